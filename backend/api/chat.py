"""Follow-up chat API with streamed replies."""
from typing import AsyncIterator

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse
import structlog

from agent.chat_agent import CHAT_FAILURE_TEXT, ChatBusyError, ChatSession
from api.fixit import get_orchestrator
from models import ChatMessageRequest

logger = structlog.get_logger()
router = APIRouter()


def _require_chat(session_id: str) -> ChatSession:
    orchestrator = get_orchestrator(session_id)
    if orchestrator.chat is None:
        raise HTTPException(status_code=409, detail="Chat is not available for this session")
    return orchestrator.chat


async def _relay(chat: ChatSession, message: str) -> AsyncIterator[str]:
    sent = False
    replies = chat.stream_reply(message)
    try:
        async for chunk in replies:
            sent = True
            yield chunk
    finally:
        await replies.aclose()

    if not sent and chat.messages and chat.messages[-1].text == CHAT_FAILURE_TEXT:
        yield CHAT_FAILURE_TEXT


@router.get("/{session_id}/messages")
async def list_messages(session_id: str):
    """Current chat transcript, including a reply still streaming in."""
    chat = _require_chat(session_id)
    return [message.model_dump(by_alias=True) for message in chat.messages]


@router.post("/{session_id}/messages")
async def send_message(session_id: str, request: ChatMessageRequest):
    """
    Send a follow-up question.

    The reply is streamed back as plain text chunks in arrival order. The
    session is reserved before the response starts, so an overlapping
    request is refused with 409 instead of racing the running reply.
    """
    chat = _require_chat(session_id)

    message = request.message.strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message must not be empty")
    try:
        chat.reserve()
    except ChatBusyError:
        logger.warning("Chat message rejected while busy", session_id=session_id)
        raise HTTPException(status_code=409, detail="A reply is already in progress")

    logger.info("Chat request", session_id=session_id, message=message[:100])
    return StreamingResponse(
        _relay(chat, message),
        media_type="text/plain; charset=utf-8",
    )
