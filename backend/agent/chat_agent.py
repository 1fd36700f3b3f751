"""Follow-up chat sub-agent.

A ChatSession keeps two lists:
- the model-side history (system/user/assistant turns) sent on every call
- the UI message list, rebuilt fresh for each session and never persisted
"""

import re
from typing import AsyncIterator, Dict, List, Optional

import openai
import structlog

from config import settings
from models import ChatMessage
from . import prompts
from .client import get_client, is_configured

logger = structlog.get_logger()

CHAT_FAILURE_TEXT = "Sorry, I couldn't process that. Please try again."

_LIST_MARKER = re.compile(r"^(\s*[-*])\s+", re.MULTILINE)


class ChatBusyError(Exception):
    """A reply is still streaming for this session."""


def format_response_text(text: str) -> str:
    """Turn markdown list markers into bullets and drop leftover asterisks."""
    formatted = _LIST_MARKER.sub("• ", text)
    return formatted.replace("*", "")


class ChatSession:
    """Follow-up conversation about one repair plan."""

    def __init__(self, client: openai.AsyncOpenAI, system_instruction: str, model: Optional[str] = None):
        self.client = client
        self.model = model or settings.ai_model
        self.history: List[Dict[str, str]] = [{"role": "system", "content": system_instruction}]
        self.messages: List[ChatMessage] = []
        self.is_sending = False

    def reserve(self) -> None:
        """Claim the session for one reply; released when that reply's stream ends."""
        if self.is_sending:
            raise ChatBusyError("A reply is already in progress")
        self.is_sending = True

    async def send_message_stream(self, text: str) -> AsyncIterator[str]:
        """Validate, reserve and stream one reply."""
        message = text.strip()
        if not message:
            raise ValueError("Message must not be empty")
        self.reserve()
        replies = self.stream_reply(message)
        try:
            async for delta in replies:
                yield delta
        finally:
            await replies.aclose()

    async def stream_reply(self, message: str) -> AsyncIterator[str]:
        """
        Send one user message and yield the reply as it streams in.

        The caller must hold the reservation. The last AI message is updated
        in place after every chunk, so a concurrent reader of `messages`
        always sees the formatted text so far. A reply that does not finish,
        whether it failed or the reader went away, ends as the apology text
        and its user turn is dropped from the model history.
        """
        self.messages.append(ChatMessage(sender="user", text=message))
        reply = ChatMessage(sender="ai", text="", is_loading=True)
        self.messages.append(reply)
        user_turn = {"role": "user", "content": message}
        self.history.append(user_turn)

        accumulated = ""
        answered = False
        try:
            stream = await self.client.chat.completions.create(
                model=self.model,
                messages=list(self.history),
                stream=True,
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content or ""
                if not delta:
                    continue
                accumulated += delta
                reply.text = format_response_text(accumulated)
                reply.is_loading = False
                yield delta

            self.history.append({"role": "assistant", "content": accumulated})
            answered = True
        except Exception as e:
            logger.error("Error sending chat message", error=str(e))
        finally:
            if not answered:
                reply.text = CHAT_FAILURE_TEXT
                if self.history and self.history[-1] is user_turn:
                    self.history.pop()
            reply.is_loading = False
            self.is_sending = False


def start_chat_session(
    initial_context: str,
    client: Optional[openai.AsyncOpenAI] = None,
) -> Optional[ChatSession]:
    """Create a chat session, or None when no credential is configured."""
    if not is_configured():
        logger.warning("API_KEY not found, chat is disabled.")
        return None

    return ChatSession(
        client=client or get_client(),
        system_instruction=prompts.build_chat_instruction(initial_context),
    )
