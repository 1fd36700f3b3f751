"""Fix-It session API endpoints."""
from fastapi import APIRouter, File, Form, HTTPException, UploadFile
import structlog

from agent.orchestrator import FixItOrchestrator
from models import LocaleRequest, SessionResponse
from services.media import MediaValidationError, encode_upload, read_upload
from services.presentation import EXAMPLE_PROBLEMS, LOCALE_OPTIONS, merge_transcript, render_view
from store import get_store

logger = structlog.get_logger()
router = APIRouter()


def get_orchestrator(session_id: str) -> FixItOrchestrator:
    """Look up a session's controller or fail with 404."""
    orchestrator = get_store().get(session_id)
    if orchestrator is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return orchestrator


def session_response(session_id: str, orchestrator: FixItOrchestrator) -> SessionResponse:
    return SessionResponse(
        session_id=session_id,
        state=orchestrator.snapshot(),
        view=render_view(orchestrator),
    )


@router.get("/examples")
async def list_examples():
    """Example problem descriptions for the input form."""
    return EXAMPLE_PROBLEMS


@router.get("/locales")
async def list_locales():
    return LOCALE_OPTIONS


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session():
    """Start a new Fix-It session in the idle state."""
    session_id, orchestrator = get_store().create()
    return session_response(session_id, orchestrator)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str):
    return session_response(session_id, get_orchestrator(session_id))


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str):
    if not get_store().delete(session_id):
        raise HTTPException(status_code=404, detail="Session not found")


@router.put("/sessions/{session_id}/locale", response_model=SessionResponse)
async def set_locale(session_id: str, request: LocaleRequest):
    orchestrator = get_orchestrator(session_id)
    orchestrator.set_locale(request.locale)
    return session_response(session_id, orchestrator)


@router.post("/sessions/{session_id}/submit", response_model=SessionResponse)
async def submit_problem(
    session_id: str,
    file: UploadFile = File(..., description="Photo or short video of the problem"),
    description: str = Form("", description="Free-text problem description"),
    transcript: str = Form("", description="Speech-recognition transcript to append"),
):
    """
    Get a Fix-It plan for the uploaded media.

    AI failures do not fail the request: the session moves to the error
    state and the view carries the message.
    """
    orchestrator = get_orchestrator(session_id)
    try:
        problem_description = merge_transcript(description, transcript)
        if not problem_description:
            raise HTTPException(status_code=400, detail="Please describe the problem.")

        data = await read_upload(file)
        file_b64, mime_type = encode_upload(data, file.content_type)

        logger.info(
            "Submit request",
            session_id=session_id,
            mime_type=mime_type,
            description=problem_description[:100],
        )
        await orchestrator.submit(file_b64, mime_type, problem_description)
        return session_response(session_id, orchestrator)

    except HTTPException:
        raise
    except MediaValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Submit failed", session_id=session_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to process the problem")


@router.post("/sessions/{session_id}/steps/{step_index}/check", response_model=SessionResponse)
async def check_step(session_id: str, step_index: int):
    """Advance the step tracker past `step_index`."""
    orchestrator = get_orchestrator(session_id)
    orchestrator.check_step(step_index)
    return session_response(session_id, orchestrator)


@router.post("/sessions/{session_id}/reset", response_model=SessionResponse)
async def reset_session(session_id: str):
    """Start a new fix in the same session."""
    orchestrator = get_orchestrator(session_id)
    orchestrator.reset()
    return session_response(session_id, orchestrator)
