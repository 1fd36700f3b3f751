"""Part finder API endpoints."""
from fastapi import APIRouter, File, HTTPException, UploadFile
import structlog

from api.fixit import get_orchestrator, session_response
from models import SessionResponse
from services.media import IMAGE_ONLY_PREFIXES, MediaValidationError, encode_upload, read_upload

logger = structlog.get_logger()
router = APIRouter()


@router.post("/{session_id}/open", response_model=SessionResponse)
async def open_part_finder(session_id: str):
    """Open the part finder modal with a clean result."""
    orchestrator = get_orchestrator(session_id)
    orchestrator.open_part_finder()
    return session_response(session_id, orchestrator)


@router.post("/{session_id}/close", response_model=SessionResponse)
async def close_part_finder(session_id: str):
    orchestrator = get_orchestrator(session_id)
    orchestrator.close_part_finder()
    return session_response(session_id, orchestrator)


@router.post("/{session_id}/reset", response_model=SessionResponse)
async def reset_part_finder(session_id: str):
    orchestrator = get_orchestrator(session_id)
    orchestrator.reset_part_finder()
    return session_response(session_id, orchestrator)


@router.post("/{session_id}/identify", response_model=SessionResponse)
async def identify_part(session_id: str, file: UploadFile = File(..., description="Photo of the part")):
    """
    Identify a part from a photo.

    Runs independently of the main Fix-It flow; failures land in the part
    finder's own error slot.
    """
    orchestrator = get_orchestrator(session_id)
    try:
        data = await read_upload(file)
        image_b64, mime_type = encode_upload(data, file.content_type, IMAGE_ONLY_PREFIXES)

        logger.info("Part identification request", session_id=session_id, mime_type=mime_type)
        await orchestrator.identify_part(image_b64, mime_type)
        return session_response(session_id, orchestrator)

    except MediaValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Part identification failed", session_id=session_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to identify the part")
