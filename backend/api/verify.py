"""Step verification API."""
from fastapi import APIRouter, File, Form, HTTPException, UploadFile
import structlog

from agent.client import AIServiceError
from agent.verification_agent import verify_step
from models import VerificationResult
from services.media import IMAGE_ONLY_PREFIXES, MediaValidationError, encode_upload, read_upload

logger = structlog.get_logger()
router = APIRouter()


@router.post("/", response_model=VerificationResult)
async def verify(
    before: UploadFile = File(..., description="Photo taken before the step"),
    after: UploadFile = File(..., description="Photo taken after the step"),
    instruction: str = Form(..., description="The instruction the user followed"),
):
    """Compare before/after photos against one repair instruction."""
    try:
        if not instruction.strip():
            raise HTTPException(status_code=400, detail="An instruction is required")

        before_b64, before_mime = encode_upload(await read_upload(before), before.content_type, IMAGE_ONLY_PREFIXES)
        after_b64, after_mime = encode_upload(await read_upload(after), after.content_type, IMAGE_ONLY_PREFIXES)

        return await verify_step(before_b64, after_b64, before_mime, after_mime, instruction.strip())

    except HTTPException:
        raise
    except MediaValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AIServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error("Step verification failed", error=str(e))
        raise HTTPException(status_code=500, detail="Step verification failed")
