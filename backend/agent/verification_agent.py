"""Step verification sub-agent.

Compares a before and an after photo against one instruction. Not wired into
the step tracker; exposed as a standalone endpoint.
"""

from typing import Optional

import openai
import structlog
from pydantic import ValidationError

from config import settings
from models import VerificationResult
from . import prompts
from .client import (
    AIServiceError,
    SolutionContractError,
    inline_part,
    is_configured,
    json_schema_format,
    map_error,
    mock_response,
    request_json,
)

logger = structlog.get_logger()


def build_verification_request(
    before_b64: str,
    after_b64: str,
    before_mime_type: str,
    after_mime_type: str,
    instruction: str,
) -> dict:
    return {
        "model": settings.ai_model,
        "messages": [
            {"role": "system", "content": prompts.STEP_VERIFICATION_INSTRUCTION},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": f'The user was given this instruction: "{instruction}"'},
                    {"type": "text", "text": "Here is the image BEFORE the step:"},
                    inline_part(before_b64, before_mime_type),
                    {"type": "text", "text": "Here is the image AFTER the user performed the step:"},
                    inline_part(after_b64, after_mime_type),
                ],
            },
        ],
        "response_format": json_schema_format("step_verification", prompts.VERIFICATION_SCHEMA),
    }


async def verify_step(
    before_b64: str,
    after_b64: str,
    before_mime_type: str,
    after_mime_type: str,
    instruction: str,
    client: Optional[openai.AsyncOpenAI] = None,
) -> VerificationResult:
    if not is_configured():
        return VerificationResult.model_validate(
            await mock_response(prompts.MOCK_VERIFICATION, "verification")
        )

    try:
        request = build_verification_request(
            before_b64, after_b64, before_mime_type, after_mime_type, instruction
        )
        payload = await request_json(request, client=client)
        try:
            result = VerificationResult.model_validate(payload)
        except ValidationError as e:
            raise SolutionContractError(
                "The AI service returned an unreadable verification result."
            ) from e

        logger.info("Step verified", is_correct=result.is_correct)
        return result
    except AIServiceError as e:
        logger.error("Step verification rejected", error=str(e))
        raise
    except Exception as e:
        logger.error("Error calling AI service for step verification", error=str(e))
        raise map_error(e, "verify step", "verifying the step") from e
