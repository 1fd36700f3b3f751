"""Part finder sub-agent: identify a hardware part from a photo."""

from typing import Optional

import openai
import structlog
from pydantic import ValidationError

from config import settings
from models import Locale, PartIdentification
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


async def identify_part(
    image_b64: str,
    mime_type: str,
    locale: Locale = Locale.GLOBAL,
    client: Optional[openai.AsyncOpenAI] = None,
) -> PartIdentification:
    if not is_configured():
        return PartIdentification.model_validate(await mock_response(prompts.MOCK_PART, "part_finder"))

    try:
        request = {
            "model": settings.ai_model,
            "messages": [
                {"role": "system", "content": prompts.build_part_finder_instruction(locale)},
                {"role": "user", "content": [inline_part(image_b64, mime_type)]},
            ],
            "response_format": json_schema_format("part_identification", prompts.PART_SCHEMA),
        }
        payload = await request_json(request, client=client)
        try:
            part = PartIdentification.model_validate(payload)
        except ValidationError as e:
            raise SolutionContractError(
                "The AI service could not identify the part. Please try a clearer photo."
            ) from e

        logger.info("Part identified", part_name=part.part_name, model_number=part.model_number)
        return part
    except AIServiceError as e:
        logger.error("Part identification rejected", error=str(e))
        raise
    except Exception as e:
        logger.error("Error calling AI service for part identification", error=str(e))
        raise map_error(e, "identify part", "identifying the part") from e
