"""AI service client shared by the sub-agents.

Handles:
- client construction from settings (OpenAI-compatible endpoint)
- inline media parts and JSON-schema response formats
- the demo fallback when no credential is configured
- mapping service failures to user-facing messages
"""

import asyncio
import copy
import json
from typing import Any, Dict, Optional

import openai
import structlog

from config import settings

logger = structlog.get_logger()

INVALID_KEY_MARKER = "API key not valid"
INVALID_KEY_MESSAGE = "Your API key is not valid. Please check it in your environment variables."


class AIServiceError(Exception):
    """AI call failed; the message is safe to show to the user."""


class SolutionContractError(AIServiceError):
    """The model answered, but not in the shape the UI can render."""


def is_configured() -> bool:
    return bool(settings.api_key)


def get_client() -> openai.AsyncOpenAI:
    """Create an async client for the configured AI endpoint."""
    return openai.AsyncOpenAI(api_key=settings.api_key, base_url=settings.ai_base_url)


def inline_part(data_b64: str, mime_type: str) -> Dict[str, Any]:
    """Wrap base64 file data as a chat content part."""
    data_uri = f"data:{mime_type};base64,{data_b64}"
    if mime_type.startswith("image/"):
        return {"type": "image_url", "image_url": {"url": data_uri}}
    extension = mime_type.split("/", 1)[-1] or "bin"
    return {"type": "file", "file": {"file_data": data_uri, "filename": f"upload.{extension}"}}


def json_schema_format(name: str, schema: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "json_schema", "json_schema": {"name": name, "schema": schema}}


def map_error(exc: Exception, action: str, activity: str) -> AIServiceError:
    """
    Translate a raw failure into the message shown in the error view.

    Only the invalid-credential case gets its own wording; everything else
    forwards the service's message.
    """
    message = str(exc).strip()
    if INVALID_KEY_MARKER in message:
        return AIServiceError(INVALID_KEY_MESSAGE)
    if message:
        return AIServiceError(f"Failed to {action}: {message}")
    return AIServiceError(f"An unknown error occurred while {activity}.")


async def mock_response(payload: Dict[str, Any], flow: str) -> Dict[str, Any]:
    """Return a canned payload after the configured demo delay."""
    logger.warning(
        "API_KEY not found, using mock data. Set API_KEY for real results.",
        flow=flow,
    )
    await asyncio.sleep(settings.mock_delay_seconds)
    return copy.deepcopy(payload)


def _decode_json(text: str) -> Dict[str, Any]:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        # Some models wrap the object in a code fence; fall back to the outermost {...}
        start = text.find("{")
        end = text.rfind("}")
        if start >= 0 and end > start:
            return json.loads(text[start : end + 1])
        raise


async def request_json(
    request: Dict[str, Any],
    client: Optional[openai.AsyncOpenAI] = None,
) -> Dict[str, Any]:
    """Send one chat-completions request and decode the JSON object it returns."""
    client = client or get_client()
    response = await client.chat.completions.create(**request)

    text = (response.choices[0].message.content or "").strip()
    if not text:
        raise AIServiceError("The AI service returned an empty response.")

    payload = _decode_json(text)
    if not isinstance(payload, dict):
        raise AIServiceError("The AI service returned an unexpected response.")
    return payload
