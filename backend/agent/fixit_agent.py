"""Fix-It sub-agent.

Builds the multimodal diagnosis request, calls the AI service and turns the
returned JSON into a risk-gated Solution.
"""

from typing import Any, Dict, Optional

import openai
import structlog

from config import settings
from models import AssessedSolution, HighRiskSolution, Locale, Solution
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

_RISK_BY_NAME = {"low": "Low", "medium": "Medium", "high": "High"}


def build_fixit_request(
    file_b64: str,
    mime_type: str,
    problem_description: str,
    locale: Locale = Locale.GLOBAL,
) -> Dict[str, Any]:
    """Assemble chat-completions kwargs for one diagnosis call."""
    return {
        "model": settings.ai_model,
        "messages": [
            {"role": "system", "content": prompts.build_fixit_instruction(mime_type, locale)},
            {
                "role": "user",
                "content": [
                    inline_part(file_b64, mime_type),
                    {"type": "text", "text": problem_description},
                ],
            },
        ],
        "response_format": json_schema_format("fixit_solution", prompts.SOLUTION_SCHEMA),
    }


def _string_list(value: Any) -> list:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def parse_solution(payload: Dict[str, Any]) -> Solution:
    """
    Validate the model's answer into HighRiskSolution or AssessedSolution.

    The schema only requires "risk"; the remaining fields are required by
    prompt wording alone, so they are checked here.
    """
    risk = _RISK_BY_NAME.get(str(payload.get("risk", "")).strip().lower())
    if risk is None:
        raise SolutionContractError(
            f"The AI service returned an unknown risk level: {payload.get('risk')!r}."
        )

    if risk == "High":
        warning = str(payload.get("safetyWarning") or "").strip()
        return HighRiskSolution(safety_warning=warning or prompts.DEFAULT_SAFETY_WARNING)

    diagnosis = str(payload.get("diagnosis") or "").strip()
    instructions = _string_list(payload.get("instructions"))
    if not diagnosis or not instructions:
        raise SolutionContractError(
            "The AI service returned an incomplete repair plan. Please try again."
        )

    return AssessedSolution(
        risk=risk,
        diagnosis=diagnosis,
        tools=_string_list(payload.get("tools")),
        instructions=instructions,
        difficulty=str(payload.get("difficulty") or "").strip() or "Not specified",
        estimated_time=str(payload.get("estimatedTime") or "").strip() or "Not specified",
        potential_pitfalls=_string_list(payload.get("potentialPitfalls")),
    )


def build_chat_context(problem_description: str, solution: AssessedSolution) -> str:
    """Context string handed to the follow-up chat session."""
    instructions = "\n".join(solution.instructions)
    return (
        f"Problem: {problem_description}\n"
        f"Solution Provided:\n"
        f"- Diagnosis: {solution.diagnosis}\n"
        f"- Instructions: {instructions}"
    )


async def get_fixit_solution(
    file_b64: str,
    mime_type: str,
    problem_description: str,
    locale: Locale = Locale.GLOBAL,
    client: Optional[openai.AsyncOpenAI] = None,
) -> Solution:
    """Diagnose a household problem from a photo or video plus description."""
    if not is_configured():
        return parse_solution(await mock_response(prompts.MOCK_SOLUTION, "fixit"))

    try:
        request = build_fixit_request(file_b64, mime_type, problem_description, locale)
        payload = await request_json(request, client=client)
        solution = parse_solution(payload)
        logger.info("Solution received", risk=solution.risk, mime_type=mime_type, locale=locale.value)
        return solution
    except AIServiceError as e:
        logger.error("Solution rejected", error=str(e))
        raise
    except Exception as e:
        logger.error("Error calling AI service for solution", error=str(e))
        raise map_error(e, "get solution", "fetching the solution") from e
