"""
View models for the browser front end.

The front end renders these dicts as-is. Speech synthesis, clipboard writes
and microphone capture stay in the browser; this module supplies the text
they operate on.
"""
from __future__ import annotations

from typing import Any, Dict, List

from config import settings
from models import AssessedSolution, HighRiskSolution, Locale, Solution

EXAMPLE_PROBLEMS: List[Dict[str, str]] = [
    {"name": "Leaky Faucet", "text": "My kitchen sink faucet is dripping constantly from the spout, even when turned off completely."},
    {"name": "Jammed Disposal", "text": "My garbage disposal hums but doesn't spin when I turn it on. I think something is stuck."},
    {"name": "Drywall Hole", "text": "There's a small hole in my wall, about the size of a doorknob, that I need to patch up."},
]

LOCALE_OPTIONS: List[Dict[str, str]] = [
    {"id": Locale.GLOBAL.value, "name": "Global", "icon": "globe"},
    {"id": Locale.USA.value, "name": "USA", "icon": "flag-us"},
    {"id": Locale.UK.value, "name": "UK", "icon": "flag-uk"},
    {"id": Locale.AUSTRALIA.value, "name": "Australia", "icon": "flag-au"},
]

RISK_COLORS = {"Low": "green", "Medium": "yellow", "High": "red"}

SAFETY_PREFIX = "safety first:"
NO_TOOLS_MESSAGE = "No special tools required for this fix!"


def merge_transcript(description: str, transcript: str) -> str:
    """Append a speech-recognition transcript to the typed description."""
    description = (description or "").strip()
    transcript = (transcript or "").strip()
    if not transcript:
        return description
    return f"{description} {transcript}" if description else transcript


def build_read_aloud_text(solution: AssessedSolution) -> str:
    if not solution.diagnosis or not solution.instructions:
        return ""

    diagnosis = f"Diagnosis: {solution.diagnosis}"
    difficulty = (
        f"The difficulty is {solution.difficulty} and it should take about {solution.estimated_time}."
    )
    tools = (
        f"Tools needed: {', '.join(solution.tools)}."
        if solution.tools
        else "No special tools are required."
    )
    steps = " ".join(f"Step {i + 1}. {step}" for i, step in enumerate(solution.instructions))
    instructions = f"Instructions: {steps}"
    pitfalls = (
        f"Be aware of these potential pitfalls: {'. '.join(solution.potential_pitfalls)}"
        if solution.potential_pitfalls
        else ""
    )
    return "\n\n".join([diagnosis, difficulty, tools, instructions, pitfalls])


def build_plan_copy_text(solution: AssessedSolution) -> str:
    """Plain-text copy of the whole plan."""
    lines = [f"Diagnosis: {solution.diagnosis}", "", "Tools:"]
    lines += [f"- {tool}" for tool in solution.tools] or ["- None"]
    lines += ["", "Instructions:"]
    lines += [f"{i + 1}. {step}" for i, step in enumerate(solution.instructions)]
    if solution.potential_pitfalls:
        lines += ["", "Potential Pitfalls:"]
        lines += [f"- {pitfall}" for pitfall in solution.potential_pitfalls]
    return "\n".join(lines)


def _step_views(instructions: List[str], current_step: int) -> List[Dict[str, Any]]:
    steps = []
    for index, text in enumerate(instructions):
        is_safety = text.lower().startswith(SAFETY_PREFIX)
        if index < current_step:
            status = "completed"
        elif index == current_step:
            status = "active"
        else:
            status = "pending"
        steps.append({
            "index": index,
            "number": index + 1,
            "text": text,
            "isSafetyWarning": is_safety,
            "status": status,
            "canCheckWork": status == "active" and not is_safety,
            "copyText": text,
        })
    return steps


def render_high_risk(solution: HighRiskSolution) -> Dict[str, Any]:
    return {
        "view": "high_risk",
        "risk": "High",
        "title": "Professional Help Required",
        "message": "This repair is considered High Risk. For your safety, please do not attempt this yourself.",
        "assessmentLabel": "AI Safety Assessment:",
        "safetyWarning": solution.safety_warning,
        "advice": "Contact a licensed professional for assistance.",
    }


def render_solution(
    solution: AssessedSolution,
    current_step: int = 0,
    chat_available: bool = False,
) -> Dict[str, Any]:
    return {
        "view": "solution",
        "title": "Your Fix-It Plan",
        "risk": solution.risk,
        "riskBadge": {"label": f"Risk Level: {solution.risk}", "color": RISK_COLORS[solution.risk]},
        "difficulty": solution.difficulty,
        "estimatedTime": solution.estimated_time,
        "diagnosis": solution.diagnosis,
        "tools": {
            "items": list(solution.tools),
            "copyText": "\n".join(solution.tools),
            "emptyMessage": None if solution.tools else NO_TOOLS_MESSAGE,
        },
        "steps": _step_views(solution.instructions, current_step),
        "currentStepProgress": current_step,
        "potentialPitfalls": list(solution.potential_pitfalls),
        "readAloudText": build_read_aloud_text(solution),
        "copyText": build_plan_copy_text(solution),
        "findPartLabel": "Find Replacement Part",
        "chatAvailable": chat_available,
    }


def render_solution_view(solution: Solution, current_step: int = 0, chat_available: bool = False) -> Dict[str, Any]:
    """Risk gate: High risk shows the warning only."""
    if isinstance(solution, HighRiskSolution):
        return render_high_risk(solution)
    return render_solution(solution, current_step, chat_available)


def render_view(orchestrator) -> Dict[str, Any]:
    """Map the controller's current state to the main content view."""
    state = orchestrator.app_state
    header = {
        "title": "DIY-AI Fix-It",
        "showStartNewFix": state in ("solution", "error"),
        "locale": orchestrator.locale.value,
        "locales": LOCALE_OPTIONS,
    }

    if state == "loading":
        content = {"view": "loading", "message": "Analyzing your problem..."}
    elif state == "error":
        content = {
            "view": "error",
            "title": "Oops! Something went wrong.",
            "message": orchestrator.error,
            "retryLabel": "Try Again",
        }
    elif state == "solution" and orchestrator.solution is not None:
        content = render_solution_view(
            orchestrator.solution,
            orchestrator.current_step_progress,
            orchestrator.chat is not None,
        )
    else:
        content = {
            "view": "input_form",
            "examples": EXAMPLE_PROBLEMS,
            "acceptedMedia": ["image/*", "video/*"],
            "maxUploadMb": settings.max_upload_mb,
            "submitLabel": "Get Fix-It Plan",
        }

    return {"header": header, "content": content, "partFinder": render_part_finder(orchestrator)}


def render_part_finder(orchestrator) -> Dict[str, Any]:
    result = orchestrator.part_finder_result
    return {
        "isOpen": orchestrator.modal_state == "partFinder",
        "isLoading": orchestrator.part_finder_loading,
        "error": orchestrator.part_finder_error,
        "result": result.model_dump(by_alias=True) if result else None,
        "purchaseLocationsCopyText": "\n".join(result.purchase_locations) if result else None,
    }
