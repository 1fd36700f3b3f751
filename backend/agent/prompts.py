"""
Centralized system prompts, response schemas and demo payloads.

Every instruction the AI service receives is defined here so the sub-agents
only deal with request assembly and parsing:
- Fix-It diagnosis prompts (photo and video variants, locale aware)
- Follow-up chat prompt
- Part finder prompt
- Step verification prompt
"""

from typing import Any, Dict

from models import Locale


# ============================================================================
# LOCALE PHRASING
# ============================================================================

LOCALE_HINTS: Dict[Locale, str] = {
    Locale.GLOBAL: (
        "Use internationally understood terminology and metric units, and avoid "
        "naming region-specific retailers or brands unless they are visible."
    ),
    Locale.USA: (
        "Use American English terminology (e.g., 'faucet', 'breaker box', "
        "'drywall'), imperial units, and US retailers such as Home Depot or Lowe's."
    ),
    Locale.UK: (
        "Use British English terminology (e.g., 'tap', 'consumer unit', "
        "'plasterboard'), metric units, and UK retailers such as B&Q or Screwfix."
    ),
    Locale.AUSTRALIA: (
        "Use Australian English terminology (e.g., 'tap', 'switchboard', "
        "'plasterboard'), metric units, and Australian retailers such as Bunnings."
    ),
}


def locale_hint(locale: Locale) -> str:
    return LOCALE_HINTS.get(locale, LOCALE_HINTS[Locale.GLOBAL])


# ============================================================================
# FIX-IT DIAGNOSIS
# ============================================================================

_RISK_RULES = """**Assess the Risk First:** Classify the repair as "Low", "Medium" or "High" risk for an untrained homeowner. Work involving gas lines, mains electrical wiring or panels, structural elements, asbestos, or working at dangerous heights is "High".
- If the risk is "High", respond ONLY with the keys "risk" and "safetyWarning". The safety warning must explain in one or two sentences why a licensed professional is required. Do not include any repair steps.
- If the risk is "Low" or "Medium", respond with "risk" and the full repair plan described below."""

_JSON_RULES = """Your entire response MUST be in a valid JSON format, with no extra text before or after the JSON object. For Low and Medium risk the JSON object should have seven keys: "risk", "diagnosis", "tools", "instructions", "difficulty", "estimatedTime", and "potentialPitfalls"."""

SYSTEM_INSTRUCTION_PHOTO = """You are an expert DIY assistant named "DIY-AI Fix-It". Your role is to help users solve common household problems safely and effectively. A user has provided an image and a text description.

The user is located in: {locale}. {locale_hint}

{risk_rules}

Based on the visual information and the user's text, perform the following actions:
1.  **Diagnose the Problem:** In one or two clear, simple sentences, explain what you believe the issue is.
2.  **List Tools Needed:** Provide a list of the necessary tools. If no tools are needed, return an empty list.
3.  **Provide Step-by-Step Instructions:** Give an ordered list of instructions. The instructions must be clear, concise, and easy for a beginner to follow. **Crucially, begin with a safety warning if applicable (e.g., "Safety First: Turn off the water supply..." or "Safety First: Unplug the appliance...").**
4.  **Estimate Difficulty:** Categorize the repair's difficulty (e.g., Beginner, Intermediate, Advanced).
5.  **Estimate Time:** Provide a time estimate for the repair (e.g., '15-30 minutes').
6.  **List Potential Pitfalls:** Mention 1-3 common mistakes or pitfalls to avoid during this repair.

{json_rules}"""

SYSTEM_INSTRUCTION_VIDEO = """You are a master repair technician named "DIY-AI Fix-It". A user has provided a short video and a text description of a household problem. Your task is to analyze the video to diagnose the issue with a high degree of accuracy.

The user is located in: {locale}. {locale_hint}

Pay close attention to the **speed, direction, and consistency of any motion**, as well as any **audible sounds** (like drips, rattles, or hums). Based on this dynamic behavior, provide a complete repair plan.

{risk_rules}

Perform the following actions:
1.  **Diagnose the Problem:** Based on the video's motion and sound, explain the most likely root cause in one or two sentences.
2.  **List Tools Needed:** Provide a list of the necessary tools.
3.  **Provide Step-by-Step Instructions:** Give an ordered list of clear, concise instructions, starting with a safety warning if applicable (e.g., "Safety First: ...").
4.  **Estimate Difficulty:** Categorize the repair's difficulty.
5.  **Estimate Time:** Provide a time estimate for the repair.
6.  **List Potential Pitfalls:** Mention common mistakes to avoid.

{json_rules}"""


def build_fixit_instruction(mime_type: str, locale: Locale) -> str:
    """Pick the photo or video template and fill in the locale."""
    template = SYSTEM_INSTRUCTION_VIDEO if mime_type.startswith("video/") else SYSTEM_INSTRUCTION_PHOTO
    return template.format(
        locale=locale.value,
        locale_hint=locale_hint(locale),
        risk_rules=_RISK_RULES,
        json_rules=_JSON_RULES,
    )


DEFAULT_SAFETY_WARNING = (
    "This repair involves hazards that require a licensed professional. "
    "Please do not attempt it yourself."
)

SOLUTION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "risk": {
            "type": "string",
            "enum": ["Low", "Medium", "High"],
            "description": "The risk of the repair for an untrained homeowner.",
        },
        "safetyWarning": {
            "type": "string",
            "description": "Only for High risk: why a licensed professional is required.",
        },
        "diagnosis": {
            "type": "string",
            "description": "A clear, simple diagnosis of the problem in one or two sentences.",
        },
        "tools": {
            "type": "array",
            "items": {"type": "string"},
            "description": "A list of necessary tools. Empty if no tools are needed.",
        },
        "instructions": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Clear, step-by-step instructions for the fix, starting with a safety warning if applicable.",
        },
        "difficulty": {
            "type": "string",
            "description": "The estimated difficulty of the repair (e.g., Beginner, Intermediate, Advanced).",
        },
        "estimatedTime": {
            "type": "string",
            "description": "The estimated time to complete the repair (e.g., '15-30 minutes').",
        },
        "potentialPitfalls": {
            "type": "array",
            "items": {"type": "string"},
            "description": "A list of common mistakes or pitfalls to avoid.",
        },
    },
    "required": ["risk"],
}

MOCK_SOLUTION: Dict[str, Any] = {
    "risk": "Low",
    "diagnosis": "This is a sample diagnosis for a leaky faucet. The O-ring is likely worn out and needs replacement.",
    "tools": ["Adjustable wrench", "Phillips head screwdriver", "Replacement O-ring kit", "Rag"],
    "instructions": [
        "Safety First: Turn off the water supply valves under the sink before starting.",
        "Use the adjustable wrench to loosen the faucet handle's base.",
        "Lift the handle off to expose the faucet body.",
        "Unscrew the cap with your wrench.",
        "Carefully pull out the faucet cartridge or ball valve.",
        "Locate and replace the old O-rings with new ones from your kit.",
        "Reassemble the faucet in reverse order.",
        "Turn the water supply back on slowly and check for leaks.",
    ],
    "difficulty": "Beginner",
    "estimatedTime": "30-45 minutes",
    "potentialPitfalls": [
        "Forgetting to turn off the water supply.",
        "Using the wrong size replacement O-rings.",
        "Scratching the faucet finish with tools.",
    ],
}


# ============================================================================
# FOLLOW-UP CHAT
# ============================================================================

CHAT_SYSTEM_INSTRUCTION = """You are a helpful DIY assistant. The user has already received an initial diagnosis and a set of instructions for their problem. Your role now is to answer follow-up questions clearly and concisely.

**Formatting Rules:**
- Do not use markdown like asterisks (*) for bolding or italics.
- For lists, use a hyphen (-) at the beginning of each line.

Here is the context of the original problem and the solution you provided:
{context}

Now, continue the conversation and help the user with any further questions they have about this specific repair. Be friendly and encouraging. If they ask about a new problem, politely ask them to start a new "Fix-It" session."""


def build_chat_instruction(initial_context: str) -> str:
    return CHAT_SYSTEM_INSTRUCTION.format(context=initial_context)


# ============================================================================
# PART FINDER
# ============================================================================

PART_FINDER_INSTRUCTION = """You are an expert hardware and parts identifier. Your task is to analyze an image of a household or mechanical part and identify it with high precision. Use your visual recognition and OCR capabilities to extract any text, numbers, or logos from the part.

The user is located in: {locale}. {locale_hint}

Based on the image, perform the following actions:
1.  **Identify the Part:** Clearly state the name of the part (e.g., "Moen 1225 single-handle faucet cartridge").
2.  **Find Model Number:** If visible or identifiable, provide the exact model number or part number. If not available, return an empty string.
3.  **Describe the Part:** Briefly describe its function and common use.
4.  **Suggest Purchase Locations:** List common places to buy this part in the user's region.
5.  **Find Installation Guide:** Provide a URL to a helpful installation video or guide if you can find a relevant one (e.g., a YouTube link). Otherwise return an empty string.

Your entire response MUST be in a valid JSON format."""


def build_part_finder_instruction(locale: Locale) -> str:
    return PART_FINDER_INSTRUCTION.format(locale=locale.value, locale_hint=locale_hint(locale))


PART_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "partName": {"type": "string", "description": "The specific name of the part, including make if possible."},
        "modelNumber": {"type": "string", "description": "The model or part number. Can be an empty string if not found."},
        "description": {"type": "string", "description": "A brief description of the part's function."},
        "purchaseLocations": {
            "type": "array",
            "items": {"type": "string"},
            "description": "A list of stores or online sites where the part can be purchased.",
        },
        "installationVideo": {
            "type": "string",
            "description": "A URL to a relevant installation video or guide. Can be an empty string if not found.",
        },
    },
    "required": ["partName", "modelNumber", "description", "purchaseLocations", "installationVideo"],
}

MOCK_PART: Dict[str, Any] = {
    "partName": "Moen 1225 Single-Handle Faucet Cartridge",
    "modelNumber": "1225 / 1225B",
    "description": (
        "A common replacement cartridge for Moen single-handle faucets, used to control water "
        "flow and temperature. Fixes most leaks and drips from the spout."
    ),
    "purchaseLocations": ["Home Depot", "Lowe's", "Amazon", "Local plumbing supply stores"],
    "installationVideo": "https://www.youtube.com/watch?v=kC9_W_x_5_c",
}


# ============================================================================
# STEP VERIFICATION
# ============================================================================

STEP_VERIFICATION_INSTRUCTION = """You are a DIY supervisor. Your goal is to check if a user has correctly completed a repair step.

You will be given:
1.  The specific instruction the user was supposed to follow.
2.  An image of the object **BEFORE** the step was performed.
3.  An image of the object **AFTER** the user claims to have performed the step.

Your task is to visually compare the "before" and "after" images in the context of the instruction. Then, determine if the step was completed correctly.

Your response MUST be a valid JSON object with two keys:
1.  "isCorrect" (boolean): `true` if the step is done correctly, `false` otherwise.
2.  "feedback" (string): A short, clear, and encouraging message for the user.
    - If correct, confirm it (e.g., "Excellent. The nut is now properly seated. You can proceed to the next step.").
    - If incorrect, explain what seems to be wrong and suggest a correction (e.g., "It looks like it's still a bit loose. Try tightening it another quarter turn.")."""

VERIFICATION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "isCorrect": {"type": "boolean", "description": "True if the step was done correctly, false otherwise."},
        "feedback": {"type": "string", "description": "A helpful message for the user explaining the result."},
    },
    "required": ["isCorrect", "feedback"],
}

MOCK_VERIFICATION: Dict[str, Any] = {
    "isCorrect": True,
    "feedback": "Looks great! You've successfully completed the step. Ready for the next one.",
}
