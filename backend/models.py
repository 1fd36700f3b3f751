"""Pydantic models for API."""
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class Locale(str, Enum):
    """Region used to bias terminology in prompts."""
    GLOBAL = "Generic/Global"
    USA = "USA"
    UK = "UK"
    AUSTRALIA = "Australia"


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HighRiskSolution(CamelModel):
    """Assessment for a repair the user must not attempt themselves."""
    risk: Literal["High"] = "High"
    safety_warning: str


class AssessedSolution(CamelModel):
    """Full repair plan for a Low or Medium risk problem."""
    risk: Literal["Low", "Medium"]
    diagnosis: str
    tools: List[str] = []
    instructions: List[str]
    difficulty: str = "Not specified"
    estimated_time: str = "Not specified"
    potential_pitfalls: List[str] = []


Solution = Union[HighRiskSolution, AssessedSolution]


class PartIdentification(CamelModel):
    """Part finder result."""
    part_name: str
    model_number: Optional[str] = None
    description: str
    purchase_locations: List[str] = []
    installation_video: Optional[str] = None

    @field_validator("model_number", "installation_video", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class VerificationResult(CamelModel):
    """Before/after check of a single repair step."""
    is_correct: bool
    feedback: str


class ChatMessage(CamelModel):
    """One bubble in the follow-up chat; never persisted."""
    sender: Literal["user", "ai"]
    text: str
    is_loading: bool = False


class LocaleRequest(BaseModel):
    locale: Locale


class ChatMessageRequest(BaseModel):
    message: str


class SessionResponse(CamelModel):
    """Session snapshot plus the rendered view model."""
    session_id: str
    state: Dict[str, Any]
    view: Dict[str, Any]
