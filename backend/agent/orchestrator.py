"""View-state controller for one Fix-It session.

States of the main flow:
    idle -> loading -> error | solution
The part finder is an independent modal with its own loading/error/result
triple, and the step tracker is a counter that only moves forward while a
solution is shown.
"""
from typing import Any, Awaitable, Callable, Dict, Optional
import structlog

from models import AssessedSolution, Locale, PartIdentification, Solution
from .chat_agent import ChatSession, start_chat_session
from .fixit_agent import build_chat_context, get_fixit_solution
from .part_finder_agent import identify_part

logger = structlog.get_logger()

APP_STATES = ("idle", "loading", "error", "solution")
MODAL_STATES = ("none", "partFinder")

FetchSolution = Callable[[str, str, str, Locale], Awaitable[Solution]]
StartChat = Callable[[str], Optional[ChatSession]]
FindPart = Callable[[str, str, Locale], Awaitable[PartIdentification]]


class FixItOrchestrator:
    """Holds one user's transient state and applies user-triggered transitions."""

    def __init__(
        self,
        fetch_solution: Optional[FetchSolution] = None,
        start_chat: Optional[StartChat] = None,
        find_part: Optional[FindPart] = None,
    ):
        self._fetch_solution = fetch_solution or get_fixit_solution
        self._start_chat = start_chat or start_chat_session
        self._find_part = find_part or identify_part

        self.locale: Locale = Locale.GLOBAL
        self.modal_state: str = "none"
        self.reset()
        self.reset_part_finder()
        self.part_finder_loading = False

    # ------------------------------------------------------------------
    # Main flow
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Return the main flow to its initial state."""
        self.app_state: str = "idle"
        self.solution: Optional[Solution] = None
        self.error: Optional[str] = None
        self.chat: Optional[ChatSession] = None
        self.current_step_progress: int = 0
        self.problem_description: str = ""

    def set_locale(self, locale: Locale) -> None:
        self.locale = locale

    async def submit(self, file_b64: str, mime_type: str, problem_description: str) -> None:
        """Fetch a repair plan for the uploaded media and description."""
        self.app_state = "loading"
        self.error = None
        self.solution = None
        self.chat = None
        self.current_step_progress = 0
        self.problem_description = problem_description

        try:
            result = await self._fetch_solution(file_b64, mime_type, problem_description, self.locale)
            self.solution = result
            self.app_state = "solution"

            # Only low/medium risk plans with instructions get a follow-up chat
            if isinstance(result, AssessedSolution) and result.diagnosis and result.instructions:
                self.chat = self._start_chat(build_chat_context(problem_description, result))

            logger.info("Submit completed", risk=result.risk, chat_enabled=self.chat is not None)
        except Exception as e:
            logger.error("Submit failed", error=str(e))
            self.error = str(e) or "An unexpected error occurred."
            self.app_state = "error"

    def check_step(self, step_index: int) -> bool:
        """
        Mark steps up to `step_index` as done.

        Returns True when the counter moved. It never moves backwards within
        one solution.
        """
        instructions = getattr(self.solution, "instructions", None)
        if not instructions or step_index < 0 or step_index >= len(instructions):
            return False

        progress = max(self.current_step_progress, step_index + 1)
        moved = progress != self.current_step_progress
        self.current_step_progress = progress
        return moved

    # ------------------------------------------------------------------
    # Part finder
    # ------------------------------------------------------------------

    def reset_part_finder(self) -> None:
        self.part_finder_result: Optional[PartIdentification] = None
        self.part_finder_error: Optional[str] = None

    def open_part_finder(self) -> None:
        self.reset_part_finder()
        self.modal_state = "partFinder"

    def close_part_finder(self) -> None:
        self.modal_state = "none"

    async def identify_part(self, image_b64: str, mime_type: str) -> None:
        self.part_finder_loading = True
        self.reset_part_finder()

        try:
            self.part_finder_result = await self._find_part(image_b64, mime_type, self.locale)
        except Exception as e:
            logger.error("Part identification failed", error=str(e))
            self.part_finder_error = str(e) or "Failed to identify the part."
        finally:
            self.part_finder_loading = False

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        return {
            "appState": self.app_state,
            "modalState": self.modal_state,
            "locale": self.locale.value,
            "problemDescription": self.problem_description,
            "solution": self.solution.model_dump(by_alias=True) if self.solution else None,
            "error": self.error,
            "chatAvailable": self.chat is not None,
            "chatMessages": [m.model_dump(by_alias=True) for m in self.chat.messages] if self.chat else [],
            "currentStepProgress": self.current_step_progress,
            "partFinder": {
                "isLoading": self.part_finder_loading,
                "error": self.part_finder_error,
                "result": self.part_finder_result.model_dump(by_alias=True) if self.part_finder_result else None,
            },
        }
