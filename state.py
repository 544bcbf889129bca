"""In-memory application state owned by the web app.

One instance per app; nothing here is persisted.  Mutations go through the
methods below, which hold a lock so concurrent requests (e.g. several logo
generations at once) never trample each other.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, NamedTuple, Optional, Tuple, Union

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from errors import InvalidInputError, LogoError, QuizClosedError
from models import BrandInputs, BrandResult
from quiz import BrandQuiz, QuizStep

log = logging.getLogger(__name__)

TABS = ("core", "strategy", "visual", "marketing")

# camelCase wire name -> attribute name
_INPUT_FIELDS = {to_camel(name): name for name in BrandInputs.model_fields}


# ---------------------------------------------------------------------------
# Per-name logo slots
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Idle:
    status = "idle"

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status}


@dataclass(frozen=True)
class Loading:
    status = "loading"

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status}


@dataclass(frozen=True)
class Ready:
    image: str
    status = "ready"

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "image": self.image}


@dataclass(frozen=True)
class Failed:
    reason: str
    message: str
    retryable: bool = True
    status = "failed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "reason": self.reason,
            "error": self.message,
            "retryable": self.retryable,
        }


LogoSlot = Union[Idle, Loading, Ready, Failed]


class GenerationTicket(NamedTuple):
    token: int
    inputs: BrandInputs


class LogoTicket(NamedTuple):
    result_version: int
    name: str
    industry: str
    tone: str


class AppState:
    def __init__(self, inputs: Optional[BrandInputs] = None) -> None:
        self._lock = threading.RLock()
        self.inputs = inputs or BrandInputs()
        self.result: Optional[BrandResult] = None
        self.error: Optional[str] = None
        self.active_tab = TABS[0]
        self.quiz: Optional[BrandQuiz] = None
        self.logos: Dict[str, LogoSlot] = {}
        self.generation_token = 0
        self.result_version = 0
        self.generating = False

    # ------------------------------------------------------------------
    # Form
    # ------------------------------------------------------------------

    def update_inputs(self, **fields: Any) -> BrandInputs:
        """Apply field edits; accepts camelCase or snake_case names."""
        with self._lock:
            updated = self.inputs.model_copy()
            for key, value in fields.items():
                attr = _INPUT_FIELDS.get(key, key)
                if attr not in BrandInputs.model_fields:
                    raise InvalidInputError(f"Unknown field: {key}", [key])
                try:
                    setattr(updated, attr, value)
                except ValidationError as exc:
                    raise InvalidInputError(f"Invalid value for {key}: {value!r}", [key]) from exc
            self.inputs = updated
            return updated

    def select_tab(self, tab: str) -> None:
        if tab not in TABS:
            raise InvalidInputError(f"tab must be one of: {', '.join(TABS)}", ["tab"])
        with self._lock:
            self.active_tab = tab

    # ------------------------------------------------------------------
    # Quiz
    # ------------------------------------------------------------------

    def open_quiz(self) -> BrandQuiz:
        with self._lock:
            self.quiz = BrandQuiz(on_complete=self._quiz_complete)
            return self.quiz

    def answer_quiz(self, value: str) -> Tuple[QuizStep, Dict[str, Any]]:
        """Answer the open quiz; returns the step and the quiz as it stands afterwards."""
        with self._lock:
            quiz = self.quiz
            if quiz is None:
                raise QuizClosedError("quiz is not open")
            step = quiz.select(value)
            return step, quiz.to_dict()

    def close_quiz(self) -> None:
        with self._lock:
            if self.quiz is not None:
                self.quiz.close()
            self.quiz = None

    def _quiz_complete(self, summary: str) -> None:
        self.inputs = self.inputs.model_copy(update={"personality_summary": summary})
        self.quiz = None

    # ------------------------------------------------------------------
    # Brand identity generation
    # ------------------------------------------------------------------

    def begin_generation(self) -> GenerationTicket:
        with self._lock:
            inputs = self.inputs.require_complete().model_copy()
            self.generation_token += 1
            self.generating = True
            self.error = None
            return GenerationTicket(self.generation_token, inputs)

    def complete_generation(self, token: int, result: BrandResult) -> bool:
        with self._lock:
            if token != self.generation_token:
                log.info("Discarding stale brand result (token %d, current %d)", token, self.generation_token)
                return False
            self.result_version += 1
            self.result = result
            self.error = None
            self.generating = False
            self.active_tab = TABS[0]
            self.logos = {name: Idle() for name in result.names()}
            return True

    def fail_generation(self, token: int, message: str) -> bool:
        with self._lock:
            if token != self.generation_token:
                return False
            self.error = message
            self.generating = False
            return True

    # ------------------------------------------------------------------
    # Logos
    # ------------------------------------------------------------------

    def begin_logo(self, name: str) -> LogoTicket:
        with self._lock:
            if self.result is None or name not in self.logos:
                raise InvalidInputError(f"No brand name {name!r} in the current result", ["name"])
            self.logos[name] = Loading()
            return LogoTicket(self.result_version, name, self.inputs.industry, self.inputs.tone.value)

    def complete_logo(self, ticket: LogoTicket, image: str) -> bool:
        return self._settle_logo(ticket, Ready(image))

    def fail_logo(self, ticket: LogoTicket, error: LogoError) -> bool:
        return self._settle_logo(ticket, Failed(error.reason, error.user_message, error.retryable))

    def _settle_logo(self, ticket: LogoTicket, slot: LogoSlot) -> bool:
        with self._lock:
            if ticket.result_version != self.result_version or ticket.name not in self.logos:
                log.debug("Discarding logo for %r from superseded result", ticket.name)
                return False
            self.logos[ticket.name] = slot
            return True

    def logo_image(self, name: str) -> Optional[str]:
        with self._lock:
            slot = self.logos.get(name)
            return slot.image if isinstance(slot, Ready) else None

    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "inputs": self.inputs.to_wire(),
                "result": self.result.to_wire() if self.result else None,
                "error": self.error,
                "generating": self.generating,
                "activeTab": self.active_tab,
                "quiz": self.quiz.to_dict() if self.quiz else None,
                "logos": {name: slot.to_dict() for name, slot in self.logos.items()},
            }
