"""Exception taxonomy shared by the web app, relay and CLI."""

from __future__ import annotations

from typing import Iterable, Optional


class BrandCraftError(Exception):
    """Base class for every error raised by BrandCraft code."""


class ConfigurationError(BrandCraftError):
    """A required setting (usually an API credential) is missing."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"{key} is not configured")


class InvalidInputError(BrandCraftError):
    """User-supplied inputs are incomplete or refer to something that does not exist."""

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        self.fields = list(fields)
        super().__init__(message)


class GenerationError(BrandCraftError):
    """Brand identity generation failed: upstream error, empty text or schema mismatch."""


class QuizClosedError(BrandCraftError):
    """An answer was submitted to a quiz that has already completed or been closed."""


# ---------------------------------------------------------------------------
# Logo failures
# ---------------------------------------------------------------------------

UNREACHABLE = "unreachable"
SAFETY_BLOCKED = "safety-blocked"
RATE_LIMITED = "rate-limited"
EMPTY = "empty"
MALFORMED = "malformed"
UPSTREAM_ERROR = "upstream-error"
CONFIGURATION = "configuration"

REASONS = (UNREACHABLE, SAFETY_BLOCKED, RATE_LIMITED, EMPTY, MALFORMED, UPSTREAM_ERROR, CONFIGURATION)

_TRANSIENT = (SAFETY_BLOCKED, RATE_LIMITED, EMPTY)

_USER_MESSAGES = {
    SAFETY_BLOCKED: "The image service's safety filter blocked this logo. Try again or tweak the brand name.",
    RATE_LIMITED: "The image service is busy or out of quota. Wait a moment and try again.",
    EMPTY: "The image service returned an empty image. Try again.",
}
_GENERIC_MESSAGE = "Logo generation failed. Try again?"


class LogoError(BrandCraftError):
    """Logo generation failed for one brand name.

    ``reason`` is one of :data:`REASONS`.  Every logo failure can be retried
    by re-invoking the same call; nothing is retried automatically.
    """

    retryable = True

    def __init__(self, reason: str, message: str = "") -> None:
        if reason not in REASONS:
            raise ValueError(f"unknown logo error reason: {reason!r}")
        self.reason = reason
        self.message = message or reason
        super().__init__(self.message)

    @property
    def transient(self) -> bool:
        return self.reason in _TRANSIENT

    @property
    def user_message(self) -> str:
        return _USER_MESSAGES.get(self.reason, _GENERIC_MESSAGE)

    def to_dict(self) -> dict:
        return {"error": self.message, "reason": self.reason, "retryable": self.retryable}


class RelayError(LogoError):
    """The logo relay could not be reached or reported a failure."""

    def __init__(self, reason: str, message: str = "", status: Optional[int] = None) -> None:
        self.status = status
        super().__init__(reason, message)

    @property
    def user_message(self) -> str:
        # The relay already phrases its errors for people.
        if self.status is not None and not self.transient:
            return self.message
        return super().user_message
