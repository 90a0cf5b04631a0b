"""Error taxonomy shared by triggers, the options loader and the HTTP layer."""

from __future__ import annotations

from typing import Iterable, List, Optional

from fragment.models import ErrorResponse, Validation


class FragmentError(Exception):
    """Base class for errors rendered as a structured HTTP response."""

    status_code: int = 400
    default_message: str = "Bad Request"

    def __init__(
        self,
        message: Optional[str] = None,
        validations: Optional[Iterable[Validation]] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.message = message or self.default_message
        self.validations: List[Validation] = list(validations or [])
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [self.message]
        parts.extend(f"{'.'.join(v.path)}: {v.message}" for v in self.validations)
        return " - ".join(parts)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            status_code=self.status_code,
            message=self.message,
            validations=self.validations,
        )


class DecodeError(FragmentError):
    """Raised when a request body is not valid JSON or does not fit its schema."""


class EventValidationError(FragmentError):
    """Raised when a decoded payload misses a field its kind requires."""


class EncodeError(FragmentError):
    """Raised when context or data cannot be canonically encoded."""


class ConfigError(FragmentError):
    """Raised when the source options are invalid. Fatal at startup."""

    status_code = 500
    default_message = "source/rest: Failed to load"
