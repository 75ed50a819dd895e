from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    CONTENT_SOURCE_UNAVAILABLE = "CONTENT_SOURCE_UNAVAILABLE"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_INPUT = "INVALID_INPUT"


class QuickNavError(Exception):
    """Raised for all expected failure conditions.

    Store and content source wrap their driver errors into this type and
    re-raise. Never catch this inside the index core — let it propagate to
    the HTTP layer, which serialises it into a structured error body.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }
