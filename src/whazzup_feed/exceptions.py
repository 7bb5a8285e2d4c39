"""
Exception classes for the whazzup feed pipeline.

All exceptions inherit from WhazzupError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class WhazzupError(Exception):
    """Base exception for all whazzup feed errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(WhazzupError):
    """Raised when the client identifier or the candidate URLs are missing."""

    pass


class TransportError(WhazzupError):
    """Raised when fetching or decompressing a remote resource fails."""

    pass


class ParseError(WhazzupError):
    """Raised when the status document is not valid key/value syntax."""

    pass


class MalformedRecordError(WhazzupError):
    """Raised when a participant line has too few fields to decode."""

    pass


class PersistenceError(WhazzupError):
    """Raised when local artifact I/O fails."""

    pass
