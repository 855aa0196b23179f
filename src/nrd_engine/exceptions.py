"""
Exception classes for the NRD classification engine.

Every engine error carries a machine-readable code (a value of one of the
error-code enums, or a configuration field tag), a message, and a details
dictionary with the offending input.
"""

from typing import Optional


class NrdEngineError(Exception):
    """Root of the engine's error taxonomy."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = dict(details or {})

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """JSON-safe form for logs and result sinks."""
        return {
            "error_type": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidDomain(NrdEngineError):
    """The input cannot be split into at least two non-empty labels."""


class LookupUnavailable(NrdEngineError):
    """
    The domain-age lookup service could not answer.

    Raised by AgeLookupService implementations; the resolver turns it into
    an "unavailable" age result and never lets it reach the caller.
    """


class ConfigurationError(NrdEngineError):
    """A configuration value is outside its allowed range."""
