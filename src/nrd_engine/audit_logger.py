"""
Audit Logger for the NRD classification engine.

Emits structured entries for lookups, cache decisions, degradations and
verdicts as JSON lines, readable text, or both. In audit mode every entry
carries an HMAC-SHA256 signature over its canonical JSON payload so that a
stored classification trail can be checked for tampering.
"""

import hashlib
import hmac
import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, TextIO

from .config import LoggingConfig
from .enums import LogLevel


LEVEL_ORDER = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.WARN: 30,
    LogLevel.ERROR: 40,
}

OUTPUT_FORMATS = ("json", "text", "both")


@dataclass
class LogEntry:
    """One emitted log record."""

    timestamp: str
    level: LogLevel
    component: str
    message: str
    data: dict = field(default_factory=dict)
    signature: Optional[str] = None

    def payload(self) -> dict:
        """Signed fields of the entry, in a JSON-safe form."""
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "component": self.component,
            "message": self.message,
            "data": self.data,
        }


class AuditLogger:
    """
    Structured logger shared by the resolver and the classifier.

    Entries below min_level are dropped before formatting. Emitted entries
    are also retained in memory for inspection.
    """

    def __init__(
        self,
        output_format: str = "both",
        output_stream: Optional[TextIO] = None,
        min_level: LogLevel = LogLevel.INFO,
    ):
        """
        Initialize the audit logger.

        Args:
            output_format: One of 'json', 'text' or 'both'
            output_stream: Where lines are written; sys.stderr by default
            min_level: Lowest level that is emitted
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Invalid output_format: {output_format}")

        self._format = output_format
        self._stream = output_stream or sys.stderr
        self._min_level = min_level
        self._key: Optional[bytes] = None
        self._entries: list[LogEntry] = []

    @classmethod
    def from_config(
        cls,
        config: LoggingConfig,
        output_stream: Optional[TextIO] = None,
    ) -> "AuditLogger":
        """Build a logger from LoggingConfig; audit mode needs a signing key."""
        logger = cls(
            output_format=config.output_format,
            output_stream=output_stream,
            min_level=LogLevel(config.level),
        )
        if config.audit_mode:
            if not config.audit_signing_key:
                raise ValueError("Audit mode requires audit_signing_key")
            logger.enable_audit_mode(config.audit_signing_key)
        return logger

    @property
    def audit_mode(self) -> bool:
        return self._key is not None

    @property
    def entries(self) -> list[LogEntry]:
        """Copy of the entries emitted so far."""
        return list(self._entries)

    def enable_audit_mode(self, signing_key: str) -> None:
        """Sign every following entry with the given key."""
        if not signing_key:
            raise ValueError("Signing key cannot be empty")
        self._key = signing_key.encode("utf-8")

    def disable_audit_mode(self) -> None:
        self._key = None

    def is_enabled_for(self, level: LogLevel) -> bool:
        return LEVEL_ORDER[level] >= LEVEL_ORDER[self._min_level]

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Record and write one entry.

        Args:
            level: Severity
            component: Emitting component, e.g. "DomainAgeResolver"
            message: Short human-readable summary
            data: Structured context such as domain, age_days or attempts

        Returns:
            The emitted LogEntry, or None when the level is filtered out
        """
        if not self.is_enabled_for(level):
            return None

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            data=dict(data or {}),
        )
        if self._key is not None:
            entry.signature = self._sign(entry)

        self._entries.append(entry)
        self._write(entry)
        return entry

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[BaseException] = None,
        additional_data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Record an ERROR entry describing an exception.

        The exception's type and text are added to the data, plus its code
        when it is an NrdEngineError.
        """
        data = dict(additional_data or {})
        if error is not None:
            data["error_type"] = type(error).__name__
            data["error_message"] = str(error)
            code = getattr(error, "code", None)
            if code is not None:
                data["error_code"] = code
        return self.log(LogLevel.ERROR, component, message, data)

    def _sign(self, entry: LogEntry) -> str:
        if self._key is None:
            raise RuntimeError("Signing key not set")
        canonical = json.dumps(
            entry.payload(), sort_keys=True, ensure_ascii=False, default=str
        )
        return hmac.new(self._key, canonical.encode("utf-8"), hashlib.sha256).hexdigest()

    def verify_signature(self, entry: LogEntry) -> bool:
        """True only if the entry is signed and matches the current key."""
        if not entry.signature or self._key is None:
            return False
        return hmac.compare_digest(entry.signature, self._sign(entry))

    def _write(self, entry: LogEntry) -> None:
        lines = []
        if self._format != "text":
            lines.append(self.format_json(entry))
        if self._format != "json":
            lines.append(self.format_text(entry))
        for line in lines:
            self._stream.write(line + "\n")
        self._stream.flush()

    def format_json(self, entry: LogEntry) -> str:
        """Render an entry as one JSON line."""
        record = entry.payload()
        if entry.signature:
            record["signature"] = entry.signature
        return json.dumps(record, ensure_ascii=False, default=str)

    def format_text(self, entry: LogEntry) -> str:
        """Render an entry as "[ts] LEVEL [component] message {data}"."""
        text = (
            f"[{entry.timestamp}] {entry.level.value.upper()} "
            f"[{entry.component}] {entry.message}"
        )
        if entry.data:
            text += " " + json.dumps(entry.data, ensure_ascii=False, default=str)
        if entry.signature:
            text += f" [sig:{entry.signature[:16]}]"
        return text

    def clear_entries(self) -> None:
        self._entries.clear()
