"""
Property-based tests for the Audit Logger module.

Uses Hypothesis to check output formats, level filtering, error context and
HMAC signing of audit entries.
"""

import io
import json

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from nrd_engine.audit_logger import LEVEL_ORDER, AuditLogger
from nrd_engine.config import LoggingConfig
from nrd_engine.enums import LogLevel, LookupErrorCode
from nrd_engine.exceptions import LookupUnavailable


# Strategies for generating test data

level_strategy = st.sampled_from(list(LogLevel))

component_strategy = st.sampled_from(["DomainAgeResolver", "NrdClassifier"])

message_strategy = st.text(min_size=1, max_size=80)

data_strategy = st.dictionaries(
    keys=st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=12),
    values=st.one_of(st.integers(), st.booleans(), st.text(max_size=20), st.none()),
    max_size=5,
)


class TestJsonOutputProperty:
    """Every JSON line parses back to the logged entry."""

    @given(
        level=level_strategy,
        component=component_strategy,
        message=message_strategy,
        data=data_strategy,
    )
    @settings(max_examples=100)
    def test_json_line_round_trips_fields(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: dict,
    ) -> None:
        stream = io.StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream, min_level=LogLevel.DEBUG)

        logger.log(level, component, message, data)

        lines = stream.getvalue().rstrip("\n").split("\n")
        assert len(lines) == 1
        parsed = json.loads(lines[0])
        assert parsed["level"] == level.value
        assert parsed["component"] == component
        assert parsed["message"] == message
        assert parsed["data"] == data
        assert "signature" not in parsed

    def test_both_format_writes_json_then_text(self) -> None:
        stream = io.StringIO()
        logger = AuditLogger(output_format="both", output_stream=stream)

        logger.log(LogLevel.INFO, "NrdClassifier", "Classified example.com", {"is_nrd": False})

        json_line, text_line = stream.getvalue().splitlines()
        assert json.loads(json_line)["message"] == "Classified example.com"
        assert "INFO [NrdClassifier] Classified example.com" in text_line
        assert '"is_nrd": false' in text_line

    def test_invalid_output_format(self) -> None:
        with pytest.raises(ValueError):
            AuditLogger(output_format="xml")


class TestLevelFilteringProperty:
    """Entries below the minimum level are neither stored nor written."""

    @given(min_level=level_strategy, level=level_strategy, message=message_strategy)
    @settings(max_examples=200)
    def test_filtering_follows_level_order(
        self,
        min_level: LogLevel,
        level: LogLevel,
        message: str,
    ) -> None:
        stream = io.StringIO()
        logger = AuditLogger(output_format="text", output_stream=stream, min_level=min_level)

        entry = logger.log(level, "NrdClassifier", message)

        if LEVEL_ORDER[level] >= LEVEL_ORDER[min_level]:
            assert entry is not None
            assert logger.entries == [entry]
            assert stream.getvalue() != ""
        else:
            assert entry is None
            assert logger.entries == []
            assert stream.getvalue() == ""

    def test_clear_entries(self) -> None:
        logger = AuditLogger(output_stream=io.StringIO())
        logger.log(LogLevel.WARN, "DomainAgeResolver", "slow")
        logger.clear_entries()
        assert logger.entries == []


class TestErrorContextProperty:
    """log_error attaches the exception type, message and code."""

    def test_engine_error_code_is_recorded(self) -> None:
        logger = AuditLogger(output_stream=io.StringIO())
        error = LookupUnavailable(code=LookupErrorCode.TIMEOUT.value, message="timed out")

        entry = logger.log_error("DomainAgeResolver", "Lookup failed", error, {"domain": "a.com"})

        assert entry.level == LogLevel.ERROR
        assert entry.data["domain"] == "a.com"
        assert entry.data["error_type"] == "LookupUnavailable"
        assert entry.data["error_message"] == "timed out"
        assert entry.data["error_code"] == "timeout"

    def test_plain_exception_has_no_code(self) -> None:
        logger = AuditLogger(output_stream=io.StringIO())
        entry = logger.log_error("NrdClassifier", "Crash", RuntimeError("boom"))
        assert entry.data["error_type"] == "RuntimeError"
        assert "error_code" not in entry.data


class TestAuditSigningProperty:
    """Signed entries verify, and tampering breaks verification."""

    @given(
        key=st.text(min_size=1, max_size=32),
        message=message_strategy,
        data=data_strategy,
    )
    @settings(max_examples=100)
    def test_signed_entries_verify(self, key: str, message: str, data: dict) -> None:
        logger = AuditLogger(output_format="json", output_stream=io.StringIO())
        logger.enable_audit_mode(key)

        entry = logger.log(LogLevel.INFO, "NrdClassifier", message, data)

        assert entry.signature is not None
        assert logger.verify_signature(entry) is True

    @given(key=st.text(min_size=1, max_size=32), message=message_strategy)
    @settings(max_examples=100)
    def test_tampered_entry_fails_verification(self, key: str, message: str) -> None:
        logger = AuditLogger(output_format="json", output_stream=io.StringIO())
        logger.enable_audit_mode(key)

        entry = logger.log(LogLevel.INFO, "NrdClassifier", message)
        entry.message = message + "!"

        assert logger.verify_signature(entry) is False

    def test_unsigned_entry_fails_verification(self) -> None:
        logger = AuditLogger(output_stream=io.StringIO())
        entry = logger.log(LogLevel.INFO, "NrdClassifier", "plain")
        logger.enable_audit_mode("secret")
        assert logger.verify_signature(entry) is False

    def test_signature_is_written_to_json(self) -> None:
        stream = io.StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream)
        logger.enable_audit_mode("secret")

        entry = logger.log(LogLevel.INFO, "NrdClassifier", "signed")

        assert json.loads(stream.getvalue())["signature"] == entry.signature

    def test_empty_key_is_rejected(self) -> None:
        logger = AuditLogger(output_stream=io.StringIO())
        with pytest.raises(ValueError):
            logger.enable_audit_mode("")

    def test_disable_audit_mode(self) -> None:
        logger = AuditLogger(output_stream=io.StringIO())
        logger.enable_audit_mode("secret")
        logger.disable_audit_mode()
        assert logger.audit_mode is False
        assert logger.log(LogLevel.INFO, "NrdClassifier", "plain").signature is None


class TestFromConfigProperty:
    """Loggers built from LoggingConfig honour every field."""

    def test_from_config(self) -> None:
        config = LoggingConfig(
            level="warn",
            audit_mode=True,
            audit_signing_key="secret",
            output_format="text",
        )
        logger = AuditLogger.from_config(config, output_stream=io.StringIO())

        assert logger.audit_mode is True
        assert logger.is_enabled_for(LogLevel.INFO) is False
        assert logger.is_enabled_for(LogLevel.ERROR) is True

    def test_audit_mode_without_key_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            AuditLogger.from_config(LoggingConfig(audit_mode=True), output_stream=io.StringIO())
