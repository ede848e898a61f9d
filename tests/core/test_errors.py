"""Tests for error types and codes."""

import pytest

from runview.core.errors import (
    ConfigError,
    ErrorCode,
    EventError,
    InternalError,
    RunviewError,
    TransportError,
    TreeIndexError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.CONFIG_INVALID_VALUE, 2000),
            (ErrorCode.INDEX_MISSING_REFERENCE, 3000),
            (ErrorCode.INDEX_ORPHANED_NODE, 3000),
            (ErrorCode.EVENT_DECODE_ERROR, 6000),
            (ErrorCode.TRANSPORT_REQUEST_FAILED, 7000),
            (ErrorCode.INTERNAL_ERROR, 9000),
            (ErrorCode.INTERNAL_TIMEOUT, 9000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        assert expected_range <= code.value < expected_range + 1000


class TestRunviewError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = RunviewError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message="Test message",
            retryable=True,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "CONFIG_PARSE_ERROR",
            "message": "Test message",
            "retryable": True,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_includes_code_and_name(self) -> None:
        """String form carries the numeric code and error name."""
        error = InternalError.unexpected("boom", where="drain")

        assert str(error) == "[9001] INTERNAL_ERROR: Internal error: boom"
        assert error.details == {"where": "drain"}

    def test_given_error_when_raised_then_is_exception(self) -> None:
        """Errors are raisable and catchable as the base type."""
        with pytest.raises(RunviewError):
            raise ConfigError.missing_required("transport.base_url")


class TestFactories:
    """Factory classmethod tests."""

    def test_config_parse_error_records_path(self) -> None:
        """Parse error keeps the offending path."""
        error = ConfigError.parse_error("/tmp/config.yaml", "bad indent")

        assert error.code is ErrorCode.CONFIG_PARSE_ERROR
        assert error.details["path"] == "/tmp/config.yaml"
        assert "bad indent" in error.message

    def test_config_invalid_value_stringifies_value(self) -> None:
        """Invalid values are stored as strings for JSON output."""
        error = ConfigError.invalid_value("scheduler.max_fps", 0, "must be positive")

        assert error.details == {
            "field": "scheduler.max_fps",
            "value": "0",
            "reason": "must be positive",
        }

    def test_index_errors_are_retryable(self) -> None:
        """Index errors heal on the next full pass, so they are retryable."""
        assert TreeIndexError.missing_reference("t1").retryable
        assert TreeIndexError.orphaned_node("t1", "s1").retryable

    def test_decode_failed_mentions_line(self) -> None:
        """Decode errors point at the recording line when known."""
        error = EventError.decode_failed("Expecting value", line=7)

        assert "(line 7)" in error.message
        assert error.details["line"] == 7

    def test_decode_failed_without_line(self) -> None:
        """Decode errors without a line omit the location."""
        error = EventError.decode_failed("not an object")

        assert error.message == "Failed to decode event: not an object"

    def test_unknown_event_names_event(self) -> None:
        """Unknown events carry the offending name."""
        error = EventError.unknown_event("onSomethingElse")

        assert error.code is ErrorCode.EVENT_UNKNOWN
        assert error.details == {"event": "onSomethingElse"}

    def test_transport_failure_is_retryable(self) -> None:
        """Transport failures may succeed on retry."""
        error = TransportError.request_failed("rerun", "connection refused")

        assert error.retryable
        assert "rerun" in error.message
