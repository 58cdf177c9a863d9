"""
Unit tests for the error handling framework.
"""

import json
import logging
import pytest

from holidate.error_handler import (
    BaseApplicationError, CacheStorageError, ConnectionTimeoutError, ErrorCategory, ErrorHandler,
    ErrorSeverity, FileSystemError, HolidayDataError, HolidaysExhaustedError, NetworkError,
    TransportError, UnknownCountryError, handle_error, with_error_handling
)


def read_error_log(temp_dir):
    error_log = temp_dir / ".holidate" / "logs" / "errors.jsonl"
    return [json.loads(line) for line in error_log.read_text(encoding="utf-8").splitlines()]


class TestErrorTypes:

    def test_unknown_country_message(self):
        error = UnknownCountryError("zz", 2024)

        assert error.get_user_message() == "unknown country code: zz"
        assert error.category == ErrorCategory.DATA
        assert error.context_data == {"country_code": "zz", "year": 2024}
        assert any("country code" in s for s in error.recovery_suggestions)

    def test_transport_error_is_network_error(self):
        assert TransportError is NetworkError
        error = ConnectionTimeoutError("https://date.nager.at/x", 2.0)

        assert isinstance(error, TransportError)
        assert error.severity == ErrorSeverity.HIGH
        assert error.category == ErrorCategory.NETWORK
        assert "2s" in str(error)

    def test_parse_error_is_not_unknown_country(self):
        error = HolidayDataError("bad payload")

        assert not isinstance(error, UnknownCountryError)
        assert error.category == ErrorCategory.PARSING

    def test_cache_storage_error_category(self):
        error = CacheStorageError("cannot write", file_path="/tmp/x.json")

        assert isinstance(error, FileSystemError)
        assert error.category == ErrorCategory.FILE_SYSTEM
        assert error.context_data["file_path"] == "/tmp/x.json"
        assert any("cache directory" in s for s in error.recovery_suggestions)

    def test_exhausted_error_context(self):
        error = HolidaysExhaustedError("us", found=3, requested=5, last_year=2034, empty_years=10)

        assert "only 3 of 5" in str(error)
        assert error.context_data["empty_years"] == 10

    def test_instance_overrides_class_defaults(self):
        error = HolidayDataError("bad", severity=ErrorSeverity.LOW, recovery_suggestions=["Retry"])

        assert error.severity == ErrorSeverity.LOW
        assert error.recovery_suggestions == ["Retry"]
        assert HolidayDataError("other").severity == ErrorSeverity.MEDIUM

    def test_technical_message_includes_cause(self):
        error = NetworkError("failed", cause=OSError("refused"))

        assert "Caused by: OSError: refused" in error.get_technical_message()


class TestErrorHandler:

    def test_handle_error_writes_file(self, temp_dir):
        log_file = temp_dir / "logs" / "errors.jsonl"
        handler = ErrorHandler(str(log_file))

        context = handler.handle_error(UnknownCountryError("zz"), {"year": 2024})

        assert context.context_data["year"] == 2024
        entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[0])
        assert entry["category"] == "data"
        assert entry["severity"] == "medium"
        assert entry["user_message"] == "unknown country code: zz"
        assert entry["context_data"]["year"] == 2024

    def test_log_level_follows_severity(self, caplog):
        with caplog.at_level(logging.INFO, logger="holidate.error_handler"):
            ErrorHandler().handle_error(ConnectionTimeoutError("https://date.nager.at/x", 2.0))

        assert caplog.records[-1].levelno == logging.ERROR
        assert caplog.records[-1].getMessage().startswith("[NETWORK]")

    @pytest.mark.parametrize("error,expected", [
        (ConnectionError("down"), NetworkError),
        (PermissionError("denied"), FileSystemError),
        (ValueError("bad"), HolidayDataError),
        (RuntimeError("other"), BaseApplicationError),
    ])
    def test_foreign_errors_are_converted(self, error, expected):
        context = ErrorHandler().handle_error(error)

        assert context.technical_message.startswith(expected.__name__)

    def test_global_handler_uses_home(self, temp_dir):
        handle_error(HolidayDataError("bad payload"))

        assert read_error_log(temp_dir)[0]["category"] == "parsing"


class TestWithErrorHandling:

    def test_application_errors_pass_through(self, temp_dir):
        @with_error_handling(operation_name="lookup")
        def lookup():
            raise UnknownCountryError("zz")

        with pytest.raises(UnknownCountryError) as exc_info:
            lookup()

        assert exc_info.value.operation == "lookup"
        assert [entry["operation"] for entry in read_error_log(temp_dir)] == ["lookup"]

    def test_foreign_errors_are_wrapped(self):
        @with_error_handling(operation_name="lookup", category=ErrorCategory.DATA)
        def lookup():
            raise KeyError("date")

        with pytest.raises(BaseApplicationError) as exc_info:
            lookup()

        assert exc_info.value.category == ErrorCategory.DATA
        assert isinstance(exc_info.value.cause, KeyError)

    def test_return_value_preserved(self):
        @with_error_handling()
        def lookup():
            return [1, 2]

        assert lookup() == [1, 2]
        assert lookup.__name__ == "lookup"
