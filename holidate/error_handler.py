"""Error handling framework module.

Typed application errors for the holiday lookup, plus a central handler that
logs them with a severity-derived level and appends them to a JSONL error log.
"""

import functools
import json
import logging
import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class ErrorSeverity(Enum):
    """Error severity levels, valued by the logging level they are logged at."""
    CRITICAL = logging.CRITICAL
    HIGH = logging.ERROR
    MEDIUM = logging.WARNING
    LOW = logging.INFO


class ErrorCategory(Enum):
    """Error categories."""
    NETWORK = "network"
    DATA = "data"
    FILE_SYSTEM = "file_system"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    PARSING = "parsing"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Snapshot of a handled error."""
    timestamp: datetime
    severity: ErrorSeverity
    category: ErrorCategory
    operation: str
    user_message: str
    technical_message: str
    recovery_suggestions: List[str] = field(default_factory=list)
    context_data: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp.isoformat(),
            'severity': self.severity.name.lower(),
            'category': self.category.value,
            'operation': self.operation,
            'user_message': self.user_message,
            'technical_message': self.technical_message,
            'recovery_suggestions': self.recovery_suggestions,
            'context_data': self.context_data,
            'stack_trace': self.stack_trace
        }


class BaseApplicationError(Exception):
    """Base class for every error raised by holidate.

    Subclasses set ``severity``, ``category`` and ``recovery_suggestions`` as
    class attributes; the constructor arguments override them per instance.
    """

    severity = ErrorSeverity.MEDIUM
    category = ErrorCategory.UNKNOWN
    recovery_suggestions: List[str] = []

    def __init__(
        self,
        message: str,
        severity: Optional[ErrorSeverity] = None,
        category: Optional[ErrorCategory] = None,
        operation: str = "",
        recovery_suggestions: Optional[List[str]] = None,
        context_data: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.severity = severity or type(self).severity
        self.category = category or type(self).category
        self.operation = operation
        self.recovery_suggestions = list(recovery_suggestions or type(self).recovery_suggestions)
        self.context_data = dict(context_data or {})
        self.cause = cause
        self.timestamp = datetime.now()

    def get_user_message(self) -> str:
        return str(self)

    def get_technical_message(self) -> str:
        """Message with the class name and the underlying cause, if any."""
        message = f"{type(self).__name__}: {self}"
        if self.cause:
            message += f" (Caused by: {type(self.cause).__name__}: {self.cause})"
        return message

    def to_error_context(self) -> ErrorContext:
        return ErrorContext(
            timestamp=self.timestamp,
            severity=self.severity,
            category=self.category,
            operation=self.operation,
            user_message=self.get_user_message(),
            technical_message=self.get_technical_message(),
            recovery_suggestions=self.recovery_suggestions,
            context_data=dict(self.context_data),
            stack_trace=traceback.format_exc() if sys.exc_info()[0] else None
        )


class NetworkError(BaseApplicationError):
    """Network, timeout or non-success HTTP status failure."""

    severity = ErrorSeverity.HIGH
    category = ErrorCategory.NETWORK
    recovery_suggestions = [
        "Check your internet connection",
        "Try again in a moment",
        "Check proxy and firewall settings"
    ]

    def __init__(self, message: str, url: str = "", status_code: Optional[int] = None, **kwargs):
        super().__init__(message, context_data={"url": url, "status_code": status_code}, **kwargs)
        self.url = url
        self.status_code = status_code


# The holiday API client reports every transport failure as a NetworkError.
TransportError = NetworkError


class ConnectionTimeoutError(NetworkError):
    """The request did not complete within the timeout."""

    recovery_suggestions = [
        "Check the stability of your network connection",
        "Check whether the holiday API is reachable"
    ]

    def __init__(self, url: str, timeout: float, **kwargs):
        super().__init__(f"Request timed out after {timeout:g}s: {url}", url=url, **kwargs)
        self.timeout = timeout


class DataError(BaseApplicationError):
    """Holiday data related error."""

    category = ErrorCategory.DATA


class UnknownCountryError(DataError):
    """The holiday API does not recognise the country code."""

    recovery_suggestions = [
        "Check your country code",
        "See https://date.nager.at/Country for the supported countries"
    ]

    def __init__(self, country_code: str, year: Optional[int] = None, **kwargs):
        super().__init__(
            f"unknown country code: {country_code}",
            context_data={"country_code": country_code, "year": year},
            **kwargs
        )
        self.country_code = country_code
        self.year = year


class HolidayDataError(DataError):
    """Holiday payload could not be parsed."""

    category = ErrorCategory.PARSING
    recovery_suggestions = [
        "The holiday API returned an unexpected payload",
        "Try again later"
    ]

    def __init__(self, message: str, data_source: str = "", **kwargs):
        super().__init__(message, context_data={"data_source": data_source}, **kwargs)


class HolidaysExhaustedError(DataError):
    """Paging ran into too many consecutive years without a holiday."""

    recovery_suggestions = [
        "Check that the holiday API has data for this country",
        "Raise holidays.max_years in the configuration"
    ]

    def __init__(self, country_code: str, found: int, requested: int, last_year: int,
                 empty_years: int, **kwargs):
        super().__init__(
            f"only {found} of {requested} holidays found for {country_code}: "
            f"no holidays in the {empty_years} years up to {last_year}",
            context_data={
                "country_code": country_code,
                "found": found,
                "requested": requested,
                "last_year": last_year,
                "empty_years": empty_years
            },
            **kwargs
        )


class FileSystemError(BaseApplicationError):
    """File system error."""

    category = ErrorCategory.FILE_SYSTEM
    recovery_suggestions = [
        "Check the file path",
        "Check file permissions",
        "Check free disk space"
    ]

    def __init__(self, message: str, file_path: str = "", **kwargs):
        super().__init__(message, context_data={"file_path": file_path}, **kwargs)


class CacheStorageError(FileSystemError):
    """Reading or writing a cache entry failed."""

    recovery_suggestions = [
        "Check that the cache directory is writable",
        "Point cache.directory or HOLIDATE_CACHE_DIR elsewhere"
    ]


class ConfigurationError(BaseApplicationError):
    """Configuration error."""

    category = ErrorCategory.CONFIGURATION
    recovery_suggestions = [
        "Check the configuration file",
        "Check the HOLIDATE_* environment variables"
    ]

    def __init__(self, message: str, config_key: str = "", **kwargs):
        super().__init__(message, context_data={"config_key": config_key}, **kwargs)


class ValidationError(BaseApplicationError):
    """Input validation error."""

    category = ErrorCategory.VALIDATION
    recovery_suggestions = [
        "Check the input value",
        "Use the documented format"
    ]

    def __init__(self, message: str, field: str = "", value: Any = None, **kwargs):
        super().__init__(message, context_data={"field": field, "value": value}, **kwargs)


def to_application_error(error: Exception) -> BaseApplicationError:
    """Wrap a foreign exception into the application hierarchy."""
    if isinstance(error, BaseApplicationError):
        return error
    if isinstance(error, (ConnectionError, TimeoutError)):
        return NetworkError(str(error), cause=error)
    if isinstance(error, OSError):
        return FileSystemError(str(error), file_path=getattr(error, 'filename', '') or '', cause=error)
    if isinstance(error, ValueError):
        return HolidayDataError(str(error), cause=error)
    return BaseApplicationError(str(error), cause=error)


class ErrorHandler:
    """Logs handled errors and appends them to a JSONL file."""

    def __init__(self, log_file: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self.log_file = log_file

    def handle_error(
        self,
        error: Union[BaseApplicationError, Exception],
        context: Optional[Dict[str, Any]] = None
    ) -> ErrorContext:
        """Log an error and record it in the error file.

        Args:
            error: Error to handle
            context: Extra context merged into the error context data

        Returns:
            ErrorContext: The recorded error context
        """
        error_context = to_application_error(error).to_error_context()
        if context:
            error_context.context_data.update(context)

        self.logger.log(
            error_context.severity.value,
            f"[{error_context.category.value.upper()}] {error_context.user_message}",
            extra={'error_context': error_context.to_dict()}
        )

        if self.log_file:
            self._append_to_file(error_context)

        return error_context

    def _append_to_file(self, error_context: ErrorContext):
        try:
            path = Path(self.log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open('a', encoding='utf-8') as f:
                f.write(json.dumps(error_context.to_dict(), ensure_ascii=False, default=str) + '\n')
        except OSError as e:
            self.logger.error(f"Failed to write error to {self.log_file}: {e}")


_global_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Return the process-wide error handler, logging to ``~/.holidate/logs/errors.jsonl``."""
    global _global_error_handler
    if _global_error_handler is None:
        _global_error_handler = ErrorHandler(str(Path.home() / '.holidate' / 'logs' / 'errors.jsonl'))
    return _global_error_handler


def handle_error(
    error: Union[BaseApplicationError, Exception],
    context: Optional[Dict[str, Any]] = None
) -> ErrorContext:
    return get_error_handler().handle_error(error, context)


def with_error_handling(
    operation_name: str = "",
    category: ErrorCategory = ErrorCategory.UNKNOWN
):
    """Decorator recording errors raised by the wrapped function.

    Application errors are re-raised unchanged; anything else is wrapped in a
    BaseApplicationError of the given category.
    """
    def decorator(func):
        operation = operation_name or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except BaseApplicationError as e:
                if not e.operation:
                    e.operation = operation
                handle_error(e)
                raise
            except Exception as e:
                app_error = BaseApplicationError(str(e), category=category, operation=operation, cause=e)
                handle_error(app_error)
                raise app_error from e
        return wrapper
    return decorator
