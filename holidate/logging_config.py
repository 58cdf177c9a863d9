"""Logging and monitoring configuration module.

Structured log formatting, rotating log files under ``~/.holidate/logs`` and
optional per-operation metrics (duration, memory delta) for holiday lookups
and page fetches.
"""

import functools
import json
import logging
import logging.handlers
import sys
import time
import traceback
from contextlib import contextmanager, nullcontext
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import psutil

logger = logging.getLogger(__name__)

# LogRecord attributes copied into structured output when present
EXTRA_FIELDS = ('operation', 'performance_metric', 'error_context', 'call_args', 'call_kwargs')


class LogLevel(Enum):
    """Log levels."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class LogFormat(Enum):
    """Log output formats."""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"
    STRUCTURED = "structured"


@dataclass
class PerformanceMetric:
    """Duration and memory use of one monitored operation."""
    operation: str
    duration: float
    memory_delta_mb: float
    success: bool
    error_message: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def describe(self) -> str:
        scope = ""
        if self.context:
            scope = " (" + ", ".join(f"{key}={value}" for key, value in self.context.items()) + ")"
        outcome = "completed" if self.success else "failed"
        return (f"{self.operation}{scope} {outcome} in {self.duration:.3f}s "
                f"(memory {self.memory_delta_mb:+.2f}MB)")


class StructuredFormatter(logging.Formatter):
    """Formatter rendering records as text or JSON."""

    def __init__(self, format_type: LogFormat = LogFormat.STRUCTURED):
        super().__init__()
        self.format_type = format_type

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        message = record.getMessage()

        if self.format_type == LogFormat.SIMPLE:
            return f"{timestamp} [{record.levelname}] {message}"
        if self.format_type == LogFormat.DETAILED:
            return (f"{timestamp} [{record.levelname}] "
                    f"{record.name}:{record.funcName}:{record.lineno} - {message}")

        log_data = {
            'timestamp': timestamp,
            'level': record.levelname,
            'logger': record.name,
            'message': message,
            'function': record.funcName,
            'line': record.lineno,
            'process_id': record.process
        }
        for name in EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)
        if record.exc_info:
            log_data['exception'] = ''.join(traceback.format_exception(*record.exc_info))

        indent = 2 if self.format_type == LogFormat.STRUCTURED else None
        return json.dumps(log_data, ensure_ascii=False, default=str, indent=indent)


class PerformanceMonitor:
    """Logs a PerformanceMetric for each monitored block."""

    def __init__(self):
        self.process = psutil.Process()

    def _memory_mb(self) -> float:
        return self.process.memory_info().rss / 1024 / 1024

    @contextmanager
    def monitor_operation(self, operation_name: str, context: Optional[Dict[str, Any]] = None):
        """Measure the duration and memory delta of the enclosed block."""
        start = time.perf_counter()
        memory_before = self._memory_mb()
        error_message = None

        try:
            yield
        except Exception as e:
            error_message = str(e)
            raise
        finally:
            metric = PerformanceMetric(
                operation=operation_name,
                duration=time.perf_counter() - start,
                memory_delta_mb=self._memory_mb() - memory_before,
                success=error_message is None,
                error_message=error_message,
                context=context
            )
            logger.log(
                logging.INFO if metric.success else logging.WARNING,
                metric.describe(),
                extra={'performance_metric': asdict(metric), 'operation': operation_name}
            )


class LoggingManager:
    """Owns the root logger handlers and the optional performance monitor."""

    def __init__(self,
                 log_dir: Optional[str] = None,
                 log_level: LogLevel = LogLevel.WARNING,
                 log_format: LogFormat = LogFormat.SIMPLE,
                 enable_console: bool = True,
                 enable_file: bool = True,
                 enable_performance_monitoring: bool = False,
                 max_log_size: int = 10 * 1024 * 1024,  # 10MB
                 backup_count: int = 5):
        self.log_dir = Path(log_dir) if log_dir else Path.home() / '.holidate' / 'logs'
        self.log_level = log_level
        self.max_log_size = max_log_size
        self.backup_count = backup_count
        self.performance_monitor = PerformanceMonitor() if enable_performance_monitoring else None
        self.handlers: List[logging.Handler] = []

        if enable_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.handlers.append(self._file_handler('application.log', log_level.value))
            self.handlers.append(self._file_handler('errors.log', logging.ERROR))
        if enable_console:
            # stdout carries the holiday listing
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(log_level.value)
            self.handlers.insert(0, console_handler)

        if self.handlers:
            self._install(StructuredFormatter(log_format))

    def _file_handler(self, filename: str, level: int) -> logging.Handler:
        handler = logging.handlers.RotatingFileHandler(
            self.log_dir / filename,
            maxBytes=self.max_log_size,
            backupCount=self.backup_count,
            encoding='utf-8'
        )
        handler.setLevel(level)
        return handler

    def _install(self, formatter: logging.Formatter):
        root_logger = logging.getLogger()
        root_logger.setLevel(self.log_level.value)
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()
        for handler in self.handlers:
            handler.setFormatter(formatter)
            root_logger.addHandler(handler)

    def monitor_operation(self, operation_name: str, context: Optional[Dict[str, Any]] = None):
        """Context manager measuring an operation when monitoring is on."""
        if self.performance_monitor:
            return self.performance_monitor.monitor_operation(operation_name, context)
        return nullcontext()

    def cleanup(self):
        root_logger = logging.getLogger()
        for handler in self.handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self.handlers.clear()


def log_performance(operation_name: Optional[str] = None):
    """Decorator measuring the wrapped call with the global logging manager."""
    def decorator(func):
        name = operation_name or f"{func.__module__}.{func.__name__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with get_logging_manager().monitor_operation(name):
                return func(*args, **kwargs)
        return wrapper
    return decorator


def log_function_call(log_args: bool = False, log_result: bool = False):
    """Decorator emitting debug records around the wrapped call."""
    def decorator(func):
        name = f"{func.__module__}.{func.__name__}"
        func_logger = logging.getLogger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            extra = {'operation': name}
            if log_args:
                extra.update(call_args=str(args), call_kwargs=str(kwargs))
            func_logger.debug(f"Function call started: {name}", extra=extra)

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                func_logger.debug(f"Function call failed: {name}: {type(e).__name__}: {e}",
                                  extra={'operation': name})
                raise

            suffix = f" -> {result!r}" if log_result else ""
            func_logger.debug(f"Function call completed: {name}{suffix}", extra={'operation': name})
            return result
        return wrapper
    return decorator


_global_logging_manager: Optional[LoggingManager] = None


def get_logging_manager() -> LoggingManager:
    """Return the global logging manager.

    Without a prior setup_logging call the manager leaves the root logger
    untouched, so library callers keep their own handlers.
    """
    global _global_logging_manager
    if _global_logging_manager is None:
        _global_logging_manager = LoggingManager(enable_console=False, enable_file=False)
    return _global_logging_manager


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: LogLevel = LogLevel.WARNING,
    log_format: LogFormat = LogFormat.SIMPLE,
    enable_console: bool = True,
    enable_file: bool = True,
    enable_performance_monitoring: bool = False,
    debug_mode: bool = False
) -> LoggingManager:
    """Configure logging for the process and return the manager."""
    global _global_logging_manager

    _global_logging_manager = LoggingManager(
        log_dir=log_dir,
        log_level=LogLevel.DEBUG if debug_mode else log_level,
        log_format=log_format,
        enable_console=enable_console,
        enable_file=enable_file,
        enable_performance_monitoring=enable_performance_monitoring
    )
    return _global_logging_manager


def cleanup_logging():
    """Remove the handlers installed by setup_logging."""
    global _global_logging_manager
    if _global_logging_manager:
        _global_logging_manager.cleanup()
        _global_logging_manager = None
