"""
Input validation and safe file handling.

Validates the values that reach the holiday lookup from the command line and
the configuration file, and provides atomic file writes for the cache.
"""

import os
import re
from datetime import datetime, date
from pathlib import Path
from typing import Union
from urllib.parse import urlparse

from .error_handler import ValidationError


class InputValidator:
    """
    Validation and sanitization of user supplied input.
    """

    COUNTRY_CODE_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')
    DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')

    MAX_COUNTRY_CODE_LENGTH = 16
    MAX_FILE_PATH_LENGTH = 260  # Windows MAX_PATH limit
    MAX_DATE_STRING_LENGTH = 20

    @classmethod
    def validate_date(cls, date_input: Union[str, date, datetime]) -> date:
        """
        Validate and parse a ``YYYY-MM-DD`` date.

        Args:
            date_input: Date string, date or datetime

        Returns:
            date: Validated date object

        Raises:
            ValidationError: If date input is invalid or malformed
        """
        if isinstance(date_input, datetime):
            return date_input.date()

        if isinstance(date_input, date):
            return date_input

        if not isinstance(date_input, str):
            raise ValidationError(f"Invalid date input type: {type(date_input)}", field="date")

        if len(date_input) > cls.MAX_DATE_STRING_LENGTH:
            raise ValidationError(
                f"Date string too long: {len(date_input)} > {cls.MAX_DATE_STRING_LENGTH}",
                field="date", value=date_input
            )

        sanitized_input = date_input.strip()
        if not sanitized_input:
            raise ValidationError("Empty date input", field="date")

        if not cls.DATE_PATTERN.match(sanitized_input):
            raise ValidationError(
                f"Date format not recognized (expected YYYY-MM-DD): {sanitized_input}",
                field="date", value=sanitized_input
            )

        try:
            return datetime.strptime(sanitized_input, '%Y-%m-%d').date()
        except ValueError:
            raise ValidationError(f"Unable to parse date: {sanitized_input}", field="date", value=sanitized_input)

    @classmethod
    def validate_country_code(cls, country_code: str) -> str:
        """
        Validate a country code and return it stripped.

        Case is preserved; normalisation to lower case belongs to the cache
        and the API client.

        Raises:
            ValidationError: If the code is empty or contains invalid characters
        """
        if not isinstance(country_code, str):
            raise ValidationError(f"Country code must be string, got: {type(country_code)}", field="country_code")

        sanitized_code = country_code.strip()

        if not sanitized_code:
            raise ValidationError("Country code cannot be empty", field="country_code")

        if len(sanitized_code) > cls.MAX_COUNTRY_CODE_LENGTH:
            raise ValidationError(
                f"Country code too long: {len(sanitized_code)} > {cls.MAX_COUNTRY_CODE_LENGTH}",
                field="country_code", value=sanitized_code
            )

        if not cls.COUNTRY_CODE_PATTERN.match(sanitized_code):
            raise ValidationError(
                f"Country code contains invalid characters: {sanitized_code}",
                field="country_code", value=sanitized_code
            )

        return sanitized_code

    @classmethod
    def validate_quantity(cls, quantity: int) -> int:
        """Validate the number of holidays requested."""
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError(f"Quantity must be an integer, got: {type(quantity)}", field="quantity")

        if quantity < 0:
            raise ValidationError(f"Quantity cannot be negative: {quantity}", field="quantity", value=quantity)

        return quantity

    @classmethod
    def validate_file_path(cls, file_path: Union[str, Path],
                          require_exists: bool = False) -> Path:
        """
        Validate a file path and resolve it.

        Args:
            file_path: File path to validate
            require_exists: Whether the file must already exist

        Returns:
            Path: Validated and resolved file path

        Raises:
            ValidationError: If file path is invalid or unsafe
        """
        if not isinstance(file_path, (str, Path)):
            raise ValidationError(f"File path must be string or Path, got: {type(file_path)}", field="file_path")

        path_str = str(file_path)

        if len(path_str) > cls.MAX_FILE_PATH_LENGTH:
            raise ValidationError(f"File path too long: {len(path_str)} > {cls.MAX_FILE_PATH_LENGTH}", field="file_path")

        if '\x00' in path_str:
            raise ValidationError("File path contains null bytes", field="file_path")

        try:
            resolved_path = Path(path_str).expanduser().resolve()
        except (OSError, RuntimeError) as e:
            raise ValidationError(f"Cannot resolve file path: {e}", field="file_path")

        if require_exists and not resolved_path.exists():
            raise ValidationError(f"File does not exist: {resolved_path}", field="file_path")

        if resolved_path.exists() and not os.access(resolved_path, os.R_OK):
            raise ValidationError(f"File not readable: {resolved_path}", field="file_path")

        return resolved_path

    @classmethod
    def validate_url(cls, url: str, require_https: bool = True) -> str:
        """
        Validate URL and enforce security requirements.

        Args:
            url: URL to validate
            require_https: Whether to require HTTPS protocol

        Returns:
            str: Validated URL without a trailing slash

        Raises:
            ValidationError: If URL is invalid or insecure
        """
        if not isinstance(url, str):
            raise ValidationError(f"URL must be string, got: {type(url)}", field="url")

        url = url.strip()
        if not url:
            raise ValidationError("URL cannot be empty", field="url")

        parsed = urlparse(url)

        if require_https and parsed.scheme != 'https':
            raise ValidationError(f"HTTPS required, got: {parsed.scheme}", field="url", value=url)

        if parsed.scheme not in ['http', 'https']:
            raise ValidationError(f"Invalid URL scheme: {parsed.scheme}", field="url", value=url)

        suspicious_chars = ['<', '>', '"', "'", '`']
        if any(char in url for char in suspicious_chars):
            raise ValidationError(f"URL contains suspicious characters: {url}", field="url", value=url)

        if not parsed.netloc:
            raise ValidationError("URL missing hostname", field="url", value=url)

        return url.rstrip('/')


class SecureFileHandler:
    """
    File reads and atomic writes.
    """

    SECURE_FILE_PERMISSIONS = 0o600  # rw-------
    READABLE_FILE_PERMISSIONS = 0o644  # rw-r--r--

    @classmethod
    def read_secure_file(cls, file_path: Path) -> str:
        """
        Read a UTF-8 file after validating its path.

        Raises:
            ValidationError: If the path is invalid or the file cannot be read
        """
        validated_path = InputValidator.validate_file_path(file_path, require_exists=True)

        try:
            return validated_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise ValidationError(f"Cannot read file: {e}", field="file_path")

    @classmethod
    def write_atomic(cls, file_path: Path, content: str,
                     permissions: int = READABLE_FILE_PERMISSIONS) -> None:
        """
        Write content through a temporary file and an atomic replace,
        creating parent directories as needed.

        Raises:
            OSError: If the directory or file cannot be written
        """
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        temp_path = file_path.with_suffix(file_path.suffix + f'.{os.getpid()}.tmp')
        try:
            temp_path.write_text(content, encoding='utf-8')
            temp_path.chmod(permissions)
            temp_path.replace(file_path)
        except OSError:
            if temp_path.exists():
                temp_path.unlink()
            raise

    @classmethod
    def write_secure_file(cls, file_path: Path, content: str,
                         permissions: int = SECURE_FILE_PERMISSIONS) -> None:
        """
        Validate the path and write the file atomically.

        Raises:
            ValidationError: If the path is invalid or the write fails
        """
        validated_path = InputValidator.validate_file_path(file_path)

        try:
            cls.write_atomic(validated_path, content, permissions)
        except OSError as e:
            raise ValidationError(f"Cannot write secure file: {e}", field="file_path")


def validate_date_input(date_input: Union[str, date, datetime]) -> date:
    """Convenience function for date validation."""
    return InputValidator.validate_date(date_input)


def validate_country_code_input(country_code: str) -> str:
    """Convenience function for country code validation."""
    return InputValidator.validate_country_code(country_code)


def validate_quantity_input(quantity: int) -> int:
    """Convenience function for quantity validation."""
    return InputValidator.validate_quantity(quantity)


def validate_file_path_input(file_path: Union[str, Path], **kwargs) -> Path:
    """Convenience function for file path validation."""
    return InputValidator.validate_file_path(file_path, **kwargs)


def validate_url_input(url: str, require_https: bool = True) -> str:
    """Convenience function for URL validation."""
    return InputValidator.validate_url(url, require_https)
