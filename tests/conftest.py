"""
Pytest configuration and shared fixtures for the test suite.
"""

import pytest
import tempfile
import shutil
import json
from pathlib import Path
from datetime import datetime, timezone
from unittest.mock import Mock

from holidate import error_handler, logging_config
from holidate.models import Holiday

# Trimmed Nager.Date responses
TEST_HOLIDAYS_2024 = [
    {
        "date": "2024-01-01",
        "localName": "New Year's Day",
        "name": "New Year's Day",
        "countryCode": "US",
        "fixed": False,
        "global": True,
        "counties": None,
        "launchYear": None,
        "types": ["Public"]
    },
    {
        "date": "2024-07-04",
        "localName": "Independence Day",
        "name": "Independence Day",
        "countryCode": "US",
        "fixed": False,
        "global": True,
        "counties": None,
        "launchYear": None,
        "types": ["Public"]
    },
    {
        "date": "2024-10-14",
        "localName": "Columbus Day",
        "name": "Columbus Day",
        "countryCode": "US",
        "fixed": False,
        "global": False,
        "counties": ["US-AL", "US-AZ", "US-CT"],
        "launchYear": None,
        "types": ["Public", "Bank"]
    },
    {
        "date": "2024-11-28",
        "localName": "Thanksgiving Day",
        "name": "Thanksgiving Day",
        "countryCode": "US",
        "fixed": False,
        "global": True,
        "counties": None,
        "launchYear": 1863,
        "types": ["Public"]
    },
    {
        "date": "2024-12-25",
        "localName": "Christmas Day",
        "name": "Christmas Day",
        "countryCode": "US",
        "fixed": False,
        "global": True,
        "counties": None,
        "launchYear": None,
        "types": ["Public"]
    }
]

TEST_HOLIDAYS_2025 = [
    {"date": "2025-01-01", "name": "New Year's Day", "counties": None, "types": ["Public"]},
    {"date": "2025-01-20", "name": "Martin Luther King, Jr. Day", "counties": None, "types": ["Public"]},
    {"date": "2025-02-17", "name": "Presidents Day", "counties": None, "types": ["Public"]},
    {"date": "2025-05-26", "name": "Memorial Day", "counties": None, "types": ["Public"]},
    {"date": "2025-07-04", "name": "Independence Day", "counties": None, "types": ["Public"]}
]

PAYLOADS_BY_YEAR = {2024: TEST_HOLIDAYS_2024, 2025: TEST_HOLIDAYS_2025}


def make_response(status_code=200, body=b"", reason="OK"):
    """Build a requests.Response look-alike."""
    if not isinstance(body, bytes):
        body = json.dumps(body).encode('utf-8')

    response = Mock()
    response.status_code = status_code
    response.reason = reason
    response.ok = status_code < 400
    response.content = body
    response.json.side_effect = lambda: json.loads(body.decode('utf-8'))
    return response


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def cache_dir(temp_dir):
    """Cache root for tests."""
    return temp_dir / "cache"


@pytest.fixture
def now():
    return datetime(2024, 10, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_holidays():
    """Parsed holidays matching TEST_HOLIDAYS_2024."""
    return [Holiday.from_dict(item) for item in TEST_HOLIDAYS_2024]


@pytest.fixture
def mock_fetch_client():
    """Fetch client returning the canned page for each year."""
    client = Mock()
    client.fetch.side_effect = lambda year, country_code: [
        Holiday.from_dict(item) for item in PAYLOADS_BY_YEAR.get(year, [])
    ]
    return client


@pytest.fixture
def mock_session():
    """requests.Session stand-in answering from PAYLOADS_BY_YEAR."""
    session = Mock()

    def get(url, timeout=None):
        year = int(url.rstrip('/').split('/')[-2])
        return make_response(200, PAYLOADS_BY_YEAR.get(year, []))

    session.get.side_effect = get
    return session


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, temp_dir):
    """Setup test environment with temporary directories."""
    monkeypatch.setenv("HOME", str(temp_dir))

    monkeypatch.delenv("HOLIDATE_API_URL", raising=False)
    monkeypatch.delenv("HOLIDATE_CACHE_DIR", raising=False)

    monkeypatch.setattr(error_handler, "_global_error_handler", None)
    yield temp_dir
    logging_config.cleanup_logging()


@pytest.fixture
def response_factory():
    """Factory for fake HTTP responses."""
    return make_response


@pytest.fixture
def payloads():
    """Raw API payloads keyed by year."""
    return PAYLOADS_BY_YEAR
