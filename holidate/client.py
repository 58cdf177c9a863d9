"""Nager.Date API client.

Performs exactly one GET per (year, country) page and classifies the
response. The API reports an unrecognised country either with a 404 or with
a successful response whose body is empty; both become UnknownCountryError.
"""

import logging
from typing import List, Optional
from urllib.parse import quote

import requests

from .error_handler import (
    ConnectionTimeoutError, HolidayDataError, TransportError, UnknownCountryError
)
from .logging_config import log_function_call
from .models import Holiday, parse_holidays
from .security import validate_url_input

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://date.nager.at"
DEFAULT_TIMEOUT = 2.0


class HolidayApiClient:
    """Client for the public holidays endpoint.

    One ``requests.Session`` is reused for every request made through the
    client, so paging across years shares a connection pool.
    """

    USER_AGENT = 'holidate/1.0'

    def __init__(self, base_url: str = DEFAULT_API_URL, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        """Initialize the client.

        Args:
            base_url: API root, HTTPS only
            timeout: Connect and read timeout in seconds
            session: Session to use instead of creating one
        """
        self.base_url = validate_url_input(base_url, require_https=True)
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({
            'User-Agent': self.USER_AGENT,
            'Accept': 'application/json'
        })
        return session

    def uri_for(self, year: int, country_code: str) -> str:
        """Endpoint for one year of holidays of one country."""
        code = quote(country_code.strip().lower(), safe='')
        return f"{self.base_url}/api/v3/publicholidays/{year}/{code}"

    @log_function_call(log_args=True)
    def fetch(self, year: int, country_code: str) -> List[Holiday]:
        """Fetch every holiday of ``year`` for ``country_code``.

        Returns:
            Holidays in the order the API returned them

        Raises:
            UnknownCountryError: 404, or a successful response with an empty body
            TransportError: Network failure, timeout or other non-success status
            HolidayDataError: The body is not a valid list of holidays
        """
        url = self.uri_for(year, country_code)
        logger.info(f"Fetching holidays: {url}")

        try:
            response = self.session.get(url, timeout=(self.timeout, self.timeout))
        except requests.exceptions.Timeout as e:
            raise ConnectionTimeoutError(url, self.timeout, operation="fetch_holidays", cause=e)
        except requests.exceptions.RequestException as e:
            raise TransportError(
                f"Failed to fetch holidays from {url}: {e}",
                url=url,
                operation="fetch_holidays",
                cause=e
            )

        if response.status_code == 404:
            logger.info(f"Holiday API returned 404 for {country_code!r}")
            raise UnknownCountryError(country_code, year, operation="fetch_holidays")

        if not response.ok:
            raise TransportError(
                f"Holiday API returned HTTP {response.status_code} {response.reason or ''}".rstrip()
                + f" for {url}",
                url=url,
                status_code=response.status_code,
                operation="fetch_holidays"
            )

        if not response.content.strip():
            logger.info(f"Holiday API returned an empty body for {country_code!r}")
            raise UnknownCountryError(country_code, year, operation="fetch_holidays")

        try:
            payload = response.json()
        except ValueError as e:
            raise HolidayDataError(
                f"Holiday API returned invalid JSON for {url}: {e}",
                data_source=url,
                operation="fetch_holidays",
                cause=e
            )

        holidays = parse_holidays(payload)
        logger.debug(f"Fetched {len(holidays)} holidays for {country_code} {year}")
        return holidays

    def close(self):
        """Close the session if this client created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> 'HolidayApiClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
