"""On-disk cache of holiday pages.

Each (year, country) page lives in ``<cache_dir>/<country>/<year>.json`` and
is served for 24 hours after it was fetched. Anything wrong with a cached
file makes it a miss; a failed write after a successful fetch is logged and
the fetched holidays are still returned.
"""

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Union

from .error_handler import CacheStorageError, HolidayDataError, handle_error
from .logging_config import get_logging_manager
from .models import CacheEntry, Holiday
from .security import SecureFileHandler

logger = logging.getLogger(__name__)

_UNSAFE_PATH_CHARS = re.compile(r'[^a-z0-9_-]')


def normalize_country_code(country_code: str) -> str:
    """Lower-case form used for cache keys and API paths."""
    return country_code.strip().lower()


def _path_component(country_code: str) -> str:
    # Percent-encode anything but [a-z0-9_-] so "..", "/" and friends stay
    # inside a single directory name.
    component = _UNSAFE_PATH_CHARS.sub(
        lambda match: ''.join(f'%{byte:02X}' for byte in match.group().encode('utf-8')),
        country_code
    )
    return component or '%'


def default_cache_dir() -> Path:
    """Cache root used when none is configured."""
    return Path.home() / '.holidate' / 'cache'


class CacheStore:
    """Holiday pages keyed by (year, lower-cased country code)."""

    FRESHNESS_WINDOW = CacheEntry.FRESHNESS_WINDOW

    def __init__(self, fetch_client, cache_dir: Optional[Union[str, Path]] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """Initialize the cache store.

        Args:
            fetch_client: Object with ``fetch(year, country_code)`` used on a miss
            cache_dir: Cache root directory (default ``~/.holidate/cache``)
            clock: Returns the current UTC time; defaults to ``datetime.now(timezone.utc)``
        """
        self.fetch_client = fetch_client
        self.cache_dir = Path(cache_dir).expanduser() if cache_dir else default_cache_dir()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def cache_path(self, year: int, country_code: str) -> Path:
        """File holding the page for ``year`` and ``country_code``."""
        country = _path_component(normalize_country_code(country_code))
        return self.cache_dir / country / f"{int(year)}.json"

    def load(self, year: int, country_code: str) -> Optional[List[Holiday]]:
        """Return the cached page, or None when it is missing, invalid or stale."""
        country = normalize_country_code(country_code)
        path = self.cache_path(year, country)

        if not path.exists():
            logger.debug(f"Cache miss (no entry): {path}")
            return None

        try:
            entry = CacheEntry.from_dict(json.loads(path.read_text(encoding='utf-8')))
        except (OSError, ValueError, RecursionError, HolidayDataError) as e:
            logger.warning(f"Ignoring unreadable cache entry {path}: {e}")
            return None

        if entry.year != year or entry.country_code != country:
            logger.warning(
                f"Ignoring cache entry {path}: holds {entry.country_code} {entry.year}, "
                f"expected {country} {year}"
            )
            return None

        if not entry.is_fresh(self.clock()):
            logger.info(f"Cache entry expired (fetched {entry.fetched_at.isoformat()}): {path}")
            return None

        logger.debug(f"Cache hit: {path}")
        return entry.holidays

    def store(self, entry: CacheEntry) -> Path:
        """Persist ``entry``, replacing any previous file for its key.

        Raises:
            CacheStorageError: If the entry cannot be written
        """
        path = self.cache_path(entry.year, entry.country_code)
        content = json.dumps(entry.to_dict(), ensure_ascii=False, indent=2)

        try:
            SecureFileHandler.write_atomic(path, content)
        except OSError as e:
            raise CacheStorageError(
                f"Failed to write cache entry {path}: {e}",
                file_path=str(path),
                operation="store_cache_entry",
                cause=e
            )

        logger.debug(f"Cached {len(entry.holidays)} holidays: {path}")
        return path

    def lookup_or_fetch(self, year: int, country_code: str) -> List[Holiday]:
        """Return the page for ``year``, fetching and caching it on a miss.

        Raises:
            UnknownCountryError, TransportError, HolidayDataError: From the fetch
        """
        country = normalize_country_code(country_code)

        cached = self.load(year, country)
        if cached is not None:
            return cached

        with get_logging_manager().monitor_operation("fetch_holiday_page", {"year": year, "country_code": country}):
            holidays = self.fetch_client.fetch(year, country)
        entry = CacheEntry(
            fetched_at=self.clock(),
            year=year,
            country_code=country,
            holidays=holidays
        )

        try:
            self.store(entry)
        except CacheStorageError as e:
            handle_error(e, {"year": year, "country_code": country})

        return holidays
