"""Upcoming holiday lookup.

Pages through calendar years, starting at the reference date's year, until
enough holidays on or after the reference date have been collected.
"""

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional, Union

from .cache import CacheStore
from .client import DEFAULT_API_URL, HolidayApiClient
from .error_handler import ErrorCategory, HolidaysExhaustedError, with_error_handling
from .logging_config import log_performance
from .models import Holiday
from .security import validate_quantity_input

logger = logging.getLogger(__name__)

DEFAULT_QUANTITY = 5
# Consecutive years without a matching holiday before giving up; None pages
# without limit.
DEFAULT_MAX_YEARS = 10


def paginate_holidays(store: CacheStore, country_code: str, relative_to: date,
                      quantity: int, max_years: Optional[int] = DEFAULT_MAX_YEARS) -> List[Holiday]:
    """Collect ``quantity`` holidays dated on or after ``relative_to``.

    Each year's page comes from ``store.lookup_or_fetch``; holidays keep the
    order of their page, and pages are visited in increasing year order. Any
    error aborts the whole lookup.

    ``max_years`` bounds only the run of consecutive years that add nothing,
    so a country with holidays every year can be paged arbitrarily far.

    Raises:
        ValidationError: If ``quantity`` is negative
        HolidaysExhaustedError: If ``max_years`` consecutive years added no holidays
    """
    validate_quantity_input(quantity)

    year = relative_to.year
    holidays: List[Holiday] = []
    empty_years = 0

    while len(holidays) < quantity:
        page = store.lookup_or_fetch(year, country_code)
        upcoming = [holiday for holiday in page if holiday.date >= relative_to]
        logger.debug(f"{country_code} {year}: {len(upcoming)} of {len(page)} holidays on or after {relative_to}")

        holidays.extend(upcoming)
        empty_years = 0 if upcoming else empty_years + 1

        if len(holidays) < quantity and max_years is not None and empty_years >= max_years:
            raise HolidaysExhaustedError(country_code, len(holidays), quantity, year, empty_years)

        year += 1

    return holidays[:quantity]


@with_error_handling(operation_name="next_holidays", category=ErrorCategory.DATA)
@log_performance("next_holidays")
def next_holidays(country_code: str, relative_to: date, quantity: int = DEFAULT_QUANTITY,
                  cache_dir: Optional[Union[str, Path]] = None,
                  api_url: str = DEFAULT_API_URL,
                  max_years: Optional[int] = DEFAULT_MAX_YEARS) -> List[Holiday]:
    """Return the next ``quantity`` holidays of ``country_code`` from ``relative_to`` on.

    One API client, and so one HTTP session, serves every year fetched by
    this call.

    Args:
        country_code: Country code, any case
        relative_to: First date that may be returned
        quantity: Number of holidays to return
        cache_dir: Cache root directory (default ``~/.holidate/cache``)
        api_url: Holiday API root
        max_years: Consecutive empty years tolerated, None for no limit

    Returns:
        Exactly ``quantity`` holidays in date order

    Raises:
        UnknownCountryError: The API does not know ``country_code``
        TransportError: Network failure or non-success HTTP status
        HolidayDataError: Malformed API response
        HolidaysExhaustedError: ``max_years`` consecutive years without holidays
    """
    with HolidayApiClient(base_url=api_url) as client:
        store = CacheStore(client, cache_dir=cache_dir)
        return paginate_holidays(store, country_code, relative_to, quantity, max_years)
