"""Upcoming public holidays from the Nager.Date API with a local disk cache."""

from .error_handler import (
    BaseApplicationError, CacheStorageError, HolidayDataError, HolidaysExhaustedError,
    TransportError, UnknownCountryError
)
from .holidays import next_holidays
from .models import CacheEntry, Holiday, HolidayType

__version__ = "0.1.0"
