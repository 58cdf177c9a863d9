"""Holiday data model.

Records returned by the Nager.Date API and the cache entries persisted for
each (year, country) page.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .error_handler import HolidayDataError


class HolidayType(Enum):
    """Holiday type tags used by the Nager.Date API."""
    PUBLIC = "Public"
    BANK = "Bank"
    SCHOOL = "School"
    AUTHORITIES = "Authorities"
    OPTIONAL = "Optional"
    OBSERVANCE = "Observance"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Any) -> 'HolidayType':
        try:
            return cls(value)
        except ValueError:
            raise HolidayDataError(f"Unknown holiday type: {value!r}")


@dataclass(frozen=True)
class Holiday:
    """One occurrence of a named holiday.

    ``counties`` is empty when the holiday applies nationwide.
    """
    date: date
    name: str
    counties: Tuple[str, ...] = ()
    types: Tuple[HolidayType, ...] = (HolidayType.PUBLIC,)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Holiday':
        """Build a Holiday from an API or cache object.

        Fields other than ``date``, ``name``, ``counties`` and ``types`` are
        ignored.

        Raises:
            HolidayDataError: If a required field is missing or malformed
        """
        if not isinstance(data, dict):
            raise HolidayDataError(f"Holiday record must be an object, got {type(data).__name__}")

        try:
            holiday_date = date.fromisoformat(data['date'])
        except KeyError:
            raise HolidayDataError("Holiday record is missing 'date'")
        except (TypeError, ValueError) as e:
            raise HolidayDataError(f"Invalid holiday date {data.get('date')!r}: {e}")

        name = data.get('name')
        if not isinstance(name, str):
            raise HolidayDataError(f"Invalid holiday name for {holiday_date}: {name!r}")

        raw_types = data.get('types')
        if not isinstance(raw_types, list) or not raw_types:
            raise HolidayDataError(f"Holiday {name!r} has no types")
        types = tuple(HolidayType.parse(value) for value in raw_types)

        raw_counties = data.get('counties')
        # null means nationwide
        if raw_counties is None:
            raw_counties = []
        if not isinstance(raw_counties, list) or not all(isinstance(c, str) for c in raw_counties):
            raise HolidayDataError(f"Invalid counties for holiday {name!r}: {raw_counties!r}")

        return cls(
            date=holiday_date,
            name=name,
            counties=tuple(raw_counties),
            types=types
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date.isoformat(),
            'name': self.name,
            'counties': list(self.counties),
            'types': [holiday_type.value for holiday_type in self.types]
        }


def parse_holidays(payload: Any) -> List[Holiday]:
    """Parse a JSON array of holiday objects."""
    if not isinstance(payload, list):
        raise HolidayDataError(f"Expected a list of holidays, got {type(payload).__name__}")
    return [Holiday.from_dict(item) for item in payload]


@dataclass
class CacheEntry:
    """One cached page: every holiday of one year for one country."""

    FRESHNESS_WINDOW = timedelta(hours=24)

    fetched_at: datetime
    year: int
    country_code: str
    holidays: List[Holiday] = field(default_factory=list)

    def is_fresh(self, now: Optional[datetime] = None) -> bool:
        """True while ``fetched_at + 24h`` has not passed."""
        now = now or datetime.now(timezone.utc)
        return self.fetched_at + self.FRESHNESS_WINDOW >= now

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fetched': self.fetched_at.isoformat(),
            'year': self.year,
            'country_code': self.country_code,
            'holidays': [holiday.to_dict() for holiday in self.holidays]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CacheEntry':
        """Parse a persisted cache entry.

        Raises:
            HolidayDataError: If the entry is malformed
        """
        if not isinstance(data, dict):
            raise HolidayDataError("Cache entry must be an object", data_source="cache")

        try:
            fetched_at = datetime.fromisoformat(data['fetched'])
            year = data['year']
            country_code = data['country_code']
            raw_holidays = data['holidays']
        except KeyError as e:
            raise HolidayDataError(f"Cache entry is missing {e}", data_source="cache")
        except (TypeError, ValueError) as e:
            raise HolidayDataError(f"Invalid cache timestamp: {e}", data_source="cache")

        if fetched_at.tzinfo is None:
            fetched_at = fetched_at.replace(tzinfo=timezone.utc)
        if not isinstance(year, int) or isinstance(year, bool):
            raise HolidayDataError(f"Invalid cache year: {year!r}", data_source="cache")
        if not isinstance(country_code, str):
            raise HolidayDataError(f"Invalid cache country code: {country_code!r}", data_source="cache")

        return cls(
            fetched_at=fetched_at,
            year=year,
            country_code=country_code,
            holidays=parse_holidays(raw_holidays)
        )
