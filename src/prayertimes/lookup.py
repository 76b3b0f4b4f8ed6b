"""Pre-computed timetables. An injectable provider that replaces astronomy for one locality.

JSON format (one object per date, keyed by ``YYYY-MM-DD``)::

    {"city": "london",
     "times": {"2025-12-31": {"date": "2025-12-31", "fajr": "06:26", "sunrise": "08:03",
                              "dhuhr": "12:09", "asr": "13:45", "magrib": "16:04",
                              "isha": "17:41"}}}
"""

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from types import MappingProxyType
from typing import Protocol

from pytz import timezone, utc

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"\d{2}:\d{2}")

LONDON_TIMEZONE = "Europe/London"


class LookupDataError(ValueError):
    """Malformed lookup table entry."""


@dataclass(frozen=True)
class LookupTimes:
    """One day of a timetable. Times are local civil "HH:MM" strings."""

    date: str  # "YYYY-MM-DD"
    fajr: str
    sunrise: str
    dhuhr: str
    asr: str
    maghrib: str
    isha: str

    @classmethod
    def from_json(cls, data: Mapping[str, str]) -> "LookupTimes":
        """Build from a JSON day entry. Accepts ``magrib`` as the maghrib key."""
        try:
            maghrib = data["magrib"] if "magrib" in data else data["maghrib"]
            entry = cls(
                date=data["date"],
                fajr=data["fajr"],
                sunrise=data["sunrise"],
                dhuhr=data["dhuhr"],
                asr=data["asr"],
                maghrib=maghrib,
                isha=data["isha"],
            )
        except KeyError as e:
            raise LookupDataError(f"Lookup entry missing field {e}: {dict(data)}") from e
        for name in ("fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha"):
            value = getattr(entry, name)
            if not isinstance(value, str) or not _TIME_RE.fullmatch(value):
                raise LookupDataError(f"Invalid time format for {name}: {value!r}")
        return entry

    def local_datetime(self, name: str, day: date) -> datetime:
        """Naive local datetime for one field on `day`."""
        hour, minute = (int(p) for p in getattr(self, name).split(":"))
        if hour > 23 or minute > 59:
            raise LookupDataError(f"Invalid time for {name}: {getattr(self, name)!r}")
        return datetime(day.year, day.month, day.day, hour, minute)

    def utc_datetimes(self, day: date, tz_name: str) -> dict[str, datetime]:
        """All six times localised in `tz_name` and converted to UTC."""
        local_tz = timezone(tz_name)
        return {
            name: local_tz.localize(self.local_datetime(name, day), is_dst=None).astimezone(utc)
            for name in ("fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha")
        }


class LookupProvider(Protocol):
    """Anything that can answer "what are the times on this date" for one locality."""

    timezone: str  # IANA zone the table's "HH:MM" strings are expressed in

    def lookup(self, day: date) -> LookupTimes | None: ...


class JsonLookupProvider:
    """Immutable timetable loaded once from JSON data.

    Build a new provider and swap the reference to refresh data; an existing
    instance never changes, so concurrent readers always see one snapshot.
    """

    def __init__(
        self,
        times: Mapping[str, LookupTimes],
        city: str = "",
        timezone: str = LONDON_TIMEZONE,
    ) -> None:
        self._times = MappingProxyType(dict(times))
        self.city = city
        self.timezone = timezone

    @classmethod
    def from_mapping(
        cls, data: Mapping, timezone: str = LONDON_TIMEZONE
    ) -> "JsonLookupProvider":
        """Parse an already-decoded JSON document.

        Args:
            data: Object with an optional "city" and a "times" mapping.
            timezone: Zone the table is expressed in.

        Raises:
            LookupDataError: If an entry is malformed.
        """
        raw_times = data.get("times") or {}
        if not isinstance(raw_times, Mapping):
            raise LookupDataError("Lookup data 'times' must be an object")
        times = {key: LookupTimes.from_json(entry) for key, entry in raw_times.items()}
        logger.debug(
            "Loaded %d lookup days for %r (%s)", len(times), data.get("city", ""), timezone
        )
        return cls(times, city=data.get("city", ""), timezone=timezone)

    @classmethod
    def from_json(cls, text: str, timezone: str = LONDON_TIMEZONE) -> "JsonLookupProvider":
        return cls.from_mapping(json.loads(text), timezone=timezone)

    @classmethod
    def from_file(
        cls, path: str | Path, timezone: str = LONDON_TIMEZONE
    ) -> "JsonLookupProvider":
        with Path(path).open(encoding="utf-8") as f:
            return cls.from_mapping(json.load(f), timezone=timezone)

    def lookup(self, day: date) -> LookupTimes | None:
        return self._times.get(day.isoformat())

    def has_data_for(self, day: date) -> bool:
        return self.lookup(day) is not None

    def dates(self) -> tuple[str, ...]:
        return tuple(sorted(self._times))
