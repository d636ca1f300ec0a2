import requests
from collections import namedtuple
from typing import Dict, Any, List, Optional
import logging

from athan_service.core.errors import UpstreamCallFailed

# One normalized day. date is "DD-MM-YYYY"; timings maps our prayer names to "HH:MM (TZ)" strings.
PrayerDay = namedtuple("PrayerDay", ["date", "timings"])


class AladhanClient:
    """Client for api.aladhan.com. Every call raises UpstreamCallFailed on network/HTTP errors; no retries."""

    DEFAULT_BASE_URL = "http://api.aladhan.com/v1"

    # our name -> Aladhan name
    PRAYER_NAMES = {
        'Fajr': 'Fajr',
        'Shurooq': 'Sunrise',
        'Dhuhr': 'Dhuhr',
        'Asr': 'Asr',
        'Maghrib': 'Maghrib',
        'Isha': 'Isha',
    }

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.base_url = (self.config.get('base_url') or self.DEFAULT_BASE_URL).rstrip('/')
        self.timeout = self.config.get('timeout', 30)
        self.logger = logging.getLogger(self.__class__.__name__)

    def get_calendar_by_coordinates(self, lat: float, lon: float, method: int, month: int, year: int) -> List[PrayerDay]:
        """Daily timings for one Gregorian month at the given coordinates"""
        params = {
            'latitude': lat,
            'longitude': lon,
            'method': method,
            'month': month,
            'year': year,
        }
        return self._normalize_days(self._get('/calendar', params))

    def get_calendar_by_city(self, city: str, country: str, method: int, month: int, year: int) -> List[PrayerDay]:
        """Daily timings for one Gregorian month in the given city"""
        params = {
            'city': city,
            'country': country,
            'method': method,
            'month': month,
            'year': year,
        }
        return self._normalize_days(self._get('/calendarByCity', params))

    def get_gregorian_to_hijri_calendar(self, month: int, year: int) -> List[Dict[str, Any]]:
        """Raw day entries ({gregorian: {...}, hijri: {...}}) for one Gregorian month"""
        return self._get(f'/gToHCalendar/{month}/{year}') or []

    def get_methods(self) -> Dict[str, Any]:
        """Method catalog keyed by method id: {"3": {"id": 3, "name": "...", "params": {...}}, ...}"""
        return self._get('/methods') or {}

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        self.logger.info(f"Making API request to {url} with params {params}")
        try:
            response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Request to {url} failed: {e}")
            raise UpstreamCallFailed(f"Aladhan request to {path} failed: {e}") from e
        except ValueError as e:
            self.logger.error(f"Invalid JSON from {url}: {e}")
            raise UpstreamCallFailed(f"Aladhan returned invalid JSON for {path}") from e

        if not isinstance(payload, dict) or 'data' not in payload:
            raise UpstreamCallFailed(f"Aladhan response for {path} has no data")
        return payload['data']

    def _normalize_days(self, days: Optional[List[Dict[str, Any]]]) -> List[PrayerDay]:
        result = []
        for d in days or []:
            try:
                day_date = d['date']['gregorian']['date']
            except (KeyError, TypeError) as e:
                raise UpstreamCallFailed(f"Unexpected day entry from Aladhan: {d!r}") from e
            timings = d.get('timings') or {}
            result.append(PrayerDay(
                date=day_date,
                timings={ours: timings.get(theirs) for ours, theirs in self.PRAYER_NAMES.items()},
            ))
        return result
