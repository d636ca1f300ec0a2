"""
In-memory fake Aladhan client for testing.

Duck-type-compatible stand-in for AladhanClient. No network access: prayer
days, gToH months and the method catalog are generated or preset, and every
call is recorded so tests can assert on what was asked for.
"""
from datetime import date, timedelta

from athan_service.core.errors import UpstreamCallFailed
from athan_service.plugins.prayer.prayer_base import PrayerDay

TIMINGS = {
    "Fajr": "04:12 (EET)",
    "Shurooq": "05:58 (EET)",
    "Dhuhr": "12:58 (EET)",
    "Asr": "16:35 (EET)",
    "Maghrib": "19:57 (EET)",
    "Isha": "21:26 (EET)",
}

METHODS = {
    "MWL": {"id": 3, "name": "Muslim World League", "params": {"Fajr": 18, "Isha": 17}},
    "ISNA": {"id": 2, "name": "Islamic Society of North America (ISNA)", "params": {"Fajr": 15, "Isha": 15}},
    "EGYPT": {"id": 5, "name": "Egyptian General Authority of Survey", "params": {"Fajr": 19.5, "Isha": 17.5}},
    "CUSTOM": {"id": 99},
}


def month_days(month: int, year: int) -> list:
    first = date(year, month, 1)
    next_month = date(year + (month == 12), month % 12 + 1, 1)
    return [first + timedelta(days=i) for i in range((next_month - first).days)]


def make_prayer_days(month: int, year: int, count: int = 3) -> list:
    return [
        PrayerDay(date=d.strftime("%d-%m-%Y"), timings=dict(TIMINGS))
        for d in month_days(month, year)[:count]
    ]


def make_gtoh_month(month: int, year: int, hijri_year: int = 1446) -> list:
    """gToHCalendar-shaped entries. The Hijri side is synthetic: month index and day number only."""
    return [
        {
            "gregorian": {"date": d.strftime("%d-%m-%Y")},
            "hijri": {"date": f"{i + 1:02d}-{month:02d}-{hijri_year}"},
        }
        for i, d in enumerate(month_days(month, year))
    ]


class FakeAladhanClient:
    """In-memory stub that satisfies the AladhanClient duck-type contract."""

    def __init__(self, gtoh=None, methods=None, fail_on_month=None):
        # (month, year) -> list of gToH entries; missing keys are generated
        self.gtoh = dict(gtoh or {})
        self.methods = METHODS if methods is None else methods
        self.fail_on_month = fail_on_month
        self.calls = []

    def get_calendar_by_coordinates(self, lat, lon, method, month, year):
        self.calls.append(("coordinates", lat, lon, method, month, year))
        return make_prayer_days(month, year)

    def get_calendar_by_city(self, city, country, method, month, year):
        self.calls.append(("city", city, country, method, month, year))
        return make_prayer_days(month, year)

    def get_gregorian_to_hijri_calendar(self, month, year):
        self.calls.append(("gtoh", month, year))
        if month == self.fail_on_month:
            raise UpstreamCallFailed(f"Aladhan request to /gToHCalendar/{month}/{year} failed")
        if (month, year) in self.gtoh:
            return self.gtoh[(month, year)]
        return make_gtoh_month(month, year)

    def get_methods(self):
        self.calls.append(("methods",))
        return self.methods

    @property
    def last_call(self):
        return self.calls[-1] if self.calls else None
