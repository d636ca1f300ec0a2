"""
AladhanClient against a patched requests.get: URLs and params sent, day
normalization (Sunrise -> Shurooq), and error mapping to UpstreamCallFailed.
"""
import pytest
import requests

from athan_service.core.errors import UpstreamCallFailed
from athan_service.plugins.prayer import prayer_base
from athan_service.plugins.prayer.prayer_base import AladhanClient, PrayerDay


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _calendar_entry(day):
    return {
        "timings": {
            "Fajr": "04:12 (EET)",
            "Sunrise": "05:58 (EET)",
            "Dhuhr": "12:58 (EET)",
            "Asr": "16:35 (EET)",
            "Sunset": "19:57 (EET)",
            "Maghrib": "19:57 (EET)",
            "Isha": "21:26 (EET)",
            "Midnight": "00:27 (EET)",
        },
        "date": {"readable": f"{day} Jul 2024", "gregorian": {"date": f"{day}-07-2024"}},
    }


@pytest.fixture
def captured(monkeypatch):
    """Patch requests.get; set captured['response'] before calling the client."""
    state = {"calls": [], "response": FakeResponse({"code": 200, "data": []})}

    def fake_get(url, params=None, timeout=None):
        state["calls"].append({"url": url, "params": params, "timeout": timeout})
        response = state["response"]
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(prayer_base.requests, "get", fake_get)
    return state


def test_calendar_by_coordinates_request_and_normalization(captured):
    captured["response"] = FakeResponse({"code": 200, "data": [_calendar_entry("25"), _calendar_entry("26")]})
    client = AladhanClient({"timeout": 5})

    days = client.get_calendar_by_coordinates(30.0444, 31.2357, 5, 7, 2024)

    assert captured["calls"] == [{
        "url": "http://api.aladhan.com/v1/calendar",
        "params": {"latitude": 30.0444, "longitude": 31.2357, "method": 5, "month": 7, "year": 2024},
        "timeout": 5,
    }]
    assert days[0] == PrayerDay(
        date="25-07-2024",
        timings={
            "Fajr": "04:12 (EET)",
            "Shurooq": "05:58 (EET)",
            "Dhuhr": "12:58 (EET)",
            "Asr": "16:35 (EET)",
            "Maghrib": "19:57 (EET)",
            "Isha": "21:26 (EET)",
        },
    )
    assert [d.date for d in days] == ["25-07-2024", "26-07-2024"]


def test_calendar_by_city_request(captured):
    captured["response"] = FakeResponse({"code": 200, "data": [_calendar_entry("01")]})
    client = AladhanClient({"base_url": "https://api.aladhan.com/v1/"})

    days = client.get_calendar_by_city("Cairo", "Egypt", 5, 7, 2024)

    call = captured["calls"][0]
    assert call["url"] == "https://api.aladhan.com/v1/calendarByCity"
    assert call["params"] == {"city": "Cairo", "country": "Egypt", "method": 5, "month": 7, "year": 2024}
    assert call["timeout"] == 30
    assert days[0].timings["Shurooq"] == "05:58 (EET)"


def test_gtoh_calendar_returns_raw_days(captured):
    entries = [{"gregorian": {"date": "01-01-2025"}, "hijri": {"date": "01-07-1446"}}]
    captured["response"] = FakeResponse({"code": 200, "data": entries})

    assert AladhanClient().get_gregorian_to_hijri_calendar(1, 2025) == entries
    assert captured["calls"][0]["url"] == "http://api.aladhan.com/v1/gToHCalendar/1/2025"


def test_methods_catalog(captured):
    catalog = {"MWL": {"id": 3, "name": "Muslim World League"}}
    captured["response"] = FakeResponse({"code": 200, "data": catalog})

    assert AladhanClient().get_methods() == catalog


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse({"code": 400, "data": "Bad request"}, status_code=400),
        requests.exceptions.ConnectionError("connection refused"),
        requests.exceptions.Timeout("read timed out"),
        FakeResponse(ValueError("Expecting value")),
        FakeResponse({"code": 200}),
        FakeResponse({"code": 200, "data": [{"timings": {}}]}),
    ],
)
def test_failures_raise_upstream_call_failed(captured, response):
    captured["response"] = response
    with pytest.raises(UpstreamCallFailed):
        AladhanClient().get_calendar_by_coordinates(1.0, 2.0, 3, 7, 2024)
    assert len(captured["calls"]) == 1
