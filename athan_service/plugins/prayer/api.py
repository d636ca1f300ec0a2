"""
Per-plugin API for prayer times. Mounted at /api/prayer/.
- /by-coordinates, /by-city: direct upstream lookups for the current month.
- /times: implicit strategy resolution.
- /execute-strategy: explicit strategy by name, then store the calendar when city and method are known.
- /methods, /init-methods: upstream method catalog (raw / stored).
- /stored: stored calendar for a method and city.
"""
import json
import logging
import datetime as dt
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, ConfigDict, field_validator

from athan_service.core.errors import ParametersNotValid, PersistenceWriteFailed
from athan_service.plugins.prayer import service
from athan_service.plugins.prayer.prayer_base import PrayerDay

PREFIX = "/prayer"

logger = logging.getLogger(__name__)


class PrayerDayResponse(BaseModel):
    date: str
    timings: Dict[str, Optional[str]]


class InitMethodsResponse(BaseModel):
    message: str
    inserted: int
    updated: int


class AthanCalendarRecordResponse(BaseModel):
    """Pydantic view of AthanCalendarRecord; data is decoded back to the timings map."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    athan_school_id: int
    city_id: int
    date: dt.date
    data: Dict[str, Optional[str]]

    @field_validator("data", mode="before")
    @classmethod
    def _decode_data(cls, value: Any) -> Any:
        return json.loads(value) if isinstance(value, str) else value


def _to_response(days: List[PrayerDay]) -> List[PrayerDayResponse]:
    return [PrayerDayResponse(date=d.date, timings=d.timings) for d in days]


def get_router(ctx) -> Optional[APIRouter]:
    """Return router for this plugin; mounted with prefix /api/prayer."""
    router = APIRouter(tags=["Prayer Times"])

    @router.get("/by-coordinates", response_model=List[PrayerDayResponse])
    def get_by_coordinates(lat: float, lon: float, method: Optional[int] = None) -> List[PrayerDayResponse]:
        """Current month of prayer times at the given coordinates."""
        today = dt.date.today()
        calc_method = ctx.default_method if method is None else method
        days = ctx.client.get_calendar_by_coordinates(lat, lon, calc_method, today.month, today.year)
        return _to_response(days)

    @router.get("/by-city", response_model=List[PrayerDayResponse])
    def get_by_city(city: str, country: str, method: Optional[int] = None) -> List[PrayerDayResponse]:
        """Current month of prayer times in the given city."""
        if not city.strip() or not country.strip():
            raise HTTPException(status_code=400, detail="City and country are required")
        today = dt.date.today()
        calc_method = ctx.default_method if method is None else method
        days = ctx.client.get_calendar_by_city(city, country, calc_method, today.month, today.year)
        return _to_response(days)

    @router.get("/times", response_model=List[PrayerDayResponse])
    def get_prayer_times(
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        city: Optional[str] = None,
        country: Optional[str] = None,
        method: Optional[int] = None,
        duration: int = 7,
    ) -> List[PrayerDayResponse]:
        """Prayer times by coordinates or by city; the first strategy that fits wins."""
        params: Dict[str, Any] = {
            "method": ctx.default_method if method is None else method,
            "duration": duration,
        }
        if lat is not None or lon is not None:
            params.update(lat=lat, lon=lon)
        if city is not None or country is not None:
            params.update(city=city, country=country)
        return _to_response(ctx.athan_service.get_prayer_times(params))

    @router.get("/methods")
    def get_methods() -> Dict[str, Any]:
        """Raw upstream calculation-method catalog."""
        return ctx.athan_service.get_methods()

    @router.get("/init-methods", response_model=InitMethodsResponse)
    def init_methods() -> InitMethodsResponse:
        """Fetch the upstream catalog and store it in athan_school."""
        inserted, updated = service.save_calculation_methods(ctx.database, ctx.athan_service.get_methods())
        return InitMethodsResponse(
            message="Prayer calculation methods initialized and saved successfully.",
            inserted=inserted,
            updated=updated,
        )

    @router.get("/execute-strategy", response_model=List[PrayerDayResponse])
    def execute_strategy(
        strategy: str,
        params: str = Query("{}", description="JSON object, e.g. {\"city\": \"Cairo\", \"country\": \"Egypt\", \"duration\": 7}"),
    ) -> List[PrayerDayResponse]:
        """Run a strategy by name; store the result when both the strategy and the city are known."""
        try:
            data = json.loads(params)
        except ValueError as e:
            raise ParametersNotValid(f"params is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ParametersNotValid("params must be a JSON object")

        strategy_id = service.find_strategy_id_by_name(ctx.database, strategy)
        city_id = service.find_city_id_by_name(ctx.database, data.get("city"), data.get("country"))
        calendar = ctx.athan_service.execute_strategy_by_name(strategy, data)
        logger.debug(f"strategy_id={strategy_id} city_id={city_id} days={len(calendar)}")

        if strategy_id is not None and city_id is not None and calendar:
            try:
                service.insert_calendar_data(ctx.database, strategy_id, city_id, calendar)
            except PersistenceWriteFailed as e:
                # The fetched calendar is still the answer; storing it is best effort here.
                logger.warning(f"Calendar for strategy={strategy} city_id={city_id} not fully stored: {e}")
        return _to_response(calendar)

    @router.get("/stored", response_model=List[AthanCalendarRecordResponse])
    def get_stored(strategy: str, city: str, country: str) -> List[AthanCalendarRecordResponse]:
        """Stored calendar for a strategy name and a city."""
        strategy_id = service.find_strategy_id_by_name(ctx.database, strategy)
        city_id = service.find_city_id_by_name(ctx.database, city, country)
        if strategy_id is None or city_id is None:
            raise HTTPException(status_code=404, detail="Unknown strategy or city")
        records = service.get_calendar_records(ctx.database, strategy_id, city_id)
        return [AthanCalendarRecordResponse.model_validate(r) for r in records]

    return router
