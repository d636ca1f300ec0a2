"""
Per-plugin API for the official Hijri calendar. Mounted at /api/calendar/.
"""
from typing import List, Optional

from fastapi import APIRouter, Path
from pydantic import BaseModel, ConfigDict

from athan_service.core.errors import NoDataForYear
from athan_service.plugins.hijri_calendar.service import get_hijri_calendar_records

PREFIX = "/calendar"


class HijriMonthRecordResponse(BaseModel):
    """Pydantic view of HijriMonthRecord; serializes from ORM."""

    model_config = ConfigDict(from_attributes=True)

    year: int
    month: int
    gregorian_first_day: str
    hijri_first_day: str
    hijri_last_day: str


def get_router(ctx) -> Optional[APIRouter]:
    """Return router for this plugin; mounted with prefix /api/calendar."""
    router = APIRouter(tags=["Hijri Calendar"])

    @router.get("/{year}", response_model=List[List[str]])
    def sync_year(year: int = Path(..., ge=1, le=9999)) -> List[List[str]]:
        """Sync the Hijri month boundaries of a Gregorian year; returns [gregorian first, hijri first, hijri last] per month."""
        answer = ctx.hijri_synchronizer.update_official_hijri_calendar(year)
        if not answer:
            raise NoDataForYear(f"No calendar found for year {year}")
        return answer

    @router.get("/{year}/stored", response_model=List[HijriMonthRecordResponse])
    def get_stored(year: int) -> List[HijriMonthRecordResponse]:
        """Stored boundaries for a year."""
        records = get_hijri_calendar_records(ctx.database, year)
        return [HijriMonthRecordResponse.model_validate(r) for r in records]

    return router
