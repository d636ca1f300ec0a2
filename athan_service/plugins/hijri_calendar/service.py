"""
Service layer: sync the official Hijri month boundaries of a Gregorian year from
Aladhan's gToHCalendar and store them insert-if-absent.
"""
import logging
from collections import namedtuple
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from athan_service.core.db import Database
from athan_service.core.errors import PersistenceWriteFailed, StorageUnavailable, UpstreamCallFailed
from athan_service.plugins.hijri_calendar.models import HijriMonthRecord
from athan_service.plugins.prayer.prayer_base import AladhanClient

# month is the Gregorian month index 1..12; dates are "DD-MM-YYYY"
HijriMonthBoundary = namedtuple(
    "HijriMonthBoundary",
    ["month", "gregorian_first_day", "hijri_first_day", "hijri_last_day"],
)


def to_day_month_year(value: str) -> str:
    """'2025-01-31' -> '31-01-2025'; a value already in day-month-year order is returned unchanged."""
    parts = value.split("-")
    if len(parts) == 3 and len(parts[0]) == 4:
        return "-".join(reversed(parts))
    return value


def boundary_from_days(month: int, days: List[Dict[str, Any]]) -> HijriMonthBoundary:
    """First and last day entries of a gToHCalendar month -> boundary."""
    first, last = days[0], days[-1]
    return HijriMonthBoundary(
        month=month,
        gregorian_first_day=to_day_month_year(first["gregorian"]["date"]),
        hijri_first_day=to_day_month_year(first["hijri"]["date"]),
        hijri_last_day=to_day_month_year(last["hijri"]["date"]),
    )


class HijriCalendarSynchronizer:
    def __init__(self, client: AladhanClient, db: Database):
        self.client = client
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    def update_official_hijri_calendar(self, year: int) -> List[List[str]]:
        """
        Fetch the 12 Gregorian months of `year` one after another and store each
        month's boundary unless that month is already stored.
        Returns [gregorian_first_day, hijri_first_day, hijri_last_day] per month computed,
        or [] when Aladhan had nothing for the year.
        """
        self.logger.info(f"Updating official Hijri calendar for year {year}")

        boundaries = self.fetch_monthly_boundaries(year)
        if not boundaries:
            self.logger.warning(f"NoDataForYear: no calendar found for year {year}")
            return []

        answer = []
        written = 0
        for boundary in boundaries:
            answer.append([boundary.gregorian_first_day, boundary.hijri_first_day, boundary.hijri_last_day])
            if self._insert_if_absent(year, boundary):
                written += 1

        self.logger.info(
            f"Processed {len(boundaries)} months for year {year}: "
            f"{written} inserted, {len(boundaries) - written} already present"
        )
        return answer

    def fetch_monthly_boundaries(self, year: int) -> List[HijriMonthBoundary]:
        # One month at a time, in order.
        boundaries = []
        for month in range(1, 13):
            days = self.client.get_gregorian_to_hijri_calendar(month, year)
            if not days:
                self.logger.warning(f"No gToH data for {month}/{year}, skipping month")
                continue
            try:
                boundaries.append(boundary_from_days(month, days))
            except (KeyError, TypeError) as e:
                raise UpstreamCallFailed(f"Unexpected gToH entry for {month}/{year}: {e}") from e
        return boundaries

    def _insert_if_absent(self, year: int, boundary: HijriMonthBoundary) -> bool:
        """True if a row was written. Existing rows are left untouched."""
        try:
            with self.db.session_scope() as session:
                existing = session.execute(
                    select(HijriMonthRecord).where(
                        HijriMonthRecord.year == year,
                        HijriMonthRecord.month == boundary.month,
                    )
                ).scalars().first()
                if existing:
                    self.logger.debug(f"Hijri boundary for {boundary.month}/{year} already stored, keeping it")
                    return False
                session.add(HijriMonthRecord(
                    year=year,
                    month=boundary.month,
                    gregorian_first_day=boundary.gregorian_first_day,
                    hijri_first_day=boundary.hijri_first_day,
                    hijri_last_day=boundary.hijri_last_day,
                ))
            return True
        except StorageUnavailable:
            raise
        except Exception as e:
            self.logger.error(f"Error storing Hijri boundary for {boundary.month}/{year}: {e}")
            raise PersistenceWriteFailed(f"Could not store Hijri boundary for {boundary.month}/{year}: {e}") from e


def get_hijri_calendar_records(db: Database, year: Optional[int] = None) -> List[HijriMonthRecord]:
    """Stored boundaries, optionally for one year, ordered by year and month."""
    with db.session_scope() as session:
        stmt = select(HijriMonthRecord).order_by(HijriMonthRecord.year, HijriMonthRecord.month)
        if year is not None:
            stmt = stmt.where(HijriMonthRecord.year == year)
        return list(session.execute(stmt).scalars().all())
