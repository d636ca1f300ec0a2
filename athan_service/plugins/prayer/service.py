"""
Service layer: name lookups, the calculation-method catalog, and stored calendars.
Every write runs in its own session, so a failing item leaves earlier items committed.
"""
import json
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select

from athan_service.core.db import Database
from athan_service.core.errors import PersistenceWriteFailed, StorageUnavailable
from athan_service.core.models import AthanSchool, City
from athan_service.plugins.prayer.models import AthanCalendarRecord
from athan_service.plugins.prayer.prayer_base import PrayerDay
from athan_service.plugins.prayer.strategies import ATHAN_API_PREFIX

logger = logging.getLogger(__name__)


def strategy_name_for(method_id: Any) -> str:
    return f"{ATHAN_API_PREFIX}{method_id}"


def _contains_pattern(value: str) -> str:
    # % and _ in the input are literal characters
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def find_city_id_by_name(db: Database, city: str, country: str) -> Optional[int]:
    """First city whose name and country contain the given strings, ignoring case. Blank input matches nothing."""
    with db.session_scope() as session:
        if not city or not country:
            return None
        return session.execute(
            select(City.id)
            .where(
                City.country_name.ilike(_contains_pattern(country), escape="\\"),
                City.name.ilike(_contains_pattern(city), escape="\\"),
            )
            .order_by(City.id)
            .limit(1)
        ).scalars().first()


def find_strategy_id_by_name(db: Database, strategy_name: str) -> Optional[int]:
    with db.session_scope() as session:
        return session.execute(
            select(AthanSchool.id).where(AthanSchool.strategy_name == strategy_name).limit(1)
        ).scalars().first()


def save_calculation_methods(db: Database, methods: Dict[str, Any]) -> Tuple[int, int]:
    """
    Store the upstream method catalog. Entries without a name are skipped.
    Returns (inserted, updated); an existing strategy_name only gets its description refreshed.
    """
    logger.info("Attempting to save prayer calculation methods.")
    inserted_count = 0
    updated_count = 0
    for method_id, method in (methods or {}).items():
        if not isinstance(method, dict) or method.get("name") is None:
            continue
        strategy_name = strategy_name_for(method.get("id", method_id))
        try:
            with db.session_scope() as session:
                row = session.execute(
                    select(AthanSchool).where(AthanSchool.strategy_name == strategy_name)
                ).scalars().first()
                if row:
                    if row.description != method["name"]:
                        row.description = method["name"]
                        updated_count += 1
                else:
                    session.add(AthanSchool(
                        name=str(method_id),
                        strategy_name=strategy_name,
                        description=method["name"],
                    ))
                    inserted_count += 1
        except StorageUnavailable:
            raise
        except Exception as e:
            logger.error(f"Error saving prayer calculation method {method_id}: {e}")
            raise PersistenceWriteFailed(f"Could not save calculation method {method_id}: {e}") from e

    logger.info(f"Successfully processed prayer methods. Inserted: {inserted_count}, Updated: {updated_count}.")
    return inserted_count, updated_count


def parse_day_date(value: str) -> date:
    """'25-07-2024' -> date(2024, 7, 25)"""
    day, month, year = value.split("-")
    return date(int(year), int(month), int(day))


def insert_calendar_data(db: Database, strategy_id: int, city_id: int, days: Iterable[PrayerDay]) -> int:
    """Insert one row per day. Stops at the first failure; rows already inserted stay."""
    inserted = 0
    for day in days:
        try:
            with db.session_scope() as session:
                session.add(AthanCalendarRecord(
                    athan_school_id=strategy_id,
                    city_id=city_id,
                    date=parse_day_date(day.date),
                    data=json.dumps(day.timings),
                ))
        except StorageUnavailable:
            raise
        except Exception as e:
            logger.error(f"Error inserting calendar day {day.date} for strategy={strategy_id} city={city_id}: {e}")
            raise PersistenceWriteFailed(f"Could not store calendar day {day.date}: {e}") from e
        inserted += 1
    logger.info(f"Inserted {inserted} calendar days for strategy={strategy_id} city={city_id}")
    return inserted


def get_calendar_records(db: Database, strategy_id: int, city_id: int) -> List[AthanCalendarRecord]:
    """Stored days for a method and city, oldest first (for API serialization)."""
    with db.session_scope() as session:
        return list(
            session.execute(
                select(AthanCalendarRecord)
                .where(
                    AthanCalendarRecord.athan_school_id == strategy_id,
                    AthanCalendarRecord.city_id == city_id,
                )
                .order_by(AthanCalendarRecord.date)
            ).scalars().all()
        )
