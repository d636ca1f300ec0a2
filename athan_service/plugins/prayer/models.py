"""
SQLAlchemy model for stored prayer calendars: one row per (method, city, day).
"""
from sqlalchemy import Column, Date, ForeignKey, Integer, Text, UniqueConstraint

from athan_service.core.db import Base


class AthanCalendarRecord(Base):
    """One day of prayer times. data is JSON text: {"Fajr": "04:12 (CEST)", ..., "Isha": "..."}."""
    __tablename__ = "athan_calendar"
    __table_args__ = (
        UniqueConstraint("athan_school_id", "city_id", "date", name="uq_athan_calendar_school_city_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    athan_school_id = Column(Integer, ForeignKey("athan_school.id"), nullable=False, index=True)
    city_id = Column(Integer, ForeignKey("city.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    data = Column(Text, nullable=False)
