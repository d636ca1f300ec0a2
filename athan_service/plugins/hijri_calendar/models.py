"""
SQLAlchemy model for official Hijri month boundaries: one row per Gregorian month.
"""
from sqlalchemy import Column, Integer, String

from athan_service.core.db import Base


class HijriMonthRecord(Base):
    """Hijri dates of the first and last day of one Gregorian month. All dates are "DD-MM-YYYY" strings."""
    __tablename__ = "hijri_calendar"

    year = Column(Integer, primary_key=True, autoincrement=False)
    month = Column(Integer, primary_key=True, autoincrement=False)  # 1..12
    gregorian_first_day = Column(String(10), nullable=False)
    hijri_first_day = Column(String(10), nullable=False)
    hijri_last_day = Column(String(10), nullable=False)
