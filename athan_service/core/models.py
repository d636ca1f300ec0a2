"""
Core DB models: cities and the calculation-method catalog (athan_school).
Both are looked up by name from the prayer plugin.
"""
from sqlalchemy import Column, Integer, String, Text

from athan_service.core.db import Base


class City(Base):
    """A city scoped by country. Populated outside this service; only read here."""
    __tablename__ = "city"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    country_name = Column(String(255), nullable=False, index=True)


class AthanSchool(Base):
    """One calculation method from the upstream catalog."""
    __tablename__ = "athan_school"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)  # upstream catalog key, e.g. "MWL"
    strategy_name = Column(String(50), nullable=False, unique=True)  # "athan-api-<upstream id>", e.g. "athan-api-3"
    description = Column(Text, nullable=False)  # upstream display name
