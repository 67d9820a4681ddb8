"""
Database models for the emission reference store

Tables:
- emission_factors: kg CO2e per kg, unique per (category, item, country)
- seasonal_info: produce calendars
- regional, seasonal, processing, waste, transport factors and distances
- special_cases: (item, origin, season) overrides of the regional factor
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    UniqueConstraint,
)

from foodprint.db.base import Base


class EmissionFactorRow(Base):
    """Emission factor keyed by (category, item, country)"""

    __tablename__ = "emission_factors"
    __table_args__ = (
        UniqueConstraint("category", "item", "country", name="uq_emission_factor_key"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(String(64), nullable=False, index=True)
    item = Column(String(128), nullable=False)
    country = Column(String(64), nullable=False, default="global")
    value = Column(Float, nullable=False)
    source = Column(String(64), nullable=False)
    last_updated = Column(DateTime, default=datetime.utcnow, nullable=False)
    # "metadata" is reserved on declarative classes
    extra = Column("metadata", JSON, nullable=True)


class SeasonalInfoRow(Base):
    """Produce calendar per country (months 1-12)"""

    __tablename__ = "seasonal_info"
    __table_args__ = (UniqueConstraint("country", "item", name="uq_seasonal_info"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    country = Column(String(64), nullable=False, index=True)
    item = Column(String(128), nullable=False)
    in_season = Column(JSON, nullable=False, default=list)
    near_season = Column(JSON, nullable=False, default=list)


class RegionalFactorRow(Base):
    __tablename__ = "regional_factors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    origin = Column(String(64), nullable=False, unique=True)
    factor = Column(Float, nullable=False)


class SeasonalFactorRow(Base):
    __tablename__ = "seasonal_factors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    season = Column(String(64), nullable=False, unique=True)
    factor = Column(Float, nullable=False)


class ProcessingFactorRow(Base):
    __tablename__ = "processing_factors"
    __table_args__ = (UniqueConstraint("method", "category", name="uq_processing_factor"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    method = Column(String(64), nullable=False)
    category = Column(String(64), nullable=False)
    factor = Column(Float, nullable=False)


class WasteFactorRow(Base):
    __tablename__ = "waste_factors"
    __table_args__ = (UniqueConstraint("category", "stage", name="uq_waste_factor"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(String(64), nullable=False)
    stage = Column(String(32), nullable=False)
    fraction = Column(Float, nullable=False)


class TransportFactorRow(Base):
    """kg CO2e per tonne-km by transport mode"""

    __tablename__ = "transport_factors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    mode = Column(String(32), nullable=False, unique=True)
    factor = Column(Float, nullable=False)


class DistanceRow(Base):
    __tablename__ = "distances"
    __table_args__ = (UniqueConstraint("origin", "destination", name="uq_distance"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    origin = Column(String(64), nullable=False)
    destination = Column(String(64), nullable=False)
    km = Column(Float, nullable=False)


class SpecialCaseRow(Base):
    """Regional factor override for one (item, origin, season)"""

    __tablename__ = "special_cases"
    __table_args__ = (UniqueConstraint("item", "origin", "season", name="uq_special_case"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    item = Column(String(128), nullable=False)
    origin = Column(String(64), nullable=False)
    season = Column(String(64), nullable=False)
    factor = Column(Float, nullable=False)
