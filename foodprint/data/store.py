# -*- coding: utf-8 -*-
"""
Structured reference store.

``EmissionFactorStore`` holds emission factors keyed by
(category, item, country). ``AdjustmentStore`` holds the adjustment-factor
tables. Both open one short session per call, so they are safe to share
between worker threads. Database failures surface as ``DataAccessError``.

Example:
    >>> engine = build_engine("sqlite://")
    >>> init_db(engine)
    >>> store = EmissionFactorStore(get_session_factory(engine))
    >>> store.upsert(EmissionFactorRecord("meat", "beef", 25.3, "reference"))
    >>> store.get("meat", "beef").value
    25.3
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from foodprint.data.records import (
    GLOBAL_COUNTRY,
    EmissionFactorRecord,
    SeasonalCalendar,
    SpecialCase,
)
from foodprint.db.base import session_scope
from foodprint.db.models import (
    DistanceRow,
    EmissionFactorRow,
    ProcessingFactorRow,
    RegionalFactorRow,
    SeasonalFactorRow,
    SeasonalInfoRow,
    SpecialCaseRow,
    TransportFactorRow,
    WasteFactorRow,
)
from foodprint.exceptions import DataAccessError

logger = logging.getLogger(__name__)


def _to_record(row: EmissionFactorRow) -> EmissionFactorRecord:
    return EmissionFactorRecord(
        category=row.category,
        item=row.item,
        value=row.value,
        source=row.source,
        country=row.country,
        last_updated=row.last_updated,
        metadata=dict(row.extra or {}),
    )


class EmissionFactorStore:
    """Emission factors persisted through SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get(
        self, category: str, item: str, country: str = GLOBAL_COUNTRY
    ) -> Optional[EmissionFactorRecord]:
        """
        Exact lookup of one factor.

        Raises:
            DataAccessError: If the store cannot be read
        """
        try:
            with session_scope(self._session_factory) as session:
                row = self._find(session, category.lower(), item.lower(), country.lower())
                return _to_record(row) if row is not None else None
        except SQLAlchemyError as e:
            raise DataAccessError(
                "Emission factor lookup failed", operation="get", original_error=e
            ) from e

    def upsert(self, record: EmissionFactorRecord) -> None:
        """Insert or supersede the factor for ``record.key``."""
        self.bulk_upsert([record])

    def bulk_upsert(self, records: Iterable[EmissionFactorRecord]) -> int:
        """
        Insert or supersede many factors in one transaction.

        Returns:
            Number of records written
        """
        records = list(records)
        if not records:
            return 0
        try:
            try:
                self._write(records)
            except IntegrityError:
                # A concurrent writer inserted one of the keys first
                logger.debug("Upsert raced with another writer, retrying")
                self._write(records)
        except SQLAlchemyError as e:
            raise DataAccessError(
                "Emission factor upsert failed", operation="upsert", original_error=e
            ) from e
        return len(records)

    def _write(self, records: List[EmissionFactorRecord]) -> None:
        with session_scope(self._session_factory) as session:
            for record in records:
                row = self._find(session, *record.key)
                if row is None:
                    row = EmissionFactorRow(
                        category=record.category,
                        item=record.item,
                        country=record.country,
                    )
                    session.add(row)
                row.value = record.value
                row.source = record.source
                row.last_updated = record.last_updated
                row.extra = dict(record.metadata)
                session.flush()

    def category_average(self, category: str) -> Optional[float]:
        """Mean of all stored factors of ``category``; None when it has none."""
        try:
            with session_scope(self._session_factory) as session:
                value = session.execute(
                    select(func.avg(EmissionFactorRow.value)).where(
                        EmissionFactorRow.category == category.lower()
                    )
                ).scalar()
                return float(value) if value is not None else None
        except SQLAlchemyError as e:
            raise DataAccessError(
                "Category average failed", operation="category_average", original_error=e
            ) from e

    def latest_update(self, source: str) -> Optional[datetime]:
        """Most recent ``last_updated`` among rows written by ``source``."""
        try:
            with session_scope(self._session_factory) as session:
                return session.execute(
                    select(func.max(EmissionFactorRow.last_updated)).where(
                        EmissionFactorRow.source == source
                    )
                ).scalar()
        except SQLAlchemyError as e:
            raise DataAccessError(
                "Latest update lookup failed", operation="latest_update", original_error=e
            ) from e

    def count(self) -> int:
        try:
            with session_scope(self._session_factory) as session:
                return session.execute(select(func.count(EmissionFactorRow.id))).scalar() or 0
        except SQLAlchemyError as e:
            raise DataAccessError("Count failed", operation="count", original_error=e) from e

    @staticmethod
    def _find(session: Session, category: str, item: str, country: str) -> Optional[EmissionFactorRow]:
        return session.execute(
            select(EmissionFactorRow).where(
                EmissionFactorRow.category == category,
                EmissionFactorRow.item == item,
                EmissionFactorRow.country == country,
            )
        ).scalar_one_or_none()


class AdjustmentStore:
    """Adjustment-factor tables (regional, seasonal, processing, ...)."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _scalar(self, statement, operation: str):
        try:
            with session_scope(self._session_factory) as session:
                return session.execute(statement).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise DataAccessError(
                f"Adjustment lookup failed: {operation}", operation=operation, original_error=e
            ) from e

    def regional_factor(self, origin: str) -> Optional[float]:
        return self._scalar(
            select(RegionalFactorRow.factor).where(RegionalFactorRow.origin == origin),
            "regional_factor",
        )

    def seasonal_factor(self, season: str) -> Optional[float]:
        return self._scalar(
            select(SeasonalFactorRow.factor).where(SeasonalFactorRow.season == season),
            "seasonal_factor",
        )

    def processing_factor(self, method: str, category: str) -> Optional[float]:
        return self._scalar(
            select(ProcessingFactorRow.factor).where(
                ProcessingFactorRow.method == method,
                ProcessingFactorRow.category == category,
            ),
            "processing_factor",
        )

    def waste_fraction(self, category: str, stage: str) -> Optional[float]:
        return self._scalar(
            select(WasteFactorRow.fraction).where(
                WasteFactorRow.category == category,
                WasteFactorRow.stage == stage,
            ),
            "waste_fraction",
        )

    def transport_factor(self, mode: str) -> Optional[float]:
        return self._scalar(
            select(TransportFactorRow.factor).where(TransportFactorRow.mode == mode),
            "transport_factor",
        )

    def distance(self, origin: str, destination: str) -> Optional[float]:
        return self._scalar(
            select(DistanceRow.km).where(
                DistanceRow.origin == origin,
                DistanceRow.destination == destination,
            ),
            "distance",
        )

    def special_case(self, item: str, origin: str, season: str) -> Optional[float]:
        return self._scalar(
            select(SpecialCaseRow.factor).where(
                SpecialCaseRow.item == item,
                SpecialCaseRow.origin == origin,
                SpecialCaseRow.season == season,
            ),
            "special_case",
        )

    def calendars(self, country: str) -> List[SeasonalCalendar]:
        """Produce calendars recorded for ``country``."""
        try:
            with session_scope(self._session_factory) as session:
                rows = session.execute(
                    select(SeasonalInfoRow)
                    .where(SeasonalInfoRow.country == country)
                    .order_by(SeasonalInfoRow.id)
                ).scalars().all()
                return [
                    SeasonalCalendar(
                        country=row.country,
                        item=row.item,
                        in_season=tuple(row.in_season or ()),
                        near_season=tuple(row.near_season or ()),
                    )
                    for row in rows
                ]
        except SQLAlchemyError as e:
            raise DataAccessError(
                "Seasonal calendar lookup failed", operation="calendars", original_error=e
            ) from e

    # ==================== SEEDING ====================

    def seed(
        self,
        regional: Dict[str, float],
        seasonal: Dict[str, float],
        processing: Dict[Tuple[str, str], float],
        waste: Dict[str, Dict[str, float]],
        transport: Dict[str, float],
        distances: Dict[Tuple[str, str], float],
        calendars: Dict[Tuple[str, str], Tuple[List[int], List[int]]],
        special_cases: Iterable[SpecialCase] = (),
    ) -> Dict[str, int]:
        """
        Populate every empty table from the given data.

        Tables that already hold rows are left untouched.

        Returns:
            Rows inserted per table
        """
        inserted: Dict[str, int] = {}
        try:
            with session_scope(self._session_factory) as session:
                inserted["regional_factors"] = self._seed_table(
                    session, RegionalFactorRow,
                    [RegionalFactorRow(origin=k, factor=v) for k, v in regional.items()],
                )
                inserted["seasonal_factors"] = self._seed_table(
                    session, SeasonalFactorRow,
                    [SeasonalFactorRow(season=k, factor=v) for k, v in seasonal.items()],
                )
                inserted["processing_factors"] = self._seed_table(
                    session, ProcessingFactorRow,
                    [
                        ProcessingFactorRow(method=m, category=c, factor=v)
                        for (m, c), v in processing.items()
                    ],
                )
                inserted["waste_factors"] = self._seed_table(
                    session, WasteFactorRow,
                    [
                        WasteFactorRow(category=category, stage=stage, fraction=fraction)
                        for category, stages in waste.items()
                        for stage, fraction in stages.items()
                    ],
                )
                inserted["transport_factors"] = self._seed_table(
                    session, TransportFactorRow,
                    [TransportFactorRow(mode=k, factor=v) for k, v in transport.items()],
                )
                inserted["distances"] = self._seed_table(
                    session, DistanceRow,
                    [DistanceRow(origin=o, destination=d, km=v) for (o, d), v in distances.items()],
                )
                inserted["seasonal_info"] = self._seed_table(
                    session, SeasonalInfoRow,
                    [
                        SeasonalInfoRow(country=c, item=i, in_season=list(ins), near_season=list(near))
                        for (c, i), (ins, near) in calendars.items()
                    ],
                )
                inserted["special_cases"] = self._seed_table(
                    session, SpecialCaseRow,
                    [
                        SpecialCaseRow(item=s.item, origin=s.origin, season=s.season, factor=s.factor)
                        for s in special_cases
                    ],
                )
        except SQLAlchemyError as e:
            raise DataAccessError(
                "Reference data seeding failed", operation="seed", original_error=e
            ) from e
        return inserted

    def add_special_case(self, case: SpecialCase) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.add(
                    SpecialCaseRow(
                        item=case.item, origin=case.origin, season=case.season, factor=case.factor
                    )
                )
        except SQLAlchemyError as e:
            raise DataAccessError(
                "Special case insert failed", operation="add_special_case", original_error=e
            ) from e

    @staticmethod
    def _seed_table(session: Session, model, rows: list) -> int:
        existing = session.execute(select(func.count()).select_from(model)).scalar() or 0
        if existing or not rows:
            return 0
        session.add_all(rows)
        logger.info(f"Seeded {len(rows)} rows into {model.__tablename__}")
        return len(rows)
