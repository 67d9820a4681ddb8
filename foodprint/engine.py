# -*- coding: utf-8 -*-
"""
Foodprint calculation engine.

``EmissionsEngine.calculate`` turns a dish name and a list of free-text
ingredients into a CO2e estimate:

    validation -> result cache -> (optional) enrichment
    -> per ingredient, on a worker pool:
         classification, portion, season, adjustments, emission factor
    -> uncertainty -> aggregation -> response by detail level

Inside the engine nothing fails: every ingredient ends with an estimate,
degraded estimates are marked through their ``data_source``. Only a
malformed request raises (``foodprint.exceptions.ValidationError``).

Example:
    >>> engine = EmissionsEngine.from_config()
    >>> engine.calculate("Beef Rice Bowl", ["beef", "rice"])["total"]
    4.11
"""

import copy
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from foodprint.adjustments import (
    AdjustmentContext,
    ProcessingProvider,
    RegionalProvider,
    SeasonalProvider,
    WasteProvider,
)
from foodprint.cache.base import CacheBackend, result_cache_key
from foodprint.cache.memory import MemoryCache
from foodprint.calculation.aggregator import (
    PERISHABLE_KEYWORDS,
    PERISHABLE_MULTIPLIER,
    WASTE_PREVENTION_RATE,
    DetailLevel,
    IngredientEstimate,
    aggregate,
)
from foodprint.config.manager import get_config
from foodprint.config.schemas import FoodprintConfig
from foodprint.connectors.registry import build_sources
from foodprint.data.maintenance import (
    RefreshScheduler,
    initialize_reference_data,
    populate_initial_data,
)
from foodprint.data.records import GLOBAL_COUNTRY, DataSource, FactorResolution
from foodprint.data.store import AdjustmentStore, EmissionFactorStore
from foodprint.db.base import build_engine, get_database_url, get_session_factory, init_db
from foodprint.exceptions import ValidationError
from foodprint.inference.client import InferenceClient
from foodprint.inference.models import EnrichedIngredient
from foodprint.portion.estimator import DEFAULT_PORTION_GRAMS, PortionEstimator
from foodprint.resolution.resolver import DEFAULT_CATEGORY_FACTOR, EmissionFactorResolver
from foodprint.taxonomy.matcher import MatchResult, TaxonomyMatcher

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8
DEFAULT_REQUEST_DEADLINE_SECONDS = 20.0
DEFAULT_RESULT_TTL_SECONDS = 300


class CalculationRequest(BaseModel):
    """Validated calculation request."""

    dish_name: str
    ingredients: List[str] = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)
    country: str = GLOBAL_COUNTRY
    detail_level: DetailLevel = DetailLevel.STANDARD

    @field_validator("dish_name")
    @classmethod
    def require_dish_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("dish_name must not be empty")
        return v

    @field_validator("ingredients", mode="before")
    @classmethod
    def require_strings(cls, v: Any) -> Any:
        if not isinstance(v, list) or not all(isinstance(i, str) for i in v):
            raise ValueError("ingredients must be a list of strings")
        if not all(i.strip() for i in v):
            raise ValueError("ingredients must not contain empty names")
        return v

    @field_validator("country")
    @classmethod
    def normalize_country(cls, v: str) -> str:
        return (v or GLOBAL_COUNTRY).strip().lower() or GLOBAL_COUNTRY


def validate_request(**fields) -> CalculationRequest:
    """
    Build a CalculationRequest or raise ``ValidationError``.

    Raises:
        ValidationError: With the offending fields in ``invalid_fields``
    """
    try:
        return CalculationRequest(**fields)
    except PydanticValidationError as e:
        invalid = {
            ".".join(str(part) for part in error["loc"]) or "request": error["msg"]
            for error in e.errors()
        }
        raise ValidationError(
            f"Invalid calculation request: {', '.join(sorted(invalid))}",
            invalid_fields=invalid,
        ) from e


def open_reference_store(
    config: FoodprintConfig,
) -> Tuple[EmissionFactorStore, AdjustmentStore]:
    """Connect to the configured database and create missing tables."""
    db_engine = build_engine(
        get_database_url(config.database.url, config.database.path),
        echo=config.database.echo,
    )
    init_db(db_engine)
    session_factory = get_session_factory(db_engine)
    return EmissionFactorStore(session_factory), AdjustmentStore(session_factory)


class EmissionsEngine:
    """
    Computes dish emissions from free-text ingredients.

    Every collaborator is injected; ``from_config`` wires the default set.
    """

    def __init__(
        self,
        resolver: EmissionFactorResolver,
        matcher: Optional[TaxonomyMatcher] = None,
        portion_estimator: Optional[PortionEstimator] = None,
        seasonal: Optional[SeasonalProvider] = None,
        regional: Optional[RegionalProvider] = None,
        processing: Optional[ProcessingProvider] = None,
        waste: Optional[WasteProvider] = None,
        inference: Optional[InferenceClient] = None,
        result_cache: Optional[CacheBackend] = None,
        result_ttl_seconds: float = DEFAULT_RESULT_TTL_SECONDS,
        max_workers: int = DEFAULT_MAX_WORKERS,
        request_deadline: float = DEFAULT_REQUEST_DEADLINE_SECONDS,
        waste_prevention_rate: float = WASTE_PREVENTION_RATE,
        perishable_multiplier: float = PERISHABLE_MULTIPLIER,
        perishable_keywords: Sequence[str] = PERISHABLE_KEYWORDS,
        today: Callable[[], date] = date.today,
        scheduler: Optional[RefreshScheduler] = None,
    ):
        self.resolver = resolver
        self.matcher = matcher or TaxonomyMatcher()
        self.portion_estimator = portion_estimator or PortionEstimator(self.matcher)
        self.seasonal = seasonal or SeasonalProvider()
        self.regional = regional or RegionalProvider()
        self.processing = processing or ProcessingProvider()
        self.waste = waste or WasteProvider()
        self.inference = inference
        self.result_cache = result_cache if result_cache is not None else MemoryCache(
            ttl_seconds=result_ttl_seconds
        )
        self.result_ttl_seconds = result_ttl_seconds
        self.max_workers = max_workers
        self.request_deadline = request_deadline
        self.waste_prevention_rate = waste_prevention_rate
        self.perishable_multiplier = perishable_multiplier
        self.perishable_keywords = tuple(perishable_keywords)
        self.today = today
        self.scheduler = scheduler

    # ==================== CONSTRUCTION ====================

    @classmethod
    def from_config(
        cls, config: Optional[FoodprintConfig] = None, initialize: bool = True
    ) -> "EmissionsEngine":
        """
        Engine wired from configuration.

        Opens the reference store, seeds the adjustment tables and, on
        first run, populates the factor store. Store problems are logged;
        the engine then runs on its fallback tables.

        With ``refresh.enabled`` the engine also carries an unstarted
        RefreshScheduler for the store, see ``start_refresh``.
        """
        config = config or get_config()
        factor_store, adjustment_store = open_reference_store(config)
        sources = build_sources(
            config.sources, timeout=config.resolver.external_timeout_seconds
        )

        if initialize:
            try:
                initialize_reference_data(adjustment_store)
                if config.refresh.populate_on_start:
                    populate_initial_data(factor_store, sources)
            except Exception as e:
                logger.error(f"Reference store initialization failed: {e}")

        scheduler = None
        if config.refresh.enabled:
            scheduler = RefreshScheduler(
                factor_store, sources, interval_seconds=config.refresh.interval_hours * 3600
            )

        resolver = EmissionFactorResolver(
            store=factor_store,
            sources=sources,
            cache=MemoryCache(
                max_size=config.cache.max_size, ttl_seconds=config.cache.factor_ttl_seconds
            ),
            ttl_seconds=config.cache.factor_ttl_seconds,
            external_timeout=config.resolver.external_timeout_seconds,
        )

        return cls(
            resolver=resolver,
            seasonal=SeasonalProvider(adjustment_store),
            regional=RegionalProvider(adjustment_store),
            processing=ProcessingProvider(adjustment_store),
            waste=WasteProvider(adjustment_store),
            inference=InferenceClient.from_config(config.inference),
            result_cache=MemoryCache(
                max_size=config.cache.max_size, ttl_seconds=config.cache.result_ttl_seconds
            ),
            result_ttl_seconds=config.cache.result_ttl_seconds,
            max_workers=config.resolver.max_workers,
            request_deadline=config.resolver.request_deadline_seconds,
            waste_prevention_rate=config.aggregation.waste_prevention_rate,
            perishable_multiplier=config.aggregation.perishable_multiplier,
            perishable_keywords=config.aggregation.perishable_keywords,
            scheduler=scheduler,
        )

    # ==================== REFRESH ====================

    def start_refresh(self) -> bool:
        """Start the periodic store refresh; False when none is configured."""
        if self.scheduler is None:
            return False
        self.scheduler.start()
        return True

    def stop_refresh(self) -> None:
        if self.scheduler is not None:
            self.scheduler.stop()

    # ==================== CALCULATION ====================

    def calculate(
        self,
        dish_name: str,
        ingredients: List[str],
        quantity: int = 1,
        detail_level: str = DetailLevel.STANDARD.value,
        country: str = GLOBAL_COUNTRY,
    ) -> Dict[str, Any]:
        """
        Estimate the emissions of ``quantity`` servings of a dish.

        Args:
            dish_name: Name of the dish
            ingredients: Free-text ingredient names
            quantity: Number of servings (>= 1)
            detail_level: basic, standard or detailed
            country: Country of consumption, or "global"

        Returns:
            Response dict shaped by ``detail_level``

        Raises:
            ValidationError: If the request is malformed
        """
        deadline = time.monotonic() + self.request_deadline
        request = validate_request(
            dish_name=dish_name,
            ingredients=ingredients,
            quantity=quantity,
            country=country,
            detail_level=detail_level,
        )

        key = result_cache_key(
            request.dish_name,
            request.ingredients,
            request.quantity,
            request.country,
            request.detail_level.value,
        )
        cached = self.result_cache.get(key)
        if cached is not None:
            logger.debug(f"Result cache hit for {request.dish_name!r}")
            return copy.deepcopy(cached)

        on_date = self.today()
        enriched = self._enrich(request, on_date, deadline)
        estimates, complete = self._estimate_all(request, enriched, on_date, deadline)

        result = aggregate(
            request.dish_name,
            estimates,
            quantity=request.quantity,
            waste_prevention_rate=self.waste_prevention_rate,
            perishable_multiplier=self.perishable_multiplier,
            perishable_keywords=self.perishable_keywords,
        )
        response = result.to_response(request.detail_level.value)

        if complete:
            self.result_cache.set(key, copy.deepcopy(response), ttl=self.result_ttl_seconds)
        return response

    def _enrich(
        self, request: CalculationRequest, on_date: date, deadline: float
    ) -> Optional[List[EnrichedIngredient]]:
        if self.inference is None:
            return None
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.warning("Request deadline reached before enrichment")
            return None
        try:
            enriched = self.inference.enrich(
                request.dish_name, request.ingredients, on_date, timeout=remaining
            )
        except Exception as e:
            logger.warning(f"Enrichment failed: {e}")
            return None
        if enriched is None:
            logger.info("Enrichment unavailable, using deterministic estimates")
        return enriched

    def _estimate_all(
        self,
        request: CalculationRequest,
        enriched: Optional[List[EnrichedIngredient]],
        on_date: date,
        deadline: float,
    ):
        """
        Estimate every ingredient on the worker pool until ``deadline``
        (a ``time.monotonic`` value shared with enrichment).

        Returns:
            (estimates in input order, whether all finished in time)
        """
        cancel = threading.Event()
        hints = enriched or [None] * len(request.ingredients)

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(request.ingredients))
        )
        try:
            futures = [
                executor.submit(
                    self._estimate_ingredient,
                    raw, request.dish_name, request.country, on_date, hint, deadline, cancel,
                )
                for raw, hint in zip(request.ingredients, hints)
            ]
            _, pending = wait(futures, timeout=max(0.0, deadline - time.monotonic()))
            if pending:
                cancel.set()
                logger.warning(
                    f"Request deadline reached with {len(pending)} ingredients unresolved"
                )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        estimates = []
        for raw, hint, future in zip(request.ingredients, hints, futures):
            if future in pending:
                future.cancel()
                estimates.append(
                    self._estimate_ingredient(
                        raw, request.dish_name, request.country, on_date, hint, offline=True
                    )
                )
            else:
                estimates.append(future.result())
        return estimates, not pending

    def _estimate_ingredient(
        self,
        raw: str,
        dish_name: str,
        country: str,
        on_date: date,
        hint: Optional[EnrichedIngredient] = None,
        deadline: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
        offline: bool = False,
    ) -> IngredientEstimate:
        """One ingredient; any failure yields an error_fallback estimate."""
        match: Optional[MatchResult] = None
        try:
            match = self.matcher.match(raw)
            category = match.category
            if hint is not None and hint.category in self.matcher.taxonomy.categories:
                category = hint.category
            item = match.specific_item if category == match.category else "default"

            if hint is not None:
                weight = float(hint.weight)
                context = AdjustmentContext(
                    category=category,
                    country=country,
                    on_date=on_date,
                    origin=hint.origin,
                    processing=hint.processing,
                    season=hint.seasonality,
                    production=hint.production,
                )
            else:
                weight = self.portion_estimator.estimate(raw, dish_name, match)
                context = AdjustmentContext(category=category, country=country, on_date=on_date)

            if context.season is None:
                context = context.with_season(
                    self.seasonal.determine_season(raw, country, on_date, category)
                )

            resolution = self._resolve(category, item, country, deadline, cancel, offline)

            return IngredientEstimate(
                raw_name=raw,
                category=category,
                subcategory=hint.subcategory if hint and hint.subcategory else match.subcategory,
                specific_item=item,
                weight_grams=weight,
                emission_factor=resolution.value,
                seasonal_factor=self.seasonal.get(raw, context),
                regional_factor=self.regional.get(raw, context),
                processing_factor=self.processing.get(raw, context),
                waste_fraction=self.waste.get(raw, context),
                data_source=DataSource.AI_ESTIMATED if hint else resolution.data_source,
                match_confidence=match.confidence,
            )
        except Exception as e:
            logger.error(f"Estimate failed for {raw!r}, using fallback: {e}")
            return IngredientEstimate(
                raw_name=raw,
                category=match.category if match else "unknown",
                subcategory=match.subcategory if match else "unknown",
                specific_item="default",
                weight_grams=DEFAULT_PORTION_GRAMS,
                emission_factor=DEFAULT_CATEGORY_FACTOR,
                data_source=DataSource.ERROR_FALLBACK,
            )

    def _resolve(
        self,
        category: str,
        item: str,
        country: str,
        deadline: Optional[float],
        cancel: Optional[threading.Event],
        offline: bool,
    ) -> FactorResolution:
        if offline:
            return self.resolver.resolve_offline(category, item, country)
        return self.resolver.resolve_with_provenance(category, item, country, deadline, cancel)

    # ==================== LOOKUPS ====================

    def emission_factor(
        self, category: str, item: str, country: str = GLOBAL_COUNTRY
    ) -> Dict[str, Any]:
        resolution = self.resolver.resolve_with_provenance(category, item, country)
        return {
            "category": category.lower(),
            "item": item.lower(),
            "country": (country or GLOBAL_COUNTRY).lower(),
            "value": resolution.value,
            "tier": resolution.tier.value,
            "source": resolution.source,
            "data_source": resolution.data_source.value,
        }

    def categorize(self, ingredient: str) -> Dict[str, Any]:
        return self.matcher.categorize(ingredient)

    def portion_size(self, ingredient: str, dish_name: str = "") -> Dict[str, Any]:
        return {
            "ingredient": ingredient,
            "dish_name": dish_name,
            "grams": self.portion_estimator.estimate(ingredient, dish_name),
        }

    def seasonality(
        self, ingredient: str, country: str = GLOBAL_COUNTRY, on_date: Optional[date] = None
    ) -> Dict[str, Any]:
        """Season label and seasonal factor of an ingredient on a date."""
        on_date = on_date or self.today()
        category = self.matcher.match(ingredient).category
        season = self.seasonal.determine_season(ingredient, country, on_date, category)
        context = AdjustmentContext(
            category=category, country=country, on_date=on_date, season=season
        )
        return {
            "ingredient": ingredient,
            "country": country,
            "date": on_date.isoformat(),
            "season": season,
            "factor": self.seasonal.get(ingredient, context),
        }


_default_engine: Optional[EmissionsEngine] = None
_default_lock = threading.Lock()


def get_default_engine() -> EmissionsEngine:
    """Process-wide engine built from configuration on first use."""
    global _default_engine
    with _default_lock:
        if _default_engine is None:
            _default_engine = EmissionsEngine.from_config()
        return _default_engine


def reset_default_engine() -> None:
    global _default_engine
    with _default_lock:
        _default_engine = None


def calculate_emissions(
    dish_name: str,
    ingredients: List[str],
    quantity: int = 1,
    detail_level: str = DetailLevel.STANDARD.value,
    country: str = GLOBAL_COUNTRY,
) -> Dict[str, Any]:
    """``EmissionsEngine.calculate`` on the default engine."""
    return get_default_engine().calculate(
        dish_name, ingredients, quantity=quantity, detail_level=detail_level, country=country
    )
