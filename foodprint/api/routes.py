# -*- coding: utf-8 -*-
"""
Emissions API routes.

Thin HTTP adapter over ``EmissionsEngine``. Handlers are synchronous so
FastAPI runs them on its thread pool; the engine blocks on I/O.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from foodprint._version import __version__
from foodprint.api.models import (
    CalculateRequest,
    CategorizeResponse,
    EmissionFactorResponse,
    ErrorResponse,
    HealthResponse,
    PortionSizeResponse,
    SeasonalityResponse,
)
from foodprint.config.manager import get_config
from foodprint.engine import EmissionsEngine, get_default_engine
from foodprint.exceptions import ValidationError
from foodprint.logging_config import setup_logging
from foodprint.taxonomy.rules import RULES_VERSION

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/emissions", tags=["Emissions"])


def get_engine(request: Request) -> EmissionsEngine:
    """The engine attached to the app, or the process default."""
    engine = getattr(request.app.state, "engine", None)
    return engine if engine is not None else get_default_engine()


# =============================================================================
# Endpoints
# =============================================================================

@router.post(
    "/calculate",
    summary="Estimate dish emissions",
    responses={400: {"model": ErrorResponse, "description": "Malformed request"}},
)
def calculate(
    body: CalculateRequest, engine: EmissionsEngine = Depends(get_engine)
) -> Dict[str, Any]:
    logger.info(f"Calculating emissions for {body.dish_name!r}")
    return engine.calculate(
        body.dish_name,
        body.ingredients,
        quantity=body.quantity,
        detail_level=body.detail_level,
        country=body.country,
    )


@router.get(
    "/emission-factor/{category}/{item}",
    response_model=EmissionFactorResponse,
    summary="Resolve one emission factor",
)
def emission_factor(
    category: str,
    item: str,
    country: str = Query(default="global"),
    engine: EmissionsEngine = Depends(get_engine),
) -> Dict[str, Any]:
    return engine.emission_factor(category, item, country)


@router.get(
    "/categorize/{ingredient}",
    response_model=CategorizeResponse,
    summary="Classify an ingredient",
)
def categorize(ingredient: str, engine: EmissionsEngine = Depends(get_engine)) -> Dict[str, Any]:
    return engine.categorize(ingredient)


@router.get(
    "/portion-size/{ingredient}",
    response_model=PortionSizeResponse,
    summary="Estimate the portion of an ingredient",
)
def portion_size(
    ingredient: str,
    dish_name: str = Query(default=""),
    engine: EmissionsEngine = Depends(get_engine),
) -> Dict[str, Any]:
    return engine.portion_size(ingredient, dish_name)


@router.get(
    "/seasonality/{ingredient}",
    response_model=SeasonalityResponse,
    summary="Season and seasonal factor of an ingredient",
)
def seasonality(
    ingredient: str,
    country: str = Query(default="global"),
    on_date: Optional[date] = Query(default=None, alias="date"),
    engine: EmissionsEngine = Depends(get_engine),
) -> Dict[str, Any]:
    return engine.seasonality(ingredient, country, on_date)


@router.get("/health", response_model=HealthResponse, summary="Liveness check")
def health() -> Dict[str, Any]:
    return {"status": "ok", "version": __version__, "rules_version": RULES_VERSION}


# =============================================================================
# Application
# =============================================================================

async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info(f"Rejected request to {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=exc.to_dict())


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    invalid = {
        ".".join(str(part) for part in error["loc"]): error["msg"] for error in exc.errors()
    }
    error = ValidationError("Malformed request", invalid_fields=invalid)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error.to_dict())


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Configure logging and run the store refresh while the app is up."""
    config = get_config()
    setup_logging(config.logging.level, config.logging.format)

    engine = app.state.engine if app.state.engine is not None else get_default_engine()
    engine.start_refresh()
    try:
        yield
    finally:
        engine.stop_refresh()


def create_app(engine: Optional[EmissionsEngine] = None) -> FastAPI:
    """
    FastAPI application serving the emissions router.

    On startup the app configures logging from ``config.logging`` and
    starts the engine's refresh scheduler; shutdown stops it.

    Args:
        engine: Engine to serve; the process default is built at startup
            when omitted
    """
    app = FastAPI(title="Foodprint", version=__version__, lifespan=_lifespan)
    app.state.engine = engine
    app.include_router(router)
    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    return app
