"""
interfaces/api.py
──────────────────────────────────────────────────────────────────────────────
HTTP API for the EI region lookup.

Run:
  uvicorn ei_regions.interfaces.api:app --port 8000
  # or via the installed entry-point (PORT env var, default 8000)
  ei-regions-api

Routes:
  GET /scrape?postalCode=K1A0A1          (route kept from the original service)
  GET /api/postal-codes/{postal_code}
  GET /health

Both lookup routes return {"data": [PostalResult]}.  Failures return
{"error": "..."} with a status that tells a cache failure apart from a
fetch failure:
  InvalidPostalCodeError → 422  (also a LookupRequest ValidationError)
  StoreError             → 503
  ExtractionError        → 404
  FetchError             → 502

Handlers are plain ``def``: FastAPI runs each request on its worker thread
pool, so every lookup is an independent unit of work sharing the store pool.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ei_regions import __version__
from ei_regions.config.settings import get_settings
from ei_regions.domain.exceptions import (
    ExtractionError,
    FetchError,
    InvalidPostalCodeError,
    StoreError,
)
from ei_regions.domain.models import LookupRequest
from ei_regions.services.container import Services, get_services
from ei_regions.services.postal_lookup import PostalLookup

logger = logging.getLogger(__name__)


def create_app(services_factory: Callable[[], Services] = get_services) -> FastAPI:
    """Build the FastAPI application.

    Args:
        services_factory: Returns the wired Services; tests pass in-memory ones.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        services = services_factory()
        services.store.init_schema()
        app.state.services = services
        logger.info("EI regions API started")
        yield
        services.close()
        logger.info("EI regions API shutdown complete")

    app = FastAPI(
        title="EI Economic Region Lookup",
        description="Postal code → EI economic region and current EI statistics",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)

    def get_lookup(request: Request) -> PostalLookup:
        return request.app.state.services.postal_lookup

    @app.get("/health")
    def health_check():
        return {"status": "healthy", "service": "ei-regions"}

    @app.get("/scrape")
    def scrape(
        postal_code: str = Query(..., alias="postalCode"),
        lookup: PostalLookup = Depends(get_lookup),
    ):
        logger.info("Received postal code: %r", postal_code)
        request = LookupRequest(postal_code=postal_code)
        return {"data": [lookup.lookup(request.postal_code).to_dict()]}

    @app.get("/api/postal-codes/{postal_code}")
    def get_postal_code(
        postal_code: str,
        lookup: PostalLookup = Depends(get_lookup),
    ):
        request = LookupRequest(postal_code=postal_code)
        return {"data": [lookup.lookup(request.postal_code).to_dict()]}

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidPostalCodeError)
    async def _invalid(request: Request, exc: InvalidPostalCodeError):
        return JSONResponse(status_code=422, content={"error": str(exc)})

    @app.exception_handler(ValidationError)
    async def _invalid_request(request: Request, exc: ValidationError):
        first = exc.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"])
        return JSONResponse(
            status_code=422,
            content={"error": f"Invalid {field}: {first['msg']}"},
        )

    @app.exception_handler(StoreError)
    async def _store(request: Request, exc: StoreError):
        logger.error("Database error: %s", exc)
        return JSONResponse(status_code=503, content={"error": "Database error"})

    @app.exception_handler(FetchError)
    async def _fetch(request: Request, exc: FetchError):
        if isinstance(exc, ExtractionError):
            logger.warning("No data on EI regions page: %s", exc)
            return JSONResponse(status_code=404, content={"error": str(exc)})
        logger.error("Error scraping EI regions site: %s", exc)
        return JSONResponse(
            status_code=502,
            content={"error": "Error scraping postal code data"},
        )


app = create_app()


def main() -> None:
    """Entry point for the ei-regions-api console script."""
    import uvicorn

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )
    logger.info("Server running on http://localhost:%d", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
