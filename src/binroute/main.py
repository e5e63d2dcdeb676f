"""FastAPI application entry point."""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import bins, driver, health
from .config import settings
from .persistence.store import KeyValueStore, get_store
from .services.bins.ledger import CapacityLedger
from .services.bins.registry import BinRegistry
from .services.routing.interpreter import DirectionsClient
from .services.routing.service import DriverSession


def _build_registry(store: KeyValueStore) -> BinRegistry:
    registry = BinRegistry(store, CapacityLedger(settings.truck_capacity_kg), key=settings.store_key)
    registry.load()
    return registry


def create_app(
    store: KeyValueStore | None = None,
    client_factory: Callable[[], DirectionsClient] | None = None,
) -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title=settings.app_name, root_path="")
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Client and driver keep separate in-memory copies that meet only in the store.
    shared_store = store or get_store()
    app.state.client_registry = _build_registry(shared_store)
    app.state.driver_session = DriverSession(_build_registry(shared_store), client_factory=client_factory)

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(bins.router, prefix=settings.api_prefix)
    app.include_router(driver.router, prefix=settings.api_prefix)
    return app
