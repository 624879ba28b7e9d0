# FILE: factory/api/app.py
"""FastAPI assembly for embedding the factory routers."""

from __future__ import annotations

from fastapi import FastAPI

from factory.api.ir_router import router as ir_router
from factory.api.soc_router import router as soc_router


def create_app(init_storage: bool = False) -> FastAPI:
    """Build an app with the IR and SOC routers mounted.

    init_storage=True creates the database tables on FACTORY_DATABASE_URL.
    """
    if init_storage:
        from factory.storage.db import init_db
        init_db()

    app = FastAPI(title="Factory Front End", version="0.1.0")
    app.include_router(ir_router)
    app.include_router(soc_router)
    return app


__all__ = ["create_app"]
