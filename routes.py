# routes.py
from fastapi import FastAPI
from controller.asset_controller import asset_router
from controller.catalog_controller import catalog_router
from controller.progress_controller import progress_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(asset_router)
    app.include_router(progress_router)
    app.include_router(catalog_router)
