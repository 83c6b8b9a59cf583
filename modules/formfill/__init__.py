"""Template form filling module entry point."""

from __future__ import annotations

from fastapi import FastAPI

__all__ = ["register_api"]


def register_api(app: FastAPI) -> None:
    """Register FastAPI routes for form filling, reports and signature positions."""
    from .api import router as formfill_router

    if getattr(app.state, "formfill_registered", False):
        return
    app.include_router(formfill_router)
    app.state.formfill_registered = True
