"""
Dashboard Package.

This package provides external visibility into the decision log.
Optional component - the engine can be embedded without it.

Modules:
- api: FastAPI application factory
- schemas: Pydantic response models
- routers/: /decisions and /news endpoints
"""

from .api import create_app, build_default_app

__all__ = ["create_app", "build_default_app"]
