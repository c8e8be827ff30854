# portal/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from portal.core import config
from portal.core.errors import register_exception_handlers
from portal.db.base import Base
from portal.db.session import engine
from portal.middleware.request_logging import RequestLoggingMiddleware

# models must be imported before create_all
from portal import models  # noqa: F401

from portal.api import health
from portal.api.v1 import auth, invitations, organizations, projects

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# ---------------------------
# CREATE TABLES (dev-only; migrations handle real deployments)
# ---------------------------
if config.ENABLE_CREATE_ALL:
    Base.metadata.create_all(bind=engine)

# ---------------------------
# APP
# ---------------------------
app = FastAPI(title=config.APP_NAME)
app.add_middleware(RequestLoggingMiddleware)
register_exception_handlers(app)

app.include_router(auth.router, prefix="/api/v1", tags=["auth"])
app.include_router(invitations.router, prefix="/api/v1", tags=["invitations"])
app.include_router(organizations.router, prefix="/api/v1", tags=["organizations"])
app.include_router(projects.router, prefix="/api/v1", tags=["projects"])
app.include_router(health.router, prefix="/api", tags=["health"])


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=config.APP_NAME,
        version="1.0.0",
        description="Client invitations and tenant provisioning",
        routes=app.routes,
    )
    openapi_schema.setdefault("components", {}).setdefault("securitySchemes", {})
    openapi_schema["components"]["securitySchemes"]["OAuth2PasswordBearer"] = {
        "type": "oauth2",
        "flows": {"password": {"tokenUrl": "/api/v1/login", "scopes": {}}},
    }

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi
