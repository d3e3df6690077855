"""
FastAPI application setup and configuration.
"""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from server.middleware import RequestLoggingMiddleware


# =============================================================================
# Constants
# =============================================================================

DEFAULT_CORS_ORIGINS = "*"
CORS_ORIGINS_ENV = "CORS_ORIGINS"
API_TITLE = "Chatforge API"
API_VERSION = "1.0.0"


def cors_origins_from_env() -> list[str]:
    """Allowed origins from CORS_ORIGINS (comma separated), or any origin."""
    value = os.environ.get(CORS_ORIGINS_ENV, DEFAULT_CORS_ORIGINS)
    if value == DEFAULT_CORS_ORIGINS:
        return [DEFAULT_CORS_ORIGINS]
    return [origin.strip() for origin in value.split(",") if origin.strip()]


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(title=API_TITLE, version=API_VERSION)

# Cookies carry API keys, so set CORS_ORIGINS explicitly outside development
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_from_env(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Added after CORS so it runs first
app.add_middleware(RequestLoggingMiddleware)
