"""CORS middleware configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

from rebook.api.middleware.auth import AUTH_HEADER

if TYPE_CHECKING:
    from fastapi import FastAPI

    from rebook.config.settings import CorsConfig


def setup_cors(app: FastAPI, config: CorsConfig) -> None:
    """Allow the browser client's origins to send the bearer token."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allow_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", AUTH_HEADER],
    )
