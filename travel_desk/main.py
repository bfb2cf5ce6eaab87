from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from travel_desk.api.router import api_router
from travel_desk.core.config import get_cors_origins, get_settings
from travel_desk.core.errors import AppError, app_error_handler, validation_error_handler
from travel_desk.core.logging import configure_logging

logger = logging.getLogger(__name__)

# The browser client reads the PDF filename from Content-Disposition.
EXPOSED_HEADERS = ["Content-Disposition"]


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=EXPOSED_HEADERS,
    )
    app.include_router(api_router, prefix=settings.api_prefix)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    logger.info(
        "%s ready environment=%s upstream=%s",
        settings.app_name,
        settings.environment,
        settings.booking_api_base_url,
    )
    return app


app = create_app()
