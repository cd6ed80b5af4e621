"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.errors import AnimatorError
from app.models.responses import ErrorResponse

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.animator_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


async def _animator_error_handler(request: Request, exc: AnimatorError) -> JSONResponse:
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message, type=type(exc).__name__).model_dump(),
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="SVG Animator",
        description="Select SVG elements, describe a motion, get SMIL animations spliced into the original",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AnimatorError, _animator_error_handler)

    from app.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
