"""
FastAPI application entry point.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable

import uvicorn
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from alertrelay import __version__
from alertrelay.alerts.factory import get_alert_dispatcher
from alertrelay.alerts.queue import AlertQueue
from alertrelay.alerts.router import router as alerts_router
from alertrelay.config import get_settings
from alertrelay.escalation.factory import get_command_handler
from alertrelay.escalation.listener import TelegramCommandListener
from alertrelay.escalation.router import router as escalation_router
from alertrelay.notifications.factory import get_notification_channel, get_notification_config
from alertrelay.notifications.telegram import TelegramChannel
from alertrelay.shared.exceptions import (
    AlertQueueFull,
    AlertRelayError,
    CallProviderError,
    InvalidCommand,
    InvalidResponder,
    InvalidTimeFormat,
    NoResponderFound,
    NotificationError,
)
from alertrelay.shared.logging import correlation_scope, get_logger, setup_logging
from alertrelay.telephony.factory import get_call_provider

logger = get_logger(__name__)

# First match wins, so subclasses go before their bases.
ERROR_STATUS: list[tuple[type[AlertRelayError], int]] = [
    (InvalidTimeFormat, status.HTTP_400_BAD_REQUEST),
    (InvalidResponder, status.HTTP_400_BAD_REQUEST),
    (InvalidCommand, status.HTTP_400_BAD_REQUEST),
    (NoResponderFound, status.HTTP_404_NOT_FOUND),
    (AlertQueueFull, status.HTTP_503_SERVICE_UNAVAILABLE),
    (CallProviderError, status.HTTP_502_BAD_GATEWAY),
    (NotificationError, status.HTTP_502_BAD_GATEWAY),
]


def status_for(exc: AlertRelayError) -> int:
    for exc_type, code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds X-Request-ID (or a fresh one) to the logging context."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        with correlation_scope(request.headers.get("X-Request-ID")) as request_id:
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def _close_cached(factory: Callable) -> None:
    # Only close what was actually built during this process.
    if factory.cache_info().currsize:
        factory().close()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging()
    settings = get_settings()

    logger.info("Application starting", extra={"env": settings.app_env})

    if settings.queue_enabled:
        queue = AlertQueue(
            get_alert_dispatcher(),
            max_size=settings.queue_max_size,
            workers=settings.queue_workers,
        )
        queue.start()
        app.state.alert_queue = queue

    listener_task: asyncio.Task[None] | None = None
    notification_cfg = get_notification_config()
    if notification_cfg.commands_enabled:
        channel = get_notification_channel()
        if isinstance(channel, TelegramChannel):
            listener = TelegramCommandListener(
                channel,
                get_command_handler(),
                allowed_chat_ids=notification_cfg.destinations.values(),
            )
            listener_task = asyncio.create_task(listener.run())
            logger.info("Telegram command listener enabled")
        else:
            logger.warning(
                "Commands enabled but channel cannot poll",
                extra={"channel_type": notification_cfg.channel_type.value},
            )

    yield

    logger.info("Shutting down application")

    if listener_task is not None:
        listener_task.cancel()
        try:
            await listener_task
        except asyncio.CancelledError:
            pass

    queue = getattr(app.state, "alert_queue", None)
    if queue is not None:
        await queue.stop()
        app.state.alert_queue = None

    _close_cached(get_call_provider)
    _close_cached(get_notification_channel)
    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="AlertRelay API",
        description="Alertmanager relay with on-call phone escalation",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.alert_queue = None

    @app.exception_handler(AlertRelayError)
    async def _relay_error(_: Request, exc: AlertRelayError) -> JSONResponse:
        code = status_for(exc)
        if code >= 500:
            logger.error(
                "Request failed",
                extra={"error_code": exc.error_code, "error": exc.message},
            )
        return JSONResponse(
            status_code=code,
            content={"detail": {"code": exc.error_code, "message": exc.message}},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append(
                {
                    "field": field,
                    "message": error["msg"],
                    "type": error["type"],
                }
            )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": {
                    "code": "VALIDATION_ERROR",
                    "message": "Request validation failed",
                    "errors": errors,
                }
            },
        )

    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(alerts_router)
    app.include_router(escalation_router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "alertrelay.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
