"""
Alertmanager webhook endpoint.

The body is decoded by hand rather than through a typed parameter so that
malformed payloads answer 400 (Alertmanager treats 4xx as permanent and
stops retrying) instead of FastAPI's 422.
"""

from __future__ import annotations

from typing import Annotated

import anyio
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError

from alertrelay.alerts.dispatcher import AlertDispatcher
from alertrelay.alerts.factory import get_alert_dispatcher
from alertrelay.alerts.models import AlertManagerMessage
from alertrelay.alerts.queue import AlertQueue
from alertrelay.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["alerts"])


def get_alert_queue(request: Request) -> AlertQueue | None:
    """The running worker queue, when the app started one."""
    return getattr(request.app.state, "alert_queue", None)


DispatcherDep = Annotated[AlertDispatcher, Depends(get_alert_dispatcher)]
QueueDep = Annotated[AlertQueue | None, Depends(get_alert_queue)]


@router.post("/alert", status_code=status.HTTP_200_OK)
async def receive_alert(
    request: Request,
    dispatcher: DispatcherDep,
    queue: QueueDep,
) -> dict[str, object]:
    raw = await request.body()
    try:
        message = AlertManagerMessage.model_validate_json(raw)
    except ValidationError as e:
        logger.warning("Rejected malformed alert payload", extra={"errors": e.error_count()})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_PAYLOAD", "message": "Malformed Alertmanager payload"},
        ) from e

    if queue is not None:
        queue.submit(message.alerts)
        return {"status": "queued", "alerts": len(message.alerts)}

    report = await anyio.to_thread.run_sync(dispatcher.dispatch, message.alerts)
    return {
        "status": "processed",
        "alerts": len(message.alerts),
        "messages_sent": report.messages_sent,
        "escalations": len(report.escalations),
    }
