"""
Plusofon quick-call adapter.

The provider accepts a JSON body ``{number, lineNumber, sipId}`` and answers
``200`` when the call has been queued.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from alertrelay.shared.logging import get_logger
from alertrelay.telephony.config import TelephonyConfig, get_telephony_config
from alertrelay.telephony.interface import (
    CallData,
    CallPlacementError,
    CallPlacementResponse,
    CallProvider,
)

logger = get_logger(__name__)


class PlusofonAdapter(CallProvider):
    """Plusofon call provider adapter.

    Uses a sync httpx client; an injected client is never closed by the
    adapter.
    """

    def __init__(
        self,
        config: TelephonyConfig | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._config = config or get_telephony_config()
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(
                timeout=httpx.Timeout(self._config.call_timeout_seconds),
            )
        return self._http_client

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def _get_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Client": self._config.plusofon_client_id,
            "Authorization": f"Bearer {self._config.plusofon_token}",
        }

    def place_call_sync(self, call: CallData) -> CallPlacementResponse:
        """Place a quick call via Plusofon."""
        client = self._get_client()

        logger.info(
            "Placing Plusofon call",
            extra={"to": call.number, "line_number": call.line_number},
        )

        try:
            response = client.post(
                self._config.plusofon_api_url,
                json=call.to_payload(),
                headers=self._get_headers(),
            )
        except httpx.HTTPError as e:
            logger.error(
                "HTTP error during Plusofon call placement",
                extra={"to": call.number, "error": str(e)},
            )
            raise CallPlacementError(
                message=f"HTTP error: {e!s}",
                error_code="HTTP_ERROR",
            ) from e

        data = _safe_json(response)

        if response.status_code != httpx.codes.OK:
            logger.warning(
                "Plusofon rejected call",
                extra={
                    "to": call.number,
                    "status_code": response.status_code,
                    "error": data,
                },
            )
            return CallPlacementResponse(
                accepted=False,
                status_code=response.status_code,
                created_at=datetime.now(timezone.utc),
                raw_response=data,
            )

        call_id = data.get("id") or data.get("call_id")
        return CallPlacementResponse(
            accepted=True,
            status_code=response.status_code,
            created_at=datetime.now(timezone.utc),
            provider_call_id=str(call_id) if call_id is not None else None,
            raw_response=data,
        )


def _safe_json(response: httpx.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        return {"body": response.text}
    return data if isinstance(data, dict) else {"body": data}
