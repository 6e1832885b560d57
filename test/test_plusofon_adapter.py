"""Tests for the Plusofon call adapter (sync, no network)."""

from unittest.mock import MagicMock

import httpx
import pytest

from alertrelay.telephony.adapters.plusofon import PlusofonAdapter
from alertrelay.telephony.config import ProviderType, TelephonyConfig
from alertrelay.telephony.interface import CallData, CallPlacementError


@pytest.fixture
def plusofon_config() -> TelephonyConfig:
    return TelephonyConfig(
        provider_type=ProviderType.PLUSOFON,
        plusofon_token="test-token-123456",
        plusofon_client_id="client-42",
        plusofon_api_url="https://restapi.example.test/api/v1/call/quickcall",
        line_number="74951332210",
        sip_id="51326",
    )


@pytest.fixture
def call() -> CallData:
    return CallData(number="+79990000001", line_number="74951332210", sip_id="51326")


class TestPlusofonAdapterPlaceCallSync:
    def test_place_call_success(self, plusofon_config: TelephonyConfig, call: CallData) -> None:
        mock_response = httpx.Response(status_code=200, json={"id": 987})
        mock_client = MagicMock(spec=httpx.Client)
        mock_client.post.return_value = mock_response

        adapter = PlusofonAdapter(config=plusofon_config, http_client=mock_client)
        response = adapter.place_call_sync(call)

        assert response.accepted is True
        assert response.status_code == 200
        assert response.provider_call_id == "987"

    def test_request_shape(self, plusofon_config: TelephonyConfig, call: CallData) -> None:
        mock_client = MagicMock(spec=httpx.Client)
        mock_client.post.return_value = httpx.Response(status_code=200)

        PlusofonAdapter(config=plusofon_config, http_client=mock_client).place_call_sync(call)

        args, kwargs = mock_client.post.call_args
        assert args[0] == "https://restapi.example.test/api/v1/call/quickcall"
        assert kwargs["json"] == {
            "number": "+79990000001",
            "lineNumber": "74951332210",
            "sipId": "51326",
        }
        assert kwargs["headers"]["Authorization"] == "Bearer test-token-123456"
        assert kwargs["headers"]["Client"] == "client-42"

    def test_non_200_is_not_accepted(self, plusofon_config: TelephonyConfig, call: CallData) -> None:
        mock_client = MagicMock(spec=httpx.Client)
        mock_client.post.return_value = httpx.Response(
            status_code=401, json={"message": "Unauthenticated"}
        )

        response = PlusofonAdapter(config=plusofon_config, http_client=mock_client).place_call_sync(call)

        assert response.accepted is False
        assert response.status_code == 401
        assert response.raw_response == {"message": "Unauthenticated"}

    def test_non_json_body(self, plusofon_config: TelephonyConfig, call: CallData) -> None:
        mock_client = MagicMock(spec=httpx.Client)
        mock_client.post.return_value = httpx.Response(status_code=502, text="Bad Gateway")

        response = PlusofonAdapter(config=plusofon_config, http_client=mock_client).place_call_sync(call)

        assert response.accepted is False
        assert response.raw_response == {"body": "Bad Gateway"}

    def test_transport_error_raises(self, plusofon_config: TelephonyConfig, call: CallData) -> None:
        mock_client = MagicMock(spec=httpx.Client)
        mock_client.post.side_effect = httpx.ConnectError("Connection failed")

        adapter = PlusofonAdapter(config=plusofon_config, http_client=mock_client)

        with pytest.raises(CallPlacementError) as exc_info:
            adapter.place_call_sync(call)

        assert exc_info.value.error_code == "HTTP_ERROR"

    def test_with_mock_transport(self, plusofon_config: TelephonyConfig, call: CallData) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"call_id": "abc"})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        response = PlusofonAdapter(config=plusofon_config, http_client=client).place_call_sync(call)

        assert response.provider_call_id == "abc"
        assert seen[0].method == "POST"
        assert seen[0].headers["Client"] == "client-42"


class TestPlusofonAdapterLifecycle:
    def test_injected_client_is_not_closed(self, plusofon_config: TelephonyConfig) -> None:
        mock_client = MagicMock(spec=httpx.Client)

        PlusofonAdapter(config=plusofon_config, http_client=mock_client).close()

        mock_client.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_async_place_call(self, plusofon_config: TelephonyConfig, call: CallData) -> None:
        mock_client = MagicMock(spec=httpx.Client)
        mock_client.post.return_value = httpx.Response(status_code=200)

        adapter = PlusofonAdapter(config=plusofon_config, http_client=mock_client)
        response = await adapter.place_call(call)

        assert response.accepted is True
