"""Tests for the REST client."""

import json

import httpx
import pytest

from bitflyer_sdk import APIError, ChildOrderType, ExchangeError, RestClient, Side, Signer


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def mock_transport(requests_seen):
    routes = {
        ("GET", "/v1/getmarkets"): httpx.Response(200, json=[{"product_code": "BTC_JPY", "market_type": "Spot"}]),
        ("GET", "/v1/me/getbalance"): httpx.Response(200, json=[{"currency_code": "JPY", "amount": 1000.0}]),
        ("GET", "/v1/me/getpositions"): httpx.Response(200, json=[]),
        ("POST", "/v1/me/sendchildorder"): httpx.Response(
            200, json={"child_order_acceptance_id": "JRF20240101-000000-000001"}
        ),
        ("POST", "/v1/me/cancelchildorder"): httpx.Response(200),
        ("GET", "/v1/getticker"): httpx.Response(
            400, json={"status": -100, "error_message": "Invalid product", "data": None}
        ),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        return routes[(request.method, request.url.path)]

    return httpx.MockTransport(handler)


@pytest.fixture
async def client(credentials, mock_transport):
    rest = RestClient(credentials=credentials, transport=mock_transport)
    yield rest
    await rest.close()


def _assert_signed(request: httpx.Request, signer: Signer) -> None:
    timestamp = int(request.headers["ACCESS-TIMESTAMP"])
    target = request.url.raw_path.decode()
    assert request.headers["ACCESS-SIGN"] == signer.signature(timestamp, request.method, target, request.content)


class TestRestClient:
    """Test REST client behavior."""

    async def test_get_balance_is_signed(self, client, requests_seen):
        balance = await client.get_balance()

        assert balance == [{"currency_code": "JPY", "amount": 1000.0}]
        (request,) = requests_seen
        assert request.headers["ACCESS-KEY"] == "key123"
        _assert_signed(request, client.signer)

    async def test_query_string_in_signature(self, client, requests_seen):
        await client.get_positions("FX_BTC_JPY")

        (request,) = requests_seen
        assert request.url.raw_path == b"/v1/me/getpositions?product_code=FX_BTC_JPY"
        _assert_signed(request, client.signer)

    async def test_send_child_order(self, client, requests_seen):
        result = await client.send_child_order("BTC_JPY", Side.BUY, 0.01, price=6500000)

        assert result["child_order_acceptance_id"] == "JRF20240101-000000-000001"
        (request,) = requests_seen
        assert json.loads(request.content) == {
            "product_code": "BTC_JPY",
            "child_order_type": "LIMIT",
            "side": "BUY",
            "size": 0.01,
            "price": 6500000,
        }
        _assert_signed(request, client.signer)

    async def test_limit_order_requires_price(self, client, requests_seen):
        with pytest.raises(ValueError):
            await client.send_child_order("BTC_JPY", Side.SELL, 0.01, ChildOrderType.LIMIT)
        assert requests_seen == []

    async def test_cancel_child_order_returns_none_for_empty_body(self, client, requests_seen):
        assert await client.cancel_child_order("BTC_JPY", child_order_acceptance_id="JRF1") is None
        assert json.loads(requests_seen[0].content) == {
            "product_code": "BTC_JPY",
            "child_order_acceptance_id": "JRF1",
        }

    async def test_cancel_requires_exactly_one_id(self, client):
        with pytest.raises(ValueError):
            await client.cancel_child_order("BTC_JPY")
        with pytest.raises(ValueError):
            await client.cancel_child_order("BTC_JPY", child_order_id="a", child_order_acceptance_id="b")

    async def test_api_error(self, client):
        with pytest.raises(APIError) as exc_info:
            await client.get_ticker("NOPE")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid product"
        assert exc_info.value.body["status"] == -100


class TestPublicRestClient:
    """Test a client without credentials."""

    async def test_public_requests_are_not_signed(self, mock_transport, requests_seen):
        async with RestClient(transport=mock_transport) as rest:
            markets = await rest.get_markets()

        assert markets[0]["product_code"] == "BTC_JPY"
        assert "ACCESS-KEY" not in requests_seen[0].headers
        assert rest.signer is None

    async def test_private_endpoint_requires_credentials(self, mock_transport, requests_seen):
        async with RestClient(transport=mock_transport) as rest:
            with pytest.raises(ExchangeError):
                await rest.get_balance()
        assert requests_seen == []

    async def test_empty_base_url_uses_default(self, mock_transport):
        async with RestClient(base_url="", transport=mock_transport) as rest:
            assert rest.base_url == "https://api.bitflyer.com"
