"""REST client for the bitFlyer Lightning HTTP API."""

from typing import Any, Optional

import httpx

from .auth import Credentials, Signer
from .exceptions import APIError, ExchangeError
from .logger import Logger, NoopLogger
from .transport import AuthenticatedTransport
from .types import ChildOrderType, Side


DEFAULT_REST_URL = "https://api.bitflyer.com"


class RestClient:
    """
    Async REST client. Private endpoints are signed at the transport level.

    Example:
        ```python
        async with RestClient(Credentials(api_key="...", api_secret="...")) as rest:
            balance = await rest.get_balance()
        ```
    """

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        base_url: str = DEFAULT_REST_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[Logger] = None,
    ):
        """
        Initialize REST client.

        Args:
            credentials: API key and secret, public endpoints only when omitted
            base_url: API base URL, the production endpoint when empty
            timeout: Request timeout in seconds
            transport: Underlying httpx transport (wrapped with signing when credentials are set)
            logger: Logger instance
        """
        self.base_url = base_url or DEFAULT_REST_URL
        self.logger = logger or NoopLogger()
        self._credentials = credentials

        if credentials is not None:
            self.signer: Optional[Signer] = Signer(credentials)
            transport = AuthenticatedTransport(self.signer, base=transport)
        else:
            self.signer = None

        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    @property
    def http(self) -> httpx.AsyncClient:
        """Underlying httpx client, for endpoints not wrapped here."""
        return self._http

    async def __aenter__(self) -> "RestClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP connection pool."""
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """
        Send a request and decode the JSON response.

        Returns:
            Decoded JSON body, or None when the body is empty

        Raises:
            APIError: If the response status is not 2xx
            BodyReadError: If the request body could not be signed
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        self.logger.debug(f"{method} {path}")
        response = await self._http.request(method, path, params=params or None, json=json)

        if response.is_error:
            body: Any
            try:
                body = response.json()
            except ValueError:
                body = response.text
            message = body.get("error_message", response.reason_phrase) if isinstance(body, dict) else response.reason_phrase
            self.logger.error(f"{method} {path} failed with {response.status_code}: {message}")
            raise APIError(response.status_code, str(message), body)

        if not response.content:
            return None
        return response.json()

    def _require_credentials(self) -> None:
        if self._credentials is None:
            raise ExchangeError("this endpoint requires API credentials")

    # ========================================================================
    # Public API
    # ========================================================================

    async def get_markets(self) -> list[dict[str, Any]]:
        """List tradable products."""
        return await self.request("GET", "/v1/getmarkets")

    async def get_ticker(self, product_code: str) -> dict[str, Any]:
        return await self.request("GET", "/v1/getticker", params={"product_code": product_code})

    async def get_board(self, product_code: str) -> dict[str, Any]:
        return await self.request("GET", "/v1/getboard", params={"product_code": product_code})

    # ========================================================================
    # Private API
    # ========================================================================

    async def get_balance(self) -> list[dict[str, Any]]:
        """Get asset balances."""
        self._require_credentials()
        return await self.request("GET", "/v1/me/getbalance")

    async def get_positions(self, product_code: str) -> list[dict[str, Any]]:
        """Get open positions for a margin product."""
        self._require_credentials()
        return await self.request("GET", "/v1/me/getpositions", params={"product_code": product_code})

    async def send_child_order(
        self,
        product_code: str,
        side: Side,
        size: float,
        child_order_type: ChildOrderType = ChildOrderType.LIMIT,
        price: Optional[float] = None,
        minute_to_expire: Optional[int] = None,
        time_in_force: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Place a child order.

        Returns:
            Response holding ``child_order_acceptance_id``
        """
        self._require_credentials()
        if child_order_type == ChildOrderType.LIMIT and price is None:
            raise ValueError("price is required for LIMIT orders")

        body: dict[str, Any] = {
            "product_code": product_code,
            "child_order_type": ChildOrderType(child_order_type).value,
            "side": Side(side).value,
            "size": size,
        }
        if price is not None:
            body["price"] = price
        if minute_to_expire is not None:
            body["minute_to_expire"] = minute_to_expire
        if time_in_force is not None:
            body["time_in_force"] = time_in_force
        return await self.request("POST", "/v1/me/sendchildorder", json=body)

    async def cancel_child_order(
        self,
        product_code: str,
        child_order_id: Optional[str] = None,
        child_order_acceptance_id: Optional[str] = None,
    ) -> None:
        """Cancel a child order by id or acceptance id."""
        self._require_credentials()
        if (child_order_id is None) == (child_order_acceptance_id is None):
            raise ValueError("pass exactly one of child_order_id or child_order_acceptance_id")

        body = {"product_code": product_code}
        if child_order_id is not None:
            body["child_order_id"] = child_order_id
        else:
            body["child_order_acceptance_id"] = child_order_acceptance_id
        await self.request("POST", "/v1/me/cancelchildorder", json=body)
