"""Main bitFlyer SDK client with unified interface."""

from typing import Optional

from .client import RestClient
from .config import ClientConfig
from .logger import ConsoleLogger, Logger
from .router import MessageRouter
from .websocket import WebSocketClient


class BitflyerClient:
    """
    Unified REST + WebSocket client.

    Example:
        ```python
        async with BitflyerClient(ClientConfig.from_env()) as client:
            markets = await client.rest.get_markets()

            ws = await client.connect_websocket()
            ws.on_ticker(lambda ticker: print(ticker.ltp))
            await ws.subscribe("lightning_ticker_BTC_JPY")
            await ws.wait_closed()
        ```
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        logger: Optional[Logger] = None,
        router: Optional[MessageRouter] = None,
    ):
        """
        Initialize the SDK.

        Args:
            config: Client settings, defaults when omitted
            logger: Custom logger instance
            router: Router used by the WebSocket session
        """
        self.config = config or ClientConfig()
        self.logger = logger or ConsoleLogger(level=self.config.log_level)
        self.router = router or MessageRouter(logger=self.logger)

        self.rest = RestClient(
            credentials=self.config.credentials(),
            base_url=self.config.rest_url,
            timeout=self.config.rest_timeout,
            logger=self.logger,
        )
        self.ws: Optional[WebSocketClient] = None

    async def __aenter__(self) -> "BitflyerClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def connect_websocket(self, authenticate: bool = True, **connect_kwargs) -> WebSocketClient:
        """
        Open the WebSocket session, reusing it if already open.

        Args:
            authenticate: Send ``auth`` when credentials are configured
            **connect_kwargs: Extra options for the websockets dialer

        Returns:
            Open session
        """
        if self.ws is not None and self.ws.is_open():
            return self.ws

        self.ws = await WebSocketClient.connect(
            self.config.ws_url,
            timeout=self.config.ws_connect_timeout,
            router=self.router,
            logger=self.logger,
            **connect_kwargs,
        )

        credentials = self.config.credentials()
        if authenticate and credentials is not None:
            await self.ws.authenticate(credentials.api_key, credentials.api_secret.get_secret_value())
        return self.ws

    async def close(self) -> None:
        """Close all connections."""
        try:
            await self.rest.close()
        finally:
            if self.ws:
                await self.ws.close()
