"""WebSocket session for the bitFlyer Realtime API (JSON-RPC 2.0)."""

import asyncio
from enum import Enum
from typing import Any, Optional

from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from .auth import Credentials, ws_auth_params
from .exceptions import (
    AlreadySubscribedError,
    ConnectError,
    NotSubscribedError,
    SendError,
    SessionClosedError,
    TimeoutError,
)
from .logger import Logger, NoopLogger
from .router import ChannelHandler, Handler, MessageRouter
from .types import MessageKind, RpcRequest


DEFAULT_WS_URL = "wss://ws.lightstream.bitflyer.com/json-rpc"


class SessionState(str, Enum):
    """
    Lifecycle of a session.

    The connecting phase is :meth:`WebSocketClient.connect` itself; a
    session object only exists once the handshake has completed.
    """

    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class WebSocketClient:
    """
    One persistent Realtime API connection.

    Features:
    - Channel subscription bookkeeping (a channel is subscribed at most once)
    - Private channel authentication
    - Background receive loop routing frames to typed callbacks

    The subscription set and the call id counter share one lock, which is
    also held across each send so frames never interleave.

    Example:
        ```python
        session = await WebSocketClient.connect(DEFAULT_WS_URL, timeout=10)
        session.on_ticker(lambda ticker: print(ticker.ltp))
        await session.subscribe(Channel.ticker("BTC_JPY"))
        ```
    """

    def __init__(
        self,
        connection: Any,
        router: Optional[MessageRouter] = None,
        logger: Optional[Logger] = None,
        initial_call_id: int = 1,
        url: str = "",
        close_timeout: float = 10.0,
    ):
        """
        Wrap an open connection and start the receive loop.

        Must be called from a running event loop; use :meth:`connect` to dial.

        Args:
            connection: Open connection exposing ``send``, ``close`` and async iteration
            router: Router for inbound frames, a new one when omitted
            logger: Logger instance
            initial_call_id: First JSON-RPC id handed out
            url: Endpoint the connection was opened against
            close_timeout: Seconds to wait for the receive loop after closing
        """
        self.url = url
        self.logger = logger or NoopLogger()
        self.router = router or MessageRouter(logger=self.logger)
        self.close_timeout = close_timeout

        self._ws = connection
        self._lock = asyncio.Lock()
        self._subscribed: set[str] = set()
        self._next_id = initial_call_id
        self._state = SessionState.OPEN
        self._receive_task = asyncio.get_running_loop().create_task(self._receive_loop())

    @classmethod
    async def connect(
        cls,
        url: str = DEFAULT_WS_URL,
        *,
        timeout: Optional[float] = None,
        router: Optional[MessageRouter] = None,
        logger: Optional[Logger] = None,
        initial_call_id: int = 1,
        **connect_kwargs: Any,
    ) -> "WebSocketClient":
        """
        Dial ``url`` and return an open session.

        Args:
            url: WebSocket URL
            timeout: Deadline in seconds for the opening handshake, none when None
            router: Router for inbound frames
            logger: Logger instance
            initial_call_id: First JSON-RPC id handed out
            **connect_kwargs: Extra options for ``websockets.asyncio.client.connect``

        Raises:
            TimeoutError: If the handshake does not finish before ``timeout``
            ConnectError: If dialing fails for any other reason
        """
        logger = logger or NoopLogger()
        logger.debug(f"Connecting to {url}...")

        async def _dial():
            # Socket timeouts are OSErrors and map to ConnectError; only the
            # caller deadline below maps to TimeoutError
            try:
                return await ws_connect(url, open_timeout=None, **connect_kwargs)
            except (OSError, WebSocketException, ValueError) as e:
                logger.error(f"Failed to connect: {e}")
                raise ConnectError(url, e) from e

        try:
            connection = await asyncio.wait_for(_dial(), timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Timed out connecting to {url}")
            raise TimeoutError(url, e) from e

        logger.info("WebSocket connected")
        return cls(connection, router=router, logger=logger, initial_call_id=initial_call_id, url=url)

    async def __aenter__(self) -> "WebSocketClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ========================================================================
    # State
    # ========================================================================

    @property
    def state(self) -> SessionState:
        return self._state

    def is_open(self) -> bool:
        return self._state == SessionState.OPEN

    @property
    def subscriptions(self) -> frozenset[str]:
        """Channels currently subscribed."""
        return frozenset(self._subscribed)

    async def next_call_id(self) -> int:
        """Take the next JSON-RPC id."""
        async with self._lock:
            return self._take_id()

    def _take_id(self) -> int:
        # caller holds self._lock
        call_id = self._next_id
        self._next_id += 1
        return call_id

    def _ensure_open(self) -> None:
        if self._state != SessionState.OPEN:
            raise SessionClosedError(f"session is {self._state.value}")

    # ========================================================================
    # JSON-RPC calls
    # ========================================================================

    async def authenticate(self, api_key: str, api_secret: str) -> None:
        """
        Send the ``auth`` call for private channels.

        Returns once the frame is written; the server reply is not awaited.

        Raises:
            SendError: If the write fails
        """
        credentials = Credentials(api_key=api_key, api_secret=api_secret)
        async with self._lock:
            self._ensure_open()
            params = ws_auth_params(credentials, nonce=self._take_id())
            self.logger.debug("Sending auth")
            await self._send_locked("auth", params)

    async def subscribe(self, channel: str) -> None:
        """
        Subscribe to a channel.

        Raises:
            AlreadySubscribedError: If the channel is already subscribed
            SendError: If the write fails; the channel is not left subscribed
        """
        async with self._lock:
            self._ensure_open()
            if channel in self._subscribed:
                raise AlreadySubscribedError(channel)
            self._subscribed.add(channel)
            self.logger.debug(f"Subscribing to {channel}")
            try:
                await self._send_locked("subscribe", {"channel": channel})
            except SendError:
                self._subscribed.discard(channel)
                raise

    async def unsubscribe(self, channel: str) -> None:
        """
        Unsubscribe from a channel.

        Raises:
            NotSubscribedError: If the channel is not subscribed
            SendError: If the write fails; the channel stays subscribed
        """
        async with self._lock:
            self._ensure_open()
            if channel not in self._subscribed:
                raise NotSubscribedError(channel)
            self._subscribed.discard(channel)
            self.logger.debug(f"Unsubscribing from {channel}")
            try:
                await self._send_locked("unsubscribe", {"channel": channel})
            except SendError:
                self._subscribed.add(channel)
                raise

    async def _send_locked(self, method: str, params: dict[str, Any]) -> int:
        # caller holds self._lock
        request = RpcRequest(method=method, params=params, id=self._take_id())
        try:
            await self._ws.send(request.to_json())
        except (WebSocketException, OSError) as e:
            self.logger.error(f"Failed to send {method}: {e}")
            raise SendError(f"failed to send message: {e}") from e
        return request.id

    # ========================================================================
    # Handlers
    # ========================================================================

    def on_ticker(self, handler: Handler) -> None:
        """Receive :class:`~bitflyer_sdk.types.Ticker` messages."""
        self.router.on(MessageKind.TICKER, handler)

    def on_executions(self, handler: Handler) -> None:
        """Receive :class:`~bitflyer_sdk.types.ExecutionsMessage` batches."""
        self.router.on(MessageKind.EXECUTIONS, handler)

    def on_board(self, handler: Handler) -> None:
        """Receive :class:`~bitflyer_sdk.types.BoardMessage` deltas."""
        self.router.on(MessageKind.BOARD, handler)

    def on_board_snapshot(self, handler: Handler) -> None:
        """Receive :class:`~bitflyer_sdk.types.BoardSnapshotMessage` snapshots."""
        self.router.on(MessageKind.BOARD_SNAPSHOT, handler)

    def on_order_events(self, handler: Handler) -> None:
        """Receive :class:`~bitflyer_sdk.types.OrderEvent` from private channels."""
        self.router.on(MessageKind.ORDER_EVENT, handler)

    def on_channel(self, channel: str, handler: ChannelHandler) -> None:
        """Receive ``(channel, params)`` for one exact channel, undecoded."""
        self.router.on_channel(channel, handler)

    # ========================================================================
    # Receive loop / shutdown
    # ========================================================================

    async def _receive_loop(self) -> None:
        try:
            async for frame in self._ws:
                try:
                    self.router.dispatch(frame)
                except Exception as e:
                    self.logger.error(f"Error dispatching message: {e}")
        except ConnectionClosedOK:
            self.logger.debug("WebSocket connection closed")
        except ConnectionClosed as e:
            self.logger.warn(f"WebSocket connection lost: {e}")
        except Exception as e:
            self.logger.error(f"WebSocket receive loop failed: {e}")
        finally:
            self._state = SessionState.CLOSED

    async def wait_closed(self) -> None:
        """Block until the receive loop ends."""
        await asyncio.gather(self._receive_task, return_exceptions=True)

    async def close(self) -> None:
        """
        Close the connection with a normal closure.

        Failures of the close handshake are logged, not raised. Callbacks
        already running are left to finish.
        """
        if self._state == SessionState.CLOSED and self._receive_task.done():
            return

        self._state = SessionState.CLOSING
        try:
            await self._ws.close(code=1000, reason="client closed")
        except Exception as e:
            self.logger.error(f"An error occurred while closing the WebSocket connection: {e}")

        done, _ = await asyncio.wait({self._receive_task}, timeout=self.close_timeout)
        if not done:
            self._receive_task.cancel()
            await asyncio.gather(self._receive_task, return_exceptions=True)

        self._subscribed.clear()
        self._state = SessionState.CLOSED
        self.logger.info("WebSocket closed")
