"""Channel classification and callback dispatch for Realtime API frames."""

import asyncio
import functools
import inspect
import json
import threading
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import BaseModel, ValidationError

from .logger import Logger, NoopLogger
from .types import (
    BoardData,
    BoardMessage,
    BoardSnapshotMessage,
    Channel,
    ExecutionsMessage,
    MessageKind,
    OrderEvent,
    Ticker,
)


Handler = Callable[[Any], Union[None, Awaitable[None]]]
ChannelHandler = Callable[[str, dict[str, Any]], Union[None, Awaitable[None]]]

# Snapshot must be tested before board: "lightning_board_" prefixes both
_PREFIX_RULES: tuple[tuple[str, MessageKind], ...] = (
    (Channel.TICKER_PREFIX, MessageKind.TICKER),
    (Channel.EXECUTIONS_PREFIX, MessageKind.EXECUTIONS),
    (Channel.BOARD_SNAPSHOT_PREFIX, MessageKind.BOARD_SNAPSHOT),
    (Channel.BOARD_PREFIX, MessageKind.BOARD),
)

_ORDER_EVENT_CHANNELS = frozenset({Channel.CHILD_ORDER_EVENTS, Channel.PARENT_ORDER_EVENTS})


def classify(channel: str) -> tuple[Optional[MessageKind], Optional[str]]:
    """
    Map a channel name to its message kind.

    Args:
        channel: Channel name from ``params.channel``

    Returns:
        ``(kind, product_code)``; product_code is None for private channels,
        and ``(None, None)`` for channels with no typed payload
    """
    for prefix, kind in _PREFIX_RULES:
        if channel.startswith(prefix):
            return kind, channel[len(prefix):]
    if channel in _ORDER_EVENT_CHANNELS:
        return MessageKind.ORDER_EVENT, None
    return None, None


def decode(kind: MessageKind, product_code: Optional[str], message: Any) -> list[BaseModel]:
    """
    Decode ``params.message`` into typed payloads.

    Raises:
        ValidationError: If the message does not have the expected shape
    """
    if kind == MessageKind.TICKER:
        return [Ticker.model_validate(message)]
    if kind == MessageKind.EXECUTIONS:
        return [ExecutionsMessage(product_code=product_code, executions=message)]
    if kind == MessageKind.BOARD:
        return [BoardMessage(product_code=product_code, data=BoardData.model_validate(message))]
    if kind == MessageKind.BOARD_SNAPSHOT:
        return [BoardSnapshotMessage(product_code=product_code, data=BoardData.model_validate(message))]
    # Order event channels push either one event or a list of them
    events = message if isinstance(message, list) else [message]
    return [OrderEvent.model_validate(event) for event in events]


class HandlerRegistry:
    """One handler per message kind plus exact-match channel handlers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._typed: dict[MessageKind, Handler] = {}
        self._channels: dict[str, ChannelHandler] = {}

    def set(self, kind: MessageKind, handler: Handler) -> None:
        """Register the handler for ``kind``, replacing any previous one."""
        with self._lock:
            self._typed[MessageKind(kind)] = handler

    def get(self, kind: MessageKind) -> Optional[Handler]:
        with self._lock:
            return self._typed.get(kind)

    def set_channel(self, channel: str, handler: ChannelHandler) -> None:
        """Register a raw handler for one exact channel name."""
        with self._lock:
            self._channels[channel] = handler

    def get_channel(self, channel: str) -> Optional[ChannelHandler]:
        with self._lock:
            return self._channels.get(channel)


class MessageRouter:
    """
    Routes raw frames to registered callbacks.

    Each callback runs on its own unit of work so a slow handler does not
    hold up the receive loop. Coroutine handlers run as tasks, plain
    callables run in the loop's default executor.
    """

    def __init__(self, logger: Optional[Logger] = None, max_concurrency: Optional[int] = None):
        """
        Initialize router.

        Args:
            logger: Logger instance
            max_concurrency: Cap on callbacks running at once, unbounded when None
        """
        self.logger = logger or NoopLogger()
        self.registry = HandlerRegistry()
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None
        self._tasks: set[asyncio.Task] = set()

    def on(self, kind: MessageKind, handler: Handler) -> None:
        self.registry.set(kind, handler)

    def on_channel(self, channel: str, handler: ChannelHandler) -> None:
        self.registry.set_channel(channel, handler)

    @property
    def pending(self) -> int:
        """Number of callbacks scheduled but not finished."""
        return len(self._tasks)

    def route(self, raw_frame: Union[str, bytes]) -> list[tuple[Callable, tuple]]:
        """
        Classify and decode a frame without running anything.

        Returns:
            ``(handler, args)`` pairs to invoke, empty for dropped frames
        """
        try:
            envelope = json.loads(raw_frame)
        except (ValueError, TypeError):
            self.logger.debug("Dropping frame that is not valid JSON")
            return []
        if not isinstance(envelope, dict):
            return []

        params = envelope.get("params")
        if not isinstance(params, dict) or not isinstance(params.get("channel"), str):
            self._log_rpc_reply(envelope)
            return []

        channel = params["channel"]
        calls: list[tuple[Callable, tuple]] = []

        kind, product_code = classify(channel)
        if kind is not None:
            handler = self.registry.get(kind)
            message = params.get("message")
            if handler is not None and message is not None:
                try:
                    payloads = decode(kind, product_code, message)
                except ValidationError as e:
                    self.logger.debug(f"Dropping malformed {kind.value} message on {channel}: {e.error_count()} errors")
                    payloads = []
                calls.extend((handler, (payload,)) for payload in payloads)

        channel_handler = self.registry.get_channel(channel)
        if channel_handler is not None:
            calls.append((channel_handler, (channel, params)))

        return calls

    def dispatch(self, raw_frame: Union[str, bytes]) -> int:
        """
        Route a frame and schedule its callbacks on the running loop.

        Returns:
            Number of callbacks scheduled
        """
        calls = self.route(raw_frame)
        if not calls:
            return 0

        loop = asyncio.get_running_loop()
        for handler, args in calls:
            task = loop.create_task(self._invoke(handler, args))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return len(calls)

    async def drain(self) -> None:
        """Wait until every scheduled callback has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _invoke(self, handler: Callable, args: tuple) -> None:
        if self._semaphore is None:
            await self._call(handler, args)
            return
        async with self._semaphore:
            await self._call(handler, args)

    async def _call(self, handler: Callable, args: tuple) -> None:
        try:
            if inspect.iscoroutinefunction(handler):
                await handler(*args)
                return
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(None, functools.partial(handler, *args))
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            name = getattr(handler, "__name__", repr(handler))
            self.logger.error(f"Error in handler {name}: {e}")

    def _log_rpc_reply(self, envelope: dict[str, Any]) -> None:
        if "error" in envelope:
            self.logger.warn(f"RPC call {envelope.get('id')} failed: {envelope['error']}")
        elif "result" in envelope:
            self.logger.debug(f"RPC call {envelope.get('id')} returned {envelope['result']}")
        else:
            self.logger.debug("Dropping frame without params.channel")
