"""Exceptions raised by the bitFlyer SDK."""

from typing import Any, Optional


class ExchangeError(Exception):
    """Base class for every error raised by the SDK."""


class APIError(ExchangeError):
    """REST endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str, body: Any = None):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.body = body


class BodyReadError(ExchangeError):
    """Request body could not be read or restored for signing."""


# ============================================================================
# WebSocket
# ============================================================================


class WebSocketError(ExchangeError):
    """Base class for WebSocket session errors."""


class ConnectError(WebSocketError):
    """Dialing the WebSocket endpoint failed."""

    def __init__(self, url: str, reason: Optional[BaseException] = None):
        detail = f": {reason}" if reason is not None else ""
        super().__init__(f"websocket connection error ({url}){detail}")
        self.url = url
        self.reason = reason


class TimeoutError(ConnectError):
    """Handshake did not complete before the caller's deadline."""


class SendError(WebSocketError):
    """Writing a frame to the connection failed."""


class SessionClosedError(WebSocketError):
    """Operation attempted on a session that is not open."""


class SubscriptionError(WebSocketError):
    """Subscription state does not allow the requested change."""

    def __init__(self, channel: str, message: str):
        super().__init__(message)
        self.channel = channel


class AlreadySubscribedError(SubscriptionError):
    def __init__(self, channel: str):
        super().__init__(channel, f"channel {channel} already subscribed")


class NotSubscribedError(SubscriptionError):
    def __init__(self, channel: str):
        super().__init__(channel, f"channel {channel} not subscribed")
