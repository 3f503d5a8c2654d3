"""bitFlyer Lightning SDK for Python."""

# Main unified client
from .sdk import BitflyerClient

# Individual clients
from .client import RestClient
from .websocket import WebSocketClient, SessionState

# Signing
from .auth import Credentials, Signer, ws_auth_params
from .transport import AuthenticatedTransport, AuthenticatedSyncTransport

# Services
from .config import ClientConfig
from .router import MessageRouter, HandlerRegistry, classify
from .logger import Logger, ConsoleLogger, NoopLogger, StdlibLogger, LogLevel

# Types
from .types import (
    Side,
    ChildOrderType,
    MessageKind,
    Channel,
    Ticker,
    Execution,
    ExecutionsMessage,
    PriceLevel,
    BoardData,
    BoardMessage,
    BoardSnapshotMessage,
    OrderEvent,
    RpcRequest,
)

# Exceptions
from .exceptions import (
    ExchangeError,
    APIError,
    BodyReadError,
    WebSocketError,
    ConnectError,
    TimeoutError,
    SendError,
    SessionClosedError,
    SubscriptionError,
    AlreadySubscribedError,
    NotSubscribedError,
)

__all__ = [
    # Main client
    "BitflyerClient",
    # Individual clients
    "RestClient",
    "WebSocketClient",
    "SessionState",
    # Signing
    "Credentials",
    "Signer",
    "ws_auth_params",
    "AuthenticatedTransport",
    "AuthenticatedSyncTransport",
    # Services
    "ClientConfig",
    "MessageRouter",
    "HandlerRegistry",
    "classify",
    "Logger",
    "ConsoleLogger",
    "NoopLogger",
    "StdlibLogger",
    "LogLevel",
    # Domain types
    "Side",
    "ChildOrderType",
    "MessageKind",
    "Channel",
    "Ticker",
    "Execution",
    "ExecutionsMessage",
    "PriceLevel",
    "BoardData",
    "BoardMessage",
    "BoardSnapshotMessage",
    "OrderEvent",
    "RpcRequest",
    # Exceptions
    "ExchangeError",
    "APIError",
    "BodyReadError",
    "WebSocketError",
    "ConnectError",
    "TimeoutError",
    "SendError",
    "SessionClosedError",
    "SubscriptionError",
    "AlreadySubscribedError",
    "NotSubscribedError",
]

__version__ = "0.1.0"
