"""Type definitions for the bitFlyer SDK."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enums
# ============================================================================


class Side(str, Enum):
    """Order side."""

    BUY = "BUY"
    SELL = "SELL"


class ChildOrderType(str, Enum):
    """Child order type."""

    LIMIT = "LIMIT"
    MARKET = "MARKET"


class MessageKind(str, Enum):
    """Typed message kinds the router can deliver."""

    TICKER = "ticker"
    EXECUTIONS = "executions"
    BOARD = "board"
    BOARD_SNAPSHOT = "board_snapshot"
    ORDER_EVENT = "order_event"


# ============================================================================
# Channels
# ============================================================================


class Channel:
    """Channel name prefixes and builders for the Realtime API."""

    TICKER_PREFIX = "lightning_ticker_"
    EXECUTIONS_PREFIX = "lightning_executions_"
    BOARD_SNAPSHOT_PREFIX = "lightning_board_snapshot_"
    BOARD_PREFIX = "lightning_board_"
    CHILD_ORDER_EVENTS = "child_order_events"
    PARENT_ORDER_EVENTS = "parent_order_events"

    @classmethod
    def ticker(cls, product_code: str) -> str:
        return cls.TICKER_PREFIX + product_code

    @classmethod
    def executions(cls, product_code: str) -> str:
        return cls.EXECUTIONS_PREFIX + product_code

    @classmethod
    def board(cls, product_code: str) -> str:
        return cls.BOARD_PREFIX + product_code

    @classmethod
    def board_snapshot(cls, product_code: str) -> str:
        return cls.BOARD_SNAPSHOT_PREFIX + product_code


# ============================================================================
# WebSocket Message Models
# ============================================================================


class Ticker(BaseModel):
    """Ticker pushed on ``lightning_ticker_<product>``."""

    product_code: str
    timestamp: str
    best_bid: float
    best_ask: float
    best_bid_size: float
    best_ask_size: float
    total_bid_depth: float
    total_ask_depth: float
    ltp: float
    volume: float
    volume_by_product: float
    state: Optional[str] = None


class Execution(BaseModel):
    """Single trade from an executions batch."""

    id: int
    side: str
    price: float
    size: float
    exec_date: str
    buy_child_order_acceptance_id: str
    sell_child_order_acceptance_id: str


class ExecutionsMessage(BaseModel):
    """Executions batch; the product code comes from the channel name."""

    product_code: str
    executions: list[Execution]


class PriceLevel(BaseModel):
    """Order book price level."""

    price: float
    size: float


class BoardData(BaseModel):
    """Order book body shared by deltas and snapshots."""

    mid_price: float
    bids: list[PriceLevel]
    asks: list[PriceLevel]


class BoardMessage(BaseModel):
    """Incremental order book update, merged into earlier state."""

    product_code: str
    data: BoardData


class BoardSnapshotMessage(BaseModel):
    """Full order book, replaces any earlier state."""

    product_code: str
    data: BoardData


class OrderEvent(BaseModel):
    """
    Private order event from ``child_order_events`` or ``parent_order_events``.

    Which optional fields are set depends on ``event_type``
    (ORDER, ORDER_FAILED, CANCEL, CANCEL_FAILED, EXECUTION, EXPIRE, ...).
    """

    product_code: str
    event_type: str
    event_date: str
    child_order_id: Optional[str] = None
    child_order_acceptance_id: Optional[str] = None
    parent_order_id: Optional[str] = None
    parent_order_acceptance_id: Optional[str] = None
    child_order_type: Optional[str] = None
    parent_order_type: Optional[str] = None
    side: Optional[str] = None
    price: Optional[float] = None
    size: Optional[float] = None
    expire_date: Optional[str] = None
    reason: Optional[str] = None
    exec_id: Optional[int] = None
    commission: Optional[float] = None
    sfd: Optional[float] = None


# ============================================================================
# JSON-RPC
# ============================================================================


class RpcRequest(BaseModel):
    """Client-to-server JSON-RPC envelope."""

    model_config = ConfigDict(populate_by_name=True)

    version: str = Field(default="2.0", alias="jsonrpc")
    method: str
    params: dict[str, Any]
    id: int

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
