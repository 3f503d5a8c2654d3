"""Shared fixtures for SDK tests."""

import asyncio
import json
import os
from typing import Any

import pytest

from bitflyer_sdk import Credentials, Logger


class RecordingLogger(Logger):
    """Logger that keeps every message for assertions."""

    def __init__(self):
        self.records: list[tuple[str, str]] = []

    def debug(self, message: str, *args: Any) -> None:
        self.records.append(("debug", message))

    def info(self, message: str, *args: Any) -> None:
        self.records.append(("info", message))

    def warn(self, message: str, *args: Any) -> None:
        self.records.append(("warn", message))

    def error(self, message: str, *args: Any) -> None:
        self.records.append(("error", message))

    def messages(self, level: str) -> list[str]:
        return [message for lvl, message in self.records if lvl == level]


_END = object()


class FakeConnection:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self):
        self.sent: list[dict[str, Any]] = []
        self.close_code = None
        self.fail_sends = False
        self.fail_close = False
        self._incoming: asyncio.Queue = asyncio.Queue()

    async def send(self, data: str) -> None:
        if self.fail_sends:
            raise OSError("broken pipe")
        self.sent.append(json.loads(data))

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if self.fail_close:
            raise OSError("close handshake failed")
        self.close_code = code
        self._incoming.put_nowait(_END)

    def feed(self, frame: str) -> None:
        """Queue an inbound frame."""
        self._incoming.put_nowait(frame)

    def drop(self) -> None:
        """End the inbound stream as if the peer went away."""
        self._incoming.put_nowait(_END)

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        item = await self._incoming.get()
        if item is _END:
            raise StopAsyncIteration
        return item


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep BITFLYER_* variables from the host out of ClientConfig."""
    for name in list(os.environ):
        if name.upper().startswith("BITFLYER_"):
            monkeypatch.delenv(name)


@pytest.fixture
def credentials():
    """Credentials used across signing tests."""
    return Credentials(api_key="key123", api_secret="secret123")


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def fake_connection():
    return FakeConnection()


@pytest.fixture
def frame():
    """Build a channelMessage frame."""

    def build(channel: str, message: Any) -> str:
        return json.dumps(
            {
                "jsonrpc": "2.0",
                "method": "channelMessage",
                "params": {"channel": channel, "message": message},
            }
        )

    return build


@pytest.fixture
def ticker_payload():
    return {
        "product_code": "BTC_JPY",
        "state": "RUNNING",
        "timestamp": "2024-01-01T00:00:00.000",
        "best_bid": 6500000.0,
        "best_ask": 6500100.0,
        "best_bid_size": 0.1,
        "best_ask_size": 0.2,
        "total_bid_depth": 1200.5,
        "total_ask_depth": 1100.25,
        "ltp": 6500050.0,
        "volume": 12345.6,
        "volume_by_product": 2345.6,
    }


@pytest.fixture
def board_payload():
    return {
        "mid_price": 6500050.0,
        "bids": [{"price": 6500000.0, "size": 0.1}],
        "asks": [{"price": 6500100.0, "size": 0.2}, {"price": 6500200.0, "size": 0.0}],
    }


@pytest.fixture
def executions_payload():
    return [
        {
            "id": 2512345678,
            "side": "BUY",
            "price": 6500100.0,
            "size": 0.01,
            "exec_date": "2024-01-01T00:00:00.1234567Z",
            "buy_child_order_acceptance_id": "JRF20240101-000000-000001",
            "sell_child_order_acceptance_id": "JRF20240101-000000-000002",
        },
        {
            "id": 2512345679,
            "side": "SELL",
            "price": 6500000.0,
            "size": 0.02,
            "exec_date": "2024-01-01T00:00:00.2234567Z",
            "buy_child_order_acceptance_id": "JRF20240101-000000-000003",
            "sell_child_order_acceptance_id": "JRF20240101-000000-000004",
        },
    ]


@pytest.fixture
def order_event_payload():
    return {
        "product_code": "BTC_JPY",
        "child_order_id": "JOR20240101-000000-000001",
        "child_order_acceptance_id": "JRF20240101-000000-000001",
        "event_date": "2024-01-01T00:00:00.000Z",
        "event_type": "EXECUTION",
        "exec_id": 2512345678,
        "side": "BUY",
        "price": 6500100.0,
        "size": 0.01,
        "commission": 0.0,
        "sfd": 0.0,
    }
