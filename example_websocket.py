"""Example usage of the Realtime API session."""

import asyncio

from bitflyer_sdk import BitflyerClient, Channel, ClientConfig


async def main():
    async with BitflyerClient(ClientConfig.from_env()) as client:
        # Authenticates automatically when credentials are configured
        ws = await client.connect_websocket()

        def handle_ticker(ticker):
            print(f"Ticker {ticker.product_code}: bid={ticker.best_bid} ask={ticker.best_ask}")

        def handle_executions(batch):
            for execution in batch.executions:
                print(f"Trade {batch.product_code}: {execution.side} {execution.size} @ {execution.price}")

        async def handle_snapshot(snapshot):
            print(f"Book {snapshot.product_code}: mid={snapshot.data.mid_price}")

        def handle_order_event(event):
            print(f"Order {event.child_order_acceptance_id}: {event.event_type}")

        ws.on_ticker(handle_ticker)
        ws.on_executions(handle_executions)
        ws.on_board_snapshot(handle_snapshot)
        ws.on_order_events(handle_order_event)

        await ws.subscribe(Channel.ticker("BTC_JPY"))
        await ws.subscribe(Channel.executions("BTC_JPY"))
        await ws.subscribe(Channel.board_snapshot("BTC_JPY"))
        if client.config.credentials() is not None:
            await ws.subscribe(Channel.CHILD_ORDER_EVENTS)

        print("Subscribed. Press Ctrl+C to exit...")
        try:
            await asyncio.wait_for(ws.wait_closed(), timeout=60)
        except asyncio.TimeoutError:
            pass

        await ws.unsubscribe(Channel.ticker("BTC_JPY"))
    print("Client closed")


if __name__ == "__main__":
    asyncio.run(main())
