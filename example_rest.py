"""Example usage of the signed REST client."""

import asyncio

from bitflyer_sdk import APIError, BitflyerClient, ClientConfig


async def main():
    # BITFLYER_API_KEY / BITFLYER_API_SECRET enable the private endpoints
    config = ClientConfig.from_env()

    async with BitflyerClient(config) as client:
        # ====================================================================
        # Public endpoints
        # ====================================================================

        markets = await client.rest.get_markets()
        print(f"Found {len(markets)} markets:")
        for market in markets:
            print(f"  - {market['product_code']}")

        ticker = await client.rest.get_ticker("BTC_JPY")
        print(f"\nBTC_JPY last traded price: {ticker['ltp']}")

        # ====================================================================
        # Private endpoints
        # ====================================================================

        if config.credentials() is None:
            print("\nSet BITFLYER_API_KEY and BITFLYER_API_SECRET for private endpoints")
            return

        try:
            balances = await client.rest.get_balance()
            for balance in balances:
                print(f"  - {balance['currency_code']}: {balance['available']}")

            positions = await client.rest.get_positions("FX_BTC_JPY")
            print(f"\nOpen FX_BTC_JPY positions: {len(positions)}")
        except APIError as e:
            print(f"\nRequest rejected ({e.status_code}): {e.message}")


if __name__ == "__main__":
    asyncio.run(main())
