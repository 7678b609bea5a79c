"""
Remote data ingestion.

Modules
-------
market_client : MarketPriceClient — data.gov.in mandi price feed (httpx),
                with a fixture mode for offline use.
"""
