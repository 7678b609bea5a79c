"""
Dashboard data loader.

Functions are decorated with ``@st.cache_data`` so Streamlit only reloads
reference files when the process restarts (or the cache is cleared), and
only re-queries the price feed once per state/district within the TTL.

Loaders raise on configuration errors; the app turns them into an error
banner. Price-feed failures are returned as ``(None, message)`` so the
market tab can show the user-facing message without a traceback.
"""

from __future__ import annotations

from typing import Optional

import streamlit as st

from agri_advisor.config import AppConfig, load_config
from agri_advisor.ingestion.market_client import (
    MarketFeedError,
    MarketFeedResponse,
    MarketPriceClient,
)
from agri_advisor.reference.loader import ReferenceData, load_reference_data
from agri_advisor.utils.logging import configure_logging


@st.cache_resource
def get_config() -> AppConfig:
    """Load config once per process and configure logging."""
    config = load_config()
    configure_logging(config.logging)
    return config


@st.cache_resource
def get_reference_data() -> ReferenceData:
    """Reference datasets are immutable; share one copy across sessions."""
    return load_reference_data(get_config())


@st.cache_data(ttl=900, show_spinner="Loading market insights...")
def fetch_market_prices(
    state: str,
    district: Optional[str],
) -> tuple[Optional[MarketFeedResponse], Optional[str]]:
    """Fetch prices for one selection. TTL: 15 minutes.

    Returns:
        ``(response, None)`` on success, ``(None, user_message)`` on failure.
    """
    client = MarketPriceClient.from_config(get_config().market)
    try:
        return client.get_prices(state, district), None
    except MarketFeedError as exc:
        return None, exc.user_message
