"""
data.gov.in mandi price client — daily market prices by state / district.

API:   https://api.data.gov.in/resource/9ef84268-d588-465a-a308-a864a43d0070
Docs:  https://data.gov.in/resource/current-daily-price-various-commodities-various-markets-mandi

Credential setup (.env, gitignored):
  AGRI_ADVISOR_MARKET_API_KEY=your_key_here

Request:
  GET {base_url}/{resource_id}
    ?api-key=...&format=json&limit=500
    &filters[state]=<state>[&filters[district]=<district>]

Response (fields used):
  {"records": [{"state", "district", "market", "commodity", "variety",
                "arrival_date", "min_price", "max_price", "modal_price"}, ...]}

Failure handling:
  - Network error, non-2xx status, or a body without a ``records`` list
    raises ``MarketFeedError`` carrying one static user-facing message.
    No retry, no partial results.
  - Records whose ``modal_price`` does not parse to a positive integer, or
    that lack a commodity or market name, or that otherwise fail record
    validation, are dropped silently (counted in
    ``MarketFeedResponse.dropped`` and logged at DEBUG). Optional text
    fields of any JSON type are stringified.

Without an API key the client serves ``FIXTURE_RECORDS`` (stub mode) so the
CLI and dashboard work offline.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, ClassVar, Optional

import httpx
from pydantic import ValidationError

from agri_advisor.models.market import MarketRecord

if TYPE_CHECKING:
    from agri_advisor.config import MarketConfig

logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "Failed to fetch market data. Please check your network or API key."

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class MarketFeedError(RuntimeError):
    """The price feed could not be fetched or decoded.

    ``str(exc)`` is always ``FETCH_ERROR_MESSAGE``; the underlying cause is
    chained as ``__cause__`` and logged.
    """

    def __init__(self, message: str = FETCH_ERROR_MESSAGE) -> None:
        super().__init__(message)
        self.user_message = message


# ── Response types ─────────────────────────────────────────────────────────────

@dataclass
class MarketFeedResponse:
    """Typed container for one price-feed request."""

    source: str = "data_gov_in"
    state: str = ""
    district: Optional[str] = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    records: list[MarketRecord] = field(default_factory=list)
    dropped: int = 0
    is_fixture: bool = True


# ── Parsing ────────────────────────────────────────────────────────────────────

def parse_modal_price(raw: Any) -> Optional[int]:
    """Parse a leading base-10 integer the way the feed's consumers always have.

    ``"2150"`` → 2150, ``"2150.75"`` → 2150, ``" 980 Rs"`` → 980,
    ``"NR"`` / ``""`` / ``None`` → ``None``.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else None
    match = _LEADING_INT.match(str(raw))
    return int(match.group(1)) if match else None


def parse_price_records(rows: list[Any]) -> tuple[list[MarketRecord], int]:
    """Convert raw feed rows into ``MarketRecord``s.

    Returns:
        ``(records, dropped)`` — valid records in feed order and the number
        of rows discarded.
    """
    records: list[MarketRecord] = []
    dropped = 0
    for row in rows:
        if not isinstance(row, dict):
            dropped += 1
            continue
        price = parse_modal_price(row.get("modal_price"))
        commodity = row.get("commodity")
        market = row.get("market")
        if price is None or price <= 0 or not commodity or not market:
            dropped += 1
            continue
        try:
            record = MarketRecord(
                commodity=str(commodity),
                market=str(market),
                modal_price=price,
                state=str(row.get("state") or ""),
                district=str(row.get("district") or ""),
                variety=_opt_str(row.get("variety")),
                arrival_date=_opt_str(row.get("arrival_date")),
                min_price=_opt_str(row.get("min_price")),
                max_price=_opt_str(row.get("max_price")),
            )
        except ValidationError as exc:
            logger.debug("Dropping price row that failed validation: %s", exc)
            dropped += 1
            continue
        records.append(record)
    if dropped:
        logger.debug("Dropped %d malformed price row(s)", dropped)
    return records, dropped


def _opt_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


# ── Client ─────────────────────────────────────────────────────────────────────

class MarketPriceClient:
    """Client for the data.gov.in current daily mandi price resource.

    Usage (fixture / stub mode — no API key required)::

        client = MarketPriceClient()
        response = client.get_prices("Punjab", "Ludhiana")

    Usage (real API)::

        client = MarketPriceClient.from_config(config.market)
        response = client.fetch_prices("Punjab", "Ludhiana")

    Pass ``http_client`` to reuse a connection pool or to inject a mock
    transport in tests.
    """

    BASE_URL: ClassVar[str] = "https://api.data.gov.in/resource"
    RESOURCE_ID: ClassVar[str] = "9ef84268-d588-465a-a308-a864a43d0070"

    # Fixture rows for stub mode, shaped like the live feed (string prices).
    # The last two rows are deliberately malformed and are always dropped.
    FIXTURE_RECORDS: ClassVar[list[dict]] = [
        {"market": "Khanna", "commodity": "Wheat", "variety": "Dara",
         "arrival_date": "18/10/2026", "min_price": "2275", "max_price": "2350",
         "modal_price": "2325"},
        {"market": "Ludhiana", "commodity": "Paddy(Dhan)(Common)", "variety": "Other",
         "arrival_date": "18/10/2026", "min_price": "2183", "max_price": "2203",
         "modal_price": "2203"},
        {"market": "Ludhiana", "commodity": "Potato", "variety": "Desi",
         "arrival_date": "18/10/2026", "min_price": "800", "max_price": "1200",
         "modal_price": "1000"},
        {"market": "Jagraon", "commodity": "Onion", "variety": "Red",
         "arrival_date": "18/10/2026", "min_price": "1800", "max_price": "2400",
         "modal_price": "2100"},
        {"market": "Khanna", "commodity": "Maize", "variety": "Hybrid/Local",
         "arrival_date": "18/10/2026", "min_price": "1850", "max_price": "2090",
         "modal_price": "1950"},
        {"market": "Ludhiana", "commodity": "Tomato", "variety": "Hybrid",
         "arrival_date": "18/10/2026", "min_price": "900", "max_price": "1500",
         "modal_price": "1200"},
        {"market": "Samrala", "commodity": "Cauliflower", "variety": "Local",
         "arrival_date": "18/10/2026", "min_price": "", "max_price": "",
         "modal_price": "NR"},
        {"market": "Jagraon", "commodity": "Garlic", "variety": "Average",
         "arrival_date": "18/10/2026", "min_price": "0", "max_price": "0",
         "modal_price": "0"},
    ]

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        resource_id: Optional[str] = None,
        limit: int = 500,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialise the price-feed client.

        Args:
            api_key: data.gov.in API key. ``None`` or ``""`` → stub mode.
            base_url: Resource API base URL.
            resource_id: Dataset resource identifier.
            limit: Maximum records per request.
            timeout: Request timeout in seconds.
            http_client: Optional pre-built ``httpx.Client``.
        """
        self.api_key = api_key or None
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.resource_id = resource_id or self.RESOURCE_ID
        self.limit = limit
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_config(
        cls,
        config: "MarketConfig",
        http_client: Optional[httpx.Client] = None,
    ) -> "MarketPriceClient":
        return cls(
            api_key=config.api_key,
            base_url=config.base_url,
            resource_id=config.resource_id,
            limit=config.record_limit,
            timeout=config.timeout_seconds,
            http_client=http_client,
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.resource_id}"

    @property
    def is_stub(self) -> bool:
        return self.api_key is None

    def build_params(self, state: str, district: Optional[str] = None) -> dict[str, str]:
        """Query parameters for one state / district request."""
        params = {
            "api-key": self.api_key or "",
            "format": "json",
            "limit": str(self.limit),
            "filters[state]": state,
        }
        if district:
            params["filters[district]"] = district
        return params

    # ── Real API ───────────────────────────────────────────────────────────────

    def fetch_prices(self, state: str, district: Optional[str] = None) -> MarketFeedResponse:
        """Fetch current modal prices for ``state`` (optionally one district).

        Returns:
            MarketFeedResponse with valid records (is_fixture=False).

        Raises:
            MarketFeedError: On network failure, non-2xx status or an
                undecodable body.
        """
        params = self.build_params(state, district)
        try:
            if self._http_client is not None:
                resp = self._http_client.get(self.url, params=params, timeout=self.timeout)
            else:
                resp = httpx.get(self.url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "Market feed request failed for state=%s district=%s: %s",
                state, district, exc,
            )
            raise MarketFeedError() from exc

        rows = payload.get("records") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            logger.warning(
                "Market feed response for state=%s district=%s has no 'records' list",
                state, district,
            )
            raise MarketFeedError()

        records, dropped = parse_price_records(rows)
        logger.info(
            "Market feed: %d record(s) for state=%s district=%s (%d dropped)",
            len(records), state, district, dropped,
        )
        return MarketFeedResponse(
            state=state,
            district=district,
            fetched_at=datetime.now(timezone.utc),
            records=records,
            dropped=dropped,
            is_fixture=False,
        )

    # ── Fixture / stub mode ────────────────────────────────────────────────────

    def get_fixture_response(
        self,
        state: str,
        district: Optional[str] = None,
    ) -> MarketFeedResponse:
        """Return fixture price data tagged with ``state`` / ``district``."""
        rows = [
            {**r, "state": state, "district": district or ""}
            for r in self.FIXTURE_RECORDS
        ]
        records, dropped = parse_price_records(rows)
        logger.debug(
            "MarketPriceClient: returning %d fixture records for %s/%s",
            len(records), state, district,
        )
        return MarketFeedResponse(
            source="fixture",
            state=state,
            district=district,
            fetched_at=datetime.now(timezone.utc),
            records=records,
            dropped=dropped,
            is_fixture=True,
        )

    def get_prices(self, state: str, district: Optional[str] = None) -> MarketFeedResponse:
        """Real fetch when an API key is configured, fixture data otherwise."""
        if self.is_stub:
            return self.get_fixture_response(state, district)
        return self.fetch_prices(state, district)
