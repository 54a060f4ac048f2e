from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

# Bonzo only serves mainnet data, whatever Hedera network the relay targets.
DEFAULT_BASE_URL = "https://mainnet-data-staging.bonzo.finance"

ENDPOINTS = {
    "account_dashboard": "/dashboard",
    "market_info": "/market",
    "pool_stats": "/stats",
    "protocol_info": "/info",
    "bonzo_token": "/bonzo",
    "bonzo_circulation": "/bonzo/circulation",
}

# Operations whose endpoint answers with a plain-text body.
TEXT_OPERATIONS = frozenset({"bonzo_circulation"})

DOCS_URL = "https://docs.bonzo.finance/hub/developer/bonzo-v1-data-api"


@dataclass(frozen=True, slots=True)
class BonzoSettings:
    """Runtime configuration for the Bonzo Finance data API client."""

    base_url: str = DEFAULT_BASE_URL
    min_interval: float = 2.0  # seconds between consecutive requests
    max_retries: int = 2
    backoff: float = 5.0  # first retry delay, doubled on each attempt
    cache_ttl: float = 300.0
    request_timeout: float = 10.0

    @classmethod
    def load(cls) -> "BonzoSettings":
        base_url = os.getenv("BONZO_API_BASE_URL", "").strip() or DEFAULT_BASE_URL
        return cls(
            base_url=base_url.rstrip("/"),
            min_interval=float(os.getenv("BONZO_MIN_INTERVAL", "2.0")),
            max_retries=int(os.getenv("BONZO_MAX_RETRIES", "2")),
            backoff=float(os.getenv("BONZO_BACKOFF", "5.0")),
            cache_ttl=float(os.getenv("BONZO_CACHE_TTL", "300")),
            request_timeout=float(os.getenv("BONZO_TIMEOUT", "10")),
        )


@lru_cache(maxsize=1)
def get_bonzo_settings() -> BonzoSettings:
    return BonzoSettings.load()
