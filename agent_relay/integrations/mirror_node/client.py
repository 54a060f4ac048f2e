"""Read-only client for the Hedera mirror node REST API."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import httpx

from agent_relay.infrastructure.retry import RetryConfig, execute_with_retry

logger = logging.getLogger(__name__)

MIRROR_NODE_URLS = {
    "mainnet": "https://mainnet-public.mirrornode.hedera.com/api/v1",
    "testnet": "https://testnet.mirrornode.hedera.com/api/v1",
}

TINYBARS_PER_HBAR = 100_000_000

_RETRY = RetryConfig(max_retries=2, base_delay=1.0, max_delay=10.0, jitter=0.5, retryable_exceptions=(httpx.TransportError,))


class MirrorNodeError(RuntimeError):
    """Raised when the mirror node answers with an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def resolve_base_url(network: str) -> str:
    override = os.getenv("MIRROR_NODE_URL", "").strip()
    if override:
        return override.rstrip("/")
    try:
        return MIRROR_NODE_URLS[network]
    except KeyError:
        raise ValueError(f"No mirror node known for network '{network}'") from None


class MirrorNodeClient:
    """Async wrapper around the mirror node account endpoints. Holds no cache."""

    def __init__(self, network: str = "testnet", *, client: httpx.AsyncClient | None = None) -> None:
        self.network = network
        self.base_url = resolve_base_url(network)
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=10.0)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = await execute_with_retry(self._client.get, path, params=params, config=_RETRY)
        if response.status_code == 404:
            raise MirrorNodeError(f"Not found on {self.network}: {path}", 404)
        if response.status_code >= 400:
            raise MirrorNodeError(f"Mirror node request failed ({response.status_code})", response.status_code)
        return response.json()

    async def get_account(self, account_id: str) -> Dict[str, Any]:
        return await self._get(f"/accounts/{account_id}")

    async def get_hbar_balance(self, account_id: str) -> Dict[str, Any]:
        account = await self.get_account(account_id)
        tinybars = int((account.get("balance") or {}).get("balance") or 0)
        return {
            "accountId": account_id,
            "network": self.network,
            "tinybars": tinybars,
            "hbars": tinybars / TINYBARS_PER_HBAR,
        }

    async def get_token_balances(self, account_id: str, limit: int = 25) -> Dict[str, Any]:
        data = await self._get(f"/accounts/{account_id}/tokens", params={"limit": limit})
        tokens = [
            {
                "tokenId": entry.get("token_id"),
                "balance": entry.get("balance"),
                "decimals": entry.get("decimals"),
            }
            for entry in data.get("tokens", [])
        ]
        return {"accountId": account_id, "network": self.network, "tokens": tokens}
