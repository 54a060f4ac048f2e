"""Per-session LangChain tools bound to one Hedera account."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional

from langchain_core.tools import BaseTool, tool
from pydantic import BaseModel, Field

from agent_relay.integrations.bonzo import BonzoApiClient, BonzoApiError
from agent_relay.integrations.bonzo.config import DOCS_URL
from agent_relay.integrations.mirror_node import MirrorNodeClient, MirrorNodeError

logger = logging.getLogger(__name__)

BONZO_API_QUERY_TOOL = "bonzo_api_query"

BonzoOperation = Literal[
    "account_dashboard",
    "market_info",
    "pool_stats",
    "protocol_info",
    "bonzo_token",
    "bonzo_circulation",
]

# Extra tool families (transaction builders) are plugged in by the caller.
ToolFactory = Callable[[str], Iterable[BaseTool]]


# ---------- Input schemas ----------
class BonzoApiQueryInput(BaseModel):
    operation: BonzoOperation = Field(
        ...,
        description=(
            "The Bonzo API operation to perform: account_dashboard, market_info, pool_stats, "
            "protocol_info, bonzo_token, or bonzo_circulation"
        ),
    )
    accountId: Optional[str] = Field(
        default=None,
        description=(
            "Hedera account ID in format shard.realm.num (only used by account_dashboard; "
            "defaults to the connected account)"
        ),
    )


class AccountQueryInput(BaseModel):
    accountId: Optional[str] = Field(
        default=None,
        description="Hedera account ID in format shard.realm.num; defaults to the connected account",
    )


def _error_payload(operation: str, message: str, suggestion: str) -> Dict[str, Any]:
    return {
        "error": message,
        "operation": operation,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "suggestion": suggestion,
    }


# ---------- Tool builders ----------
def build_bonzo_tool(account_id: str, client: BonzoApiClient) -> BaseTool:
    @tool(BONZO_API_QUERY_TOOL, args_schema=BonzoApiQueryInput)
    async def bonzo_api_query(operation: str, accountId: Optional[str] = None) -> Dict[str, Any]:
        """Query the Bonzo Finance lending protocol REST API for market data, protocol
        statistics, BONZO token information or an account's lending dashboard.
        The API only serves MAINNET data, even for testnet accounts."""

        target = accountId or account_id
        try:
            return await client.query(operation, target if operation == "account_dashboard" else None)
        except ValueError as e:
            return _error_payload(
                operation, str(e), 'Provide a Hedera account ID in format shard.realm.num (e.g., "0.0.123456")'
            )
        except BonzoApiError as e:
            logger.warning("Bonzo API query %s failed: %s", operation, e)
            payload = _error_payload(
                operation,
                f"Error querying Bonzo Finance API: {e}",
                "The API may be rate limiting requests. Try waiting a few seconds between requests.",
            )
            payload["api_documentation"] = DOCS_URL
            return payload

    return bonzo_api_query


def build_account_tools(account_id: str, client: MirrorNodeClient) -> List[BaseTool]:
    @tool("get_hbar_balance", args_schema=AccountQueryInput)
    async def get_hbar_balance(accountId: Optional[str] = None) -> Dict[str, Any]:
        """Return the HBAR balance of a Hedera account (the connected one by default)."""

        target = accountId or account_id
        try:
            return await client.get_hbar_balance(target)
        except MirrorNodeError as e:
            return _error_payload("get_hbar_balance", str(e), "Check the account id and the network.")

    @tool("get_token_balances", args_schema=AccountQueryInput)
    async def get_token_balances(accountId: Optional[str] = None) -> Dict[str, Any]:
        """List the HTS token balances held by a Hedera account (the connected one by default)."""

        target = accountId or account_id
        try:
            return await client.get_token_balances(target)
        except MirrorNodeError as e:
            return _error_payload("get_token_balances", str(e), "Check the account id and the network.")

    return [get_hbar_balance, get_token_balances]


def get_tools(
    account_id: str,
    *,
    bonzo_client: Optional[BonzoApiClient] = None,
    mirror_client: Optional[MirrorNodeClient] = None,
    extra_factories: Iterable[ToolFactory] = (),
) -> List[BaseTool]:
    """Build the tool-set for one session. The list is never mutated afterwards."""

    tools: List[BaseTool] = []
    if mirror_client is not None:
        tools.extend(build_account_tools(account_id, mirror_client))
    if bonzo_client is not None:
        tools.append(build_bonzo_tool(account_id, bonzo_client))
    for factory in extra_factories:
        tools.extend(factory(account_id))
    return tools
