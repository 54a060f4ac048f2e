"""
Follow-up instructions for multi-step transaction flows.

When the signer confirms a transaction and the session holds a pending step,
the relay has no user phrasing to replay. It rebuilds an agent instruction
from the step's tool family, stage tag and carried parameters using the
table below. New tool families are new table entries.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Tuple

from agent_relay.models.flow import PendingStep

FollowUpBuilder = Callable[[Dict[str, Any], str], str]

BONZO_DEPOSIT_TOOL = "bonzo_deposit_tool"
INFINITY_POOL_TOOL = "saucerswap_infinity_pool_tool"


def _amount(params: Dict[str, Any], *keys: str, default: Any = 0) -> Any:
    for key in keys:
        value = params.get(key)
        if value not in (None, ""):
            return value
    return default


def _bonzo_token(params: Dict[str, Any]) -> str:
    return str(params.get("token") or "hbar")


def _bonzo_approval(params: Dict[str, Any], account_id: str) -> str:
    token = _bonzo_token(params)
    amount = _amount(params, "amount", "hbarAmount")
    return (
        f"Use bonzo_approve_step_tool to approve {amount} {token.upper()} for Bonzo Finance "
        f'LendingPool with token "{token}", amount {amount}, userAccountId "{account_id}"'
    )


def _bonzo_deposit(params: Dict[str, Any], account_id: str) -> str:
    token = _bonzo_token(params)
    amount = _amount(params, "amount", "hbarAmount")
    referral = params.get("referralCode") or 0
    return (
        f"Use bonzo_deposit_step_tool to deposit {amount} {token.upper()} for account {account_id} "
        f'with token "{token}", amount {amount}, and referral code {referral}'
    )


def _infinity_pool_approval(params: Dict[str, Any], account_id: str) -> str:
    sauce_amount = _amount(params, "sauceAmount", default=100)
    return (
        "Execute SAUCE approval for staking: Use saucerswap_infinity_pool_tool with operation "
        f'"approve_sauce", sauceAmount {sauce_amount}, userAccountId "{account_id}", '
        "originalParams as provided in the flow context"
    )


def _infinity_pool_stake(params: Dict[str, Any], account_id: str) -> str:
    sauce_amount = _amount(params, "sauceAmount", default=None)
    return (
        f"Use saucerswap_infinity_pool_step_tool to stake {sauce_amount} SAUCE for account "
        f"{account_id} with originalParams {json.dumps(params, sort_keys=True, default=str)}"
    )


FOLLOW_UP_INSTRUCTIONS: Dict[Tuple[str, str], FollowUpBuilder] = {
    (BONZO_DEPOSIT_TOOL, "approval"): _bonzo_approval,
    (BONZO_DEPOSIT_TOOL, "deposit"): _bonzo_deposit,
    (INFINITY_POOL_TOOL, "approval"): _infinity_pool_approval,
    (INFINITY_POOL_TOOL, "stake"): _infinity_pool_stake,
}


def _generic_instruction(step: PendingStep, account_id: str) -> str:
    instruction = f"Execute {step.step} step for {step.tool}"
    if step.original_params:
        params = json.dumps(step.original_params, sort_keys=True, default=str)
        instruction += f' with originalParams {params} and userAccountId "{account_id}"'
    return instruction


def build_follow_up_instruction(step: PendingStep, account_id: str) -> str:
    """Return the agent instruction that carries out ``step`` for ``account_id``."""
    builder = FOLLOW_UP_INSTRUCTIONS.get((step.tool, step.step))
    if builder is None:
        instruction = _generic_instruction(step, account_id)
    else:
        instruction = builder(step.original_params, account_id)

    if step.next_step_instructions:
        instruction += f"\n\nAdditional instructions: {step.next_step_instructions}"
    return instruction
