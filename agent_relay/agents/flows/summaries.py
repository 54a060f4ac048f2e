"""Terminal confirmation messages keyed by (protocol, operation)."""

from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple

from agent_relay.models.flow import OperationContext

SummaryTemplate = Callable[[OperationContext], str]

SUMMARY_HEADER = "# ✅ Operation completed"


def _label(ctx: OperationContext, prefix: str, suffix: str = "") -> str:
    return f"{prefix}{ctx.amount_label}{suffix}" if ctx.amount_label else ""


def _associated(ctx: OperationContext) -> str:
    ids = f": {', '.join(ctx.token_ids)}" if ctx.token_ids else ""
    return f"✅ Tokens associated successfully{ids}."


def _sauce_approved(ctx: OperationContext) -> str:
    return f"✅ SAUCE approval confirmed{_label(ctx, ' (', ')')}."


def _sauce_staked(ctx: OperationContext) -> str:
    return f"✅ Staking completed{_label(ctx, ': ', ' staked into Infinity Pool')}."


def _xsauce_unstaked(ctx: OperationContext) -> str:
    return "✅ Unstaking completed."


def _bonzo_approved(ctx: OperationContext) -> str:
    return f"✅ Bonzo Finance spending approval confirmed{_label(ctx, ' (', ')')}."


def _bonzo_deposited(ctx: OperationContext) -> str:
    return f"✅ Deposit completed{_label(ctx, ': ', ' supplied to Bonzo Finance')}."


SUMMARY_TEMPLATES: Dict[Tuple[str, str], SummaryTemplate] = {
    ("saucerswap", "associate_tokens"): _associated,
    ("saucerswap", "approve_sauce"): _sauce_approved,
    ("saucerswap", "stake_sauce"): _sauce_staked,
    ("saucerswap", "unstake_xsauce"): _xsauce_unstaked,
    ("bonzo", "associate_tokens"): _associated,
    ("bonzo", "approve"): _bonzo_approved,
    ("bonzo", "deposit"): _bonzo_deposited,
}


def build_operation_summary(ctx: OperationContext) -> Optional[str]:
    """Markdown completion message for ``ctx``, or None when no template matches."""
    template = SUMMARY_TEMPLATES.get((ctx.protocol or "", ctx.operation or ""))
    if template is None:
        return None
    return f"{SUMMARY_HEADER}\n\n{template(ctx)}"
