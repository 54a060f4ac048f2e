"""
Pre-LLM intent routing hints via compiled regex patterns.

Some requests are lexically close to a different tool family ("buy SAUCE at
0.04 USDC" reads like a swap but is a limit order). Before the agent runs,
matching messages get an instruction prefix that pins the tool to use and
forbids the look-alike family. Pure text transforms, no side effects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple


@dataclass(frozen=True)
class RoutingRule:
    """Prefix ``hint`` to messages matching any of ``patterns``."""

    name: str
    patterns: Tuple[Pattern[str], ...]
    hint: str

    def matches(self, text: str) -> bool:
        return any(p.search(text) for p in self.patterns)


# ---------------------------------------------------------------------------
# Compiled patterns (module-level for zero per-call overhead)
# ---------------------------------------------------------------------------

# "target price", "when price", "al precio" (English/Spanish)
_PRICE_WORDS = re.compile(
    r"(target\s*price|precio\s*objetivo|precio\s*meta|when\s+(?:the\s+)?price|"
    r"cuando\s+el\s+precio|al\s+precio)",
    re.IGNORECASE,
)

# Quote-currency mentions count only next to a price or trigger cue:
# "price hits 0.1 USDC", "USDC price 0.05", "cuando USDC llegue a 1".
_CURRENCY_WITH_CUE = re.compile(
    r"((?:\bprice\b|\bprecio\b|\btrigger\b)[^.?!]*(?:\$|\busdc?\b|\budc\b)|"
    r"(?:\$|\busdc?\b|\budc\b)[^.?!]*(?:\bprice\b|\bprecio\b|\btrigger\b|\bllegue\b|\breaches\b|\bhits\b))",
    re.IGNORECASE,
)

# "limit order", "orden límite", "programar orden", "set limit"
_ORDER_WORDS = re.compile(
    r"(limit\s*order|orden\s*l[ií]mite|program(?:ar)?\s*orden|set\s*limit)",
    re.IGNORECASE,
)

# "at 0.04", "at $1", "a 0.5" (Spanish "a <price>")
_AT_PRICE = re.compile(r"(\bat\s+\$?\d|\ba\s+\$?\d)", re.IGNORECASE)

LIMIT_ORDER_HINT = (
    "CRITICAL: This is a LIMIT ORDER request. Do NOT use swap quote or swap execution tools. "
    'Use ONLY autoswap_limit_tool with operation "create_swap_order". If any parameter is missing '
    "(tokenOut, amountIn, minAmountOut, triggerPrice), ask briefly for the missing piece or use "
    'minimal safe defaults (minAmountOut="1"). Then return a single transaction for signing if needed.'
)

LIMIT_ORDER_RULE = RoutingRule(
    name="limit_order",
    patterns=(_PRICE_WORDS, _CURRENCY_WITH_CUE, _ORDER_WORDS, _AT_PRICE),
    hint=LIMIT_ORDER_HINT,
)

# First matching rule wins.
ROUTING_RULES: Tuple[RoutingRule, ...] = (LIMIT_ORDER_RULE,)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def match_routing_rule(text: str) -> Optional[RoutingRule]:
    for rule in ROUTING_RULES:
        if rule.matches(text):
            return rule
    return None


def apply_routing_hints(text: str) -> str:
    """Return ``text`` with the first matching rule's hint prepended, else unchanged."""
    original = text or ""
    rule = match_routing_rule(original)
    if rule is None:
        return original
    return f"{rule.hint}\n\nUser: {original}"
