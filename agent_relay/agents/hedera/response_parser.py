"""
Artifact extraction from a langgraph agent response.

The agent returns its state dict; ``state["messages"]`` holds the whole thread
(the checkpointer replays earlier turns), so every extractor only looks at the
messages after the last human message. Tools report their results as JSON in
``ToolMessage.content``; the relevant keys are:

  - ``bytes`` / ``transactionBytes`` (optionally nested under ``raw``)
  - ``preparedTransactions``: list of ``{step|operation|type, bytes}``
  - ``nextStep`` / ``next_step``: a pending continuation
  - ``operationContext`` / ``operation_context``
  - ``type == "SWAP_QUOTE"`` or a ``quote`` object with input/output

Every function is pure and returns None when its artifact is absent or
unreadable; callers decide what a missing artifact means.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolMessage
from pydantic import ValidationError

from agent_relay.models.flow import OperationContext, PendingStep

logger = logging.getLogger(__name__)

_BYTES_KEYS = ("bytes", "transactionBytes", "transaction_bytes")

# Lower rank is preferred when a turn prepared several transactions.
_KIND_RANK = {"association": 0, "approval": 1, "other": 2}


# ---------------------------------------------------------------------------
# Message helpers
# ---------------------------------------------------------------------------

def current_turn_messages(response: Any) -> List[BaseMessage]:
    """Messages produced after the last human message of ``response``."""
    if not isinstance(response, dict):
        return []
    messages = response.get("messages") or []
    last_human = -1
    for idx, msg in enumerate(messages):
        if isinstance(msg, HumanMessage):
            last_human = idx
    return list(messages[last_human + 1 :])


def _content_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    if content is None:
        return ""
    return json.dumps(content, default=str)


def extract_output_text(response: Any) -> str:
    """Text of the final AI message of the turn, '' when the agent said nothing."""
    for msg in reversed(current_turn_messages(response)):
        if isinstance(msg, AIMessage):
            text = _content_text(msg.content).strip()
            if text:
                return text
    return ""


def _parse_json(content: Any) -> Any:
    if isinstance(content, (dict, list)):
        return content
    text = _content_text(content).strip()
    if not text or text[0] not in "{[":
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def tool_payloads(response: Any) -> List[Dict[str, Any]]:
    """JSON objects reported by this turn's tool calls, in call order.

    A nested ``raw`` object is yielded right after its parent so keys tools
    bury there are found too.
    """
    payloads: List[Dict[str, Any]] = []
    for msg in current_turn_messages(response):
        if not isinstance(msg, ToolMessage):
            continue
        data = _parse_json(msg.content)
        if not isinstance(data, dict):
            continue
        payloads.append(data)
        raw = data.get("raw")
        if isinstance(raw, dict):
            payloads.append(raw)
    return payloads


# ---------------------------------------------------------------------------
# Transaction bytes
# ---------------------------------------------------------------------------

def coerce_transaction_bytes(value: Any) -> Optional[bytes]:
    """
    Normalise the encodings tools use for transaction bytes.

    Accepts raw bytes, a list of ints, a serialised Node Buffer
    (``{"type": "Buffer", "data": [...]}``), a hex string (``0x`` optional)
    or base64. Returns None for anything else or for an empty payload.
    """
    result: Optional[bytes] = None
    if isinstance(value, (bytes, bytearray)):
        result = bytes(value)
    elif isinstance(value, list):
        try:
            result = bytes(value)
        except (TypeError, ValueError):
            return None
    elif isinstance(value, dict) and isinstance(value.get("data"), list):
        return coerce_transaction_bytes(value["data"])
    elif isinstance(value, str):
        text = value.strip()
        if text.startswith(("0x", "0X")):
            text = text[2:]
        try:
            result = bytes.fromhex(text)
        except ValueError:
            try:
                result = base64.b64decode(value.strip(), validate=True)
            except (binascii.Error, ValueError):
                return None
    return result or None


def _bytes_in(payload: Dict[str, Any]) -> Optional[bytes]:
    for key in _BYTES_KEYS:
        if key in payload:
            found = coerce_transaction_bytes(payload[key])
            if found is not None:
                return found
    return None


def _classify(entry: Dict[str, Any]) -> str:
    label = " ".join(
        str(entry.get(key, "")) for key in ("step", "operation", "type")
    ).lower()
    if "associat" in label:
        return "association"
    if "approv" in label:
        return "approval"
    return "other"


def extract_prepared_transactions(response: Any) -> List[Tuple[str, bytes]]:
    """All ``(kind, bytes)`` candidates of the turn, kind in association/approval/other."""
    candidates: List[Tuple[str, bytes]] = []
    for payload in tool_payloads(response):
        prepared = payload.get("preparedTransactions")
        if isinstance(prepared, list):
            for entry in prepared:
                if not isinstance(entry, dict):
                    continue
                found = _bytes_in(entry)
                if found is not None:
                    candidates.append((_classify(entry), found))
        found = _bytes_in(payload)
        if found is not None:
            candidates.append((_classify(payload), found))
    return candidates


def extract_transaction_bytes(response: Any) -> Optional[bytes]:
    """Bytes of the most recently prepared transaction of the turn."""
    candidates = extract_prepared_transactions(response)
    if not candidates:
        return None
    return candidates[-1][1]


def extract_preferred_transaction(response: Any) -> Optional[bytes]:
    """
    When a turn prepared more than one transaction, pick the one the signer
    must see first: token association, then approval, then anything else.
    Returns None when there is at most one candidate.
    """
    candidates = extract_prepared_transactions(response)
    if len(candidates) < 2:
        return None
    # min() is stable, so ties keep call order.
    return min(candidates, key=lambda c: _KIND_RANK[c[0]])[1]


# ---------------------------------------------------------------------------
# Flow artifacts
# ---------------------------------------------------------------------------

def _last_value(payloads: Sequence[Dict[str, Any]], keys: Sequence[str]) -> Iterator[Any]:
    for payload in reversed(payloads):
        for key in keys:
            value = payload.get(key)
            if value:
                yield value


def extract_next_step(response: Any) -> Optional[PendingStep]:
    """The latest valid continuation announced by the turn's tools."""
    for value in _last_value(tool_payloads(response), ("nextStep", "next_step")):
        if not isinstance(value, dict):
            continue
        try:
            return PendingStep.model_validate(value)
        except ValidationError as e:
            logger.warning("Ignoring malformed nextStep payload: %s", e.error_count())
    return None


def extract_swap_quote(response: Any) -> Optional[Dict[str, Any]]:
    for payload in reversed(tool_payloads(response)):
        if payload.get("type") == "SWAP_QUOTE":
            quote = payload.get("quote")
            return quote if isinstance(quote, dict) else payload
        quote = payload.get("quote")
        if isinstance(quote, dict) and "input" in quote and "output" in quote:
            return quote
    return None


def extract_operation_context(response: Any) -> Optional[OperationContext]:
    for value in _last_value(tool_payloads(response), ("operationContext", "operation_context")):
        if not isinstance(value, dict):
            continue
        try:
            return OperationContext.model_validate(value)
        except ValidationError as e:
            logger.warning("Ignoring malformed operationContext payload: %s", e.error_count())
    return None
