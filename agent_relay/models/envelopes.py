"""WebSocket envelopes exchanged with the wallet frontend."""

import json
import time
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from agent_relay.exceptions import EnvelopeError, UnrecognizedEnvelopeError

SystemLevel = Literal["info", "error", "warning"]


def now_ms() -> int:
    return int(time.time() * 1000)


class Envelope(BaseModel):
    """Base for every frame; field names are camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = Field(None, description="Optional client-side message identifier")

    def to_wire(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


# ---- Inbound ---------------------------------------------------------------
class ConnectionAuth(Envelope):
    type: Literal["CONNECTION_AUTH"]
    user_account_id: str = Field(..., min_length=1, description="Hedera account id, e.g. 0.0.1234")
    timestamp: Optional[int] = None


class UserMessage(Envelope):
    type: Literal["USER_MESSAGE"]
    message: str = Field(..., description="Free-text request for the agent")
    user_account_id: Optional[str] = Field(
        None, description="When it differs from the bound account the session is switched"
    )
    timestamp: Optional[int] = None


class TransactionResult(Envelope):
    type: Literal["TRANSACTION_RESULT"]
    success: bool
    transaction_id: Optional[str] = None
    status: Optional[str] = None
    error: Optional[str] = None
    timestamp: Optional[int] = None


InboundEnvelope = Annotated[
    Union[ConnectionAuth, UserMessage, TransactionResult],
    Field(discriminator="type"),
]

INBOUND_TYPES = frozenset({"CONNECTION_AUTH", "USER_MESSAGE", "TRANSACTION_RESULT"})

_INBOUND_ADAPTER: TypeAdapter[InboundEnvelope] = TypeAdapter(InboundEnvelope)


def parse_inbound(raw: str | bytes) -> ConnectionAuth | UserMessage | TransactionResult:
    """
    Decode one inbound frame.

    Raises:
        EnvelopeError: the frame is not a JSON object, has no string ``type``,
            or fails validation for its declared type
        UnrecognizedEnvelopeError: the frame is well formed but its ``type``
            is not one the relay handles
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise EnvelopeError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        raise EnvelopeError("Envelope must be a JSON object with a string 'type' field")

    if data["type"] not in INBOUND_TYPES:
        raise UnrecognizedEnvelopeError(data["type"])

    try:
        return _INBOUND_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise EnvelopeError(f"Invalid {data['type']} envelope: {e.error_count()} validation error(s)") from e


# ---- Outbound --------------------------------------------------------------
class OutboundEnvelope(Envelope):
    timestamp: int = Field(default_factory=now_ms, description="Emission time, epoch milliseconds")


class AgentResponse(OutboundEnvelope):
    type: Literal["AGENT_RESPONSE"] = "AGENT_RESPONSE"
    message: str
    has_transaction: bool = False


class TransactionToSign(OutboundEnvelope):
    type: Literal["TRANSACTION_TO_SIGN"] = "TRANSACTION_TO_SIGN"
    transaction_bytes: List[int] = Field(..., description="Unsigned transaction, one int per byte")
    original_query: str

    @classmethod
    def from_bytes(cls, payload: bytes, original_query: str) -> "TransactionToSign":
        return cls(transaction_bytes=list(payload), original_query=original_query)


class SystemMessage(OutboundEnvelope):
    type: Literal["SYSTEM_MESSAGE"] = "SYSTEM_MESSAGE"
    message: str
    level: SystemLevel = "info"


class SwapQuote(OutboundEnvelope):
    type: Literal["SWAP_QUOTE"] = "SWAP_QUOTE"
    quote: Dict[str, Any]
    original_message: str
