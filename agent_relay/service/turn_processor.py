"""One request/response cycle through a session's agent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

from agent_relay.agents.hedera import response_parser as parser
from agent_relay.agents.routing.hints import apply_routing_hints
from agent_relay.infrastructure.logging import LoggerMixin
from agent_relay.models.envelopes import AgentResponse, SwapQuote, SystemMessage, TransactionToSign
from agent_relay.models.flow import OperationContext, PendingStep
from agent_relay.service.channel import Channel
from agent_relay.service.session_registry import Session

T = TypeVar("T")

REQUEST_ERROR_PREFIX = "Error processing your request"
EMPTY_RESPONSE_TEXT = "I couldn't produce a response for that. Please try rephrasing your request."


@dataclass
class TurnArtifacts:
    """Everything a turn can hand back besides its text; each part is optional."""

    text: str = ""
    transaction: Optional[bytes] = None
    next_step: Optional[PendingStep] = None
    quote: Optional[Dict[str, Any]] = None
    operation: Optional[OperationContext] = None


class TurnProcessor(LoggerMixin):
    """
    Runs the agent for one request and emits its envelopes.

    Emission order within a turn is fixed: swap quote, then text, then the
    transaction to sign. Agent or extraction failures become a single error
    notice; the session is left as it was.
    """

    def __init__(self, *, force_clear_memory: bool = False) -> None:
        self.force_clear_memory = force_clear_memory

    async def process(self, channel: Channel, session: Session, text: str) -> bool:
        """Handle a user request. Returns True when a transaction was sent for signing."""
        prompt = apply_routing_hints(text)
        if prompt != text:
            self.logger.info("Routing hint applied for %s", session.account_id)
        return await self.run_instruction(channel, session, prompt, original_query=text)

    async def run_instruction(
        self,
        channel: Channel,
        session: Session,
        instruction: str,
        *,
        original_query: str,
        error_prefix: str = REQUEST_ERROR_PREFIX,
    ) -> bool:
        """Invoke the agent with ``instruction`` as-is and emit the results."""
        try:
            thread_id = session.rotate_thread() if self.force_clear_memory else session.thread_id
            response = await session.agent.ainvoke(thread_id, instruction)
            artifacts = self.extract(response)
        except Exception as e:
            self.logger.exception("Turn failed for %s", session.account_id)
            await channel.send(SystemMessage(message=f"{error_prefix}: {e}", level="error"))
            return False
        return await self.emit(channel, session, artifacts, original_query)

    # ---- extraction --------------------------------------------------------
    def _safe(self, extractor: Callable[[Any], T], response: Any) -> Optional[T]:
        try:
            return extractor(response)
        except Exception:
            self.logger.warning("Extractor %s failed", extractor.__name__, exc_info=True)
            return None

    def extract(self, response: Any) -> TurnArtifacts:
        if not isinstance(response, dict):
            raise TypeError(f"Agent returned {type(response).__name__}, expected a state dict")

        transaction = self._safe(parser.extract_preferred_transaction, response) or self._safe(
            parser.extract_transaction_bytes, response
        )
        return TurnArtifacts(
            text=self._safe(parser.extract_output_text, response) or "",
            transaction=transaction,
            next_step=self._safe(parser.extract_next_step, response),
            quote=self._safe(parser.extract_swap_quote, response),
            operation=self._safe(parser.extract_operation_context, response),
        )

    # ---- emission ----------------------------------------------------------
    async def emit(
        self, channel: Channel, session: Session, artifacts: TurnArtifacts, original_query: str
    ) -> bool:
        text = artifacts.text or EMPTY_RESPONSE_TEXT

        if artifacts.quote is not None:
            await channel.send(SwapQuote(quote=artifacts.quote, original_message=original_query))

        if artifacts.transaction is None:
            await channel.send(AgentResponse(message=text, has_transaction=False))
            return False

        if artifacts.next_step is not None:
            self.logger.info(
                "Storing pending step %s for %s (%s)",
                artifacts.next_step.step,
                artifacts.next_step.tool,
                session.account_id,
            )
            session.pending.set(artifacts.next_step)
        if artifacts.operation is not None:
            session.last_prepared_operation = artifacts.operation

        await channel.send(AgentResponse(message=text, has_transaction=True))
        await channel.send(TransactionToSign.from_bytes(artifacts.transaction, original_query))
        return True
