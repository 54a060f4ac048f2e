"""Reacts to the external signer's TRANSACTION_RESULT reports."""

from __future__ import annotations

from typing import Optional

from agent_relay.agents.flows import build_follow_up_instruction, build_operation_summary
from agent_relay.infrastructure.logging import LoggerMixin
from agent_relay.models.envelopes import AgentResponse, SystemMessage, TransactionResult
from agent_relay.service.channel import Channel
from agent_relay.service.session_registry import Session
from agent_relay.service.turn_processor import TurnProcessor

NEXT_STEP_ERROR_PREFIX = "❌ Error executing next step"


def success_notice(result: TransactionResult) -> str:
    return (
        "✅ Transaction executed successfully!\n"
        f"ID: {result.transaction_id or 'N/A'}\n"
        f"Status: {result.status or 'N/A'}"
    )


class ConfirmationHandler(LoggerMixin):
    """
    Advances or abandons a session's multi-step flow after a signer report.

    Success with a pending step runs that step as a new agent turn (which may
    store the next one). Success without a step closes the flow with a single
    summary when the last prepared operation has a template. Failure drops the
    pending step and reports the reason.
    """

    def __init__(self, turns: TurnProcessor) -> None:
        self._turns = turns

    async def on_result(
        self, channel: Channel, session: Optional[Session], result: TransactionResult
    ) -> None:
        if not result.success:
            await self._on_failure(channel, session, result)
            return

        await channel.send(SystemMessage(message=success_notice(result), level="info"))
        if session is None:
            return

        step = session.pending.take_and_clear()
        if step is not None:
            self.logger.info("Executing next step %s for %s (%s)", step.step, step.tool, session.account_id)
            instruction = build_follow_up_instruction(step, session.account_id)
            await self._turns.run_instruction(
                channel,
                session,
                instruction,
                original_query=f"Next step: {step.step}",
                error_prefix=NEXT_STEP_ERROR_PREFIX,
            )
            return

        operation = session.last_prepared_operation
        if operation is None:
            return
        session.last_prepared_operation = None
        summary = build_operation_summary(operation)
        if summary is None:
            self.logger.debug(
                "No summary template for %s/%s", operation.protocol, operation.operation
            )
            return
        await channel.send(AgentResponse(message=summary, has_transaction=False))

    async def _on_failure(
        self, channel: Channel, session: Optional[Session], result: TransactionResult
    ) -> None:
        if session is not None and session.pending:
            self.logger.info("Discarding pending step for %s after failed transaction", session.account_id)
            session.pending.discard()
        reason = result.error or result.status or "Unknown error"
        await channel.send(SystemMessage(message=f"❌ Transaction error: {reason}", level="error"))
