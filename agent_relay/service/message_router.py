"""Dispatches inbound envelopes to the auth, turn and confirmation handlers."""

from __future__ import annotations

from agent_relay.exceptions import (
    AuthenticationRequiredError,
    EnvelopeError,
    UnrecognizedEnvelopeError,
)
from agent_relay.infrastructure.logging import LoggerMixin
from agent_relay.models.envelopes import (
    ConnectionAuth,
    SystemMessage,
    TransactionResult,
    UserMessage,
    parse_inbound,
)
from agent_relay.service.channel import Channel
from agent_relay.service.confirmation_handler import ConfirmationHandler
from agent_relay.service.session_registry import Session, SessionRegistry
from agent_relay.service.turn_processor import TurnProcessor

INVALID_FORMAT_MESSAGE = "Error processing message. Invalid format."


def auth_success_notice(account_id: str) -> str:
    return f"✅ Authenticated successfully with account {account_id}. You can now start asking questions!"


class MessageRouter(LoggerMixin):
    """Routes each inbound frame of a channel to exactly one handler, one at a time."""

    def __init__(
        self,
        registry: SessionRegistry,
        turns: TurnProcessor,
        confirmations: ConfirmationHandler,
    ) -> None:
        self.registry = registry
        self.turns = turns
        self.confirmations = confirmations

    async def dispatch(self, channel: Channel, raw: str | bytes) -> None:
        async with channel.lock:
            if channel.closed:
                return
            try:
                envelope = parse_inbound(raw)
            except UnrecognizedEnvelopeError as e:
                self.logger.warning("Unknown message type %r on channel %s, dropped", e.envelope_type, channel.id)
                return
            except EnvelopeError as e:
                self.logger.warning("Malformed envelope on channel %s: %s", channel.id, e)
                await channel.send(SystemMessage(message=INVALID_FORMAT_MESSAGE, level="error"))
                return

            if isinstance(envelope, ConnectionAuth):
                await self.handle_auth(channel, envelope.user_account_id)
            elif isinstance(envelope, UserMessage):
                await self.handle_user_message(channel, envelope)
            elif isinstance(envelope, TransactionResult):
                await self.confirmations.on_result(channel, self.registry.lookup(channel), envelope)

    # ---- handlers ----------------------------------------------------------
    async def handle_auth(self, channel: Channel, account_id: str) -> Session | None:
        try:
            session = self.registry.authenticate(channel, account_id)
        except Exception as e:
            self.logger.exception("Authentication failed for %s", account_id)
            await channel.send(SystemMessage(message=f"Authentication failed: {e}", level="error"))
            return None
        await channel.send(SystemMessage(message=auth_success_notice(account_id), level="info"))
        return session

    async def handle_user_message(self, channel: Channel, envelope: UserMessage) -> None:
        session = self.registry.lookup(channel)
        if session is None:
            await channel.send(SystemMessage(message=str(AuthenticationRequiredError()), level="error"))
            return

        requested = envelope.user_account_id
        if requested and requested != session.account_id:
            try:
                session = self.registry.authenticate(channel, requested)
            except Exception as e:
                self.logger.exception("Account switch to %s failed", requested)
                await channel.send(SystemMessage(message=f"Authentication failed: {e}", level="error"))
                return
            await channel.send(SystemMessage(message=f"Switched to account {requested}", level="info"))

        await self.turns.process(channel, session, envelope.message)
