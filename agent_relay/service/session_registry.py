"""
Channel-to-session registry.

A session binds one connection to one Hedera account together with the
agent, tool-set and conversation thread built for that account. The registry
is the only structure shared across connections; everything a session holds
is built for it alone.
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from langchain_core.tools import BaseTool

from agent_relay.agents.hedera.agent import AgentBuilder, ConversationalAgent
from agent_relay.exceptions import RelayError
from agent_relay.infrastructure.logging import LoggerMixin
from agent_relay.models.flow import OperationContext
from agent_relay.service.channel import Channel
from agent_relay.service.pending_step import PendingStepSlot


def new_thread_id(account_id: str) -> str:
    return f"user-{account_id}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


@dataclass
class Session:
    account_id: str
    agent: ConversationalAgent
    thread_id: str
    pending: PendingStepSlot = field(default_factory=PendingStepSlot)
    last_prepared_operation: Optional[OperationContext] = None

    @property
    def tools(self) -> Sequence[BaseTool]:
        return self.agent.tools

    def rotate_thread(self) -> str:
        """Start a fresh conversation thread; earlier turns are no longer visible to the agent."""
        self.thread_id = new_thread_id(self.account_id)
        return self.thread_id

    def reset(self) -> None:
        self.pending.discard()
        self.last_prepared_operation = None


class SessionRegistry(LoggerMixin):
    """Maps channel ids to sessions. At most one session per channel."""

    def __init__(self, agent_builder: AgentBuilder) -> None:
        self._agent_builder = agent_builder
        self._sessions: Dict[str, Session] = {}

    def authenticate(self, channel: Channel, account_id: str) -> Session:
        """
        Bind ``account_id`` to ``channel``.

        Re-authenticating with the bound account returns the existing session.
        A different account retires the current session before the new one is
        built. Builder failures propagate and leave the channel unbound.
        """
        if channel.closed:
            raise RelayError("Channel is closed")

        current = self._sessions.get(channel.id)
        if current is not None:
            if current.account_id == account_id:
                return current
            self.logger.info(
                "Switching channel %s from %s to %s", channel.id, current.account_id, account_id
            )
            self.teardown(channel)

        agent = self._agent_builder(account_id)
        session = Session(account_id=account_id, agent=agent, thread_id=new_thread_id(account_id))
        self._sessions[channel.id] = session
        self.logger.info(
            "Session created for %s on channel %s (thread %s, %d active)",
            account_id,
            channel.id,
            session.thread_id,
            len(self._sessions),
        )
        return session

    def lookup(self, channel: Channel) -> Optional[Session]:
        return self._sessions.get(channel.id)

    def teardown(self, channel: Channel) -> None:
        session = self._sessions.pop(channel.id, None)
        if session is None:
            return
        session.reset()
        self.logger.info(
            "Session for %s on channel %s torn down (%d active)",
            session.account_id,
            channel.id,
            len(self._sessions),
        )

    def count(self) -> int:
        return len(self._sessions)
