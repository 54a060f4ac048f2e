import json
from typing import Any, Dict, List

import pytest
from langchain_core.messages import AIMessage, HumanMessage, ToolMessage

from agent_relay.service.channel import Channel


class _NullSocket:
    async def send_text(self, data: str) -> None:
        return None


class RecordingChannel(Channel):
    """Channel keeping every sent envelope in memory."""

    def __init__(self, channel_id: str | None = None) -> None:
        super().__init__(_NullSocket(), channel_id)
        self.sent: List[Any] = []

    async def send(self, envelope) -> bool:
        if self.closed:
            return False
        self.sent.append(envelope)
        return True

    def types(self) -> List[str]:
        return [e.type for e in self.sent]


class ScriptedAgent:
    """Agent double: returns queued responses (or raises queued exceptions) in order."""

    def __init__(self, account_id: str = "0.0.1", responses=None) -> None:
        self.account_id = account_id
        self.tools = ()
        self.responses = list(responses or [])
        self.calls: List[Dict[str, str]] = []

    def queue(self, *responses) -> "ScriptedAgent":
        self.responses.extend(responses)
        return self

    async def ainvoke(self, thread_id: str, text: str) -> Dict[str, Any]:
        self.calls.append({"thread_id": thread_id, "text": text})
        response = self.responses.pop(0) if self.responses else make_state("ok")
        if isinstance(response, BaseException):
            raise response
        return response


def make_state(text: str, *tool_results: Dict[str, Any], history: int = 0) -> Dict[str, Any]:
    """Build a langgraph-style state: optional earlier turns, then this turn's tool output and answer."""
    messages: List[Any] = []
    for i in range(history):
        messages.append(HumanMessage(content=f"earlier question {i}"))
        messages.append(ToolMessage(content=json.dumps({"bytes": [9, 9, 9]}), tool_call_id=f"old-{i}"))
        messages.append(AIMessage(content=f"earlier answer {i}"))
    messages.append(HumanMessage(content="current question"))
    for i, result in enumerate(tool_results):
        messages.append(ToolMessage(content=json.dumps(result), tool_call_id=f"call-{i}"))
    messages.append(AIMessage(content=text))
    return {"messages": messages}


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel("chan-1")


@pytest.fixture
def agents() -> Dict[str, ScriptedAgent]:
    return {}


@pytest.fixture
def agent_builder(agents):
    """Builder returning a pre-seeded agent for an account once, else a fresh ScriptedAgent."""

    built: List[ScriptedAgent] = []

    def build(account_id: str) -> ScriptedAgent:
        agent = agents.pop(account_id, None) or ScriptedAgent(account_id)
        built.append(agent)
        return agent

    build.built = built
    return build


@pytest.fixture
def state():
    return make_state


@pytest.fixture
def scripted_agent():
    return ScriptedAgent


@pytest.fixture
def channel_factory():
    return RecordingChannel
