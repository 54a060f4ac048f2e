import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence

from langchain_core.tools import BaseTool
from langgraph.checkpoint.memory import MemorySaver
from langgraph.prebuilt import create_react_agent

from agent_relay.agents.hedera.prompt import render_system_prompt
from agent_relay.agents.hedera.tools import ToolFactory, get_tools
from agent_relay.integrations.bonzo import BonzoApiClient
from agent_relay.integrations.mirror_node import MirrorNodeClient

logger = logging.getLogger(__name__)


class ConversationalAgent(Protocol):
    """What a session needs from its agent: a fixed tool-set and one async turn."""

    tools: Sequence[BaseTool]

    async def ainvoke(self, thread_id: str, text: str) -> Dict[str, Any]: ...


AgentBuilder = Callable[[str], ConversationalAgent]


class HederaAgent:
    """ReAct agent for one Hedera account, with its own in-memory conversation store."""

    def __init__(self, llm, tools: List[BaseTool], account_id: str, network: str):
        self.llm = llm
        self.tools = tuple(tools)
        self.account_id = account_id
        self.agent = create_react_agent(
            model=llm,
            tools=list(self.tools),
            checkpointer=MemorySaver(),
            prompt=render_system_prompt(account_id, network),
            name="hedera_agent",
        )

    async def ainvoke(self, thread_id: str, text: str) -> Dict[str, Any]:
        return await self.agent.ainvoke(
            {"messages": [{"role": "user", "content": text}]},
            config={"configurable": {"thread_id": thread_id}},
        )


def make_agent_builder(
    llm,
    network: str,
    *,
    bonzo_client: Optional[BonzoApiClient] = None,
    mirror_client: Optional[MirrorNodeClient] = None,
    extra_factories: Iterable[ToolFactory] = (),
) -> AgentBuilder:
    """Return ``account_id -> HederaAgent``; each call builds a fresh tool-set and agent."""

    factories = tuple(extra_factories)

    def build(account_id: str) -> HederaAgent:
        tools = get_tools(
            account_id,
            bonzo_client=bonzo_client,
            mirror_client=mirror_client,
            extra_factories=factories,
        )
        logger.info("Built agent for %s with %d tools on %s", account_id, len(tools), network)
        return HederaAgent(llm, tools, account_id, network)

    return build
