from .agent import AgentBuilder, ConversationalAgent, HederaAgent, make_agent_builder
from .tools import BONZO_API_QUERY_TOOL, get_tools

__all__ = [
    "AgentBuilder",
    "ConversationalAgent",
    "HederaAgent",
    "make_agent_builder",
    "BONZO_API_QUERY_TOOL",
    "get_tools",
]
