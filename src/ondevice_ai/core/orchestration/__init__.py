from .agent import FINAL_ANSWER, Agent, AgentConfig, ParsedAction, parse_agent_response
from .executor import ChainExecutor
from .session import Session

__all__ = [
    "FINAL_ANSWER",
    "Agent",
    "AgentConfig",
    "ChainExecutor",
    "ParsedAction",
    "Session",
    "parse_agent_response",
]
