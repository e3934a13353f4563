from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import NamedTuple, Sequence

from ondevice_ai.core.chains.base import Chain
from ondevice_ai.core.errors import AgentActionUnresolved, ValidationError
from ondevice_ai.core.logging.context import log_context
from ondevice_ai.core.memory.base import Memory, format_history
from ondevice_ai.core.models.base import LanguageModel
from ondevice_ai.core.schemas import AgentResult, AgentStep, ChainInput, ChainOutput, GenerationConfig
from ondevice_ai.core.tools.base import Tool
from ondevice_ai.core.tools.registry import ToolRegistry

logger = logging.getLogger("ondevice_ai.agent")

FINAL_ANSWER = "FINAL_ANSWER"
DEFAULT_AGENT_PROMPT = "You are a helpful on-device AI assistant."


@dataclass(frozen=True)
class AgentConfig:
    max_steps: int = 3
    tools: Sequence[Tool] = field(default_factory=tuple)
    chains: Sequence[Chain] = field(default_factory=tuple)
    system_prompt: str | None = None


class ParsedAction(NamedTuple):
    thought: str
    action: str
    input: str

    @property
    def is_final(self) -> bool:
        return self.action == FINAL_ANSWER


def _normalize_action(action: str) -> str:
    if action.strip().upper().replace(" ", "_") == FINAL_ANSWER:
        return FINAL_ANSWER
    return action.strip()


def parse_agent_response(text: str) -> ParsedAction:
    """Read ``Thought:``/``Action:``/``Input:`` lines from a model response.

    Without an ``Action:`` line the response is a final answer, and without an
    ``Input:`` line the whole response text is the input.
    """
    thought = ""
    action = FINAL_ANSWER
    action_input = text.strip()
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("Thought:"):
            thought = stripped[len("Thought:") :].strip()
        elif stripped.startswith("Action:"):
            action = _normalize_action(stripped[len("Action:") :])
        elif stripped.startswith("Input:"):
            action_input = stripped[len("Input:") :].strip()
    return ParsedAction(thought=thought, action=action, input=action_input)


class Agent:
    """Bounded Thought/Action/Input loop over a set of tools and chains.

    Each ``run`` keeps its own scratchpad, so concurrent runs on one agent do
    not see each other's steps. Tool and chain failures become observations;
    model failures propagate.
    """

    def __init__(self, model: LanguageModel, config: AgentConfig | None = None, memory: Memory | None = None) -> None:
        self.model = model
        self.config = config or AgentConfig()
        if self.config.max_steps < 1:
            raise ValidationError("max_steps must be at least 1")
        self.memory = memory
        self.tools = ToolRegistry()
        for tool in self.config.tools:
            self.tools.register(tool)
        self.chains: dict[str, Chain] = {chain.name: chain for chain in self.config.chains}

    def describe_chains(self) -> str:
        return "\n".join(f"- {name}: on-device AI chain" for name in self.chains)

    def build_prompt(self, query: str, memory_context: str, scratchpad: str) -> str:
        parts = [
            self.config.system_prompt or DEFAULT_AGENT_PROMPT,
            f"\nAvailable tools:\n{self.tools.describe()}",
            f"\nAvailable chains:\n{self.describe_chains()}",
        ]
        if memory_context:
            parts.append(f"\nConversation context:\n{memory_context}")
        parts.append(f"\nUser query: {query}")
        if scratchpad:
            parts.append(f"\n{scratchpad}")
        parts.append("\nRespond in this format:")
        parts.append("Thought: <your reasoning>")
        parts.append(f"Action: <tool_id or chain_name or {FINAL_ANSWER}>")
        parts.append("Input: <input to the action>")
        return "\n".join(parts) + "\n"

    async def observe(self, parsed: ParsedAction) -> str:
        tool = self.tools.get(parsed.action)
        chain = self.chains.get(parsed.action)
        try:
            if tool is not None:
                return await tool.execute({"query": parsed.input})
            if chain is not None:
                return (await chain.invoke(ChainInput(text=parsed.input))).text
            raise AgentActionUnresolved(parsed.action)
        except AgentActionUnresolved as exc:
            return str(exc)
        except Exception as exc:
            logger.warning(
                "agent_action_failed",
                extra={"extra_fields": {"action": parsed.action, "error_type": exc.__class__.__name__, "error": str(exc)}},
            )
            return f"Error: {exc}"

    async def run(self, query: str) -> AgentResult:
        run_id = uuid.uuid4().hex
        with log_context(run_id=run_id):
            input = ChainInput(text=query)
            memory_context = ""
            if self.memory is not None:
                memory_context = format_history(await self.memory.load(input))

            steps: list[AgentStep] = []
            scratchpad = ""
            for index in range(self.config.max_steps):
                prompt = self.build_prompt(query, memory_context, scratchpad)
                response = await self.model.generate(prompt, GenerationConfig.CONVERSATIONAL)
                parsed = parse_agent_response(response.text)

                if parsed.is_final:
                    steps.append(AgentStep(thought=parsed.thought, action=FINAL_ANSWER, input=parsed.input))
                    if self.memory is not None:
                        await self.memory.save(input, ChainOutput(text=parsed.input, raw=response.text))
                    logger.info(
                        "agent_finished",
                        extra={"extra_fields": {"total_steps": index + 1, "completed": True}},
                    )
                    return AgentResult(answer=parsed.input, steps=tuple(steps), total_steps=index + 1)

                observation = await self.observe(parsed)
                steps.append(
                    AgentStep(thought=parsed.thought, action=parsed.action, input=parsed.input, observation=observation)
                )
                logger.info(
                    "agent_step",
                    extra={"extra_fields": {"step": index + 1, "action": parsed.action}},
                )
                scratchpad += (
                    f"Thought: {parsed.thought}\nAction: {parsed.action}\n"
                    f"Input: {parsed.input}\nObservation: {observation}\n\n"
                )

            answer = steps[-1].observation if steps and steps[-1].observation is not None else None
            if answer is None:
                answer = f"Could not determine answer within {self.config.max_steps} steps."
            logger.info(
                "agent_finished",
                extra={"extra_fields": {"total_steps": self.config.max_steps, "completed": False}},
            )
            return AgentResult(answer=answer, steps=tuple(steps), total_steps=self.config.max_steps)
