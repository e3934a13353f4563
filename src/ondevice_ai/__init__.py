from ondevice_ai.client import OnDeviceAI
from ondevice_ai.core.chains import (
    BranchResult,
    Chain,
    ChatChain,
    ClassifyChain,
    ConditionalChain,
    ExtractChain,
    FunctionChain,
    ModelChain,
    ParallelChain,
    ParallelPolicy,
    ProofreadChain,
    RewriteChain,
    RewriteStyle,
    SequentialChain,
    SummarizeChain,
    TranslateChain,
)
from ondevice_ai.core.config import Settings, load_settings
from ondevice_ai.core.errors import (
    AgentActionUnresolved,
    GuardrailBlocked,
    ModelError,
    OnDeviceAIError,
    OutputParseError,
    PipelineTypeError,
    RetryExhausted,
    ValidationError,
)
from ondevice_ai.core.guardrails import (
    ContentFilterGuardrail,
    GuardedChain,
    InputLengthGuardrail,
    RedactionGuardrail,
)
from ondevice_ai.core.memory import BufferMemory, SummaryMemory
from ondevice_ai.core.models import LanguageModel, OpenAICompatModel
from ondevice_ai.core.orchestration import Agent, AgentConfig, ChainExecutor, Session
from ondevice_ai.core.pipeline import Pipeline
from ondevice_ai.core.prompts import PromptTemplate
from ondevice_ai.core.schemas import ChainInput, ChainOutput, GenerationConfig, MemoryEntry, MemoryRole, ModelResponse
from ondevice_ai.core.tools import FunctionTool, LocalSearchTool, ToolRegistry

__version__ = "0.1.0"

__all__ = [
    "Agent",
    "AgentActionUnresolved",
    "AgentConfig",
    "BranchResult",
    "BufferMemory",
    "Chain",
    "ChainExecutor",
    "ChainInput",
    "ChainOutput",
    "ChatChain",
    "ClassifyChain",
    "ConditionalChain",
    "ContentFilterGuardrail",
    "ExtractChain",
    "FunctionChain",
    "FunctionTool",
    "GenerationConfig",
    "GuardedChain",
    "GuardrailBlocked",
    "InputLengthGuardrail",
    "LanguageModel",
    "LocalSearchTool",
    "MemoryEntry",
    "MemoryRole",
    "ModelChain",
    "ModelError",
    "ModelResponse",
    "OnDeviceAI",
    "OnDeviceAIError",
    "OpenAICompatModel",
    "OutputParseError",
    "ParallelChain",
    "ParallelPolicy",
    "Pipeline",
    "PipelineTypeError",
    "PromptTemplate",
    "ProofreadChain",
    "RedactionGuardrail",
    "RetryExhausted",
    "RewriteChain",
    "RewriteStyle",
    "SequentialChain",
    "Session",
    "Settings",
    "SummarizeChain",
    "SummaryMemory",
    "ToolRegistry",
    "TranslateChain",
    "ValidationError",
    "load_settings",
]
