from .base import Chain, FunctionChain, ModelChain, OutputParser, StreamingChain, stream_model
from .builtin import (
    ChatChain,
    ClassifyChain,
    ExtractChain,
    ProofreadChain,
    RewriteChain,
    SummarizeChain,
    TranslateChain,
    detect_language,
)
from .combinators import (
    PARALLEL_SEPARATOR,
    BranchResult,
    ConditionalChain,
    ParallelChain,
    ParallelPolicy,
    SequentialChain,
)
from .results import (
    ChatResult,
    Classification,
    ClassifyResult,
    Entity,
    ExtractResult,
    ProofreadCorrection,
    ProofreadResult,
    RewriteResult,
    RewriteStyle,
    SummarizeResult,
    TranslateResult,
)

__all__ = [
    "PARALLEL_SEPARATOR",
    "BranchResult",
    "Chain",
    "ChatChain",
    "ChatResult",
    "Classification",
    "ClassifyChain",
    "ClassifyResult",
    "ConditionalChain",
    "Entity",
    "ExtractChain",
    "ExtractResult",
    "FunctionChain",
    "ModelChain",
    "OutputParser",
    "ParallelChain",
    "ParallelPolicy",
    "ProofreadChain",
    "ProofreadCorrection",
    "ProofreadResult",
    "RewriteChain",
    "RewriteResult",
    "RewriteStyle",
    "SequentialChain",
    "StreamingChain",
    "SummarizeChain",
    "SummarizeResult",
    "TranslateChain",
    "TranslateResult",
    "detect_language",
]
