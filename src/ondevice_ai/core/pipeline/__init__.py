from .pipeline import Pipeline
from .steps import (
    Chat,
    Classify,
    Extract,
    Parallel,
    ParallelStep,
    PipelineStep,
    Proofread,
    Rewrite,
    Step,
    Summarize,
    Translate,
)

__all__ = [
    "Chat",
    "Classify",
    "Extract",
    "Parallel",
    "ParallelStep",
    "Pipeline",
    "PipelineStep",
    "Proofread",
    "Rewrite",
    "Step",
    "Summarize",
    "Translate",
]
