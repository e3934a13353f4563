from .base import Memory, estimate_tokens, format_history
from .buffer import BufferMemory
from .summary import SummaryMemory

__all__ = ["BufferMemory", "Memory", "SummaryMemory", "estimate_tokens", "format_history"]
