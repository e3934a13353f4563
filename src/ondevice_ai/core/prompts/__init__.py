from .builtin import BUILTIN_PROMPTS, strip_preamble
from .template import PromptTemplate

__all__ = ["BUILTIN_PROMPTS", "PromptTemplate", "strip_preamble"]
