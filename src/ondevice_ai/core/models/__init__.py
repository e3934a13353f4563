from .base import LanguageModel, close_stream
from .openai_compat import OpenAICompatModel

__all__ = ["LanguageModel", "OpenAICompatModel", "close_stream"]
