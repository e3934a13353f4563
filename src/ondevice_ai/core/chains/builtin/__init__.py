from .chat import ChatChain, detect_language
from .classify import ClassifyChain
from .extract import ExtractChain
from .proofread import ProofreadChain
from .rewrite import RewriteChain
from .summarize import SummarizeChain
from .translate import TranslateChain

__all__ = [
    "ChatChain",
    "ClassifyChain",
    "ExtractChain",
    "ProofreadChain",
    "RewriteChain",
    "SummarizeChain",
    "TranslateChain",
    "detect_language",
]
