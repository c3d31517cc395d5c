"""Utility modules for copa"""

from .logger import get_logger, setup_logging
from .text import levenshtein, suggest
from .tokens import count_tokens

__all__ = [
    "get_logger",
    "setup_logging",
    "levenshtein",
    "suggest",
    "count_tokens",
]
