"""Token accounting backed by tiktoken"""

import unicodedata
from functools import lru_cache

import tiktoken

from copa.config.settings import get_settings


@lru_cache(maxsize=8)
def _encoding_for(model: str) -> tiktoken.Encoding:
    return tiktoken.encoding_for_model(model)


def count_tokens(text: str, model: str | None = None) -> int:
    """Count tokens of ``text`` after NFC normalisation.

    ``model`` defaults to ``Settings.token_model``.
    """
    encoding = _encoding_for(model or get_settings().token_model)
    return len(encoding.encode(unicodedata.normalize("NFC", text), disallowed_special=()))
