"""
Token accounting matched to the completion model's tokenizer.
"""

from functools import lru_cache
from typing import Callable

import tiktoken

from leadcatcher.logger import get_logger

logger = get_logger(__name__)

TokenCounter = Callable[[str], int]


@lru_cache(maxsize=8)
def _encoding_for(model: str) -> "tiktoken.Encoding":
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        logger.warning(f"No tiktoken encoding registered for {model}, using o200k_base")
        return tiktoken.get_encoding("o200k_base")


def count_tokens(text: str, model: str = "gpt-4o") -> int:
    """Return the number of tokens ``text`` costs for ``model``."""
    if not text:
        return 0
    return len(_encoding_for(model).encode(text, disallowed_special=()))


def make_token_counter(model: str) -> TokenCounter:
    """Bind ``count_tokens`` to a model name."""

    def counter(text: str) -> int:
        return count_tokens(text, model)

    return counter
