"""
Token estimation for OpenCode Harness.

The default estimate is one token per four characters. ``TokenCounter`` gives
a precise count through tiktoken when the configuration asks for it.
"""

import logging
import math

import tiktoken

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4
DEFAULT_ENCODING = "cl100k_base"


def estimate_tokens(text: str) -> int:
    """Estimate tokens as ``ceil(len(text) / 4)``."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


class TokenCounter:
    """Counts tokens for text using tiktoken.

    The encoding is loaded on first use so constructing a counter is free.
    """

    def __init__(self, encoding_name: str = DEFAULT_ENCODING):
        """Initialize the token counter.

        Args:
            encoding_name: Tiktoken encoding to use.
        """
        self.encoding_name = encoding_name
        self._encoding: tiktoken.Encoding | None = None

    def _get_encoding(self) -> tiktoken.Encoding:
        """Get the encoding, falling back to cl100k_base.

        Returns:
            Tiktoken encoding.
        """
        if self._encoding is None:
            try:
                self._encoding = tiktoken.get_encoding(self.encoding_name)
            except ValueError:
                logger.warning(
                    f"Unknown encoding {self.encoding_name!r}, using {DEFAULT_ENCODING}"
                )
                self._encoding = tiktoken.get_encoding(DEFAULT_ENCODING)
        return self._encoding

    def count(self, text: str) -> int:
        """Count tokens in text.

        Args:
            text: Text to count.

        Returns:
            Token count.
        """
        if not text:
            return 0
        return len(self._get_encoding().encode(text))
