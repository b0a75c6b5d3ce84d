"""
Token Estimator Module

Approximate token counting used when the upstream does not report usage.
Counts are estimates; they only need to be stable and roughly proportional.
"""

import math
import re
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any

import tiktoken

from app.common.utils import dump_json
from app.config import get_settings

# Fixed per-message overhead (role separators)
MESSAGE_OVERHEAD_TOKENS = 4
# Image blocks are billed per tile upstream; without decoding assume one 512px tile pair
IMAGE_TOKENS = 170

# CJK ideographs, kana and hangul tokenize roughly one token per character
_CJK_PATTERN = re.compile(r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af\uf900-\ufaff]")


class TokenEstimator(ABC):
    """
    Token Estimator Abstract Base Class

    Subclasses only implement `estimate`; message and content walking is shared.
    """

    @abstractmethod
    def estimate(self, text: str) -> int:
        """
        Estimate tokens in text

        Args:
            text: Text to count

        Returns:
            int: Non-negative token estimate
        """
        pass

    def estimate_messages(self, messages: Any) -> int:
        """
        Estimate tokens in a Claude message list

        Args:
            messages: Message list, e.g. [{"role": "user", "content": "Hello"}]

        Returns:
            int: Token estimate including per-message overhead
        """
        if not isinstance(messages, list):
            return 0

        total = 0
        for message in messages:
            if not isinstance(message, dict):
                continue
            role = message.get("role")
            if isinstance(role, str):
                total += self.estimate(role)
            total += self.estimate_claude_content(message.get("content"))
            total += MESSAGE_OVERHEAD_TOKENS
        return total

    def estimate_claude_content(self, content: Any) -> int:
        """
        Estimate tokens in Claude content (a string or a list of content blocks)

        Args:
            content: Message content or response content blocks

        Returns:
            int: Token estimate
        """
        if isinstance(content, str):
            return self.estimate(content)
        if not isinstance(content, list):
            return 0

        total = 0
        for block in content:
            if isinstance(block, str):
                total += self.estimate(block)
                continue
            if not isinstance(block, dict):
                continue
            block_type = block.get("type")
            if block_type == "text":
                total += self.estimate(block.get("text") or "")
            elif block_type == "tool_use":
                total += self.estimate(block.get("name") or "")
                total += self.estimate(dump_json(block.get("input", {})))
            elif block_type == "tool_result":
                total += self.estimate_claude_content(block.get("content"))
            elif block_type == "image":
                total += IMAGE_TOKENS
        return total


class HeuristicTokenEstimator(TokenEstimator):
    """
    Character-based estimator

    CJK characters count as one token each, everything else as one token per 4 characters.
    """

    def __init__(self, chars_per_token: int = 4):
        self.chars_per_token = chars_per_token

    def estimate(self, text: str) -> int:
        if not text:
            return 0
        cjk_count = len(_CJK_PATTERN.findall(text))
        other_count = len(text) - cjk_count
        return cjk_count + math.ceil(other_count / self.chars_per_token)


class TiktokenEstimator(TokenEstimator):
    """
    tiktoken-based estimator

    The encoding is loaded lazily on first use since tiktoken may need to fetch BPE data.
    """

    def __init__(self, encoding_name: str = "cl100k_base"):
        self.encoding_name = encoding_name
        self._encoding: Any = None

    def _get_encoding(self) -> Any:
        if self._encoding is None:
            self._encoding = tiktoken.get_encoding(self.encoding_name)
        return self._encoding

    def estimate(self, text: str) -> int:
        if not text:
            return 0
        return len(self._get_encoding().encode(text, disallowed_special=()))


@lru_cache()
def get_token_estimator() -> TokenEstimator:
    """
    Get the configured token estimator (Singleton)

    Returns:
        TokenEstimator: Estimator selected by TOKEN_ESTIMATOR
    """
    settings = get_settings()
    if settings.TOKEN_ESTIMATOR == "tiktoken":
        return TiktokenEstimator(settings.TIKTOKEN_ENCODING)
    return HeuristicTokenEstimator()
