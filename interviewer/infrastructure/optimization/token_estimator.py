"""Service for estimating token counts for text or message lists.

Used for cost accounting when a vendor omits usage reporting. Uses
`tiktoken` when its encoding can be loaded (the first load may need network
access to fetch the BPE file) and falls back to a character approximation.
Bounded Context: Token Management
"""

import logging
from typing import Iterable, Optional

import tiktoken

from interviewer.domain.models.ai import Message
from interviewer.domain.models.common import TokenCount

logger = logging.getLogger(__name__)

DEFAULT_TOKENIZER_MODEL = "cl100k_base"  # GPT-3.5/4 family
APPROX_CHARS_PER_TOKEN = 4
MESSAGE_OVERHEAD_TOKENS = 4  # <im_start>{role}\n{content}<im_end>\n
REPLY_PRIMING_TOKENS = 2     # <im_start>assistant


class TokenEstimator:
    """Estimates token counts using tiktoken or approximation."""

    def __init__(self, tokenizer_model_name: Optional[str] = None):
        self.tokenizer_name = tokenizer_model_name or DEFAULT_TOKENIZER_MODEL
        self._tokenizer = None
        self._load_failed = False

    def _get_tokenizer(self):
        if self._tokenizer is None and not self._load_failed:
            try:
                self._tokenizer = tiktoken.get_encoding(self.tokenizer_name)
                logger.info(f"TokenEstimator loaded tiktoken encoding: {self.tokenizer_name}")
            except Exception as e:
                self._load_failed = True
                logger.warning(f"Failed to load tiktoken encoding '{self.tokenizer_name}': {e}. Using approximation.")
        return self._tokenizer

    def estimate_tokens(self, text: str) -> TokenCount:
        if not text:
            return TokenCount(0)
        tokenizer = self._get_tokenizer()
        if tokenizer is not None:
            return TokenCount(len(tokenizer.encode(text)))
        return TokenCount(len(text) // APPROX_CHARS_PER_TOKEN)

    def estimate_tokens_for_messages(self, messages: Iterable[Message]) -> TokenCount:
        """Estimates prompt tokens for a conversation, including per-message overhead.

        See: https://github.com/openai/openai-cookbook/blob/main/examples/How_to_count_tokens_with_tiktoken.ipynb
        """
        num_tokens = 0
        for message in messages:
            num_tokens += MESSAGE_OVERHEAD_TOKENS
            num_tokens += self.estimate_tokens(message.role)
            num_tokens += self.estimate_tokens(message.content)
        if num_tokens:
            num_tokens += REPLY_PRIMING_TOKENS
        return TokenCount(num_tokens)
