from __future__ import annotations

from abc import ABC, abstractmethod

from ..contracts import TokenizeConfig, TokenizeResult


class TokenizerEngine(ABC):
    """
    Interface for PHP tokenizer backends.

    IMPORTANT:
    - Engines must return tokens whose concatenated content equals the input exactly.
    - Engines must NOT classify `use` contexts or group braces; that is
      `php_tokens.transform`'s job.
    """

    @abstractmethod
    def backend_id(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def tokenize(self, *, code: str, config: TokenizeConfig) -> TokenizeResult:
        raise NotImplementedError
