from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from contracts.tokens import Token


class TokenizerEngineName(str, Enum):
    """
    Tokenizer backends supported by this module.

    Engines only split source text; contextual classification happens afterwards
    in `php_tokens.transform`, identically for every backend.
    """

    REGEX = "regex"
    PHP_CLI = "php_cli"


@dataclass(frozen=True, slots=True)
class TokenizeError:
    code: str
    message: str
    detail: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class TokenizeResult:
    """
    On failure, `ok` is False and `tokens` is empty. No tokens are guessed.
    """

    ok: bool
    engine: TokenizerEngineName
    tokens: list[Token]
    errors: list[TokenizeError]
    meta: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "engine": self.engine.value,
            "tokens": [t.to_dict() for t in self.tokens],
            "errors": [
                {"code": e.code, "message": e.message, "detail": e.detail} for e in self.errors
            ],
            "meta": dict(self.meta),
        }


@dataclass(frozen=True, slots=True)
class TokenizeConfig:
    engine: TokenizerEngineName = TokenizerEngineName.REGEX
    php_binary: str = "php"  # php_cli engine only
    timeout_s: float = 30.0

    def __post_init__(self) -> None:
        if not isinstance(self.engine, TokenizerEngineName):
            raise TypeError("engine must be a TokenizerEngineName")
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
