"""
Canonical contracts shared by the tokenizer stage and the import fixer.

These models are the schema boundary between stages:
- `php_tokens` produces `Token` sequences,
- `ordered_imports` consumes them and reports `FixResult` objects.

Stage code should consume/produce these contract objects (not ad-hoc dicts).
"""

from .tokens import Token, TokenKind, keyword_kind
from .imports import (
    FixError,
    FixResult,
    ImportKind,
    ImportRecord,
    SortAlgorithm,
    SubGroup,
    strip_comments,
)

__all__ = [
    "Token",
    "TokenKind",
    "keyword_kind",
    "ImportKind",
    "SortAlgorithm",
    "ImportRecord",
    "SubGroup",
    "FixError",
    "FixResult",
    "strip_comments",
]
