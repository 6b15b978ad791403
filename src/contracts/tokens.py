from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class TokenKind(str, Enum):
    """
    Token kinds shared by every tokenizer engine.

    The contextual kinds (USE_TRAIT, USE_LAMBDA, CONST_IMPORT, FUNCTION_IMPORT,
    GROUP_IMPORT_BRACE_*) are assigned by `php_tokens.transform`, never by an engine.
    """

    OPEN_TAG = "open_tag"
    CLOSE_TAG = "close_tag"
    INLINE_HTML = "inline_html"
    WHITESPACE = "whitespace"
    COMMENT = "comment"
    DOC_COMMENT = "doc_comment"
    VARIABLE = "variable"
    STRING = "string"
    NUMBER = "number"
    NAME = "name"
    NS_SEPARATOR = "ns_separator"
    USE = "use"
    NAMESPACE = "namespace"
    USE_TRAIT = "use_trait"
    USE_LAMBDA = "use_lambda"
    CONST_IMPORT = "const_import"
    FUNCTION_IMPORT = "function_import"
    GROUP_IMPORT_BRACE_OPEN = "group_import_brace_open"
    GROUP_IMPORT_BRACE_CLOSE = "group_import_brace_close"
    PUNCT = "punct"


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    content: str

    def is_whitespace(self) -> bool:
        return self.kind == TokenKind.WHITESPACE

    def is_comment(self) -> bool:
        return self.kind in (TokenKind.COMMENT, TokenKind.DOC_COMMENT)

    def is_meaningful(self) -> bool:
        return not (self.is_whitespace() or self.is_comment())

    def equals(self, content: str) -> bool:
        # Only punctuation is compared by content; a NAME ";" cannot exist.
        return self.kind == TokenKind.PUNCT and self.content == content

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "content": self.content}


def keyword_kind(content: str) -> TokenKind:
    """
    Kind for an identifier-like token. PHP keywords are case-insensitive.
    """

    lowered = content.lower()
    if lowered == "use":
        return TokenKind.USE
    if lowered == "namespace":
        return TokenKind.NAMESPACE
    return TokenKind.NAME
