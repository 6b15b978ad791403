from __future__ import annotations

import re
from typing import Any

from contracts.tokens import Token, TokenKind, keyword_kind

from ..contracts import TokenizeConfig, TokenizeError, TokenizeResult, TokenizerEngineName
from .base import TokenizerEngine

# `<?php` owns one trailing whitespace character (or CRLF), like PHP's T_OPEN_TAG.
_OPEN_TAG_RE = re.compile(r"<\?php(?:\r\n|[ \t\r\n]|(?=\Z))|<\?=", re.IGNORECASE)

# Alternatives are tried in order; the final `punct` branch matches any character,
# so lexing inside PHP code never stalls.
_PHP_TOKEN_PATTERNS: list[tuple[str, str]] = [
    ("close_tag", r"\?>(?:\r\n|\n)?"),
    ("whitespace", r"[ \t\r\n]+"),
    ("doc_comment", r"/\*\*(?=[ \t\r\n])[\s\S]*?(?:\*/|\Z)"),
    ("comment", r"/\*[\s\S]*?(?:\*/|\Z)|(?://|#(?!\[))(?:[^\r\n?]|\?(?!>))*"),
    (
        "heredoc",
        r"<<<[ \t]*(?P<hd_quote>[\"']?)(?P<hd_label>[^\W\d]\w*)(?P=hd_quote)\r?\n"
        r"(?:[\s\S]*?\r?\n)??[ \t]*(?P=hd_label)(?!\w)",
    ),
    ("string", r"'(?:[^'\\]|\\[\s\S])*'|\"(?:[^\"\\]|\\[\s\S])*\"|`(?:[^`\\]|\\[\s\S])*`"),
    ("variable", r"\$[^\W\d]\w*"),
    ("name", r"[^\W\d]\w*"),
    ("number", r"\d[\w.]*"),
    ("ns_separator", r"\\"),
    ("punct", r"\?->|->|::|[\s\S]"),
]

_PHP_TOKEN_RE = re.compile("|".join(f"(?P<{name}>{pattern})" for name, pattern in _PHP_TOKEN_PATTERNS))

_GROUP_KINDS: dict[str, TokenKind] = {
    "close_tag": TokenKind.CLOSE_TAG,
    "whitespace": TokenKind.WHITESPACE,
    "doc_comment": TokenKind.DOC_COMMENT,
    "comment": TokenKind.COMMENT,
    "heredoc": TokenKind.STRING,
    "string": TokenKind.STRING,
    "variable": TokenKind.VARIABLE,
    "number": TokenKind.NUMBER,
    "ns_separator": TokenKind.NS_SEPARATOR,
    "punct": TokenKind.PUNCT,
}


def _lex_php_token(code: str, pos: int) -> Token:
    m = _PHP_TOKEN_RE.match(code, pos)
    assert m is not None  # the punct branch matches any character
    for name, _ in _PHP_TOKEN_PATTERNS:
        text = m.group(name)
        if text is None:
            continue
        if name == "name":
            return Token(keyword_kind(text), text)
        return Token(_GROUP_KINDS[name], text)
    raise AssertionError(f"unreachable: no token group matched at offset {pos}")


def lex_php(code: str) -> list[Token]:
    """
    Split PHP source into raw tokens. Concatenating the contents yields `code` again.
    """

    tokens: list[Token] = []
    pos = 0
    n = len(code)

    while pos < n:
        open_tag = _OPEN_TAG_RE.search(code, pos)
        if open_tag is None:
            tokens.append(Token(TokenKind.INLINE_HTML, code[pos:]))
            break

        if open_tag.start() > pos:
            tokens.append(Token(TokenKind.INLINE_HTML, code[pos : open_tag.start()]))
        tokens.append(Token(TokenKind.OPEN_TAG, open_tag.group(0)))
        pos = open_tag.end()

        while pos < n:
            tok = _lex_php_token(code, pos)
            tokens.append(tok)
            pos += len(tok.content)
            if tok.kind == TokenKind.CLOSE_TAG:
                break

    return tokens


class RegexLexerEngine(TokenizerEngine):
    """
    Pure-Python PHP lexer.

    Covers what the import fixer needs to see precisely (tags, whitespace, comments,
    names, separators, braces, statement terminators) and keeps everything else
    (strings, heredocs, operators) as opaque tokens that serialize back unchanged.
    """

    def backend_id(self) -> str:
        return "regex"

    def tokenize(self, *, code: str, config: TokenizeConfig) -> TokenizeResult:
        meta: dict[str, Any] = {"backend": self.backend_id()}
        tokens = lex_php(code)

        if "".join(t.content for t in tokens) != code:
            return TokenizeResult(
                ok=False,
                engine=TokenizerEngineName.REGEX,
                tokens=[],
                errors=[
                    TokenizeError(
                        code="TOKENIZE_ROUNDTRIP_MISMATCH",
                        message="Lexer output does not reproduce the source text",
                        detail={"source_length": len(code)},
                    )
                ],
                meta=meta,
            )

        return TokenizeResult(
            ok=True,
            engine=TokenizerEngineName.REGEX,
            tokens=tokens,
            errors=[],
            meta={**meta, "token_count": len(tokens)},
        )
