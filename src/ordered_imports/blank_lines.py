from __future__ import annotations

import re

from contracts.imports import strip_comments
from contracts.tokens import Token, TokenKind
from php_tokens.analyzer import import_use_indexes, statement_end
from php_tokens.stream import TokenStream

from .config import WhitespacesConfig

_QUALIFIER_RE = re.compile(r"^(?:const|function)\s+", re.IGNORECASE)


def leading_segment(stream: TokenStream, use_index: int) -> str:
    """
    First namespace component of the declaration at `use_index`.

    Names without a separator live in the global namespace and share the empty
    segment, so `use Exception; use Throwable;` stay together.
    """

    text = strip_comments(stream.content(use_index + 1, statement_end(stream, use_index))).strip()
    text = _QUALIFIER_RE.sub("", text).lstrip("\\")
    if "\\" not in text:
        return ""
    return text.split("\\", 1)[0].strip()


def ensure_blank_line_before(stream: TokenStream, index: int, line_ending: str) -> bool:
    """
    Make the whitespace before `index` hold at least two line breaks.

    Returns False when it already does. A newline that ends a preceding open tag
    counts towards the two.
    """

    j = index - 1
    while j >= 0 and stream[j].is_whitespace():
        j -= 1
    run = stream.content(j + 1, index)
    breaks = run.count("\n")
    if j >= 0 and stream[j].kind == TokenKind.OPEN_TAG and stream[j].content.endswith("\n"):
        breaks += 1
    if breaks >= 2:
        return False

    needed = line_ending * (2 - breaks)
    if j + 1 < index:
        # Same-line spacing (`use A; use B;`) is replaced, indentation is kept.
        new = needed + (run if breaks else "")
        stream.splice(j + 1, index, [Token(TokenKind.WHITESPACE, new)])
    else:
        stream.insert_at(index, Token(TokenKind.WHITESPACE, needed))
    return True


def insert_blank_lines(stream: TokenStream, whitespaces: WhitespacesConfig) -> int:
    """
    Separate consecutive import declarations whose leading segments differ.

    Runs once over the whole file after every sub-group was reordered; returns the
    number of separators it had to add.
    """

    uses = [i for run in import_use_indexes(stream) for i in run]
    segments = [leading_segment(stream, i) for i in uses]
    targets = [uses[k] for k in range(1, len(uses)) if segments[k] != segments[k - 1]]

    inserted = 0
    for use_index in reversed(targets):
        if ensure_blank_line_before(stream, use_index, whitespaces.line_ending):
            inserted += 1
    return inserted
