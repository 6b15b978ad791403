from __future__ import annotations

from contracts.imports import ImportKind, ImportRecord, SortAlgorithm, SubGroup
from contracts.tokens import Token, TokenKind
from php_tokens.analyzer import statement_end
from php_tokens.stream import TokenStream

from .config import OrderedImportsConfig, WhitespacesConfig

_QUALIFIER_KINDS = {
    TokenKind.CONST_IMPORT: ImportKind.CONST,
    TokenKind.FUNCTION_IMPORT: ImportKind.FUNCTION,
}


def _text(tokens: list[Token] | tuple[Token, ...]) -> str:
    return "".join(t.content for t in tokens)


def _is_line_comment(tok: Token) -> bool:
    return tok.kind == TokenKind.COMMENT and tok.content.startswith(("//", "#"))


def _strip_whitespace(tokens: list[Token]) -> list[Token]:
    lo, hi = 0, len(tokens)
    while lo < hi and tokens[lo].is_whitespace():
        lo += 1
    while hi > lo and tokens[hi - 1].is_whitespace():
        hi -= 1
    return tokens[lo:hi]


def _trim_end(stream: TokenStream, start: int, end: int) -> int:
    """
    Exclusive end of `[start, end)` without trailing whitespace (`use A ?>`, `use A , B`).
    """

    while end > start and stream[end - 1].is_whitespace():
        end -= 1
    return end


def sorted_group_tokens(
    tokens: list[Token],
    *,
    open_pos: int,
    close_pos: int,
    whitespaces: WhitespacesConfig,
) -> list[Token] | None:
    """
    Rebuild a grouped import with its brace-list parts in plain lexical order.

    `tokens[open_pos]` / `tokens[close_pos]` are the group braces. Returns None when
    the parts are already ordered (the declaration is then kept verbatim) or when a
    line comment inside the braces makes re-flowing unsafe.
    """

    body = tokens[open_pos + 1 : close_pos]
    if any(_is_line_comment(t) for t in body):
        return None

    chunks: list[list[Token]] = [[]]
    for tok in body:
        if tok.equals(","):
            chunks.append([])
        else:
            chunks[-1].append(tok)

    line_ending = whitespaces.line_ending
    first_indent = ""
    separator = " "
    last_indent = ""
    has_trailing_comma = False
    parts: list[tuple[str, list[Token]]] = []

    for chunk in chunks:
        comments = [t for t in chunk if t.is_comment()]
        content = [t for t in chunk if not t.is_comment()]

        if first_indent == "" and any(t.is_whitespace() and line_ending in t.content for t in content):
            first_indent = line_ending + whitespaces.indent
            separator = first_indent
            last_indent = line_ending

        content = _strip_whitespace(content)
        text = _text(content)
        if text == "":
            has_trailing_comma = True
            continue

        if comments:
            text = f"{text} {_text(comments)}"
            content = content + [Token(TokenKind.WHITESPACE, " ")] + comments
        parts.append((text, content))

    texts = [text for text, _ in parts]
    if texts == sorted(texts):
        return None

    out: list[Token] = list(tokens[: open_pos + 1])
    if first_indent:
        out.append(Token(TokenKind.WHITESPACE, first_indent))
    for i, (_, part_tokens) in enumerate(sorted(parts, key=lambda p: p[0])):
        if i:
            out.append(Token(TokenKind.PUNCT, ","))
            out.append(Token(TokenKind.WHITESPACE, separator))
        out.extend(part_tokens)
    if has_trailing_comma:
        out.append(Token(TokenKind.PUNCT, ","))
    if last_indent:
        out.append(Token(TokenKind.WHITESPACE, last_indent))
    out.extend(tokens[close_pos:])
    return out


def _parse_group(
    stream: TokenStream,
    *,
    start: int,
    path_start: int,
    end: int,
    kind: ImportKind,
    qualifier: str | None,
    config: OrderedImportsConfig,
) -> ImportRecord:
    end = _trim_end(stream, path_start, end)
    tokens = [stream[j] for j in range(path_start, end)]
    open_pos = next(i for i, t in enumerate(tokens) if t.kind == TokenKind.GROUP_IMPORT_BRACE_OPEN)
    close_pos = max(i for i, t in enumerate(tokens) if t.kind == TokenKind.GROUP_IMPORT_BRACE_CLOSE)

    if config.sort_algorithm != SortAlgorithm.NONE:
        rebuilt = sorted_group_tokens(
            tokens, open_pos=open_pos, close_pos=close_pos, whitespaces=config.whitespaces
        )
        if rebuilt is not None:
            tokens = rebuilt

    return ImportRecord(
        namespace=_text(tokens),
        kind=kind,
        is_grouped=True,
        start=start,
        end=end - 1,
        tokens=tuple(tokens),
        qualifier=qualifier,
        group_prefix=_text(tokens[:open_pos]),
    )


def parse_statement(stream: TokenStream, use_index: int, config: OrderedImportsConfig) -> list[ImportRecord]:
    """
    Records for the `use` statement at `use_index`.

    A grouped import yields a single record; `use A, B;` yields one record per name.
    """

    start = stream.next_non_whitespace(use_index)
    end = statement_end(stream, use_index)
    if start is None or start >= end:
        return []

    kind = _QUALIFIER_KINDS.get(stream[start].kind, ImportKind.CLASS)
    qualifier: str | None = None
    path_start = start
    if kind != ImportKind.CLASS:
        path_start = stream.next_non_whitespace(start) or end
        qualifier = stream.content(start, path_start)

    last = stream.prev_meaningful(end)
    if last is not None and stream[last].kind == TokenKind.GROUP_IMPORT_BRACE_CLOSE:
        return [
            _parse_group(
                stream,
                start=start,
                path_start=path_start,
                end=end,
                kind=kind,
                qualifier=qualifier,
                config=config,
            )
        ]

    records: list[ImportRecord] = []
    slot_start = start
    part_start = path_start
    k = path_start
    while k <= end:
        if k == end or stream[k].equals(","):
            part_end = _trim_end(stream, part_start, k)
            part = tuple(stream[j] for j in range(part_start, part_end))
            records.append(
                ImportRecord(
                    namespace=_text(part),
                    kind=kind,
                    is_grouped=False,
                    start=slot_start,
                    end=part_end - 1,
                    tokens=part,
                    qualifier=qualifier if slot_start == start else None,
                )
            )
            if k == end:
                break
            nxt = k + 1
            while nxt < end and (stream[nxt].equals(",") or stream[nxt].is_whitespace()):
                nxt += 1
            if nxt == end:
                break
            slot_start = part_start = k = nxt
            continue
        k += 1

    return records


def parse_subgroup(stream: TokenStream, subgroup: SubGroup, config: OrderedImportsConfig) -> list[ImportRecord]:
    records: list[ImportRecord] = []
    for use_index in subgroup.use_indices:
        records.extend(parse_statement(stream, use_index, config))
    return records
