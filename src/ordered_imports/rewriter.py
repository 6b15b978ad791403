from __future__ import annotations

from dataclasses import dataclass

from contracts.imports import ImportKind, ImportRecord
from contracts.tokens import Token, TokenKind
from php_tokens.stream import TokenStream

from .comparators import Comparator, sort_records
from .config import OrderedImportsConfig, WhitespacesConfig

_QUALIFIER_TOKEN_KINDS = {
    ImportKind.CONST: TokenKind.CONST_IMPORT,
    ImportKind.FUNCTION: TokenKind.FUNCTION_IMPORT,
}


@dataclass(frozen=True, slots=True)
class SlotEdit:
    """
    Replacement of the half-open token range `[start, end)`.
    """

    start: int
    end: int
    tokens: tuple[Token, ...]


def order_records(
    records: list[ImportRecord],
    config: OrderedImportsConfig,
    comparator: Comparator | None,
) -> list[ImportRecord]:
    if config.imports_order is None:
        return sort_records(records, comparator)

    by_kind: dict[ImportKind, list[ImportRecord]] = {}
    for record in records:
        by_kind.setdefault(record.kind, []).append(record)

    ordered: list[ImportRecord] = []
    for kind in config.imports_order:
        ordered.extend(sort_records(by_kind.get(kind, []), comparator))
    return ordered


def qualifier_tokens(record: ImportRecord) -> list[Token]:
    if record.kind == ImportKind.CLASS:
        return []
    text = record.qualifier if record.qualifier is not None else f"{record.kind.value} "
    word = text.rstrip()
    out = [Token(_QUALIFIER_TOKEN_KINDS[record.kind], word)]
    if len(text) > len(word):
        out.append(Token(TokenKind.WHITESPACE, text[len(word):]))
    return out


def _statement_indent(stream: TokenStream, use_index: int) -> str:
    if use_index == 0:
        return ""
    before = stream[use_index - 1]
    if before.is_whitespace() and "\n" in before.content:
        return before.content.rsplit("\n", 1)[1]
    return ""


def plan_rewrite(
    stream: TokenStream,
    slots: list[ImportRecord],
    ordered: list[ImportRecord],
    whitespaces: WhitespacesConfig,
) -> list[SlotEdit]:
    """
    Edits writing `ordered[i]` into the slot of `slots[i]`, in source order.

    A comma-list slot keeps its comma when the incoming record can continue the
    statement (same kind, not grouped); otherwise the statement is closed and the
    record is written as a declaration of its own.
    """

    edits: list[SlotEdit] = []
    statement_kind: ImportKind | None = None
    statement_grouped = False
    statement_indent = ""

    for slot, record in zip(slots, ordered):
        prev = stream.prev_meaningful(slot.start)
        after_comma = prev is not None and stream[prev].equals(",")

        if not after_comma:
            statement_kind = record.kind
            statement_grouped = record.is_grouped
            statement_indent = _statement_indent(stream, prev) if prev is not None else ""
            new = qualifier_tokens(record) + list(record.tokens)
            edits.append(SlotEdit(slot.start, slot.end + 1, tuple(new)))
            continue

        # A brace group can neither join nor lead a comma list.
        if record.kind == statement_kind and not (record.is_grouped or statement_grouped):
            edits.append(SlotEdit(slot.start, slot.end + 1, record.tokens))
            continue

        statement_kind = record.kind
        statement_grouped = record.is_grouped
        new = [
            Token(TokenKind.PUNCT, ";"),
            Token(TokenKind.WHITESPACE, whitespaces.line_ending + statement_indent),
            Token(TokenKind.USE, "use"),
            Token(TokenKind.WHITESPACE, " "),
        ]
        new.extend(qualifier_tokens(record))
        new.extend(record.tokens)
        edits.append(SlotEdit(prev, slot.end + 1, tuple(new)))

    return edits


def apply_edits(stream: TokenStream, edits: list[SlotEdit]) -> int:
    changed = 0
    for edit in sorted(edits, key=lambda e: e.start, reverse=True):
        if stream.tokens[edit.start : edit.end] == edit.tokens:
            continue
        stream.splice(edit.start, edit.end, edit.tokens)
        changed += 1
    return changed


def rewrite_subgroup(
    stream: TokenStream,
    records: list[ImportRecord],
    config: OrderedImportsConfig,
    comparator: Comparator | None,
) -> int:
    """
    Reorder one sub-group in place; returns the number of slots whose tokens changed.
    """

    ordered = order_records(records, config, comparator)
    return apply_edits(stream, plan_rewrite(stream, records, ordered, config.whitespaces))
