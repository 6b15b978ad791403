from __future__ import annotations

from contracts.imports import SubGroup
from contracts.tokens import TokenKind
from php_tokens.analyzer import import_use_indexes, statement_end
from php_tokens.stream import TokenStream


def split_run(stream: TokenStream, use_indices: list[int]) -> list[list[int]]:
    """
    Split one namespace run into sub-groups of directly adjacent statements.

    Whitespace and comments between two statements keep them together; any other
    token (code, a different statement) starts a new sub-group.
    """

    if not use_indices:
        return []

    groups: list[list[int]] = [[use_indices[0]]]
    for current, following in zip(use_indices, use_indices[1:]):
        end = statement_end(stream, current)
        if stream[end].kind == TokenKind.CLOSE_TAG:
            # `use A ?>...<?php use B;` continues after the reopening tag.
            reopen = stream.next_of_kind(current, kinds=(TokenKind.OPEN_TAG,))
            if reopen is not None:
                end = reopen

        if stream.next_meaningful(end) != following:
            groups.append([])
        groups[-1].append(following)

    return groups


def find_subgroups(stream: TokenStream) -> list[SubGroup]:
    """
    Every sub-group of the stream, in source order.
    """

    out: list[SubGroup] = []
    for run_index, use_indices in enumerate(import_use_indexes(stream)):
        for group in split_run(stream, use_indices):
            out.append(SubGroup(run_index=run_index, use_indices=tuple(group)))
    return out
