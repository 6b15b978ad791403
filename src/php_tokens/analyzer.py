from __future__ import annotations

from contracts.tokens import TokenKind

from .stream import TokenStream


def import_use_indexes(stream: TokenStream) -> list[list[int]]:
    """
    Indices of import `use` tokens, partitioned per namespace scope.

    Run 0 holds imports before the first namespace declaration; every declaration
    opens a new run. Runs may be empty.
    """

    runs: list[list[int]] = [[]]
    for i, tok in enumerate(stream):
        if tok.kind == TokenKind.NAMESPACE:
            runs.append([])
        elif tok.kind == TokenKind.USE:
            runs[-1].append(i)
    return runs


def statement_end(stream: TokenStream, use_index: int) -> int:
    """
    Index of the `;` or close tag terminating the statement at `use_index`.
    """

    end = stream.next_of_kind(use_index, contents=(";",), kinds=(TokenKind.CLOSE_TAG,))
    if end is None:
        raise ValueError(f"Unterminated use statement at token {use_index}")
    return end
