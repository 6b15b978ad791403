from __future__ import annotations

from typing import Iterable, Iterator

from contracts.tokens import Token, TokenKind


class TokenStream:
    """
    Index-addressable sequence of immutable tokens.

    Mutation is limited to splicing new token sequences over a half-open range
    `[start, end)`; callers that splice several ranges must go from the highest
    start index to the lowest so that pending indices stay valid.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens: list[Token] = list(tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __getitem__(self, index: int) -> Token:
        return self._tokens[index]

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    @property
    def tokens(self) -> tuple[Token, ...]:
        return tuple(self._tokens)

    def next_meaningful(self, index: int) -> int | None:
        for j in range(index + 1, len(self._tokens)):
            if self._tokens[j].is_meaningful():
                return j
        return None

    def prev_meaningful(self, index: int) -> int | None:
        for j in range(index - 1, -1, -1):
            if self._tokens[j].is_meaningful():
                return j
        return None

    def next_non_whitespace(self, index: int) -> int | None:
        for j in range(index + 1, len(self._tokens)):
            if not self._tokens[j].is_whitespace():
                return j
        return None

    def next_of_kind(
        self,
        index: int,
        *,
        contents: Iterable[str] = (),
        kinds: Iterable[TokenKind] = (),
    ) -> int | None:
        """
        First index after `index` holding punctuation in `contents` or a token of `kinds`.
        """

        contents = tuple(contents)
        kinds = tuple(kinds)
        for j in range(index + 1, len(self._tokens)):
            tok = self._tokens[j]
            if tok.kind in kinds or any(tok.equals(c) for c in contents):
                return j
        return None

    def find_kind(self, kind: TokenKind) -> bool:
        return any(t.kind == kind for t in self._tokens)

    def indices_of_kind(self, kind: TokenKind) -> list[int]:
        return [i for i, t in enumerate(self._tokens) if t.kind == kind]

    def content(self, start: int, end: int) -> str:
        return "".join(t.content for t in self._tokens[start:end])

    def splice(self, start: int, end: int, tokens: Iterable[Token]) -> None:
        if not (0 <= start <= end <= len(self._tokens)):
            raise IndexError(f"invalid splice range [{start}, {end}) for {len(self._tokens)} tokens")
        self._tokens[start:end] = list(tokens)

    def insert_at(self, index: int, token: Token) -> None:
        self._tokens.insert(index, token)

    def generate_code(self) -> str:
        return "".join(t.content for t in self._tokens)
