from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from .tokens import Token

_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.S)
_LINE_COMMENT_RE = re.compile(r"(?://|#)[^\r\n]*")


class ImportKind(str, Enum):
    """
    Declaration kinds of a PHP `use` import.

    CLASS is the unqualified default (`use Foo;`), CONST and FUNCTION carry a
    qualifier keyword (`use const FOO;`, `use function foo;`).
    """

    CONST = "const"
    CLASS = "class"
    FUNCTION = "function"


class SortAlgorithm(str, Enum):
    ALPHA = "alpha"
    LENGTH = "length"
    NAMESPACE = "namespace"
    NONE = "none"


def strip_comments(text: str) -> str:
    text = _BLOCK_COMMENT_RE.sub("", text)
    return _LINE_COMMENT_RE.sub("", text)


@dataclass(frozen=True, slots=True)
class ImportRecord:
    """
    One imported name (or one whole brace group) and the token slot it occupied.

    `start`/`end` are inclusive stream indices of the slot. For the first name of a
    statement the slot begins at the kind qualifier, so `qualifier` holds its raw
    text ("const " or "function "); names after a comma inherit the kind and have
    no qualifier of their own.
    """

    namespace: str  # raw text after the qualifier, comments kept
    kind: ImportKind
    is_grouped: bool
    start: int
    end: int
    tokens: tuple[Token, ...]  # tokens reproducing `namespace`
    qualifier: str | None = None
    group_prefix: str | None = None  # text before the group brace, grouped records only

    @property
    def namespace_path(self) -> str:
        raw = self.group_prefix if self.is_grouped and self.group_prefix is not None else self.namespace
        return strip_comments(raw).strip()


@dataclass(frozen=True, slots=True)
class SubGroup:
    """
    Adjacent import statements of one namespace run, identified by their `use` indices.
    """

    run_index: int
    use_indices: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.use_indices)


@dataclass(frozen=True, slots=True)
class FixError:
    code: str
    message: str
    detail: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class FixResult:
    """
    Outcome of fixing one source text.

    On failure `ok` is False and `code` is the unmodified input.
    """

    ok: bool
    code: str
    changed: bool
    errors: list[FixError]
    meta: dict[str, Any]
    source_relpath: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        # Source text is not part of the audit payload.
        out.pop("code")
        return out
