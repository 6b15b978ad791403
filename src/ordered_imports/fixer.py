from __future__ import annotations

from typing import Any

from contracts.imports import FixError, FixResult
from contracts.tokens import TokenKind
from php_tokens.analyzer import import_use_indexes
from php_tokens.contracts import TokenizeConfig
from php_tokens.module import tokenize_source
from php_tokens.stream import TokenStream

from .blank_lines import insert_blank_lines
from .comparators import resolve_comparator
from .config import OrderedImportsConfig
from .definition import RULE_NAME
from .locator import find_subgroups
from .parser import parse_subgroup
from .rewriter import rewrite_subgroup


def is_candidate(stream: TokenStream) -> bool:
    return stream.find_kind(TokenKind.USE)


def fix_tokens(stream: TokenStream, config: OrderedImportsConfig) -> dict[str, Any]:
    """
    Reorder every import sub-group of `stream` in place, then add blank lines.

    Sub-groups are handled from the end of the file towards the start, so the
    indices of the ones still pending are unaffected by each rewrite.
    Returns counters for the result metadata.
    """

    comparator = resolve_comparator(config)
    runs = import_use_indexes(stream)
    subgroups = find_subgroups(stream)

    records = 0
    slots_changed = 0
    for subgroup in reversed(subgroups):
        parsed = parse_subgroup(stream, subgroup, config)
        records += len(parsed)
        slots_changed += rewrite_subgroup(stream, parsed, config, comparator)

    blank_lines = insert_blank_lines(stream, config.whitespaces)

    return {
        "namespace_runs": sum(1 for r in runs if r),
        "subgroups": len(subgroups),
        "records": records,
        "slots_changed": slots_changed,
        "blank_lines_inserted": blank_lines,
    }


def fix_source(
    *,
    code: str,
    config: OrderedImportsConfig | None = None,
    tokenize_config: TokenizeConfig | None = None,
    source_relpath: str | None = None,
) -> FixResult:
    """
    Fix one PHP source text.

    On a tokenizer failure the input is returned unchanged with `ok=False`;
    everything outside import declarations is reproduced byte for byte.
    """

    config = config or OrderedImportsConfig()
    meta: dict[str, Any] = {"rule": RULE_NAME, "config": config.to_dict()}

    tokenized = tokenize_source(code=code, config=tokenize_config)
    meta["tokenizer"] = {"engine": tokenized.engine.value, **tokenized.meta}
    if not tokenized.ok:
        return FixResult(
            ok=False,
            code=code,
            changed=False,
            errors=[FixError(code=e.code, message=e.message, detail=e.detail) for e in tokenized.errors],
            meta=meta,
            source_relpath=source_relpath,
        )

    stream = TokenStream(tokenized.tokens)
    if not is_candidate(stream):
        return FixResult(
            ok=True,
            code=code,
            changed=False,
            errors=[],
            meta={**meta, "candidate": False},
            source_relpath=source_relpath,
        )

    try:
        counts = fix_tokens(stream, config)
    except ValueError as e:
        # Only an import statement missing its terminator gets here.
        return FixResult(
            ok=False,
            code=code,
            changed=False,
            errors=[
                FixError(
                    code="FIX_UNTERMINATED_IMPORT",
                    message=str(e),
                    detail={"source_relpath": source_relpath},
                )
            ],
            meta={**meta, "candidate": True},
            source_relpath=source_relpath,
        )

    fixed = stream.generate_code()
    return FixResult(
        ok=True,
        code=fixed,
        changed=fixed != code,
        errors=[],
        meta={**meta, "candidate": True, "counts": counts},
        source_relpath=source_relpath,
    )
