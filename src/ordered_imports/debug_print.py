from __future__ import annotations

import argparse
from pathlib import Path

from php_tokens.contracts import TokenizeConfig, TokenizerEngineName
from php_tokens.module import TokenizeFailed, stream_from_code

from .config import OrderedImportsConfig
from .data_access import read_source
from .locator import find_subgroups
from .parser import parse_subgroup


def render(code: str, *, config: OrderedImportsConfig, tokenize_config: TokenizeConfig | None = None) -> str:
    stream = stream_from_code(code, tokenize_config)
    subgroups = find_subgroups(stream)

    lines = [f"tokens={len(stream)} subgroups={len(subgroups)}"]
    for n, subgroup in enumerate(subgroups):
        lines.append(f"\n=== RUN {subgroup.run_index} / SUBGROUP {n} ({len(subgroup)} statements) ===")
        for record in parse_subgroup(stream, subgroup, config):
            flags = " grouped" if record.is_grouped else ""
            qualifier = "" if record.qualifier is None else f" qualifier={record.qualifier.strip()!r}"
            lines.append(
                f"  [{record.start:>5}..{record.end:>5}] {record.kind.value:<8} "
                f"{record.namespace_path!r}{qualifier}{flags}"
            )
    return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="sq-ordered-imports-debug-print")
    ap.add_argument("path", type=Path, help="PHP source file.")
    ap.add_argument(
        "--engine",
        choices=[e.value for e in TokenizerEngineName],
        default=TokenizerEngineName.REGEX.value,
    )
    args = ap.parse_args(argv)

    try:
        text = render(
            read_source(args.path),
            config=OrderedImportsConfig(),
            tokenize_config=TokenizeConfig(engine=TokenizerEngineName(args.engine)),
        )
    except TokenizeFailed as e:
        print(f"error: {e}")
        return 2
    print(text, end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
