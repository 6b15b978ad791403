from __future__ import annotations

import argparse
import dataclasses
import difflib
import json
import sys
from pathlib import Path
from typing import Any

from contracts.imports import FixResult, ImportKind, SortAlgorithm
from php_tokens.contracts import TokenizeConfig, TokenizerEngineName

from .artifacts import build_run_report, summarize, write_run_report
from .config import OrderedImportsConfig, OrderedImportsConfigError, load_config
from .data_access import DataAccessError, iter_source_files, read_source, sha256_text, write_source
from .definition import get_definition
from .fixer import fix_source

_INDENTS = {"2": "  ", "4": "    ", "tab": "\t"}
_LINE_ENDINGS = {"lf": "\n", "crlf": "\r\n"}


def _priority_pair(value: str) -> tuple[str, int]:
    prefix, sep, priority = value.rpartition("=")
    if not sep or not prefix:
        raise argparse.ArgumentTypeError(f"expected PREFIX=INT, got {value!r}")
    try:
        return prefix, int(priority)
    except ValueError:
        raise argparse.ArgumentTypeError(f"priority must be an integer, got {priority!r}") from None


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="sq-ordered-imports",
        description="Order PHP `use` import statements in place (by kind, then by the chosen algorithm).",
    )
    p.add_argument("paths", nargs="*", type=Path, help="PHP files or directories (walked for *.php).")
    p.add_argument("--config", type=Path, default=None, help="JSON file with fixer options.")
    p.add_argument(
        "--sort-algorithm",
        choices=[a.value for a in SortAlgorithm],
        default=None,
        help="Sort algorithm (default: alpha). Overrides --config.",
    )
    p.add_argument(
        "--imports-order",
        default=None,
        help=f'Comma-separated kind order, e.g. "{",".join(k.value for k in ImportKind)}".',
    )
    p.add_argument("--case-sensitive", action="store_true", default=None, help="Case-sensitive sorting.")
    p.add_argument(
        "--namespace-priority",
        action="append",
        type=_priority_pair,
        default=None,
        metavar="PREFIX=INT",
        help="Namespace prefix priority for --sort-algorithm namespace (repeatable).",
    )
    p.add_argument(
        "--no-namespace-priority",
        type=int,
        default=None,
        help="Priority of names without a namespace separator.",
    )
    p.add_argument("--indent", choices=sorted(_INDENTS), default=None, help="Indentation (default: 4).")
    p.add_argument("--line-ending", choices=sorted(_LINE_ENDINGS), default=None, help="Line ending (default: lf).")
    p.add_argument(
        "--engine",
        choices=[e.value for e in TokenizerEngineName],
        default=TokenizerEngineName.REGEX.value,
        help="Tokenizer backend (php_cli requires a php binary).",
    )
    p.add_argument("--php-binary", default="php", help="php executable for --engine php_cli.")
    p.add_argument("--timeout-s", type=float, default=30.0, help="php_cli tokenizer timeout in seconds.")
    p.add_argument("--dry-run", action="store_true", help="Report changes without writing files.")
    p.add_argument("--diff", action="store_true", help="Print a unified diff for every changed file.")
    p.add_argument("--report", type=Path, default=None, help="Write a JSON run report to this file.")
    p.add_argument("--describe", action="store_true", help="Print the rule definition and samples, then exit.")
    return p


def raw_options_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """
    Options from --config, overridden by the explicit command-line flags.
    """

    raw: dict[str, Any] = {}
    if args.config is not None:
        loaded = json.loads(args.config.read_text(encoding="utf-8"))
        if not isinstance(loaded, dict):
            raise ValueError(f"{str(args.config)!r} must contain a JSON object")
        raw.update(loaded)

    if args.sort_algorithm is not None:
        raw["sort_algorithm"] = args.sort_algorithm
    if args.imports_order is not None:
        raw["imports_order"] = [v.strip() for v in args.imports_order.split(",") if v.strip()]
    if args.case_sensitive is not None:
        raw["case_sensitive"] = args.case_sensitive
    if args.namespace_priority is not None:
        raw["namespace_priority"] = dict(args.namespace_priority)
    if args.no_namespace_priority is not None:
        raw["no_namespace_priority"] = args.no_namespace_priority
    if args.indent is not None:
        raw["indent"] = _INDENTS[args.indent]
    if args.line_ending is not None:
        raw["line_ending"] = _LINE_ENDINGS[args.line_ending]
    return raw


def describe() -> str:
    definition = get_definition()
    lines = [f"{definition.name} (priority {definition.priority})", definition.summary, "", "Options:"]
    for name, text in definition.options.items():
        lines.append(f"  {name}: {text}")

    for n, sample in enumerate(definition.code_samples, start=1):
        loaded = load_config(sample.configuration)
        if loaded.config is None:
            raise OrderedImportsConfigError(f"Invalid configuration for example #{n}: {' '.join(loaded.errors)}")
        result = fix_source(code=sample.code, config=loaded.config)
        lines.extend(["", f"Example #{n}. Configuration: {json.dumps(sample.configuration, sort_keys=True)}"])
        diff = difflib.unified_diff(
            sample.code.splitlines(keepends=True),
            result.code.splitlines(keepends=True),
            fromfile="original",
            tofile="new",
        )
        lines.append("".join(diff).rstrip("\n") or "(unchanged)")
    return "\n".join(lines) + "\n"


def _fix_file(
    path: Path,
    *,
    config: OrderedImportsConfig,
    tokenize_config: TokenizeConfig,
    dry_run: bool,
    show_diff: bool,
) -> FixResult:
    code = read_source(path)
    result = fix_source(code=code, config=config, tokenize_config=tokenize_config, source_relpath=str(path))
    result = dataclasses.replace(
        result,
        meta={**result.meta, "source_sha256": sha256_text(code), "fixed_sha256": sha256_text(result.code)},
    )

    if not result.ok:
        for e in result.errors:
            print(f"error: {path}: {e.code}: {e.message}", file=sys.stderr)
        return result

    if result.changed:
        print(f"{'would fix' if dry_run else 'fixed'}: {path}")
        if show_diff:
            sys.stdout.writelines(
                difflib.unified_diff(
                    code.splitlines(keepends=True),
                    result.code.splitlines(keepends=True),
                    fromfile=str(path),
                    tofile=str(path),
                )
            )
        if not dry_run:
            write_source(path, result.code)
    return result


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.describe:
        sys.stdout.write(describe())
        return 0
    if not args.paths:
        parser.error("at least one PATH is required")

    try:
        raw = raw_options_from_args(args)
    except (OSError, ValueError) as e:
        print(f"error: cannot load --config: {e}", file=sys.stderr)
        return 2

    loaded = load_config(raw)
    if not loaded.ok or loaded.config is None:
        for message in loaded.errors:
            print(f"error: {message}", file=sys.stderr)
        return 2

    tokenize_config = TokenizeConfig(
        engine=TokenizerEngineName(args.engine),
        php_binary=args.php_binary,
        timeout_s=args.timeout_s,
    )

    results: list[FixResult] = []
    errors: list[dict[str, Any]] = []
    try:
        files = list(iter_source_files(args.paths))
    except DataAccessError as e:
        files = []
        errors.append({"code": "DATA_ACCESS_ERROR", "message": str(e)})

    for path in files:
        try:
            results.append(
                _fix_file(
                    path,
                    config=loaded.config,
                    tokenize_config=tokenize_config,
                    dry_run=args.dry_run,
                    show_diff=args.diff,
                )
            )
        except DataAccessError as e:
            errors.append({"code": "DATA_ACCESS_ERROR", "message": str(e), "path": str(path)})

    for e in errors:
        print(f"error: {e['message']}", file=sys.stderr)

    if args.report is not None:
        report = build_run_report(results=results, errors=errors, dry_run=args.dry_run)
        write_run_report(report=report, out_file=args.report)

    summary = summarize(results=results, errors=errors)
    print(json.dumps(summary, sort_keys=True))

    if summary["errors"] or summary["files_failed"]:
        return 2
    if args.dry_run and summary["files_changed"]:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
