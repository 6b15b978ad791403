from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

RULE_NAME = "CustomFixer/ordered_imports_group"

# Runs after the rules that add or drop imports, so it sees the final set.
RULE_PRIORITY = -31

RULE_SUMMARY = "Ordering `use` statements."

OPTION_DESCRIPTIONS: dict[str, str] = {
    "sort_algorithm": "Whether the statements should be sorted alphabetically or by length, or not sorted.",
    "imports_order": "Defines the order of import types.",
    "case_sensitive": "Whether the sorting should be case sensitive.",
    "namespace_priority": "Set namespace priority mapping for sorting imports.",
    "no_namespace_priority": "Config priority mapping for sorting imports without full namespace.",
    "indent": "Indentation used when splitting or re-flowing declarations.",
    "line_ending": "Line ending used when splitting declarations or inserting blank lines.",
}

_KINDS_ORDER = ["const", "class", "function"]


@dataclass(frozen=True, slots=True)
class CodeSample:
    code: str
    configuration: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class FixerDefinition:
    name: str
    priority: int
    summary: str
    options: dict[str, str]
    code_samples: list[CodeSample]


CODE_SAMPLES: list[CodeSample] = [
    CodeSample("<?php\nuse function AAC;\nuse const AAB;\nuse AAA;\n"),
    CodeSample("<?php\nuse function Aaa;\nuse const AA;\n", {"case_sensitive": True}),
    CodeSample(
        "<?php\nuse Acme\\Bar;\nuse Bar1;\nuse Acme;\nuse Bar;\n",
        {"sort_algorithm": "length"},
    ),
    CodeSample(
        "<?php\n"
        "use const AAAA;\n"
        "use const BBB;\n"
        "\n"
        "use Bar;\n"
        "use AAC;\n"
        "use Acme;\n"
        "\n"
        "use function CCC\\AA;\n"
        "use function DDD;\n",
        {"sort_algorithm": "length", "imports_order": _KINDS_ORDER},
    ),
    CodeSample(
        "<?php\n"
        "use const BBB;\n"
        "use const AAAA;\n"
        "\n"
        "use Acme;\n"
        "use AAC;\n"
        "use Bar;\n"
        "\n"
        "use function DDD;\n"
        "use function CCC\\AA;\n",
        {"sort_algorithm": "alpha", "imports_order": _KINDS_ORDER},
    ),
    CodeSample(
        "<?php\n"
        "use const BBB;\n"
        "use const AAAA;\n"
        "\n"
        "use function DDD;\n"
        "use function CCC\\AA;\n"
        "\n"
        "use Acme;\n"
        "use AAC;\n"
        "use Bar;\n",
        {"sort_algorithm": "none", "imports_order": _KINDS_ORDER},
    ),
]


def get_definition() -> FixerDefinition:
    return FixerDefinition(
        name=RULE_NAME,
        priority=RULE_PRIORITY,
        summary=RULE_SUMMARY,
        options=dict(OPTION_DESCRIPTIONS),
        code_samples=list(CODE_SAMPLES),
    )
