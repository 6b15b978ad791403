from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from contracts.imports import ImportKind, SortAlgorithm

OPTION_NAMES = (
    "sort_algorithm",
    "imports_order",
    "case_sensitive",
    "namespace_priority",
    "no_namespace_priority",
    "indent",
    "line_ending",
)

SUPPORTED_INDENTS = ("  ", "    ", "\t")
SUPPORTED_LINE_ENDINGS = ("\n", "\r\n")


class OrderedImportsConfigError(ValueError):
    pass


def natural_language_join(names: list[str], wrapper: str = '"') -> str:
    quoted = [f"{wrapper}{n}{wrapper}" for n in names]
    if len(quoted) <= 1:
        return "".join(quoted)
    return ", ".join(quoted[:-1]) + " and " + quoted[-1]


def _sort_type_message(prefix: str, names: list[str]) -> str:
    noun = "type" if len(names) == 1 else "types"
    return f"{prefix} sort {noun} {natural_language_join(names)}."


def _whitespace_errors(indent: Any, line_ending: Any) -> list[str]:
    errors: list[str] = []
    if indent not in SUPPORTED_INDENTS:
        errors.append('Invalid "indent" param, expected tab or two or four spaces.')
    if line_ending not in SUPPORTED_LINE_ENDINGS:
        errors.append('Invalid "line_ending" param, expected "\\n" or "\\r\\n".')
    return errors


def _field_errors(
    *,
    sort_algorithm: Any,
    imports_order: Any,
    case_sensitive: Any,
    namespace_priority: Any,
    no_namespace_priority: Any,
) -> list[str]:
    errors: list[str] = []

    if not isinstance(sort_algorithm, SortAlgorithm):
        accepted = ", ".join(f'"{a.value}"' for a in SortAlgorithm)
        errors.append(
            f'The option "sort_algorithm" with value {sort_algorithm!r} is invalid. '
            f"Accepted values are: {accepted}."
        )

    if imports_order is not None:
        if not isinstance(imports_order, (list, tuple)):
            errors.append('The option "imports_order" must be a list of sort types or null.')
        else:
            missing = [k.value for k in ImportKind if k not in imports_order]
            if missing:
                errors.append(_sort_type_message("Missing", missing))

            unknown = [str(v) for v in imports_order if not isinstance(v, ImportKind)]
            if unknown:
                errors.append(_sort_type_message("Unknown", unknown))

            seen: set[ImportKind] = set()
            duplicated: list[str] = []
            for v in imports_order:
                if isinstance(v, ImportKind):
                    if v in seen and v.value not in duplicated:
                        duplicated.append(v.value)
                    seen.add(v)
            if duplicated:
                errors.append(_sort_type_message("Duplicate", duplicated))

    if not isinstance(case_sensitive, bool):
        errors.append('The option "case_sensitive" must be a boolean.')

    if not isinstance(namespace_priority, Mapping):
        errors.append('The option "namespace_priority" must be a mapping of prefix to integer or null.')
    else:
        for prefix, priority in namespace_priority.items():
            if not isinstance(prefix, str) or prefix == "":
                errors.append(f'Invalid namespace priority prefix {prefix!r}, expected a non-empty string.')
            if isinstance(priority, bool) or not isinstance(priority, int):
                errors.append(f'Invalid priority {priority!r} for prefix {prefix!r}, expected an integer.')

    if no_namespace_priority is not None and (
        isinstance(no_namespace_priority, bool) or not isinstance(no_namespace_priority, int)
    ):
        errors.append('The option "no_namespace_priority" must be an integer or null.')

    return errors


def _coerce_sort_algorithm(value: Any) -> Any:
    if isinstance(value, str) and not isinstance(value, SortAlgorithm):
        try:
            return SortAlgorithm(value)
        except ValueError:
            return value
    return value


def _coerce_imports_order(value: Any) -> Any:
    if not isinstance(value, (list, tuple)):
        return value
    out: list[Any] = []
    for v in value:
        try:
            out.append(ImportKind(v) if isinstance(v, str) else v)
        except ValueError:
            out.append(v)
    return tuple(out)


@dataclass(frozen=True, slots=True)
class WhitespacesConfig:
    """
    Indentation and line ending of the host's style configuration.

    Supplied by the caller, never inferred from the file being fixed.
    """

    indent: str = "    "
    line_ending: str = "\n"

    def validate(self) -> None:
        errors = _whitespace_errors(self.indent, self.line_ending)
        if errors:
            raise OrderedImportsConfigError(errors[0])

    def __post_init__(self) -> None:
        self.validate()


@dataclass(frozen=True, slots=True)
class OrderedImportsConfig:
    """
    Import ordering parameters, immutable for the duration of a run.

    `imports_order`, when set, must name every ImportKind exactly once.
    `no_namespace_priority` applies to names without a namespace separator;
    None means "not configured", which is distinct from 0.
    """

    sort_algorithm: SortAlgorithm = SortAlgorithm.ALPHA
    imports_order: tuple[ImportKind, ...] | None = None
    case_sensitive: bool = False
    namespace_priority: dict[str, int] = field(default_factory=dict)
    no_namespace_priority: int | None = None
    whitespaces: WhitespacesConfig = field(default_factory=WhitespacesConfig)

    def validate(self) -> None:
        errors = _field_errors(
            sort_algorithm=self.sort_algorithm,
            imports_order=self.imports_order,
            case_sensitive=self.case_sensitive,
            namespace_priority=self.namespace_priority,
            no_namespace_priority=self.no_namespace_priority,
        )
        if errors:
            raise OrderedImportsConfigError(" ".join(errors))

    def __post_init__(self) -> None:
        # Plain option strings ("alpha", "const", ...) are accepted as well as enum members.
        object.__setattr__(self, "sort_algorithm", _coerce_sort_algorithm(self.sort_algorithm))
        if self.imports_order is not None:
            object.__setattr__(self, "imports_order", _coerce_imports_order(self.imports_order))
        self.validate()

    def to_dict(self) -> dict[str, Any]:
        return {
            "sort_algorithm": self.sort_algorithm.value,
            "imports_order": None if self.imports_order is None else [k.value for k in self.imports_order],
            "case_sensitive": self.case_sensitive,
            "namespace_priority": dict(self.namespace_priority),
            "no_namespace_priority": self.no_namespace_priority,
            "indent": self.whitespaces.indent,
            "line_ending": self.whitespaces.line_ending,
        }


@dataclass(frozen=True, slots=True)
class ConfigLoadResult:
    ok: bool
    config: OrderedImportsConfig | None
    errors: list[str]


def load_config(raw: Mapping[str, Any]) -> ConfigLoadResult:
    """
    Validate raw option values (e.g. parsed JSON) into an OrderedImportsConfig.

    Every problem is reported; no partially-validated configuration is returned.
    """

    errors: list[str] = []

    unknown_options = sorted(str(k) for k in raw if k not in OPTION_NAMES)
    if unknown_options:
        noun = "option" if len(unknown_options) == 1 else "options"
        errors.append(
            f"Unknown {noun} {natural_language_join(unknown_options)}. "
            f"Defined options are: {natural_language_join(list(OPTION_NAMES))}."
        )

    sort_algorithm = _coerce_sort_algorithm(raw.get("sort_algorithm", SortAlgorithm.ALPHA))
    imports_order = _coerce_imports_order(raw.get("imports_order"))
    case_sensitive = raw.get("case_sensitive", False)
    namespace_priority = raw.get("namespace_priority")
    if namespace_priority is None:
        namespace_priority = {}
    no_namespace_priority = raw.get("no_namespace_priority")
    indent = raw.get("indent", "    ")
    line_ending = raw.get("line_ending", "\n")

    errors.extend(
        _field_errors(
            sort_algorithm=sort_algorithm,
            imports_order=imports_order,
            case_sensitive=case_sensitive,
            namespace_priority=namespace_priority,
            no_namespace_priority=no_namespace_priority,
        )
    )
    errors.extend(_whitespace_errors(indent, line_ending))

    if errors:
        return ConfigLoadResult(ok=False, config=None, errors=errors)

    config = OrderedImportsConfig(
        sort_algorithm=sort_algorithm,
        imports_order=imports_order,
        case_sensitive=case_sensitive,
        namespace_priority=dict(namespace_priority),
        no_namespace_priority=no_namespace_priority,
        whitespaces=WhitespacesConfig(indent=indent, line_ending=line_ending),
    )
    return ConfigLoadResult(ok=True, config=config, errors=[])
