from __future__ import annotations

from functools import cmp_to_key, partial
from typing import Callable, Iterable, Mapping

from contracts.imports import ImportKind, ImportRecord, SortAlgorithm

from .config import OrderedImportsConfig

Comparator = Callable[[ImportRecord, ImportRecord], int]


def _cmp(a: object, b: object) -> int:
    return -1 if a < b else (1 if a > b else 0)  # type: ignore[operator]


def _compare_strings(a: str, b: str, *, case_sensitive: bool) -> int:
    if not case_sensitive:
        a, b = a.lower(), b.lower()
    return _cmp(a, b)


def _alpha_key(record: ImportRecord) -> str:
    # Segments compare as words: "Foo\Bar" sorts before "Foo2\Bar" and "FooBar".
    return record.namespace_path.replace("\\", " ")


def _length_key(record: ImportRecord) -> str:
    prefix = "" if record.kind == ImportKind.CLASS else f"{record.kind.value} "
    return prefix + record.namespace_path


def compare_alpha(a: ImportRecord, b: ImportRecord, *, case_sensitive: bool) -> int:
    return _compare_strings(_alpha_key(a), _alpha_key(b), case_sensitive=case_sensitive)


def compare_length(a: ImportRecord, b: ImportRecord, *, case_sensitive: bool) -> int:
    ka = _length_key(a)
    kb = _length_key(b)
    # Byte length, so multi-byte names measure the same as on disk.
    la = len(ka.encode("utf-8"))
    lb = len(kb.encode("utf-8"))
    if la != lb:
        return -1 if la < lb else 1
    return _compare_strings(ka, kb, case_sensitive=case_sensitive)


def namespace_priority(
    path: str,
    *,
    priority_map: Mapping[str, int],
    no_namespace_priority: int | None,
) -> tuple[int, int]:
    """
    Sort key bucket for `path`, compared ascending.

    Names without a separator use `no_namespace_priority`; when that is not
    configured they land in a bucket ahead of every prioritized name. Otherwise
    the longest matching prefix wins, unmatched paths score 0.
    """

    if "\\" not in path:
        if no_namespace_priority is None:
            return (0, 0)
        return (1, no_namespace_priority)

    matched_priority = 0
    matched_length = 0
    for prefix, priority in priority_map.items():
        if path.startswith(prefix) and len(prefix) > matched_length:
            matched_length = len(prefix)
            matched_priority = priority
    return (1, matched_priority)


def compare_namespace(
    a: ImportRecord,
    b: ImportRecord,
    *,
    case_sensitive: bool,
    priority_map: Mapping[str, int],
    no_namespace_priority: int | None,
) -> int:
    pa = namespace_priority(a.namespace_path, priority_map=priority_map, no_namespace_priority=no_namespace_priority)
    pb = namespace_priority(b.namespace_path, priority_map=priority_map, no_namespace_priority=no_namespace_priority)
    if pa != pb:
        return _cmp(pa, pb)
    return compare_alpha(a, b, case_sensitive=case_sensitive)


def resolve_comparator(config: OrderedImportsConfig) -> Comparator | None:
    """
    Comparator for the configured algorithm; None means "keep source order".
    """

    if config.sort_algorithm == SortAlgorithm.ALPHA:
        return partial(compare_alpha, case_sensitive=config.case_sensitive)
    if config.sort_algorithm == SortAlgorithm.LENGTH:
        return partial(compare_length, case_sensitive=config.case_sensitive)
    if config.sort_algorithm == SortAlgorithm.NAMESPACE:
        return partial(
            compare_namespace,
            case_sensitive=config.case_sensitive,
            priority_map=dict(config.namespace_priority),
            no_namespace_priority=config.no_namespace_priority,
        )
    if config.sort_algorithm == SortAlgorithm.NONE:
        return None
    raise ValueError(f"Unsupported sort algorithm: {config.sort_algorithm}")


def sort_records(records: Iterable[ImportRecord], comparator: Comparator | None) -> list[ImportRecord]:
    # sorted() is stable, so equal records keep their source order.
    if comparator is None:
        return list(records)
    return sorted(records, key=cmp_to_key(comparator))
