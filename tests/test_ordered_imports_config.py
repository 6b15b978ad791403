from __future__ import annotations

import unittest

from contracts.imports import ImportKind, SortAlgorithm
from ordered_imports.config import (
    OrderedImportsConfig,
    OrderedImportsConfigError,
    WhitespacesConfig,
    load_config,
    natural_language_join,
)


class TestOrderedImportsConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = OrderedImportsConfig()
        self.assertEqual(cfg.sort_algorithm, SortAlgorithm.ALPHA)
        self.assertIsNone(cfg.imports_order)
        self.assertFalse(cfg.case_sensitive)
        self.assertEqual(cfg.namespace_priority, {})
        self.assertIsNone(cfg.no_namespace_priority)
        self.assertEqual(cfg.whitespaces, WhitespacesConfig(indent="    ", line_ending="\n"))

    def test_plain_strings_are_coerced(self) -> None:
        cfg = OrderedImportsConfig(sort_algorithm="length", imports_order=["function", "const", "class"])
        self.assertEqual(cfg.sort_algorithm, SortAlgorithm.LENGTH)
        self.assertEqual(cfg.imports_order, (ImportKind.FUNCTION, ImportKind.CONST, ImportKind.CLASS))

    def test_invalid_sort_algorithm_raises(self) -> None:
        with self.assertRaises(OrderedImportsConfigError) as ctx:
            OrderedImportsConfig(sort_algorithm="invalid_sort")
        self.assertIn("invalid_sort", str(ctx.exception))

    def test_incomplete_imports_order_names_the_missing_kind(self) -> None:
        with self.assertRaises(ValueError) as ctx:
            OrderedImportsConfig(imports_order=["const", "class"])
        self.assertIn('Missing sort type "function".', str(ctx.exception))

    def test_unknown_and_duplicate_kinds(self) -> None:
        with self.assertRaises(OrderedImportsConfigError) as ctx:
            OrderedImportsConfig(imports_order=["const", "class", "function", "trait"])
        self.assertIn('Unknown sort type "trait".', str(ctx.exception))

        with self.assertRaises(OrderedImportsConfigError) as ctx:
            OrderedImportsConfig(imports_order=["const", "class", "function", "class"])
        self.assertIn('Duplicate sort type "class".', str(ctx.exception))

    def test_whitespaces_validation(self) -> None:
        with self.assertRaises(OrderedImportsConfigError):
            WhitespacesConfig(indent="   ")
        with self.assertRaises(OrderedImportsConfigError):
            WhitespacesConfig(line_ending="\r")
        self.assertEqual(WhitespacesConfig(indent="\t", line_ending="\r\n").indent, "\t")

    def test_to_dict(self) -> None:
        cfg = OrderedImportsConfig(
            sort_algorithm=SortAlgorithm.NAMESPACE,
            namespace_priority={"App\\": 1},
            no_namespace_priority=0,
        )
        self.assertEqual(
            cfg.to_dict(),
            {
                "sort_algorithm": "namespace",
                "imports_order": None,
                "case_sensitive": False,
                "namespace_priority": {"App\\": 1},
                "no_namespace_priority": 0,
                "indent": "    ",
                "line_ending": "\n",
            },
        )


class TestLoadConfig(unittest.TestCase):
    def test_valid(self) -> None:
        r = load_config(
            {
                "sort_algorithm": "namespace",
                "imports_order": ["const", "class", "function"],
                "namespace_priority": {"App\\": 1, "DI\\": -5},
                "line_ending": "\r\n",
            }
        )
        self.assertTrue(r.ok)
        assert r.config is not None
        self.assertEqual(r.config.namespace_priority, {"App\\": 1, "DI\\": -5})
        self.assertEqual(r.config.whitespaces.line_ending, "\r\n")
        self.assertEqual(r.errors, [])

    def test_null_namespace_priority_is_empty(self) -> None:
        r = load_config({"namespace_priority": None})
        self.assertTrue(r.ok)
        assert r.config is not None
        self.assertEqual(r.config.namespace_priority, {})

    def test_every_problem_is_reported(self) -> None:
        r = load_config(
            {
                "sort_algorithm": "random",
                "imports_order": ["class"],
                "case_sensitive": "yes",
                "no_namespace_priority": 1.5,
                "indent": "xx",
                "colour": "blue",
            }
        )
        self.assertFalse(r.ok)
        self.assertIsNone(r.config)
        text = "\n".join(r.errors)
        self.assertIn('Unknown option "colour".', text)
        self.assertIn('"sort_algorithm"', text)
        self.assertIn('Missing sort types "const" and "function".', text)
        self.assertIn('"case_sensitive" must be a boolean', text)
        self.assertIn('"no_namespace_priority" must be an integer or null', text)
        self.assertIn('Invalid "indent" param', text)
        self.assertEqual(len(r.errors), 6)

    def test_bad_priority_values(self) -> None:
        r = load_config({"namespace_priority": {"App\\": "high", "": 1}})
        self.assertFalse(r.ok)
        self.assertEqual(len(r.errors), 2)


class TestNaturalLanguageJoin(unittest.TestCase):
    def test_join(self) -> None:
        self.assertEqual(natural_language_join([]), "")
        self.assertEqual(natural_language_join(["a"]), '"a"')
        self.assertEqual(natural_language_join(["a", "b", "c"]), '"a", "b" and "c"')


if __name__ == "__main__":
    unittest.main()
