from __future__ import annotations

import re
import unittest
from typing import Any
from unittest.mock import patch

from contracts.imports import FixResult
from php_tokens.contracts import TokenizeError, TokenizeResult, TokenizerEngineName
from php_tokens.module import stream_from_code
from ordered_imports.config import OrderedImportsConfig, WhitespacesConfig
from ordered_imports.definition import CODE_SAMPLES, RULE_NAME, RULE_PRIORITY, get_definition
from ordered_imports.fixer import fix_source, is_candidate

_ORDER = ["const", "class", "function"]
_DECLARATION_RE = re.compile(r"^\s*use\s+(?:(const|function)\s+)?([^;]+);", re.MULTILINE)


def _config(**options: Any) -> OrderedImportsConfig:
    whitespaces = options.pop("whitespaces", WhitespacesConfig())
    return OrderedImportsConfig(whitespaces=whitespaces, **options)


def _declarations(code: str) -> list[tuple[str, str]]:
    return [(m.group(1) or "class", m.group(2).strip()) for m in _DECLARATION_RE.finditer(code)]


class _FixerTestCase(unittest.TestCase):
    def fix(self, code: str, **options: Any) -> str:
        config = _config(**options)
        result = fix_source(code=code, config=config)
        self.assertTrue(result.ok, result.errors)

        again = fix_source(code=result.code, config=config)
        self.assertEqual(again.code, result.code, "second run must not change anything")
        self.assertFalse(again.changed)
        return result.code


class TestFixerScenarios(_FixerTestCase):
    def test_simple_alphabetical(self) -> None:
        self.assertEqual(self.fix("<?php\nuse Z;\nuse A;", sort_algorithm="alpha"), "<?php\nuse A;\nuse Z;")

    def test_imports_order(self) -> None:
        source = "<?php\nuse function Zend\\foo;\nuse const App\\BAR;\nuse App\\Zed;\nuse App\\Aaa;"
        expected = "<?php\nuse const App\\BAR;\nuse App\\Aaa;\nuse App\\Zed;\n\nuse function Zend\\foo;"
        self.assertEqual(self.fix(source, sort_algorithm="alpha", imports_order=_ORDER), expected)

    def test_blank_lines_between_groups(self) -> None:
        source = (
            "<?php\n"
            "use DI\\ContainerBuilder;\n"
            "use Doctrine\\DBAL\\Types\\Type;\n"
            "use Doctrine\\ORM\\EntityManager;\n"
            "use Monolog\\Logger;"
        )
        expected = (
            "<?php\n"
            "use DI\\ContainerBuilder;\n"
            "\n"
            "use Doctrine\\DBAL\\Types\\Type;\n"
            "use Doctrine\\ORM\\EntityManager;\n"
            "\n"
            "use Monolog\\Logger;"
        )
        self.assertEqual(self.fix(source, sort_algorithm="alpha"), expected)

    def test_namespace_priority(self) -> None:
        source = "<?php\nuse App\\Zed;\nuse App\\Controller\\Foo;\nuse DI\\ContainerBuilder;\nuse App\\Aaa;"
        expected = "<?php\nuse DI\\ContainerBuilder;\n\nuse App\\Aaa;\nuse App\\Controller\\Foo;\nuse App\\Zed;"
        out = self.fix(source, sort_algorithm="namespace", namespace_priority={"App\\": 1, "DI\\": -5})
        self.assertEqual(out, expected)

    def test_blank_line_without_sorting(self) -> None:
        source = "<?php\nuse A\\One;\nuse A\\Two;\nuse B\\Three;\n"
        expected = "<?php\nuse A\\One;\nuse A\\Two;\n\nuse B\\Three;\n"
        self.assertEqual(self.fix(source, sort_algorithm="none"), expected)

    def test_kinds_mix_without_imports_order(self) -> None:
        source = "<?php\nuse function AAC;\nuse const AAB;\nuse AAA;\n"
        self.assertEqual(self.fix(source), "<?php\nuse AAA;\nuse const AAB;\nuse function AAC;\n")

    def test_length(self) -> None:
        source = "<?php\nuse Acme\\Bar;\nuse Bar1;\nuse Acme;\nuse Bar;\n"
        expected = "<?php\nuse Bar;\nuse Acme;\nuse Bar1;\n\nuse Acme\\Bar;\n"
        self.assertEqual(self.fix(source, sort_algorithm="length"), expected)

    def test_none_with_imports_order_only_groups_kinds(self) -> None:
        source = "<?php\nuse function DDD;\nuse Bar;\nuse const BBB;\nuse Acme;\nuse const AAAA;\n"
        expected = "<?php\nuse const BBB;\nuse const AAAA;\nuse Bar;\nuse Acme;\nuse function DDD;\n"
        self.assertEqual(self.fix(source, sort_algorithm="none", imports_order=_ORDER), expected)

    def test_existing_blank_line_stays_in_its_slot(self) -> None:
        source = "<?php\nuse B\\X;\n\nuse A\\Y;\nuse A\\Z;\n"
        expected = "<?php\nuse A\\Y;\n\nuse A\\Z;\n\nuse B\\X;\n"
        self.assertEqual(self.fix(source, sort_algorithm="alpha"), expected)


class TestStatementForms(_FixerTestCase):
    def test_comma_list_is_sorted_in_place(self) -> None:
        self.assertEqual(self.fix("<?php\nuse B, A;\n"), "<?php\nuse A, B;\n")

    def test_comma_list_is_split_when_kinds_change(self) -> None:
        source = "<?php\nuse function b, a;\nuse const C;\n"
        expected = "<?php\nuse const C;\nuse function a;\nuse function b;\n"
        self.assertEqual(self.fix(source, imports_order=_ORDER), expected)

    def test_split_statement_keeps_indentation(self) -> None:
        source = "<?php\nnamespace Foo {\n    use function b, a;\n    use const C;\n}\n"
        expected = "<?php\nnamespace Foo {\n    use const C;\n    use function a;\n    use function b;\n}\n"
        self.assertEqual(self.fix(source, imports_order=_ORDER), expected)

    def test_group_parts_are_sorted(self) -> None:
        source = "<?php\nuse Foo\\{C, A, B};\nuse Bar;\n"
        expected = "<?php\nuse Bar;\n\nuse Foo\\{A, B, C};\n"
        self.assertEqual(self.fix(source), expected)

    def test_multiline_group_keeps_layout(self) -> None:
        source = "<?php\nuse Foo\\{\n    Zed,\n    Bar,\n};\n"
        expected = "<?php\nuse Foo\\{\n    Bar,\n    Zed,\n};\n"
        self.assertEqual(self.fix(source), expected)

    def test_group_with_qualifier(self) -> None:
        source = "<?php\nuse function Foo\\{b, a};\nuse Bar;\n"
        expected = "<?php\nuse Bar;\n\nuse function Foo\\{a, b};\n"
        self.assertEqual(self.fix(source, imports_order=_ORDER), expected)

    def test_sorted_group_is_verbatim(self) -> None:
        source = "<?php\nuse Foo\\{ A,B ,C };\n"
        self.assertEqual(self.fix(source), source)

    def test_none_leaves_groups_alone(self) -> None:
        source = "<?php\nuse Foo\\{C, A};\n"
        self.assertEqual(self.fix(source, sort_algorithm="none"), source)

    def test_group_with_line_comment_is_not_reflowed(self) -> None:
        source = "<?php\nuse Foo\\{\n    B, // second\n    A\n};\n"
        self.assertEqual(self.fix(source), source)

    def test_close_tag_terminator(self) -> None:
        source = "<?php use B ?>\n<?php use A;"
        self.assertEqual(self.fix(source), "<?php use A ?>\n<?php use B;")


class TestScopes(_FixerTestCase):
    def test_braced_namespaces_are_independent(self) -> None:
        source = (
            "<?php\n"
            "namespace Foo {\n"
            "    use B;\n"
            "    use A;\n"
            "}\n"
            "namespace Bar {\n"
            "    use D;\n"
            "    use C;\n"
            "}\n"
        )
        expected = source.replace("use B;\n    use A;", "use A;\n    use B;").replace(
            "use D;\n    use C;", "use C;\n    use D;"
        )
        self.assertEqual(self.fix(source), expected)

    def test_code_splits_subgroups(self) -> None:
        source = "<?php\nuse Z;\nuse Y;\n$x = 1;\nuse B;\nuse A;\n"
        expected = "<?php\nuse Y;\nuse Z;\n$x = 1;\nuse A;\nuse B;\n"
        self.assertEqual(self.fix(source), expected)

    def test_comments_do_not_split_subgroups(self) -> None:
        source = "<?php\nuse B;\n// comment\nuse A;\n"
        self.assertEqual(self.fix(source), "<?php\nuse A;\n// comment\nuse B;\n")

    def test_trait_and_closure_use_untouched(self) -> None:
        source = (
            "<?php\n"
            "use B;\n"
            "use A;\n"
            "\n"
            "class Foo\n"
            "{\n"
            "    use Zed, Alpha;\n"
            "\n"
            "    public function bar()\n"
            "    {\n"
            "        return function () use ($z, $a) {};\n"
            "    }\n"
            "}\n"
        )
        self.assertEqual(self.fix(source), source.replace("use B;\nuse A;", "use A;\nuse B;"))

    def test_only_import_tokens_change(self) -> None:
        source = "<?php\n/** doc */\ndeclare(strict_types=1);\n\nuse B;\nuse A;\n\n$y = \"use Q;\";\n"
        out = self.fix(source)
        self.assertEqual(out, source.replace("use B;\nuse A;", "use A;\nuse B;"))

    def test_crlf_line_endings(self) -> None:
        source = "<?php\r\nuse B\\X;\r\nuse A\\Y;\r\n"
        expected = "<?php\r\nuse A\\Y;\r\n\r\nuse B\\X;\r\n"
        out = self.fix(source, whitespaces=WhitespacesConfig(line_ending="\r\n"))
        self.assertEqual(out, expected)


class TestProperties(_FixerTestCase):
    _SOURCE = (
        "<?php\n"
        "namespace App;\n"
        "\n"
        "use function Zend\\foo, Zend\\bar;\n"
        "use const App\\BAR;\n"
        "use App\\Zed, Acme;\n"
        "use Foo\\{Y, X};\n"
        "use app\\aaa;\n"
        "use DI\\ContainerBuilder;\n"
        "\n"
        "final class Service {}\n"
    )

    def _configs(self) -> list[dict[str, Any]]:
        out: list[dict[str, Any]] = []
        for algorithm in ("alpha", "length", "namespace", "none"):
            for order in (None, _ORDER):
                for case_sensitive in (False, True):
                    out.append(
                        {
                            "sort_algorithm": algorithm,
                            "imports_order": order,
                            "case_sensitive": case_sensitive,
                            "namespace_priority": {"App\\": 1, "DI\\": -5},
                        }
                    )
        return out

    def test_idempotent_and_preserves_declarations(self) -> None:
        def _normalized(code: str) -> list[tuple[str, str]]:
            out = []
            for kind, names in _declarations(code):
                if "{" in names:
                    prefix, _, body = names.partition("{")
                    parts = sorted(p.strip() for p in body.rstrip("}").split(","))
                    out.append((kind, prefix + "{" + ",".join(parts) + "}"))
                else:
                    out.extend((kind, n.strip()) for n in names.split(","))
            return sorted(out)

        for options in self._configs():
            with self.subTest(**{k: str(v) for k, v in options.items()}):
                out = self.fix(self._SOURCE, **options)
                self.assertEqual(_normalized(out), _normalized(self._SOURCE))
                self.assertTrue(out.endswith("\n\nfinal class Service {}\n"))

    def test_kind_order(self) -> None:
        rank = {kind: i for i, kind in enumerate(_ORDER)}
        for algorithm in ("alpha", "length", "namespace", "none"):
            with self.subTest(sort_algorithm=algorithm):
                out = self.fix(self._SOURCE, sort_algorithm=algorithm, imports_order=_ORDER)
                kinds = [rank[kind] for kind, _ in _declarations(out)]
                self.assertEqual(kinds, sorted(kinds))

    def test_alpha_order(self) -> None:
        out = self.fix(self._SOURCE, sort_algorithm="alpha")
        keys = []
        for _, names in _declarations(out):
            # A brace group sorts on its prefix.
            for name in [names.split("{")[0]] if "{" in names else names.split(","):
                keys.append(name.strip().replace("\\", " ").lower())
        self.assertEqual(keys, sorted(keys))


class TestFixerSurface(unittest.TestCase):
    def test_is_candidate(self) -> None:
        self.assertTrue(is_candidate(stream_from_code("<?php use Foo\\Bar;")))
        self.assertFalse(is_candidate(stream_from_code("<?php class A { use T; }")))
        self.assertFalse(is_candidate(stream_from_code("<?php echo 1;")))

    def test_non_candidate_is_returned_unchanged(self) -> None:
        result = fix_source(code="<?php echo 1;\n")
        self.assertTrue(result.ok)
        self.assertFalse(result.changed)
        self.assertFalse(result.meta["candidate"])

    def test_meta_counts(self) -> None:
        result = fix_source(code="<?php\nuse B\\X;\nuse A\\Y;\n$z = 1;\nuse C;\n")
        self.assertTrue(result.changed)
        self.assertEqual(result.meta["rule"], RULE_NAME)
        self.assertEqual(
            result.meta["counts"],
            {
                "namespace_runs": 1,
                "subgroups": 2,
                "records": 3,
                "slots_changed": 2,
                "blank_lines_inserted": 2,
            },
        )
        payload = result.to_dict()
        self.assertNotIn("code", payload)
        self.assertEqual(payload["meta"]["config"]["sort_algorithm"], "alpha")

    def test_tokenizer_failure_returns_input(self) -> None:
        failed = TokenizeResult(
            ok=False,
            engine=TokenizerEngineName.REGEX,
            tokens=[],
            errors=[TokenizeError(code="TOKENIZE_ROUNDTRIP_MISMATCH", message="boom")],
            meta={"backend": "regex"},
        )
        with patch("ordered_imports.fixer.tokenize_source", return_value=failed):
            result: FixResult = fix_source(code="<?php\nuse B;\nuse A;\n")
        self.assertFalse(result.ok)
        self.assertEqual(result.code, "<?php\nuse B;\nuse A;\n")
        self.assertEqual(result.errors[0].code, "TOKENIZE_ROUNDTRIP_MISMATCH")

    def test_unterminated_import(self) -> None:
        result = fix_source(code="<?php\nuse B;\nuse A")
        self.assertFalse(result.ok)
        self.assertEqual(result.errors[0].code, "FIX_UNTERMINATED_IMPORT")
        self.assertEqual(result.code, "<?php\nuse B;\nuse A")


class TestDefinition(unittest.TestCase):
    def test_name_and_priority(self) -> None:
        self.assertEqual(RULE_NAME, "CustomFixer/ordered_imports_group")
        self.assertEqual(RULE_PRIORITY, -31)
        definition = get_definition()
        self.assertEqual(definition.summary, "Ordering `use` statements.")
        self.assertEqual(set(definition.options), {
            "sort_algorithm",
            "imports_order",
            "case_sensitive",
            "namespace_priority",
            "no_namespace_priority",
            "indent",
            "line_ending",
        })

    def test_samples_are_valid_and_stable(self) -> None:
        for sample in CODE_SAMPLES:
            with self.subTest(configuration=sample.configuration):
                config = OrderedImportsConfig(**sample.configuration)
                first = fix_source(code=sample.code, config=config)
                self.assertTrue(first.ok)
                self.assertEqual(fix_source(code=first.code, config=config).code, first.code)


if __name__ == "__main__":
    unittest.main()
