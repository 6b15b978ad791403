from __future__ import annotations

import json
import subprocess
import unittest
from unittest.mock import patch

from contracts.tokens import Token, TokenKind
from php_tokens.contracts import TokenizeConfig, TokenizerEngineName
from php_tokens.engines.php_cli import PhpCliEngine, map_php_tokens
from php_tokens.module import tokenize_source

_CODE = "<?php\nuse Foo\\Bar;\n"
_ROWS = [
    ["T_OPEN_TAG", "<?php\n"],
    ["T_USE", "use"],
    ["T_WHITESPACE", " "],
    ["T_NAME_QUALIFIED", "Foo\\Bar"],
    [None, ";"],
    ["T_WHITESPACE", "\n"],
]


def _completed(stdout: str, returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["php"], returncode=returncode, stdout=stdout, stderr=stderr)


class TestMapPhpTokens(unittest.TestCase):
    def test_qualified_names_are_split(self) -> None:
        tokens = map_php_tokens(_ROWS)
        self.assertEqual(
            tokens[3:6],
            [
                Token(TokenKind.NAME, "Foo"),
                Token(TokenKind.NS_SEPARATOR, "\\"),
                Token(TokenKind.NAME, "Bar"),
            ],
        )
        self.assertEqual(tokens[1], Token(TokenKind.USE, "use"))
        self.assertEqual(tokens[6], Token(TokenKind.PUNCT, ";"))

    def test_keywords_and_operators(self) -> None:
        tokens = map_php_tokens([["T_FUNCTION", "function"], ["T_OBJECT_OPERATOR", "->"], ["T_NAMESPACE", "namespace"]])
        self.assertEqual(
            [t.kind for t in tokens],
            [TokenKind.NAME, TokenKind.PUNCT, TokenKind.NAMESPACE],
        )


class TestPhpCliEngine(unittest.TestCase):
    def setUp(self) -> None:
        self.config = TokenizeConfig(engine=TokenizerEngineName.PHP_CLI, php_binary="php8", timeout_s=5.0)

    def test_success_is_classified_like_the_regex_engine(self) -> None:
        with patch("php_tokens.engines.php_cli.subprocess.run", return_value=_completed(json.dumps(_ROWS))) as run:
            result = tokenize_source(code=_CODE, config=self.config)

        self.assertTrue(result.ok)
        self.assertEqual(result.engine, TokenizerEngineName.PHP_CLI)
        self.assertEqual("".join(t.content for t in result.tokens), _CODE)
        self.assertEqual(result.tokens, tokenize_source(code=_CODE).tokens)

        cmd = run.call_args.args[0]
        self.assertEqual(cmd[:2], ["php8", "-r"])
        self.assertEqual(run.call_args.kwargs["input"], _CODE)
        self.assertEqual(run.call_args.kwargs["timeout"], 5.0)

    def test_missing_binary(self) -> None:
        with patch("php_tokens.engines.php_cli.subprocess.run", side_effect=FileNotFoundError()):
            result = PhpCliEngine().tokenize(code=_CODE, config=self.config)
        self.assertFalse(result.ok)
        self.assertEqual(result.tokens, [])
        self.assertEqual(result.errors[0].code, "TOKENIZE_BACKEND_NOT_INSTALLED")
        self.assertEqual(result.errors[0].detail, {"expected_command": "php8"})

    def test_timeout(self) -> None:
        with patch(
            "php_tokens.engines.php_cli.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="php8", timeout=5.0),
        ):
            result = PhpCliEngine().tokenize(code=_CODE, config=self.config)
        self.assertEqual(result.errors[0].code, "TOKENIZE_TIMEOUT")

    def test_non_zero_exit(self) -> None:
        with patch(
            "php_tokens.engines.php_cli.subprocess.run",
            return_value=_completed("", returncode=255, stderr="PHP Parse error"),
        ):
            result = PhpCliEngine().tokenize(code=_CODE, config=self.config)
        self.assertEqual(result.errors[0].code, "TOKENIZE_BACKEND_ERROR")
        self.assertEqual(result.errors[0].detail["returncode"], 255)

    def test_invalid_json(self) -> None:
        with patch("php_tokens.engines.php_cli.subprocess.run", return_value=_completed("not json")):
            result = PhpCliEngine().tokenize(code=_CODE, config=self.config)
        self.assertEqual(result.errors[0].code, "TOKENIZE_BAD_OUTPUT")

    def test_tokens_not_matching_source(self) -> None:
        with patch("php_tokens.engines.php_cli.subprocess.run", return_value=_completed(json.dumps(_ROWS[:3]))):
            result = PhpCliEngine().tokenize(code=_CODE, config=self.config)
        self.assertEqual(result.errors[0].code, "TOKENIZE_ROUNDTRIP_MISMATCH")

    def test_result_serializes(self) -> None:
        with patch("php_tokens.engines.php_cli.subprocess.run", side_effect=FileNotFoundError()):
            payload = PhpCliEngine().tokenize(code=_CODE, config=self.config).to_dict()
        self.assertEqual(payload["engine"], "php_cli")
        self.assertEqual(payload["meta"]["command_template"], ["php8", "-r", "<DUMP_SCRIPT>"])


if __name__ == "__main__":
    unittest.main()
