from __future__ import annotations

import json
import subprocess
from typing import Any

from contracts.tokens import Token, TokenKind, keyword_kind

from ..contracts import TokenizeConfig, TokenizeError, TokenizeResult, TokenizerEngineName
from .base import TokenizerEngine

# Emits [[token_name|null, text], ...] for the source read from stdin.
_PHP_DUMP_SCRIPT = (
    '$out = [];'
    ' foreach (token_get_all(stream_get_contents(STDIN)) as $t) {'
    ' $out[] = is_array($t) ? [token_name($t[0]), $t[1]] : [null, $t];'
    ' }'
    ' echo json_encode($out);'
)

_NAME_KINDS: dict[str, TokenKind] = {
    "T_OPEN_TAG": TokenKind.OPEN_TAG,
    "T_OPEN_TAG_WITH_ECHO": TokenKind.OPEN_TAG,
    "T_CLOSE_TAG": TokenKind.CLOSE_TAG,
    "T_INLINE_HTML": TokenKind.INLINE_HTML,
    "T_WHITESPACE": TokenKind.WHITESPACE,
    "T_COMMENT": TokenKind.COMMENT,
    "T_DOC_COMMENT": TokenKind.DOC_COMMENT,
    "T_VARIABLE": TokenKind.VARIABLE,
    "T_CONSTANT_ENCAPSED_STRING": TokenKind.STRING,
    "T_ENCAPSED_AND_WHITESPACE": TokenKind.STRING,
    "T_START_HEREDOC": TokenKind.STRING,
    "T_END_HEREDOC": TokenKind.STRING,
    "T_LNUMBER": TokenKind.NUMBER,
    "T_DNUMBER": TokenKind.NUMBER,
    "T_NS_SEPARATOR": TokenKind.NS_SEPARATOR,
}

# PHP 8 emits qualified names as one token; they are split on `\`.
_QUALIFIED_NAMES = {"T_NAME_QUALIFIED", "T_NAME_FULLY_QUALIFIED", "T_NAME_RELATIVE"}


def _split_qualified_name(text: str) -> list[Token]:
    out: list[Token] = []
    for i, part in enumerate(text.split("\\")):
        if i > 0:
            out.append(Token(TokenKind.NS_SEPARATOR, "\\"))
        if part:
            out.append(Token(keyword_kind(part), part))
    return out


def map_php_tokens(rows: list[Any]) -> list[Token]:
    """
    Map `token_get_all` rows ([name|None, text]) onto shared token kinds.
    """

    tokens: list[Token] = []
    for row in rows:
        name, text = row[0], str(row[1])
        if name is None:
            tokens.append(Token(TokenKind.PUNCT, text))
        elif name in _QUALIFIED_NAMES:
            tokens.extend(_split_qualified_name(text))
        elif name in _NAME_KINDS:
            tokens.append(Token(_NAME_KINDS[name], text))
        elif text[:1].isalpha() or text[:1] == "_":
            # T_STRING, T_FUNCTION, T_CONST and other keywords are plain names.
            tokens.append(Token(keyword_kind(text), text))
        else:
            # Operators, casts and curly-open variants keep their text verbatim.
            tokens.append(Token(TokenKind.PUNCT, text))
    return tokens


class PhpCliEngine(TokenizerEngine):
    """
    Tokenization via the `php` CLI (`token_get_all`), parsed from JSON output.

    Requires a PHP binary on PATH (or `config.php_binary`). Failures are reported as
    coded errors; no fallback tokenization is attempted.
    """

    def backend_id(self) -> str:
        return "php_cli"

    def tokenize(self, *, code: str, config: TokenizeConfig) -> TokenizeResult:
        cmd = [config.php_binary, "-r", _PHP_DUMP_SCRIPT]
        meta: dict[str, Any] = {
            "backend": self.backend_id(),
            "command_template": [config.php_binary, "-r", "<DUMP_SCRIPT>"],
        }

        def _failed(code_: str, message: str, detail: dict[str, Any]) -> TokenizeResult:
            return TokenizeResult(
                ok=False,
                engine=TokenizerEngineName.PHP_CLI,
                tokens=[],
                errors=[TokenizeError(code=code_, message=message, detail=detail)],
                meta=meta,
            )

        try:
            proc = subprocess.run(
                cmd,
                input=code,
                check=False,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=config.timeout_s,
            )
        except FileNotFoundError:
            return _failed(
                "TOKENIZE_BACKEND_NOT_INSTALLED",
                "php binary not found on PATH",
                {"expected_command": config.php_binary},
            )
        except subprocess.TimeoutExpired:
            return _failed(
                "TOKENIZE_TIMEOUT",
                "Tokenizer backend timed out",
                {"timeout_s": config.timeout_s},
            )

        if proc.returncode != 0:
            return _failed(
                "TOKENIZE_BACKEND_ERROR",
                "Tokenizer backend returned a non-zero exit code",
                {"returncode": proc.returncode, "stderr": proc.stderr[-4000:]},
            )

        try:
            rows = json.loads(proc.stdout)
        except json.JSONDecodeError as e:
            return _failed(
                "TOKENIZE_BAD_OUTPUT",
                "Tokenizer backend produced invalid JSON",
                {"error": str(e)},
            )

        tokens = map_php_tokens(rows)
        if "".join(t.content for t in tokens) != code:
            return _failed(
                "TOKENIZE_ROUNDTRIP_MISMATCH",
                "Backend tokens do not reproduce the source text",
                {"source_length": len(code)},
            )

        return TokenizeResult(
            ok=True,
            engine=TokenizerEngineName.PHP_CLI,
            tokens=tokens,
            errors=[],
            meta={**meta, "token_count": len(tokens)},
        )
