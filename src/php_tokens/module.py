from __future__ import annotations

from .contracts import TokenizeConfig, TokenizeError, TokenizeResult, TokenizerEngineName
from .engines import PhpCliEngine, RegexLexerEngine
from .engines.base import TokenizerEngine
from .stream import TokenStream
from .transform import classify_tokens


def _get_engine(engine: TokenizerEngineName) -> TokenizerEngine:
    if engine == TokenizerEngineName.REGEX:
        return RegexLexerEngine()
    if engine == TokenizerEngineName.PHP_CLI:
        return PhpCliEngine()
    raise ValueError(f"Unsupported tokenizer engine: {engine}")


def tokenize_source(*, code: str, config: TokenizeConfig | None = None) -> TokenizeResult:
    """
    Tokenize PHP source with the configured engine and classify the tokens.
    """

    config = config or TokenizeConfig()
    engine = _get_engine(config.engine)
    result = engine.tokenize(code=code, config=config)
    if not result.ok:
        return result

    return TokenizeResult(
        ok=True,
        engine=result.engine,
        tokens=classify_tokens(result.tokens),
        errors=[],
        meta=result.meta,
    )


class TokenizeFailed(Exception):
    def __init__(self, errors: list[TokenizeError]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{e.code}: {e.message}" for e in errors))


def stream_from_code(code: str, config: TokenizeConfig | None = None) -> TokenStream:
    """
    Convenience wrapper: a classified TokenStream, or TokenizeFailed.
    """

    result = tokenize_source(code=code, config=config)
    if not result.ok:
        raise TokenizeFailed(result.errors)
    return TokenStream(result.tokens)
