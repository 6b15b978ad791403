from .base import TokenizerEngine
from .php_cli import PhpCliEngine
from .regex_lexer import RegexLexerEngine

__all__ = ["TokenizerEngine", "PhpCliEngine", "RegexLexerEngine"]
