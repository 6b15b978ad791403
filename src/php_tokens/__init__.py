"""
PHP tokenization (source text -> classified token stream).

This package is intentionally limited to lexical work:
- It splits source text into tokens that serialize back byte-for-byte.
- It classifies `use` contexts, import qualifiers and group-import braces.
- It performs NO reordering or rewriting; that is `ordered_imports`' job.
"""

from .analyzer import import_use_indexes, statement_end
from .contracts import TokenizeConfig, TokenizeError, TokenizeResult, TokenizerEngineName
from .module import TokenizeFailed, stream_from_code, tokenize_source
from .stream import TokenStream
from .transform import classify_tokens

__all__ = [
    "TokenizeConfig",
    "TokenizeError",
    "TokenizeResult",
    "TokenizerEngineName",
    "TokenizeFailed",
    "TokenStream",
    "classify_tokens",
    "import_use_indexes",
    "statement_end",
    "stream_from_code",
    "tokenize_source",
]
