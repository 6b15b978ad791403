"""
Ordering of PHP `use` import statements.

Works on the classified token stream produced by `php_tokens`:
- Locate sub-groups of adjacent import statements per namespace.
- Parse them into records, sort by kind and by the configured algorithm.
- Write records back into the original slots, then separate namespaces with blank lines.

Tokens outside import statements are never modified.
"""

from .config import ConfigLoadResult, OrderedImportsConfig, OrderedImportsConfigError, WhitespacesConfig, load_config
from .definition import RULE_NAME, RULE_PRIORITY, get_definition
from .fixer import fix_source, fix_tokens, is_candidate

__all__ = [
    "ConfigLoadResult",
    "OrderedImportsConfig",
    "OrderedImportsConfigError",
    "WhitespacesConfig",
    "load_config",
    "RULE_NAME",
    "RULE_PRIORITY",
    "get_definition",
    "fix_source",
    "fix_tokens",
    "is_candidate",
]
