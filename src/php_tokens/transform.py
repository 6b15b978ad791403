from __future__ import annotations

from contracts.tokens import Token, TokenKind

_OPEN_BRACES = {"{", "${"}
_MEMBER_ACCESS = {"->", "?->", "::"}
_IMPORT_QUALIFIERS = {"const": TokenKind.CONST_IMPORT, "function": TokenKind.FUNCTION_IMPORT}


def _next_meaningful(tokens: list[Token], index: int) -> int | None:
    for j in range(index + 1, len(tokens)):
        if tokens[j].is_meaningful():
            return j
    return None


def _prev_meaningful(tokens: list[Token], index: int) -> int | None:
    for j in range(index - 1, -1, -1):
        if tokens[j].is_meaningful():
            return j
    return None


def _is_plain_identifier(tokens: list[Token], index: int) -> bool:
    """
    `$obj->use`, `Foo::namespace` and `function use()` are names, not keywords.
    """

    prev = _prev_meaningful(tokens, index)
    if prev is None:
        return False
    p = tokens[prev]
    if p.kind == TokenKind.PUNCT and p.content in _MEMBER_ACCESS:
        return True
    return p.kind == TokenKind.NAME and p.content.lower() == "function"


def _classify_import(tokens: list[Token], use_index: int) -> int:
    """
    Mark the qualifier and group braces of the import starting at `use_index`.

    Returns the index of the statement terminator (`;` or close tag), or len(tokens).
    """

    first = _next_meaningful(tokens, use_index)
    if first is not None:
        tok = tokens[first]
        qualifier_kind = _IMPORT_QUALIFIERS.get(tok.content.lower()) if tok.kind == TokenKind.NAME else None
        # `use Const\Foo;` imports a class from a namespace named Const,
        # `use const \Foo\BAR;` is a qualifier followed by a fully qualified name.
        glued = first + 1 < len(tokens) and tokens[first + 1].kind == TokenKind.NS_SEPARATOR
        if qualifier_kind is not None and not glued:
            tokens[first] = Token(qualifier_kind, tok.content)

    for k in range(use_index + 1, len(tokens)):
        tok = tokens[k]
        if tok.kind == TokenKind.CLOSE_TAG or tok.equals(";"):
            return k
        if tok.equals("{"):
            tokens[k] = Token(TokenKind.GROUP_IMPORT_BRACE_OPEN, tok.content)
        elif tok.equals("}"):
            tokens[k] = Token(TokenKind.GROUP_IMPORT_BRACE_CLOSE, tok.content)
    return len(tokens)


def classify_tokens(raw: list[Token]) -> list[Token]:
    """
    Assign contextual kinds to raw engine tokens.

    - `use` at the import level of the current namespace stays USE; inside a class
      body it becomes USE_TRAIT, after a closure's parameter list USE_LAMBDA.
    - `const`/`function` right after an import `use` become CONST_IMPORT /
      FUNCTION_IMPORT; braces of a grouped import become GROUP_IMPORT_BRACE_*.
    - `namespace` stays NAMESPACE only for declarations (not `namespace\\foo()`).
    """

    tokens = list(raw)
    depth = 0
    import_depth = 0  # brace depth at which imports are legal: 0, or 1 inside `namespace X { }`
    pending_namespace = False
    i = 0

    while i < len(tokens):
        tok = tokens[i]

        if tok.kind in (TokenKind.USE, TokenKind.NAMESPACE) and _is_plain_identifier(tokens, i):
            tokens[i] = Token(TokenKind.NAME, tok.content)
            i += 1
            continue

        if tok.kind == TokenKind.NAMESPACE:
            nxt = _next_meaningful(tokens, i)
            if nxt is not None and tokens[nxt].kind == TokenKind.NS_SEPARATOR:
                tokens[i] = Token(TokenKind.NAME, tok.content)
            else:
                pending_namespace = True
            i += 1
            continue

        if tok.kind == TokenKind.USE:
            prev = _prev_meaningful(tokens, i)
            if prev is not None and tokens[prev].equals(")"):
                tokens[i] = Token(TokenKind.USE_LAMBDA, tok.content)
            elif depth != import_depth:
                tokens[i] = Token(TokenKind.USE_TRAIT, tok.content)
            else:
                i = _classify_import(tokens, i)
                continue
            i += 1
            continue

        if tok.kind == TokenKind.PUNCT:
            if tok.content in _OPEN_BRACES:
                depth += 1
                if pending_namespace:
                    import_depth = depth
                    pending_namespace = False
            elif tok.content == "}":
                if import_depth and depth == import_depth:
                    import_depth = 0
                depth = max(0, depth - 1)
            elif tok.content == ";" and pending_namespace:
                import_depth = depth
                pending_namespace = False

        i += 1

    return tokens
