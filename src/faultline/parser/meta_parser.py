"""Attribute grammar parser: one attribute token sequence -> one meta node.

Grammar::

    meta        := path ( '(' nested_list ')' | '=' value )?
    nested_list := ( nested ( ',' nested )* ','? )?
    nested      := literal | meta
    value       := literal | path
    path        := NAME ( ( '.' | '::' ) NAME )*

``true`` and ``false`` lex as names. In nested position they are literals
unless the next token is ``=``, in which case they start a name/value.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence

from faultline.models.declaration import AttrToken, RawAttribute
from faultline.models.errors import DiagnosticError, SourceSpan
from faultline.models.meta import (
    Ident,
    Lit,
    LitBool,
    LitChar,
    LitFloat,
    LitInt,
    LitStr,
    Meta,
    MetaList,
    MetaNameValue,
    MetaPath,
    NestedMeta,
    Path,
)

_BOOL_WORDS = {"true": True, "false": False}
_LITERAL_TOKENS = {"STRING", "CHAR", "INT", "FLOAT"}
_PATH_SEPARATORS = {"DOT", "COLON2"}


class AttributeParser:
    """Recursive descent parser with one token of lookahead."""

    def __init__(self, tokens: Sequence[AttrToken], span: SourceSpan | None = None) -> None:
        self._tokens = list(tokens)
        self._pos = 0
        self._span = span

    def parse(self) -> Meta:
        meta = self._parse_meta()
        trailing = self._peek()
        if trailing is not None:
            raise DiagnosticError.grammar(
                f"Unexpected token `{trailing.value}` after attribute", trailing.span
            )
        return meta

    # -- token helpers --------------------------------------------------------

    def _peek(self, offset: int = 0) -> AttrToken | None:
        index = self._pos + offset
        if index < len(self._tokens):
            return self._tokens[index]
        return None

    def _advance(self) -> AttrToken:
        token = self._peek()
        if token is None:
            raise self._eof_error("more input")
        self._pos += 1
        return token

    def _check(self, token_type: str, offset: int = 0) -> bool:
        token = self._peek(offset)
        return token is not None and token.type == token_type

    def _expect(self, token_type: str, what: str) -> AttrToken:
        token = self._peek()
        if token is None:
            raise self._eof_error(what)
        if token.type != token_type:
            raise DiagnosticError.grammar(
                f"Expected {what}, found `{token.value}`", token.span
            )
        self._pos += 1
        return token

    def _eof_error(self, what: str) -> DiagnosticError:
        last = self._tokens[-1].span if self._tokens else self._span
        return DiagnosticError.grammar(f"Expected {what}, found end of attribute", last)

    def _at_literal(self) -> bool:
        token = self._peek()
        if token is None:
            return False
        if token.type in _LITERAL_TOKENS:
            return True
        return token.type == "NAME" and token.value in _BOOL_WORDS

    # -- productions ----------------------------------------------------------

    def _parse_path(self) -> Path:
        first = self._expect("NAME", "identifier")
        segments = [Ident(first.value, first.span)]
        while self._peek() is not None and self._peek().type in _PATH_SEPARATORS:
            self._advance()
            token = self._expect("NAME", "identifier after path separator")
            segments.append(Ident(token.value, token.span))
        end = segments[-1].span
        span = first.span.join(end) if first.span is not None else None
        return Path(tuple(segments), span)

    def _parse_meta(self) -> Meta:
        path = self._parse_path()
        if self._check("LPAR"):
            return self._parse_list_after_path(path)
        if self._check("EQUAL"):
            self._advance()
            value = self._parse_value()
            return MetaNameValue(path, value, _join(path.span, _span_of(value)))
        return MetaPath(path, path.span)

    def _parse_list_after_path(self, path: Path) -> MetaList:
        self._expect("LPAR", "`(`")
        nested: list[NestedMeta] = []
        while not self._check("RPAR"):
            nested.append(self._parse_nested())
            if self._check("COMMA"):
                self._advance()
            elif not self._check("RPAR"):
                token = self._peek()
                if token is None:
                    raise self._eof_error("`,` or `)`")
                raise DiagnosticError.grammar(
                    f"Expected `,` or `)`, found `{token.value}`", token.span
                )
        close = self._expect("RPAR", "`)`")
        return MetaList(path, tuple(nested), _join(path.span, close.span))

    def _parse_nested(self) -> NestedMeta:
        if self._at_literal() and not (self._is_bool_word() and self._check("EQUAL", 1)):
            return self._parse_lit()
        if self._check("NAME"):
            return self._parse_meta()
        token = self._peek()
        if token is None:
            raise self._eof_error("path or literal")
        raise DiagnosticError.grammar(
            f"Expected path or literal, found `{token.value}`", token.span
        )

    def _parse_value(self) -> Path | Lit:
        if self._at_literal():
            return self._parse_lit()
        if self._check("NAME"):
            return self._parse_path()
        token = self._peek()
        if token is None:
            raise self._eof_error("path or literal")
        raise DiagnosticError.grammar(
            f"Expected path or literal, found `{token.value}`", token.span
        )

    def _is_bool_word(self) -> bool:
        token = self._peek()
        return token is not None and token.type == "NAME" and token.value in _BOOL_WORDS

    def _parse_lit(self) -> Lit:
        token = self._advance()
        match token.type:
            case "NAME":
                return LitBool(_BOOL_WORDS[token.value], token.span)
            case "STRING":
                return LitStr(_decode_quoted(token), token.span)
            case "CHAR":
                value = _decode_quoted(token)
                if len(value) != 1:
                    raise DiagnosticError.grammar(
                        f"Character literal must hold one character: {token.value}", token.span
                    )
                return LitChar(value, token.span)
            case "INT":
                return LitInt(_parse_int(token), token.value, token.span)
            case "FLOAT":
                return LitFloat(float(token.value.replace("_", "")), token.value, token.span)
        raise DiagnosticError.grammar(f"Expected literal, found `{token.value}`", token.span)


def parse_attribute(attribute: RawAttribute) -> Meta:
    """Parse one attribute block into a meta node."""
    return AttributeParser(attribute.tokens, attribute.span).parse()


def _decode_quoted(token: AttrToken) -> str:
    try:
        value = ast.literal_eval(token.value)
    except (SyntaxError, ValueError) as exc:
        raise DiagnosticError.grammar(
            f"Invalid literal {token.value}: {exc}", token.span
        ) from exc
    if not isinstance(value, str):
        raise DiagnosticError.grammar(f"Invalid literal {token.value}", token.span)
    return value


def _parse_int(token: AttrToken) -> int:
    text = token.value
    try:
        return int(text, 0)
    except ValueError:
        # int(..., 0) rejects leading zeros such as ``007``.
        return int(text.replace("_", ""), 10)


def _span_of(node: Path | Lit) -> SourceSpan | None:
    return node.span


def _join(start: SourceSpan | None, end: SourceSpan | None) -> SourceSpan | None:
    if start is None:
        return end
    return start.join(end)
