"""Declaration loader: ``.fl`` source -> declaration shapes with source spans."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from lark import Lark, Token, Tree, UnexpectedInput
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken

from faultline.models.declaration import (
    AttrToken,
    Declaration,
    EnumData,
    Field,
    Fields,
    NamedFields,
    RawAttribute,
    SourceFile,
    StructData,
    UnionData,
    UnitFields,
    UnnamedFields,
    UseDecl,
    Variant,
    Visibility,
)
from faultline.models.errors import DiagnosticError, SourceSpan
from faultline.settings import Settings

GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"

# Terminal names that are easier to read than their lark names in messages.
_TOKEN_NAMES = {
    "LPAR": "(",
    "RPAR": ")",
    "LSQB": "[",
    "RSQB": "]",
    "LBRACE": "{",
    "RBRACE": "}",
    "EQUAL": "=",
    "COMMA": ",",
    "DOT": ".",
    "COLON2": "::",
    "COLON": ":",
    "SEMI": ";",
    "PIPE": "|",
    "HASH": "#",
}


class SourceSafetyError(Exception):
    """Raised when declaration input violates safety constraints.

    Distinct from grammar errors: the source may be well formed but is
    larger than the generator is willing to process.
    """


@lru_cache(maxsize=1)
def _parser() -> Lark:
    return Lark.open(
        str(GRAMMAR_PATH),
        parser="lalr",
        propagate_positions=True,
        maybe_placeholders=False,
    )


class DeclarationLoader:
    """Parses declaration sources and builds :class:`SourceFile` shapes.

    Attribute blocks are not interpreted here; each one is kept as the flat
    token sequence between ``#[`` and ``]``.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._filename = "<string>"

    # -- safety checks -------------------------------------------------------

    def _check_source_safety(self, content: str) -> None:
        limit = self._settings.max_source_size
        if len(content) > limit:
            raise SourceSafetyError(
                f"Declaration source exceeds maximum size "
                f"({len(content):,} chars > {limit:,} limit)"
            )

    def _check_declaration_count(self, count: int) -> None:
        limit = self._settings.max_declarations
        if count > limit:
            raise SourceSafetyError(
                f"Declaration source exceeds maximum declaration count ({limit:,})"
            )

    # -- public loading API --------------------------------------------------

    def load(self, path: Path) -> SourceFile:
        """Load a declaration file."""
        with path.open("r", encoding="utf-8") as handle:
            content = handle.read()
        return self.load_string(content, str(path))

    def load_string(self, content: str, filename: str = "<string>") -> SourceFile:
        """Load declarations from a string."""
        self._check_source_safety(content)
        self._filename = filename
        try:
            tree = _parser().parse(content)
        except UnexpectedInput as exc:
            raise self._grammar_error(exc) from exc

        uses: list[UseDecl] = []
        declarations: list[Declaration] = []
        for item in tree.children:
            if item.data == "use_decl":
                uses.append(self._build_use(item))
            else:
                declarations.append(self._build_declaration(item))
                self._check_declaration_count(len(declarations))
        return SourceFile(filename, tuple(uses), tuple(declarations))

    # -- errors --------------------------------------------------------------

    def _grammar_error(self, exc: UnexpectedInput) -> DiagnosticError:
        span = None
        if getattr(exc, "line", -1) > 0:
            span = SourceSpan(file=self._filename, line=exc.line, column=exc.column)
        if isinstance(exc, UnexpectedToken):
            expected = ", ".join(sorted(_describe(name) for name in exc.expected))
            if exc.token.type == "$END":
                message = f"Unexpected end of input, expected one of: {expected}"
            else:
                message = f"Unexpected token `{exc.token}`, expected one of: {expected}"
        elif isinstance(exc, UnexpectedCharacters):
            message = f"Unexpected character `{exc.char}`"
        elif isinstance(exc, UnexpectedEOF):
            message = "Unexpected end of input"
        else:
            message = str(exc)
        return DiagnosticError.grammar(message, span)

    # -- tree walking --------------------------------------------------------

    def _span(self, node: Token | Tree) -> SourceSpan | None:
        if isinstance(node, Token):
            return SourceSpan.from_token(node, self._filename)
        if node.meta.empty:
            return None
        return SourceSpan.from_token(node.meta, self._filename)

    def _build_use(self, tree: Tree) -> UseDecl:
        path_tree, *rest = tree.children
        alias = str(rest[0]) if rest else None
        return UseDecl(_path_parts(path_tree), alias, self._span(tree))

    def _build_declaration(self, tree: Tree) -> Declaration:
        attrs, docs, rest = self._split_outer(tree.children)
        vis = Visibility.inherited()
        if rest and isinstance(rest[0], Tree) and rest[0].data == "visibility":
            vis = _build_visibility(rest.pop(0))
        body: Tree = rest[0]
        name_token: Token = body.children[0]
        shape = body.children[1:]

        if body.data == "enum_decl":
            data: Any = EnumData(tuple(self._build_variant(v) for v in shape))
        elif body.data == "union_decl":
            data = UnionData(self._build_fields(shape))
        else:
            data = StructData(self._build_fields(shape))

        return Declaration(
            ident=str(name_token),
            vis=vis,
            data=data,
            attrs=attrs,
            docs=docs,
            span=self._span(name_token),
        )

    def _build_variant(self, tree: Tree) -> Variant:
        attrs, docs, rest = self._split_outer(tree.children)
        name_token: Token = rest[0]
        return Variant(
            ident=str(name_token),
            fields=self._build_fields(rest[1:]),
            attrs=attrs,
            docs=docs,
            span=self._span(name_token),
        )

    def _build_fields(self, shape: list[Any]) -> Fields[Field]:
        if not shape:
            return UnitFields()
        fields_tree: Tree = shape[0]
        if fields_tree.data == "named_fields":
            named = [self._build_field(child, named=True) for child in fields_tree.children]
            return NamedFields(tuple((f.name, f) for f in named))
        unnamed = [self._build_field(child, named=False) for child in fields_tree.children]
        return UnnamedFields(tuple(enumerate(unnamed)))

    def _build_field(self, tree: Tree, named: bool) -> Field:
        attrs, docs, rest = self._split_outer(tree.children)
        vis = Visibility.inherited()
        if isinstance(rest[0], Tree) and rest[0].data == "visibility":
            vis = _build_visibility(rest.pop(0))
        name = str(rest.pop(0)) if named else None
        return Field(
            name=name,
            ty=_render_type(rest[0]),
            attrs=attrs,
            vis=vis,
            docs=docs,
            span=self._span(tree),
        )

    def _split_outer(
        self, children: list[Any]
    ) -> tuple[tuple[RawAttribute, ...], tuple[str, ...], list[Any]]:
        """Split leading attribute blocks and doc comments from the rest."""
        attrs: list[RawAttribute] = []
        docs: list[str] = []
        rest = list(children)
        while rest:
            child = rest[0]
            if isinstance(child, Tree) and child.data == "attribute":
                attrs.append(self._build_attribute(child))
            elif isinstance(child, Token) and child.type == "DOC":
                docs.append(_doc_text(child))
            else:
                break
            rest.pop(0)
        return tuple(attrs), tuple(docs), rest

    def _build_attribute(self, tree: Tree) -> RawAttribute:
        # Drop the ``#``, ``[`` and closing ``]``.
        inner = tree.children[2:-1]
        tokens = tuple(
            AttrToken(token.type, str(token), self._span(token)) for token in inner
        )
        return RawAttribute(tokens, self._span(tree))


# -- helpers -------------------------------------------------------------------


def _describe(terminal: str) -> str:
    name = _TOKEN_NAMES.get(terminal)
    if name is not None:
        return f"`{name}`"
    return terminal.lower()


def _doc_text(token: Token) -> str:
    text = str(token)[3:]
    return text[1:] if text.startswith(" ") else text


def _path_parts(tree: Tree) -> tuple[str, ...]:
    return tuple(str(t) for t in tree.children if isinstance(t, Token) and t.type == "NAME")


def _build_visibility(tree: Tree) -> Visibility:
    if not tree.children:
        return Visibility.public()
    restriction: Tree = tree.children[0]
    match restriction.data:
        case "vis_crate":
            return Visibility.crate()
        case "vis_self":
            return Visibility.restricted("self")
        case "vis_super":
            return Visibility.restricted("super")
    path_tree: Tree = restriction.children[0]
    segments = tuple(
        str(t) for t in path_tree.children if t.type not in ("DOT", "COLON2")
    )
    return Visibility.restricted(*segments, in_token=True)


def _render_type(tree: Tree) -> str:
    """Render a parsed type annotation back to canonical Python text."""
    match tree.data:
        case "type":
            return " | ".join(_render_type(atom) for atom in tree.children)
        case "type_atom":
            name = ".".join(_path_parts(tree.children[0]))
            if len(tree.children) == 1:
                return name
            return f"{name}[{_render_type(tree.children[1])}]"
        case "type_args":
            return ", ".join(_render_type(arg) for arg in tree.children)
        case "type_list":
            inner = _render_type(tree.children[0]) if tree.children else ""
            return f"[{inner}]"
        case "type_str":
            return str(tree.children[0])
        case "ellipsis":
            return "..."
    raise ValueError(f"Unexpected type node: {tree.data}")
