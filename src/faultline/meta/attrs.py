"""Per-declaration attribute collection with usage tracking."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from faultline.meta.from_meta import FromMeta, list_of, meta_type
from faultline.models.declaration import RawAttribute
from faultline.models.errors import DiagnosticError, SourceSpan, suggest_similar
from faultline.models.meta import LITERAL_TYPES, Meta, MetaList, lit_kind
from faultline.parser.meta_parser import parse_attribute


@dataclass(frozen=True)
class Attr:
    """One named entry of the namespace list, e.g. ``description(...)``."""

    name: str
    meta: Meta


class Attrs:
    """Ordered entries of the recognized namespace for one declaration.

    Every entry must be read by one of the ``get_*`` calls before
    :meth:`ensure_used` is called; anything left over is an unknown field.
    """

    def __init__(self, entries: Iterable[Attr] = ()) -> None:
        self._entries = list(entries)
        self._used: dict[int, bool] = {i: False for i in range(len(self._entries))}
        self._requested: list[str] = []

    @classmethod
    def from_attributes(cls, attributes: Iterable[RawAttribute], namespace: str) -> Attrs:
        """Collect entries from every ``#[<namespace>(...)]`` block.

        Blocks of other namespaces are ignored without being parsed.
        """
        entries: list[Attr] = []
        for attribute in attributes:
            if attribute.namespace != namespace:
                continue
            meta = parse_attribute(attribute)
            if not isinstance(meta, MetaList):
                raise DiagnosticError.unexpected_type(
                    f"Expected `{namespace}(...)` list"
                ).with_span(attribute.span)
            for item in meta.nested:
                if isinstance(item, LITERAL_TYPES):
                    raise DiagnosticError.unexpected_lit_type(lit_kind(item)).with_span(item.span)
                ident = item.path.single_ident()
                if ident is None:
                    raise DiagnosticError.unexpected_type("path").with_span(item.path.span)
                entries.append(Attr(ident.name, item))
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self._entries]

    def is_used(self, index: int) -> bool:
        return self._used[index]

    def get_optional(self, name: str, target: type) -> Any:
        """Extract the first entry called ``name``, or ``None`` if absent."""
        self._requested.append(name)
        adapter = meta_type(target)
        for index, entry in enumerate(self._entries):
            if entry.name == name:
                self._used[index] = True
                return adapter.from_meta(entry.meta)
        return None

    def get_required(self, name: str, target: type, anchor: SourceSpan | None) -> Any:
        value = self.get_optional(name, target)
        if value is None:
            raise DiagnosticError.missing_field(name).with_span(anchor)
        return value

    def get_list(self, name: str, item_target: type) -> list[Any]:
        """Extract every entry called ``name`` as one flat list."""
        self._requested.append(name)
        adapter: type[FromMeta[list[Any]]] = list_of(meta_type(item_target))
        values: list[Any] = []
        for index, entry in enumerate(self._entries):
            if entry.name == name:
                self._used[index] = True
                values.extend(adapter.from_meta(entry.meta))
        return values

    def ensure_used(self) -> None:
        for index, entry in enumerate(self._entries):
            if not self._used[index]:
                raise DiagnosticError.unknown_field(
                    entry.name, suggest_similar(entry.name, sorted(set(self._requested)))
                ).with_span(entry.meta.path.span)
