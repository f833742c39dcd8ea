"""Typed extraction of attribute values."""

from faultline.meta.attrs import Attr, Attrs
from faultline.meta.from_meta import FromMeta, list_of, meta_type

__all__ = [
    "Attr",
    "Attrs",
    "FromMeta",
    "list_of",
    "meta_type",
]
