"""Declaration, attribute and manifest parsing for faultline."""

from faultline.parser.loader import DeclarationLoader, SourceSafetyError
from faultline.parser.manifest import ManifestError, ManifestLoader, SourceMap
from faultline.parser.meta_parser import AttributeParser, parse_attribute

__all__ = [
    "AttributeParser",
    "DeclarationLoader",
    "ManifestError",
    "ManifestLoader",
    "SourceMap",
    "SourceSafetyError",
    "parse_attribute",
]
