"""
Extraction module for Crawly.

Provides content-type resolution and HTML/text parsing:
- Declared and sniffed media types
- Plain text extraction
- Outbound link discovery
"""

from crawly.extraction.content_type import (
    ContentType,
    parse_content_type,
    sniff_mime,
    resolve_content_type,
    is_supported,
)
from crawly.extraction.page_parser import (
    PageParser,
    ParsedPage,
)

__all__ = [
    # Content type
    "ContentType",
    "parse_content_type",
    "sniff_mime",
    "resolve_content_type",
    "is_supported",
    # Parsing
    "PageParser",
    "ParsedPage",
]
