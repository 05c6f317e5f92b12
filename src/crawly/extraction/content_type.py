"""
Content-type resolution for fetched resources.

Decides whether a response body can be treated as text or HTML, using the
declared Content-Type header and, when that is missing or generic, a sniff
of the first bytes of the body.
"""

from dataclasses import dataclass

# Leading bytes of common binary formats
_MAGIC_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"RIFF", "image/webp"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b", "application/gzip"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"ID3", "audio/mpeg"),
    (b"OggS", "audio/ogg"),
    (b"\x7fELF", "application/x-executable"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
)

_HTML_MARKERS = (b"<!doctype html", b"<html", b"<head", b"<body")

_GENERIC_TYPES = {"", "application/octet-stream", "binary/octet-stream"}

HTML_TYPES = frozenset({"text/html", "application/xhtml+xml"})

_TEXT_COMPATIBLE = HTML_TYPES | {"application/xml", "application/json"}

SNIFF_WINDOW = 512


@dataclass(frozen=True)
class ContentType:
    """A resolved media type and optional charset."""

    mime: str
    charset: str | None = None
    sniffed: bool = False

    @property
    def is_html(self) -> bool:
        return self.mime in HTML_TYPES


def parse_content_type(header: str | None) -> tuple[str, str | None]:
    """
    Split a Content-Type header into media type and charset.

    Args:
        header: Raw header value, e.g. ``text/html; charset=UTF-8``

    Returns:
        Tuple of (lowercased mime, charset or None)
    """
    if not header:
        return "", None

    parts = [p.strip() for p in header.split(";")]
    mime = parts[0].lower()
    charset = None

    for param in parts[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset" and value:
            charset = value.strip().strip('"').strip("'") or None

    return mime, charset


def sniff_mime(body: bytes) -> str:
    """
    Guess a media type from the first bytes of a body.

    Returns ``application/octet-stream`` when the body looks binary.
    """
    head = body[:SNIFF_WINDOW]

    for signature, mime in _MAGIC_SIGNATURES:
        if head.startswith(signature):
            return mime

    stripped = head.lstrip().lower()
    if stripped.startswith(b"\xef\xbb\xbf"):
        stripped = stripped[3:].lstrip()
    if any(stripped.startswith(marker) for marker in _HTML_MARKERS):
        return "text/html"
    if stripped.startswith(b"<?xml"):
        return "application/xml"

    if b"\x00" in head:
        return "application/octet-stream"

    try:
        head.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte sequence cut at the window edge is still text
        if e.start < len(head) - 3:
            return "application/octet-stream"

    return "text/plain"


def resolve_content_type(header: str | None, body: bytes) -> ContentType:
    """
    Resolve the effective content type of a response.

    The declared type wins unless it is missing or generic, in which case
    the body is sniffed.
    """
    mime, charset = parse_content_type(header)

    if mime in _GENERIC_TYPES:
        return ContentType(mime=sniff_mime(body), charset=charset, sniffed=True)

    return ContentType(mime=mime, charset=charset)


def is_supported(content_type: ContentType, allowed_mimes: tuple[str, ...] = ()) -> bool:
    """
    Check whether a resolved type can be handed to the text extractor.

    Args:
        content_type: Resolved content type
        allowed_mimes: Optional allow-list narrowing the text/HTML types.
            Empty means any text/HTML type.

    Returns:
        True if the body should be parsed
    """
    textual = content_type.mime.startswith("text/") or content_type.mime in _TEXT_COMPATIBLE
    if not textual:
        return False

    return not allowed_mimes or content_type.mime in allowed_mimes
