"""
Path codec - pure conversions between raw bytes, base64 transport form and
the text / image representations shown to users.

GitHub's Contents API ships blob bodies as base64 with embedded newlines
every 60 characters, so every decoder strips whitespace first.
"""

import base64
import binascii
import re
import unicodedata
from enum import Enum
from typing import Union

from .errors import DecodeFailure

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "bmp", "svg", "ico", "webp"})

MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "svg": "image/svg+xml",
    "webp": "image/webp",
    "ico": "image/x-icon",
    "txt": "text/plain",
    "md": "text/markdown",
    "json": "application/json",
    "js": "application/javascript",
    "ts": "application/typescript",
    "html": "text/html",
    "css": "text/css",
}
DEFAULT_MIME_TYPE = "application/octet-stream"

# extension -> syntax highlighter language
LANGUAGES = {
    "js": "javascript", "cjs": "javascript", "mjs": "javascript",
    "jsx": "jsx", "ts": "typescript", "tsx": "tsx",
    "html": "html", "htm": "html", "css": "css", "scss": "scss", "sass": "scss",
    "less": "less", "vue": "vue", "svelte": "svelte",
    "py": "python", "pyw": "python", "java": "java", "php": "php", "go": "go",
    "rb": "ruby", "cs": "csharp", "csx": "csharp", "rs": "rust",
    "kt": "kotlin", "kts": "kotlin", "swift": "swift", "pl": "perl", "pm": "perl",
    "ex": "elixir", "exs": "elixir", "c": "c", "h": "c",
    "cpp": "cpp", "hpp": "cpp", "cc": "cpp", "m": "objectivec",
    "json": "json", "xml": "xml", "yml": "yaml", "yaml": "yaml",
    "md": "markdown", "markdown": "markdown", "sql": "sql",
    "graphql": "graphql", "gql": "graphql", "toml": "toml", "csv": "csv",
    "sh": "bash", "bash": "bash", "zsh": "bash", "ps1": "powershell",
    "bat": "batch", "cmd": "batch", "lua": "lua", "ini": "ini", "env": "properties",
    "gitignore": "git", "gitattributes": "git", "gitmodules": "git",
    "r": "r", "dart": "dart", "jl": "julia",
}
DEFAULT_LANGUAGE = "plaintext"

DECODE_FAILED = "[decoding failed: content is not valid UTF-8 text]"

# git treats a blob as binary when a NUL shows up in its first 8000 bytes
BINARY_SNIFF_BYTES = 8000

_WHITESPACE = re.compile(r"\s+")


class ContentKind(str, Enum):
    """How a blob is presented."""

    TEXT = "text"
    IMAGE = "image"
    BINARY = "binary"


def extension_of(path: str) -> str:
    """Lower-cased extension of the last path segment, '' if none."""
    name = path.rstrip("/").rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def classify(path: str) -> ContentKind:
    """Kind from extension only; binary is decided later from content."""
    if extension_of(path) in IMAGE_EXTENSIONS:
        return ContentKind.IMAGE
    return ContentKind.TEXT


def mime_type_for(path: str) -> str:
    return MIME_TYPES.get(extension_of(path), DEFAULT_MIME_TYPE)


def language_for(path: str) -> str:
    """Syntax highlighter language for a path."""
    filename = path.rstrip("/").rsplit("/", 1)[-1].lower()
    if filename == "dockerfile":
        return "docker"
    return LANGUAGES.get(extension_of(path), DEFAULT_LANGUAGE)


def strip_transport(content: str) -> str:
    """Remove the newlines/whitespace GitHub inserts into base64 bodies."""
    return _WHITESPACE.sub("", content or "")


def decode_transport(content: str) -> bytes:
    """Base64 transport form to raw bytes. Raises binascii.Error on malformed input."""
    return base64.b64decode(strip_transport(content), validate=True)


def looks_binary(raw: bytes) -> bool:
    return b"\x00" in raw[:BINARY_SNIFF_BYTES]


def decode_text(content: str) -> str:
    """Decode transport base64 to UTF-8 text, raising DecodeFailure."""
    try:
        return decode_transport(content).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise DecodeFailure(f"Content is not UTF-8 text: {e}") from e


def to_display_text(content: str) -> str:
    """Like decode_text, but returns DECODE_FAILED instead of raising.

    A bad blob only degrades the one view that shows it.
    """
    try:
        return decode_text(content)
    except DecodeFailure:
        return DECODE_FAILED


def to_image_data_url(content: str, path: str) -> str:
    """Wrap transport base64 as a data: URL using the MIME type of ``path``."""
    if content.startswith("data:"):
        return content
    return f"data:{mime_type_for(path)};base64,{strip_transport(content)}"


def to_transport_base64(value: Union[str, bytes]) -> str:
    """Text (UTF-8) or bytes to base64 transport form."""
    raw = value.encode("utf-8") if isinstance(value, str) else bytes(value)
    return base64.b64encode(raw).decode("ascii")


def is_decode_failure(text: str) -> bool:
    return text == DECODE_FAILED


def collation_key(value: str) -> tuple:
    """Sort key approximating locale-aware comparison.

    Accents and case only matter once the base letters tie, and lowercase
    sorts before uppercase, as in ICU's default collation.
    """
    normalized = unicodedata.normalize("NFKD", value)
    base = "".join(c for c in normalized if not unicodedata.combining(c))
    return (base.casefold(), normalized.casefold(), normalized.swapcase())
