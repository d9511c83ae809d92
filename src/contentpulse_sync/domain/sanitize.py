"""Input sanitizers for titles, rich text, slugs and file names.

Plain-text fields lose all markup. Rich HTML keeps a fixed allow-list of
formatting tags and attributes; scripts and embedded objects are removed together
with their content, other unknown tags are unwrapped.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Final
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Comment, Tag

_PARSER: Final[str] = "html.parser"

_ALLOWED_TAGS: Final[dict[str, frozenset[str]]] = {
    "a": frozenset({"href", "title", "rel", "target", "name"}),
    "abbr": frozenset({"title"}),
    "b": frozenset(),
    "blockquote": frozenset({"cite"}),
    "br": frozenset(),
    "caption": frozenset(),
    "cite": frozenset(),
    "code": frozenset(),
    "del": frozenset({"datetime"}),
    "div": frozenset(),
    "em": frozenset(),
    "figcaption": frozenset(),
    "figure": frozenset(),
    "h1": frozenset(),
    "h2": frozenset(),
    "h3": frozenset(),
    "h4": frozenset(),
    "h5": frozenset(),
    "h6": frozenset(),
    "hr": frozenset(),
    "i": frozenset(),
    "img": frozenset({"src", "alt", "title", "width", "height", "loading"}),
    "ins": frozenset({"datetime"}),
    "li": frozenset(),
    "ol": frozenset({"start", "reversed"}),
    "p": frozenset(),
    "pre": frozenset(),
    "s": frozenset(),
    "span": frozenset(),
    "strong": frozenset(),
    "sub": frozenset(),
    "sup": frozenset(),
    "table": frozenset(),
    "tbody": frozenset(),
    "td": frozenset({"colspan", "rowspan"}),
    "tfoot": frozenset(),
    "th": frozenset({"colspan", "rowspan", "scope"}),
    "thead": frozenset(),
    "tr": frozenset(),
    "u": frozenset(),
    "ul": frozenset(),
}
_GLOBAL_ATTRIBUTES: Final[frozenset[str]] = frozenset({"class", "id", "lang", "dir", "style"})
_DROP_WITH_CONTENT: Final[frozenset[str]] = frozenset(
    {"script", "style", "iframe", "object", "embed", "applet", "form", "noscript", "template"}
)
_URL_ATTRIBUTES: Final[frozenset[str]] = frozenset({"href", "src", "cite"})
_ALLOWED_URL_SCHEMES: Final[frozenset[str]] = frozenset(
    {"", "http", "https", "mailto", "tel", "ftp"}
)

_OCTETS = re.compile(r"%[a-fA-F0-9]{2}")
_WHITESPACE = re.compile(r"\s+")
_INLINE_WHITESPACE = re.compile(r"[ \t\f\v]+")
_SLUG_INVALID = re.compile(r"[^a-z0-9_\-]")
_DASHES = re.compile(r"-+")
_FILE_NAME_SPECIAL = re.compile(r"[?\[\]/\\=<>:;,'\"&$#*()|~`!{}%+\x00]")


def _strip_tags(value: str) -> str:
    soup = BeautifulSoup(value, _PARSER)
    for node in soup.find_all(list(_DROP_WITH_CONTENT)):
        node.decompose()
    return soup.get_text()


def sanitize_text(value: str) -> str:
    """Plain single-line text: markup, octets and line breaks removed."""

    text = _strip_tags(value)
    text = _OCTETS.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def sanitize_textarea(value: str) -> str:
    """Plain text that keeps its line breaks."""

    text = _strip_tags(value).replace("\r\n", "\n").replace("\r", "\n")
    text = _OCTETS.sub("", text)
    lines = [_INLINE_WHITESPACE.sub(" ", line).strip() for line in text.split("\n")]
    return "\n".join(lines).strip()


def _is_safe_url(value: str) -> bool:
    compact = "".join(value.split()).lower()
    scheme = urlsplit(compact).scheme
    return scheme in _ALLOWED_URL_SCHEMES


def sanitize_html(value: str) -> str:
    """Rich HTML restricted to standard formatting tags and safe attributes."""

    soup = BeautifulSoup(value, _PARSER)
    for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
        comment.extract()
    for node in soup.find_all(list(_DROP_WITH_CONTENT)):
        node.decompose()

    for node in soup.find_all(True):
        if not isinstance(node, Tag):
            continue
        allowed = _ALLOWED_TAGS.get(node.name)
        if allowed is None:
            node.unwrap()
            continue
        for attribute in list(node.attrs):
            name = attribute.lower()
            if name.startswith("on") or (
                name not in allowed and name not in _GLOBAL_ATTRIBUTES
            ):
                del node.attrs[attribute]
                continue
            if name in _URL_ATTRIBUTES and not _is_safe_url(str(node.attrs[attribute])):
                del node.attrs[attribute]
    return str(soup).strip()


def remove_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def sanitize_slug(value: str) -> str:
    """URL-safe lowercase slug made of ``a-z``, digits, ``_`` and ``-``."""

    text = remove_accents(_strip_tags(value)).lower()
    text = _OCTETS.sub("", text)
    text = re.sub(r"&[a-z0-9#]+;", "", text)
    text = _WHITESPACE.sub("-", text.strip()).replace(".", "-")
    text = _SLUG_INVALID.sub("", text)
    return _DASHES.sub("-", text).strip("-")


def sanitize_key(value: str) -> str:
    return re.sub(r"[^a-z0-9_\-]", "", value.lower())


def sanitize_file_name(value: str) -> str:
    """File name without path separators, shell specials or whitespace runs."""

    name = remove_accents(value)
    name = _FILE_NAME_SPECIAL.sub("", name)
    name = _WHITESPACE.sub("-", name)
    name = _DASHES.sub("-", name)
    return name.strip(".-_")
