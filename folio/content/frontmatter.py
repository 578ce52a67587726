"""Parse the lightweight ``key: value`` header block of post documents.

The grammar is intentionally small::

    ---
    key: value
    quoted: "value"
    list: [a, "b", c]
    ---
    body text

Values are either strings or flat lists of strings. Escaped commas and nested
brackets are not supported; such values split on every comma.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from .models import CatalogEntry, PostMeta

DELIMITER = "---"
QUOTES = "\"'"

FrontmatterValue = Union[str, list[str]]


@dataclass(frozen=True, slots=True)
class ParsedDocument:
    """A document split into its header mapping and untouched body text."""

    frontmatter: dict[str, FrontmatterValue] = field(default_factory=dict)
    body: str = ""
    has_header: bool = False


def parse_frontmatter(text: str) -> ParsedDocument:
    """Split ``text`` into frontmatter and body.

    Without an opening delimiter line, or when the block is never closed, the
    whole input is returned as the body with an empty mapping.
    """
    lines = text.splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0]):
        return ParsedDocument(body=text)

    offset = len(lines[0])
    header_lines: list[str] = []
    for line in lines[1:]:
        offset += len(line)
        if _is_delimiter(line):
            return ParsedDocument(
                frontmatter=_parse_header(header_lines),
                body=text[offset:],
                has_header=True,
            )
        header_lines.append(line)
    return ParsedDocument(body=text)


def merge_metadata(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Return a new mapping of ``base`` with every key of ``overlay`` applied on top."""
    merged = dict(base)
    merged.update(overlay)
    return merged


def build_post_meta(entry: CatalogEntry, frontmatter: Mapping[str, FrontmatterValue]) -> PostMeta:
    """Merge a catalog entry with document frontmatter and validate the result.

    Frontmatter wins for every field except ``slug``: the catalog slug routes
    the post and names its files, so a document cannot rename itself.

    Raises ``pydantic.ValidationError`` when the merged record is unusable.
    """
    base = entry.model_dump(by_alias=True)
    merged = merge_metadata(base, frontmatter)
    # Frontmatter may spell read time either way; the document's spelling wins.
    if "read_time" in frontmatter:
        merged["readTime"] = merged.pop("read_time")
    merged["slug"] = entry.slug
    return PostMeta.model_validate(merged)


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER


def _parse_header(lines: list[str]) -> dict[str, FrontmatterValue]:
    data: dict[str, FrontmatterValue] = {}
    for raw in lines:
        line = raw.rstrip("\r\n")
        colon = line.find(":")
        if colon <= 0:
            continue
        key = line[:colon].strip()
        if not key:
            continue
        data[key] = _parse_value(line[colon + 1 :])
    return data


def _parse_value(raw: str) -> FrontmatterValue:
    value = _unquote(raw.strip())
    if len(value) >= 2 and value.startswith("[") and value.endswith("]"):
        inner = value[1:-1]
        if not inner.strip():
            return []
        return [_unquote(item.strip()) for item in inner.split(",")]
    return value


def _unquote(value: str) -> str:
    if value[:1] and value[0] in QUOTES:
        value = value[1:]
    if value[-1:] and value[-1] in QUOTES:
        value = value[:-1]
    return value
