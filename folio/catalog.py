"""Load, order and check the post catalog."""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Iterable, Sequence

from pydantic import ValidationError

from .config import Config
from .content import CatalogEntry
from .sources import ResourceError, ResourceSource

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised when the catalog cannot be fetched, decoded or validated."""


@dataclass(frozen=True, slots=True)
class CatalogIssue:
    """Problem found while checking catalog entries against their documents."""

    slug: str
    message: str


def load_catalog(source: ResourceSource, path: str) -> list[CatalogEntry]:
    """Fetch and validate the catalog stored at ``path``."""
    try:
        text = source.fetch_text(path)
    except ResourceError as exc:
        raise CatalogError(f"Catalog unavailable: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Catalog {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise CatalogError(f"Catalog {path} must contain a JSON array, got {type(data).__name__}.")
    entries: list[CatalogEntry] = []
    for index, item in enumerate(data):
        try:
            entries.append(CatalogEntry.model_validate(item))
        except ValidationError as exc:
            raise CatalogError(f"Invalid catalog entry #{index} in {path}: {exc}") from exc
    return entries


def find_entry(entries: Iterable[CatalogEntry], slug: str) -> CatalogEntry | None:
    """Return the first entry whose slug matches ``slug``."""
    for entry in entries:
        if entry.slug == slug:
            return entry
    return None


def parse_date(value: str) -> datetime | None:
    """Parse an ISO-ish date string; ``None`` when unparseable."""
    text = value.strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text[:10]), datetime.min.time())
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_date(value: str) -> str:
    """Format a date like ``January 5, 2026``; unparseable values are returned as-is."""
    parsed = parse_date(value)
    if parsed is None:
        return value
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def sort_entries(entries: Sequence[CatalogEntry]) -> list[CatalogEntry]:
    """Order entries newest first.

    Entries with equal dates keep their catalog order; undated or unparseable
    entries go last.
    """

    def key(entry: CatalogEntry) -> tuple[bool, datetime]:
        parsed = parse_date(entry.date)
        return (parsed is not None, parsed or datetime.min)

    return sorted(entries, key=key, reverse=True)


def check_catalog(source: ResourceSource, config: Config) -> list[CatalogIssue]:
    """Verify every catalog slug is unique and resolves to a document.

    Raises ``CatalogError`` when the catalog itself cannot be loaded.
    """
    entries = load_catalog(source, config.catalog_path)
    issues: list[CatalogIssue] = []

    counts = Counter(entry.slug for entry in entries)
    for slug, count in counts.items():
        if count > 1:
            issues.append(CatalogIssue(slug, f"slug appears {count} times in the catalog"))

    for slug in counts:
        document_path = config.post_path(slug)
        try:
            source.fetch_text(document_path)
        except ResourceError as exc:
            issues.append(CatalogIssue(slug, f"document {document_path} unavailable ({exc.reason})"))

    if issues:
        logger.warning("Catalog check found %d issue(s).", len(issues))
    return issues


def catalog_payload(entries: Iterable[CatalogEntry]) -> list[dict[str, Any]]:
    """Serialize entries back to the catalog's JSON shape."""
    return [entry.model_dump(by_alias=True) for entry in entries]
