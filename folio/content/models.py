"""Typed representations of catalog entries and merged post metadata."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CatalogEntry(BaseModel):
    """Summary record for one post as listed in the catalog."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    slug: str = Field(description="URL-safe identifier; also names the document resource.")
    title: str = Field(description="Display title.")
    description: str = Field(default="", description="Short summary shown on cards.")
    date: str = Field(default="", description="ISO-ish publication date.")
    read_time: str = Field(default="", alias="readTime", description="Estimated read time label.")
    tags: list[str] = Field(default_factory=list, description="Ordered free-form tags.")

    @field_validator("slug")
    def _normalize_slug(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("slug cannot be empty")
        # Slugs name files under the site and output directories.
        if "/" in cleaned or "\\" in cleaned or cleaned in {".", ".."}:
            raise ValueError(f"slug {cleaned!r} must not contain path separators")
        return cleaned

    @field_validator("tags", mode="before")
    def _coerce_tags(cls, value: Any) -> Any:
        return _as_tag_list(value)


class PostMeta(BaseModel):
    """Catalog entry overlaid by document frontmatter."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    slug: str
    title: str = Field(default="")
    description: str = Field(default="")
    date: str = Field(default="")
    read_time: str = Field(default="", alias="readTime")
    tags: list[str] = Field(default_factory=list)
    canonical: Optional[str] = Field(
        default=None, description="Authoritative external URL for the post, if any."
    )

    @field_validator("tags", mode="before")
    def _coerce_tags(cls, value: Any) -> Any:
        return _as_tag_list(value)

    @property
    def canonical_url(self) -> str | None:
        """Canonical reference, or ``None`` when unset or blank."""
        if self.canonical is None:
            return None
        text = self.canonical.strip()
        return text or None


def _as_tag_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        return [text] if text else []
    return value
