"""Post metadata models and frontmatter handling."""

from .frontmatter import ParsedDocument, build_post_meta, merge_metadata, parse_frontmatter
from .models import CatalogEntry, PostMeta

__all__ = [
    "CatalogEntry",
    "ParsedDocument",
    "PostMeta",
    "build_post_meta",
    "merge_metadata",
    "parse_frontmatter",
]
