"""Build the blog listing view from the catalog."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import quote

from .catalog import CatalogError, format_date, load_catalog, sort_entries
from .config import Config
from .content import CatalogEntry
from .sources import ResourceSource

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "No blog posts yet. Check back soon!"
ERROR_MESSAGE = "Failed to load blog posts. Please try again later."


@dataclass(frozen=True, slots=True)
class PostCard:
    """Summary card linking to one post."""

    slug: str
    title: str
    description: str
    date: str
    formatted_date: str
    read_time: str
    tags: tuple[str, ...]
    href: str


@dataclass(frozen=True, slots=True)
class ListingView:
    """Everything the listing page shows: cards, or a single message."""

    cards: tuple[PostCard, ...] = ()
    message: str | None = None
    is_error: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.cards


def build_listing_view(
    source: ResourceSource,
    config: Config,
    *,
    post_href: str | None = None,
) -> ListingView:
    """Load the catalog and turn it into listing cards, newest first.

    ``post_href`` overrides the configured link template (it must contain
    ``{slug}``). Catalog failures become an error view and are never raised.
    """
    template = post_href or config.post_href_template
    try:
        entries = load_catalog(source, config.catalog_path)
    except CatalogError as exc:
        logger.error("Error loading blog posts: %s", exc)
        return ListingView(message=ERROR_MESSAGE, is_error=True)

    if not entries:
        return ListingView(message=EMPTY_MESSAGE)

    cards = tuple(make_card(entry, template) for entry in sort_entries(entries))
    return ListingView(cards=cards)


def make_card(entry: CatalogEntry, href_template: str) -> PostCard:
    return PostCard(
        slug=entry.slug,
        title=entry.title,
        description=entry.description,
        date=entry.date,
        formatted_date=format_date(entry.date),
        read_time=entry.read_time,
        tags=tuple(entry.tags),
        href=href_template.format(slug=quote(entry.slug)),
    )
