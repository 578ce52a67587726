"""Resolve, parse and render a single post into a view model."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable
from urllib.parse import parse_qs, urlsplit

from pydantic import ValidationError

from .catalog import CatalogError, find_entry, format_date, load_catalog
from .config import Config
from .content import CatalogEntry, PostMeta, build_post_meta, parse_frontmatter
from .markdown import render_markdown
from .sources import ResourceError, ResourceSource

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Blog post not found"
LOAD_FAILED_MESSAGE = "Failed to load blog post. Please try again later."
BACK_LABEL = "Back to Blog"


class PostState(str, Enum):
    """Stages a post view passes through while loading."""

    READING_SLUG = "reading-slug"
    LOADING_CATALOG = "loading-catalog"
    LOADING_DOCUMENT = "loading-document"
    PARSING = "parsing"
    RENDERING = "rendering"
    DONE = "done"
    ERROR = "error"


class PostFailure(str, Enum):
    NOT_FOUND = "not-found"
    LOAD_FAILED = "load-failed"


class PostLoadError(RuntimeError):
    """Terminal failure while loading a post."""

    def __init__(self, failure: PostFailure, detail: str) -> None:
        super().__init__(detail)
        self.failure = failure
        self.detail = detail

    @property
    def message(self) -> str:
        if self.failure is PostFailure.NOT_FOUND:
            return NOT_FOUND_MESSAGE
        return LOAD_FAILED_MESSAGE


@dataclass(frozen=True, slots=True)
class PostView:
    """Everything the detail page shows for a successfully loaded post."""

    meta: PostMeta
    page_title: str
    description: str
    title: str
    formatted_date: str
    read_time: str
    tags: tuple[str, ...]
    content_html: str
    canonical_url: str | None = None
    canonical_label: str | None = None


@dataclass(frozen=True, slots=True)
class ErrorView:
    """Uniform message shown instead of a post, with a link back to the listing."""

    message: str
    back_href: str
    back_label: str = BACK_LABEL
    failure: PostFailure = PostFailure.LOAD_FAILED


@dataclass(slots=True)
class PostResult:
    """Outcome of a pipeline run: the states visited plus a view or an error."""

    slug: str | None
    states: list[PostState] = field(default_factory=list)
    view: PostView | None = None
    error: ErrorView | None = None

    @property
    def state(self) -> PostState:
        return self.states[-1] if self.states else PostState.READING_SLUG

    @property
    def ok(self) -> bool:
        return self.state is PostState.DONE


def slug_from_query(query: str) -> str | None:
    """Extract the ``slug`` parameter from a query string or URL."""
    if "?" in query or "://" in query:
        query = urlsplit(query).query
    values = parse_qs(query.lstrip("?")).get("slug")
    if not values or not values[0]:
        return None
    return values[0]


def domain_label(url: str) -> str:
    """Return the URL's hostname without a leading ``www.``; the raw URL if it has none."""
    try:
        hostname = urlsplit(url).hostname
    except ValueError:
        return url
    if not hostname:
        return url
    return hostname.removeprefix("www.")


class PostPipeline:
    """Load a post: resolve its catalog entry, then fetch, parse and render the document."""

    def __init__(
        self,
        source: ResourceSource,
        config: Config,
        *,
        render: Callable[[str], str] | None = None,
        back_href: str | None = None,
    ) -> None:
        self._source = source
        self._config = config
        self._render = render or self._default_render
        self._back_href = back_href or config.listing_href

    def run(self, slug: str | None) -> PostResult:
        result = PostResult(slug=slug)
        try:
            result.states.append(PostState.READING_SLUG)
            if not slug:
                raise PostLoadError(PostFailure.NOT_FOUND, "no slug given")

            result.states.append(PostState.LOADING_CATALOG)
            entry = self.resolve_entry(slug)

            result.states.append(PostState.LOADING_DOCUMENT)
            text = self.fetch_document(slug)

            result.states.append(PostState.PARSING)
            parsed = parse_frontmatter(text)
            try:
                meta = build_post_meta(entry, parsed.frontmatter)
            except ValidationError as exc:
                raise PostLoadError(PostFailure.LOAD_FAILED, f"invalid metadata: {exc}") from exc

            result.states.append(PostState.RENDERING)
            result.view = self.build_view(meta, parsed.body)
        except PostLoadError as exc:
            logger.error("Error loading blog post %r: %s", slug, exc.detail)
            result.states.append(PostState.ERROR)
            result.error = ErrorView(
                message=exc.message,
                back_href=self._back_href,
                failure=exc.failure,
            )
            return result

        result.states.append(PostState.DONE)
        return result

    def resolve_entry(self, slug: str) -> CatalogEntry:
        try:
            entries = load_catalog(self._source, self._config.catalog_path)
        except CatalogError as exc:
            raise PostLoadError(PostFailure.NOT_FOUND, str(exc)) from exc
        entry = find_entry(entries, slug)
        if entry is None:
            raise PostLoadError(PostFailure.NOT_FOUND, f"slug {slug!r} is not in the catalog")
        return entry

    def fetch_document(self, slug: str) -> str:
        try:
            return self._source.fetch_text(self._config.post_path(slug))
        except ResourceError as exc:
            raise PostLoadError(PostFailure.LOAD_FAILED, f"document unavailable: {exc}") from exc

    def build_view(self, meta: PostMeta, body: str) -> PostView:
        canonical = meta.canonical_url
        return PostView(
            meta=meta,
            page_title=f"{meta.title} - {self._config.site_name}",
            description=meta.description,
            title=meta.title,
            formatted_date=format_date(meta.date),
            read_time=meta.read_time,
            tags=tuple(meta.tags),
            content_html=self._render(body),
            canonical_url=canonical,
            canonical_label=domain_label(canonical) if canonical else None,
        )

    def _default_render(self, body: str) -> str:
        return render_markdown(body, allow_html=self._config.allow_html)
