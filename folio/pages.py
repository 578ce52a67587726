"""Apply listing and post view models to Jinja2 page templates."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .config import Config
from .listing import ListingView
from .posts import PostResult

logger = logging.getLogger(__name__)

BUILTIN_TEMPLATES = Path(__file__).resolve().parent / "templates"
LISTING_TEMPLATE = "blogs.html"
POST_TEMPLATE = "blog-post.html"
HIGHLIGHT_CSS = "highlight.css"


class PageRenderer:
    """Render page HTML; templates in ``config.templates_dir`` override the packaged ones."""

    def __init__(self, config: Config) -> None:
        self._config = config
        self._environment = self._build_environment()

    @property
    def environment(self) -> Environment:
        return self._environment

    def render_listing(self, view: ListingView, *, root: str = "") -> str:
        return self._render(LISTING_TEMPLATE, {"view": view}, root=root)

    def render_post(self, result: PostResult, *, root: str = "") -> str:
        """Render a loaded post, or its error container when loading failed."""
        if result.view is None and result.error is None:
            raise ValueError(f"Post result for {result.slug!r} has neither a view nor an error.")
        return self._render(
            POST_TEMPLATE,
            {"view": result.view, "error": result.error},
            root=root,
        )

    def _render(self, name: str, context: dict[str, Any], *, root: str) -> str:
        template = self._environment.get_template(name)
        return template.render(
            site_name=self._config.site_name,
            highlight_css=HIGHLIGHT_CSS,
            root=root,
            **context,
        )

    def _build_environment(self) -> Environment:
        search_paths: list[str] = []
        custom = self._config.templates_dir
        if custom is not None:
            if custom.exists():
                search_paths.append(str(custom))
            else:
                logger.warning("Templates directory %s not found; using packaged templates.", custom)
        search_paths.append(str(BUILTIN_TEMPLATES))
        return Environment(
            loader=FileSystemLoader(search_paths),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
