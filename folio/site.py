"""Write the listing, every post page and the highlight stylesheet to disk."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from .config import Config
from .listing import ListingView, build_listing_view
from .markdown import highlight_stylesheet
from .pages import HIGHLIGHT_CSS, PageRenderer
from .posts import PostPipeline, PostResult
from .sources import ResourceSource

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Summary of a static site build."""

    listing_path: Path
    stylesheet_path: Path
    listing: ListingView
    post_paths: list[Path] = field(default_factory=list)
    failures: list[PostResult] = field(default_factory=list)
    pruned: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.listing.is_error


def reset_directory(path: Path) -> None:
    """Remove a directory and recreate it empty."""
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)


def build_site(config: Config, source: ResourceSource) -> BuildResult:
    """Pre-render the blog into ``config.output_dir``.

    Post pages that fail to load are reported, not written. Pages left over
    from posts no longer in the catalog are removed.
    """
    output_root = config.output_dir
    output_root.mkdir(parents=True, exist_ok=True)
    renderer = PageRenderer(config)

    listing = build_listing_view(source, config, post_href=config.static_post_href_template)
    listing_path = output_root / config.listing_href
    _write(listing_path, renderer.render_listing(listing))

    stylesheet_path = output_root / HIGHLIGHT_CSS
    _write(stylesheet_path, highlight_stylesheet(config.highlight_style))

    result = BuildResult(listing_path=listing_path, stylesheet_path=stylesheet_path, listing=listing)
    if listing.is_error:
        return result

    existing = _existing_post_pages(config)
    pipeline = PostPipeline(source, config)
    for card in listing.cards:
        post = pipeline.run(card.slug)
        if not post.ok:
            result.failures.append(post)
            continue
        destination = output_root / config.static_post_href_template.format(slug=card.slug)
        root = "../" * (len(destination.relative_to(output_root).parts) - 1)
        _write(destination, renderer.render_post(post, root=root))
        result.post_paths.append(destination)

    for stale in sorted(existing - set(result.post_paths)):
        stale.unlink(missing_ok=True)
        result.pruned.append(stale)
    if result.pruned:
        logger.info("Removed %d stale post page(s).", len(result.pruned))
    return result


def _existing_post_pages(config: Config) -> set[Path]:
    template = config.static_post_href_template
    prefix, _, suffix = template.partition("{slug}")
    parent = config.output_dir / prefix
    if not prefix.endswith("/") or not parent.is_dir():
        return set()
    return {path for path in parent.glob(f"*{suffix}") if path.is_file()}


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
