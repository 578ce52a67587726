from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
import requests

from folio.config import Config
from folio.preview_server import PreviewServerHandle, start_preview, stop_preview
from folio.sources import DirectorySource

FIXTURE_SITE = Path(__file__).resolve().parent / "fixtures" / "site"


@pytest.fixture()
def preview() -> Iterator[PreviewServerHandle]:
    config = Config(site_dir=FIXTURE_SITE, site_name="Preview")
    handle = start_preview(config, DirectorySource(FIXTURE_SITE), port=0)
    try:
        yield handle
    finally:
        stop_preview(handle)


def test_listing_route_renders_cards(preview: PreviewServerHandle) -> None:
    response = requests.get(f"{preview.url}blogs.html", timeout=5)

    assert response.status_code == 200
    assert response.headers["Content-Type"].startswith("text/html")
    assert 'href="blog-post.html?slug=newer-post"' in response.text


def test_post_route_reads_slug_from_query(preview: PreviewServerHandle) -> None:
    response = requests.get(f"{preview.url}blog-post.html", params={"slug": "newer-post"}, timeout=5)

    assert response.status_code == 200
    assert "Newer Post, Revised - Preview" in response.text


def test_post_route_unknown_slug_is_404(preview: PreviewServerHandle) -> None:
    response = requests.get(f"{preview.url}blog-post.html?slug=nope", timeout=5)

    assert response.status_code == 404
    assert "Blog post not found" in response.text


def test_post_route_missing_document_is_502(preview: PreviewServerHandle) -> None:
    response = requests.get(f"{preview.url}blog-post.html?slug=missing-document", timeout=5)

    assert response.status_code == 502
    assert "Failed to load blog post" in response.text


def test_static_files_and_stylesheet(preview: PreviewServerHandle) -> None:
    catalog = requests.get(f"{preview.url}blogs/blog-posts.json", timeout=5)
    css = requests.get(f"{preview.url}highlight.css", timeout=5)

    assert catalog.status_code == 200
    assert catalog.json()[0]["slug"] == "older-post"
    assert css.headers["Content-Type"].startswith("text/css")
    assert "pre code" in css.text
