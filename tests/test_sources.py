from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import requests

from folio.config import Config
from folio.sources import DirectorySource, HttpSource, ResourceError, source_from_config


class _FakeResponse:
    def __init__(
        self,
        status_code: int,
        text: str = "",
        *,
        content: bytes | None = None,
        content_type: str = "text/plain; charset=utf-8",
    ) -> None:
        self.status_code = status_code
        self.text = text
        self.content = text.encode("utf-8") if content is None else content
        self.headers = {"Content-Type": content_type}

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


class _FakeSession:
    def __init__(self, responses: dict[str, Any]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, float]] = []

    def get(self, url: str, timeout: float) -> _FakeResponse:
        self.calls.append((url, timeout))
        outcome = self.responses[url]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_directory_source_reads_relative_paths(tmp_path: Path) -> None:
    (tmp_path / "blogs").mkdir()
    (tmp_path / "blogs" / "a.md").write_text("hello", encoding="utf-8")

    source = DirectorySource(tmp_path)

    assert source.fetch_text("blogs/a.md") == "hello"
    assert source.fetch_text("/blogs/a.md") == "hello"


def test_directory_source_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ResourceError) as excinfo:
        DirectorySource(tmp_path).fetch_text("blogs/none.md")

    assert excinfo.value.reason == "not found"
    assert excinfo.value.path == "blogs/none.md"


def test_directory_source_refuses_escaping_paths(tmp_path: Path) -> None:
    root = tmp_path / "site"
    root.mkdir()
    (tmp_path / "secret.txt").write_text("nope", encoding="utf-8")

    with pytest.raises(ResourceError, match="escapes"):
        DirectorySource(root).fetch_text("../secret.txt")


def test_http_source_joins_base_url_and_passes_timeout() -> None:
    session = _FakeSession({"https://example.com/blog/blogs/a.md": _FakeResponse(200, "body")})
    source = HttpSource("https://example.com/blog", timeout=3.5, session=session)  # type: ignore[arg-type]

    assert source.fetch_text("blogs/a.md") == "body"
    assert session.calls == [("https://example.com/blog/blogs/a.md", 3.5)]


def test_http_source_treats_error_status_as_failure() -> None:
    session = _FakeSession({"https://example.com/blogs/a.md": _FakeResponse(404)})
    source = HttpSource("https://example.com/", session=session)  # type: ignore[arg-type]

    with pytest.raises(ResourceError, match="HTTP 404"):
        source.fetch_text("blogs/a.md")


def test_http_source_wraps_transport_errors() -> None:
    session = _FakeSession({"https://example.com/a.md": requests.ConnectionError("refused")})
    source = HttpSource("https://example.com/", session=session)  # type: ignore[arg-type]

    with pytest.raises(ResourceError, match="request failed"):
        source.fetch_text("a.md")


def test_source_from_config_picks_http_when_base_url_set(tmp_path: Path) -> None:
    assert isinstance(source_from_config(Config(site_dir=tmp_path)), DirectorySource)

    source = source_from_config(Config(base_url="https://example.com", request_timeout=2))
    assert isinstance(source, HttpSource)
    assert source.base_url == "https://example.com/"
    assert source.timeout == 2


def test_http_source_decodes_utf8_when_charset_missing() -> None:
    body = "---\ntitle: Café résumé\n---\nNaïve text\n"
    response = _FakeResponse(
        200,
        body.encode("utf-8").decode("iso-8859-1"),
        content=body.encode("utf-8"),
        content_type="text/markdown",
    )
    session = _FakeSession({"https://example.com/blogs/posts/hello.md": response})
    source = HttpSource("https://example.com/", session=session)  # type: ignore[arg-type]

    assert source.fetch_text("blogs/posts/hello.md") == body


def test_http_source_honours_declared_charset() -> None:
    response = _FakeResponse(
        200, "déjà vu", content="déjà vu".encode("latin-1"), content_type="text/plain; charset=ISO-8859-1"
    )
    session = _FakeSession({"https://example.com/a.md": response})
    source = HttpSource("https://example.com/", session=session)  # type: ignore[arg-type]

    assert source.fetch_text("a.md") == "déjà vu"


def test_http_source_rejects_undecodable_body() -> None:
    response = _FakeResponse(200, content=b"\xff\xfe broken", content_type="text/markdown")
    session = _FakeSession({"https://example.com/a.md": response})
    source = HttpSource("https://example.com/", session=session)  # type: ignore[arg-type]

    with pytest.raises(ResourceError, match="UTF-8"):
        source.fetch_text("a.md")
