from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from folio.config import Config, load_config


def _write_project_config(root: Path) -> Path:
    config_text = (
        "site_name: External Project\n"
        "site_dir: public\n"
        "output_dir: dist\n"
        "templates_dir: templates\n"
        "catalog_path: /data/posts.json\n"
        "post_path_template: data/posts/{slug}.md\n"
        "highlight_style: monokai\n"
    )
    cfg_path = root / "folio.yml"
    cfg_path.write_text(config_text, encoding="utf-8")
    return cfg_path


def test_load_config_resolves_paths_relative_to_config_directory(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    _write_project_config(project)

    # A directory path finds folio.yml inside it.
    cfg = load_config(project)

    assert cfg.site_name == "External Project"
    assert cfg.site_dir == (project / "public").resolve()
    assert cfg.output_dir == (project / "dist").resolve()
    assert cfg.templates_dir == (project / "templates").resolve()
    assert cfg.catalog_path == "data/posts.json"
    assert cfg.post_path("hello") == "data/posts/hello.md"
    assert cfg.highlight_style == "monokai"


def test_load_config_accepts_config_file_path(tmp_path: Path) -> None:
    project = tmp_path / "siteproj"
    project.mkdir()
    config_file = _write_project_config(project)

    cfg = load_config(config_file)
    assert cfg.output_dir == (project / "dist").resolve()


def test_load_config_uses_defaults_when_directory_has_no_config(tmp_path: Path) -> None:
    project = tmp_path / "emptyproj"
    project.mkdir()

    cfg = load_config(project)

    assert cfg.site_dir == project.resolve()
    assert cfg.output_dir == (project / "site").resolve()
    assert cfg.templates_dir is None
    assert cfg.base_url is None
    assert cfg.catalog_path == "blogs/blog-posts.json"
    assert cfg.post_path("a") == "blogs/posts/a.md"
    assert cfg.post_href_template == "blog-post.html?slug={slug}"


def test_load_config_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yml")


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    cfg_path = tmp_path / "folio.yml"
    cfg_path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        load_config(cfg_path)


def test_templates_require_slug_placeholder() -> None:
    with pytest.raises(ValidationError):
        Config(post_path_template="blogs/posts/post.md")


@pytest.mark.parametrize(
    "template",
    ["posts/{lang}/{slug}.md", "posts/{}/{slug}.md", "posts/{slug"],
)
def test_templates_reject_other_placeholders(template: str) -> None:
    with pytest.raises(ValidationError):
        Config(post_path_template=template)


def test_templates_allow_escaped_braces() -> None:
    cfg = Config(post_path_template="posts/{{raw}}/{slug}.md")

    assert cfg.post_path("hello") == "posts/{raw}/hello.md"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("https://example.com", "https://example.com/"),
        ("https://example.com/blog/", "https://example.com/blog/"),
        ("   ", None),
    ],
)
def test_base_url_normalization(raw: str, expected: str | None) -> None:
    assert Config(base_url=raw).base_url == expected


def test_base_url_requires_scheme() -> None:
    with pytest.raises(ValidationError):
        Config(base_url="example.com")
