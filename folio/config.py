from pathlib import Path
from string import Formatter
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

CONFIG_FILENAME = "folio.yml"


class Config(BaseModel):
    site_name: str = Field(default="Folio", description="Suffix appended to every page title.")
    site_dir: Path = Field(
        default=Path("."),
        description="Directory holding the catalog and post documents when no base_url is set.",
    )
    output_dir: Path = Field(default=Path("site"))
    templates_dir: Path | None = Field(
        default=None,
        description="Optional directory whose templates override the packaged defaults.",
    )
    base_url: str | None = Field(
        default=None,
        description="Fetch the catalog and documents from a deployed site instead of site_dir.",
    )
    catalog_path: str = Field(default="blogs/blog-posts.json")
    post_path_template: str = Field(default="blogs/posts/{slug}.md")
    listing_href: str = Field(default="blogs.html")
    post_href_template: str = Field(
        default="blog-post.html?slug={slug}",
        description="Link from a listing card to the dynamic detail view.",
    )
    static_post_href_template: str = Field(
        default="posts/{slug}.html",
        description="Link (relative to output_dir) used for pre-rendered post pages.",
    )
    allow_html: bool = Field(
        default=False,
        description="Pass raw HTML in post bodies through instead of escaping it.",
    )
    highlight_style: str = Field(default="default", description="Pygments style name.")
    request_timeout: float = Field(default=10.0, gt=0)

    @field_validator("site_dir", "output_dir", mode="before")
    def _ensure_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("templates_dir", mode="before")
    def _ensure_optional_path(cls, value: Any) -> Path | None:
        if value is None or value == "":
            return None
        return Path(value)

    @field_validator("base_url")
    def _normalize_base_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text:
            return None
        if not text.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return text.rstrip("/") + "/"

    @field_validator("post_path_template", "post_href_template", "static_post_href_template")
    def _require_slug_placeholder(cls, value: str) -> str:
        fields = {name for _, name, _, _ in Formatter().parse(value) if name is not None}
        if "slug" not in fields:
            raise ValueError("path templates must contain a '{slug}' placeholder")
        if fields != {"slug"}:
            extra = ", ".join(sorted(repr(name) for name in fields - {"slug"}))
            raise ValueError(f"path templates may only use the '{{slug}}' placeholder, found {extra}")
        return value

    @field_validator("catalog_path")
    def _strip_leading_slash(cls, value: str) -> str:
        return value.lstrip("/")

    def post_path(self, slug: str) -> str:
        return self.post_path_template.format(slug=slug).lstrip("/")


def load_config(path: str | Path) -> Config:
    """Load configuration and resolve relative paths based on the config location.

    The ``path`` argument may point to a file (e.g., ``/site/folio.yml``) or a
    directory containing that file. All relative paths inside the configuration
    are interpreted relative to the directory holding the config file.
    """
    candidate = Path(path)
    data: dict[str, Any] = {}
    base_dir: Path
    if candidate.is_dir():
        # A directory without a config file uses defaults anchored to it.
        config_file = candidate / CONFIG_FILENAME
        if config_file.exists():
            data = _read_yaml(config_file)
        base_dir = candidate.resolve()
    else:
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        data = _read_yaml(candidate)
        base_dir = candidate.parent.resolve()

    cfg = Config(**data)

    def _abs_required(value: Path) -> Path:
        return value if value.is_absolute() else (base_dir / value).resolve()

    cfg.site_dir = _abs_required(cfg.site_dir)
    cfg.output_dir = _abs_required(cfg.output_dir)
    if cfg.templates_dir is not None:
        cfg.templates_dir = _abs_required(cfg.templates_dir)
    return cfg


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration {path} must define a mapping at the top level.")
    return data
