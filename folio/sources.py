"""Fetch site resources (catalog and post documents) by site-relative path."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol
from urllib.parse import urljoin

import requests

from .config import Config

logger = logging.getLogger(__name__)


class ResourceError(RuntimeError):
    """Raised when a resource cannot be fetched."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ResourceSource(Protocol):
    def fetch_text(self, path: str) -> str:
        """Return the text of ``path`` or raise ``ResourceError``."""
        ...


class DirectorySource:
    """Serve resources from a local site directory."""

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()

    def fetch_text(self, path: str) -> str:
        target = (self.root / path.lstrip("/")).resolve()
        if not target.is_relative_to(self.root):
            raise ResourceError(path, "path escapes the site directory")
        try:
            return target.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ResourceError(path, "not found") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ResourceError(path, str(exc)) from exc

    def __repr__(self) -> str:
        return f"DirectorySource({self.root.as_posix()!r})"


class HttpSource:
    """Fetch resources relative to the base URL of a deployed site."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.timeout = timeout
        self._session = session or requests.Session()

    def fetch_text(self, path: str) -> str:
        url = urljoin(self.base_url, path.lstrip("/"))
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ResourceError(path, f"request failed: {exc}") from exc
        if not response.ok:
            raise ResourceError(path, f"HTTP {response.status_code}")
        content_type = response.headers.get("Content-Type", "")
        if "charset=" in content_type.lower():
            return response.text
        # Without a declared charset requests assumes ISO-8859-1 for text/*.
        try:
            return response.content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ResourceError(path, f"not valid UTF-8: {exc}") from exc

    def __repr__(self) -> str:
        return f"HttpSource({self.base_url!r})"


def source_from_config(config: Config) -> ResourceSource:
    """Pick the HTTP source when a base URL is configured, else the site directory."""
    if config.base_url:
        logger.debug("Reading site resources from %s", config.base_url)
        return HttpSource(config.base_url, timeout=config.request_timeout)
    return DirectorySource(config.site_dir)
