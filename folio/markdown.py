"""Shared Markdown rendering helpers with Pygments code highlighting."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import cast

from markdown_it import MarkdownIt
from mdit_py_plugins.deflist import deflist_plugin
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name, guess_lexer
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

CODE_SELECTOR = "pre code"

_FORMATTER = HtmlFormatter(nowrap=True)


def highlight_code(code: str, lang: str = "", _attrs: str = "") -> str:
    """Highlight a fenced code block, falling back to language detection.

    The hint is tried first; an unknown hint or a lexer failure is logged and
    the block is highlighted with an automatically detected lexer instead.
    """
    hint = lang.strip()
    if hint:
        try:
            return highlight(code, get_lexer_by_name(hint), _FORMATTER)
        except ClassNotFound:
            logger.debug("No lexer named %r; detecting language instead.", hint)
        except Exception:
            logger.exception("Highlight error for language %r", hint)
    return _highlight_auto(code)


def _highlight_auto(code: str) -> str:
    try:
        return highlight(code, _guess_lexer(code), _FORMATTER)
    except Exception:
        logger.exception("Highlight error during language detection")
        return highlight(code, TextLexer(), _FORMATTER)


def _guess_lexer(code: str) -> Lexer:
    try:
        return guess_lexer(code)
    except ClassNotFound:
        return TextLexer()


@lru_cache(maxsize=2)
def _renderer(allow_html: bool) -> MarkdownIt:
    """Configure and cache a CommonMark renderer with extended syntax."""
    md = MarkdownIt(
        "commonmark",
        {"html": allow_html, "breaks": True, "typographer": True, "highlight": highlight_code},
    )
    md.enable("table").enable("strikethrough")
    md.use(deflist_plugin)
    md.use(footnote_plugin)
    md.use(tasklists_plugin, label=True)
    return md


def render_markdown(text: str, *, allow_html: bool = False) -> str:
    """Render Markdown to HTML using the shared renderer.

    Raw HTML in ``text`` is escaped unless ``allow_html`` is set.
    """
    if not text.strip():
        return ""
    return cast(str, _renderer(allow_html).render(text))


def highlight_stylesheet(style: str = "default") -> str:
    """Return CSS rules for the token classes emitted by ``highlight_code``."""
    try:
        formatter = HtmlFormatter(style=style)
    except ClassNotFound:
        logger.warning("Unknown Pygments style %r; using the default style.", style)
        formatter = HtmlFormatter()
    return cast(str, formatter.get_style_defs(CODE_SELECTOR))
