"""Markdown to HTML conversion with a run-wide configuration."""

from __future__ import annotations

import logging
import threading
from typing import Any

import markdown
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from sitesmith.config.models import MarkupConfig

logger = logging.getLogger(__name__)

# Always-on syntax: GFM-style tables, fences, strikethrough, autolinks and
# task lists, plus footnotes and heading ids.
BASE_EXTENSIONS = [
    "tables",
    "fenced_code",
    "footnotes",
    "toc",
    "pymdownx.tilde",
    "pymdownx.magiclink",
    "pymdownx.tasklist",
]


def build_markdown_options(config: MarkupConfig) -> dict[str, Any]:
    """Resolve ``markdown.Markdown`` keyword arguments from config.

    Raises ValueError if highlighting is enabled with an unknown theme.
    """
    extensions: list[str] = list(BASE_EXTENSIONS)
    extension_configs: dict[str, dict[str, Any]] = {
        # Only ~~text~~ strikethrough; single tildes stay literal.
        "pymdownx.tilde": {"subscript": False},
    }

    if config.hard_wrap:
        extensions.append("nl2br")

    if config.highlight:
        try:
            get_style_by_name(config.highlight_theme)
        except ClassNotFound as e:
            raise ValueError(f"Unknown highlight theme '{config.highlight_theme}'") from e
        extensions.append("codehilite")
        extension_configs["codehilite"] = {
            "pygments_style": config.highlight_theme,
            "noclasses": True,
            "guess_lang": False,
        }

    return {
        "extensions": extensions,
        "extension_configs": extension_configs,
        "output_format": "xhtml",
    }


class MarkupConverter:
    """Converts Markdown text to an HTML fragment.

    ``markdown.Markdown`` instances carry per-conversion state, so each
    thread gets its own instance, reset before every call.
    """

    def __init__(self, config: MarkupConfig | None = None) -> None:
        self.config = config or MarkupConfig()
        self._options = build_markdown_options(self.config)
        self._local = threading.local()
        logger.debug("markdown extensions: %s", ", ".join(self._options["extensions"]))

    def _processor(self) -> markdown.Markdown:
        md = getattr(self._local, "md", None)
        if md is None:
            md = markdown.Markdown(**self._options)
            self._local.md = md
        return md

    def convert(self, text: str) -> str:
        md = self._processor()
        md.reset()
        return md.convert(text)
