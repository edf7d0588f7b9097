"""Two-pass template composition of a document's final output.

A page goes through four phases:

1. the body is rendered as a template (so Markdown can interpolate page data),
2. the expanded body is converted to HTML,
3. the fragment is wrapped by ``_layout.html`` (or, deprecated, by
   ``_head.html`` / ``_tail.html``),
4. the composed page is rendered as a template once more, so layout and
   snippet text, and directives injected by hooks, can reference page data.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

from jinja2 import ChainableUndefined, Environment, Template, TemplateError
from jinja2.ext import Extension
from markupsafe import Markup

from sitesmith.errors import TemplateRenderError
from sitesmith.pipeline.markup import MarkupConverter
from sitesmith.pipeline.models import Document, PageRenderData, SiteMeta

logger = logging.getLogger(__name__)

HEAD_FILENAME = "_head.html"
TAIL_FILENAME = "_tail.html"
LAYOUT_FILENAME = "_layout.html"
RESERVED_FILES = (HEAD_FILENAME, TAIL_FILENAME, LAYOUT_FILENAME)

# Sources that get head/tail snippets when no layout exists.
SNIPPET_SUFFIXES = (".md", ".html")

_TAG_RE = re.compile(r"(\{\{|\{%)(.*?)(\}\}|%\})", re.DOTALL)
_LEADING_DOT_RE = re.compile(r"(?<![\w\)\]\.'\"])\.(?=[A-Za-z_])")
_STRING_RE = re.compile(r"""("(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')""", re.DOTALL)
_RAW_BLOCK_RE = re.compile(r"(\{%-?\s*raw\s*-?%\}.*?\{%-?\s*endraw\s*-?%\})", re.DOTALL)

# Go-style comments; Jinja's default {# #} clashes with Markdown like {#id}.
COMMENT_START = "{{/*"
COMMENT_END = "*/}}"


class DotFieldExtension(Extension):
    """Accept leading-dot field references such as ``{{ .Data.title }}``.

    The dot is dropped inside ``{{ }}`` and ``{% %}`` tags, so the reference
    resolves exactly like ``{{ Data.title }}``. String literals and
    ``{% raw %}`` blocks are left alone.
    """

    def preprocess(self, source: str, name: str | None, filename: str | None = None) -> str:
        # Captured raw blocks land at odd indexes.
        pieces = _RAW_BLOCK_RE.split(source)
        return "".join(
            piece if i % 2 else _TAG_RE.sub(_strip_leading_dots, piece)
            for i, piece in enumerate(pieces)
        )


def _strip_leading_dots(m: re.Match) -> str:
    parts = _STRING_RE.split(m.group(2))
    inner = "".join(
        part if i % 2 else _LEADING_DOT_RE.sub("", part) for i, part in enumerate(parts)
    )
    return m.group(1) + inner + m.group(3)


def create_environment() -> Environment:
    """Jinja2 environment shared by every template pass.

    Missing fields render as empty strings (also when chained, e.g.
    ``Data.author.name``); values are HTML-escaped unless marked safe.
    Comments are written ``{{/* like this */}}``.
    """
    return Environment(
        autoescape=True,
        undefined=ChainableUndefined,
        keep_trailing_newline=True,
        comment_start_string=COMMENT_START,
        comment_end_string=COMMENT_END,
        extensions=[DotFieldExtension],
    )


def _read_snippet(path: Path) -> str | None:
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


class TemplateComposer:
    """Renders documents to their final bytes and writes them to disk."""

    def __init__(
        self,
        site: SiteMeta,
        converter: MarkupConverter,
        out_dir: Path,
        *,
        layout: str | None = None,
        head: str | None = None,
        tail: str | None = None,
        environment: Environment | None = None,
    ) -> None:
        self.site = site
        self.converter = converter
        self.out_dir = Path(out_dir)
        self.head = head
        self.tail = tail
        self.env = environment or create_environment()
        self._layout: Template | None = None
        if layout is not None:
            self._layout = self._compile(layout, LAYOUT_FILENAME)

    @classmethod
    def from_pages_dir(
        cls, pages_dir: Path, site: SiteMeta, converter: MarkupConverter, out_dir: Path
    ) -> TemplateComposer:
        """Pick up the reserved layout and snippet files from ``pages_dir``."""
        head = _read_snippet(pages_dir / HEAD_FILENAME)
        tail = _read_snippet(pages_dir / TAIL_FILENAME)
        layout = _read_snippet(pages_dir / LAYOUT_FILENAME)

        if head is not None or tail is not None:
            logger.warning(
                "use of %s and %s is deprecated, please use %s instead",
                TAIL_FILENAME,
                HEAD_FILENAME,
                LAYOUT_FILENAME,
            )
        if layout is None:
            logger.info("no %s found, skipping", LAYOUT_FILENAME)

        return cls(site, converter, out_dir, layout=layout, head=head, tail=tail)

    @property
    def has_layout(self) -> bool:
        return self._layout is not None

    # -- template helpers --------------------------------------------------

    def _compile(self, source: str, name: str) -> Template:
        try:
            return self.env.from_string(source)
        except TemplateError as e:
            raise TemplateRenderError(name, str(e)) from e

    def render_string(self, source: str, context: dict[str, Any], name: str) -> str:
        """Render ``source`` as a template. Raises TemplateRenderError."""
        template = self._compile(source, name)
        try:
            return template.render(context)
        except TemplateError as e:
            raise TemplateRenderError(name, str(e)) from e

    # -- composition -------------------------------------------------------

    def compose(self, document: Document) -> str:
        """Run all four phases for ``document`` and return the final text."""
        render_data = PageRenderData(
            site=self.site, data=document.data, extras=document.extras
        )
        context = render_data.context()

        expanded = self.render_string(document.body, context, f"{document.name} (body)")

        if document.is_markup:
            fragment = self.converter.convert(expanded)
        else:
            fragment = expanded

        if self._layout is not None:
            try:
                composed = self._layout.render({**context, "Content": Markup(fragment)})
            except TemplateError as e:
                raise TemplateRenderError(LAYOUT_FILENAME, str(e)) from e
        else:
            composed = self._wrap_with_snippets(document, fragment)

        return self.render_string(composed, context, str(document.source_path))

    def _wrap_with_snippets(self, document: Document, fragment: str) -> str:
        if document.source_path.suffix not in SNIPPET_SUFFIXES:
            return fragment
        return (self.head or "") + fragment + (self.tail or "")

    def flush(self, document: Document) -> Path:
        """Compose ``document`` and write it under the output directory."""
        with document.lock:
            target = document.output_path(self.out_dir)
            logger.debug("flushing %s -> %s", document.name, target)
            final = self.compose(document)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(final, encoding="utf-8")
        return target
