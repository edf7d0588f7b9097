"""Per-document rendering pipeline: front matter, Markdown, templates."""

from sitesmith.pipeline.discovery import collect_documents
from sitesmith.pipeline.frontmatter import split_front_matter
from sitesmith.pipeline.markup import MarkupConverter, build_markdown_options
from sitesmith.pipeline.models import (
    BuildReport,
    Document,
    PageRenderData,
    SiteMeta,
    derive_target_name,
    normalize_target_name,
)
from sitesmith.pipeline.templates import RESERVED_FILES, TemplateComposer, create_environment

__all__ = [
    "BuildReport",
    "Document",
    "MarkupConverter",
    "PageRenderData",
    "RESERVED_FILES",
    "SiteMeta",
    "TemplateComposer",
    "build_markdown_options",
    "collect_documents",
    "create_environment",
    "derive_target_name",
    "normalize_target_name",
    "split_front_matter",
]
