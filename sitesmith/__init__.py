"""sitesmith: static site builder with Markdown, layouts and Python hooks."""

__version__ = "0.1.0"
