"""Shared test fixtures for sitesmith."""

import json
from pathlib import Path

import pytest

from sitesmith.config.models import MarkupConfig, SiteConfig
from sitesmith.pipeline.markup import MarkupConverter


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create ``files`` (relative path -> text) under ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def json_writer(fn):
    """Wrap ``fn(envelope: dict) -> dict`` as a JSON-in/JSON-out hook writer."""

    def _writer(raw: str) -> str:
        return json.dumps(fn(json.loads(raw)))

    return _writer


@pytest.fixture
def make_site(tmp_path):
    """Build a project tree and return a SiteConfig pointing at it.

    Keys of ``pages`` are relative to ``pages/``; ``hooks`` and ``public``
    likewise.
    """

    def _make(
        pages: dict[str, str],
        hooks: dict[str, str] | None = None,
        public: dict[str, str] | None = None,
        **config,
    ) -> SiteConfig:
        root = tmp_path / "site"
        (root / "pages").mkdir(parents=True, exist_ok=True)
        write_tree(root / "pages", pages)
        if hooks:
            write_tree(root / "hooks", hooks)
        if public:
            write_tree(root / "public", public)
        return SiteConfig(path=str(root), out=str(tmp_path / "dist"), **config)

    return _make


@pytest.fixture
def converter():
    return MarkupConverter(MarkupConfig(hard_wrap=False))
