"""Find the documents to render under the pages directory."""

from __future__ import annotations

from pathlib import Path

from sitesmith.errors import SourceError
from sitesmith.pipeline.templates import RESERVED_FILES


def collect_documents(pages_dir: Path) -> list[Path]:
    """Recursively list files under ``pages_dir`` in sorted order.

    Reserved layout/snippet names are skipped at every depth.
    Raises SourceError if ``pages_dir`` can't be listed.
    """
    try:
        entries = sorted(pages_dir.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise SourceError(pages_dir, e.strerror or str(e)) from e

    files: list[Path] = []
    for entry in entries:
        if entry.name in RESERVED_FILES:
            continue
        if entry.is_dir():
            files.extend(collect_documents(entry))
        else:
            files.append(entry)
    return files
