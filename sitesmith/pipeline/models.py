"""Document and render-data models for the build pipeline."""

from __future__ import annotations

import posixpath
import threading
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from sitesmith.errors import SourceError

MARKUP_EXTENSION = ".md"
OUTPUT_EXTENSION = ".html"


def derive_target_name(name: str) -> str:
    """Rewrite a Markdown logical name to its HTML output name."""
    path = PurePosixPath(name)
    if path.suffix == MARKUP_EXTENSION:
        return str(path.with_suffix(OUTPUT_EXTENSION))
    return name


def normalize_target_name(name: str) -> str | None:
    """Clean a target name into a relative path under the output root.

    Leading slashes are dropped. Returns None when ``..`` climbs out.
    """
    cleaned = posixpath.normpath(name.replace("\\", "/").lstrip("/"))
    if cleaned in (".", "..") or cleaned.startswith("../"):
        return None
    return cleaned


@dataclass
class Document:
    """One source file travelling through the pipeline.

    Created on discovery, mutated in place by each stage, discarded after
    flush. ``lock`` guards the mutable fields while hooks run and while the
    document is written.
    """

    name: str
    source_path: Path
    dest_path: Path
    target_name: str = ""
    raw: bytes = b""
    meta: dict[str, Any] | None = None
    body: str = ""
    html: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    extras: dict[str, Any] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.target_name:
            self.target_name = derive_target_name(self.name)

    @classmethod
    def from_source(cls, source_path: Path, pages_dir: Path, out_dir: Path) -> Document:
        name = source_path.relative_to(pages_dir).as_posix()
        return cls(name=name, source_path=source_path, dest_path=out_dir / name)

    @property
    def is_markup(self) -> bool:
        return self.source_path.suffix == MARKUP_EXTENSION

    def output_path(self, out_dir: Path) -> Path:
        """Where the document is written. Raises SourceError if it leaves ``out_dir``."""
        target = normalize_target_name(self.target_name)
        if target is None:
            raise SourceError(
                self.source_path, f"target {self.target_name!r} is outside the output directory"
            )
        return out_dir / target


class SiteMeta(BaseModel):
    """Run-wide values shared by every page."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "/"


class PageRenderData(BaseModel):
    """What both template passes of a page can see."""

    site: SiteMeta
    data: dict[str, Any] = Field(default_factory=dict)
    extras: dict[str, Any] = Field(default_factory=dict)

    def context(self) -> dict[str, Any]:
        return {
            "Meta": {"BaseURL": self.site.base_url},
            "Data": self.data,
            "Extras": self.extras,
        }


class BuildReport(BaseModel):
    """Summary of a finished build."""

    documents: int = 0
    stages: int = 0
    written: list[str] = []
    duration: float = 0.0
