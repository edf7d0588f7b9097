"""Exception hierarchy for sitesmith builds.

Every error raised while building a site is fatal for the whole run: the CLI
reports it on a single line and exits non-zero. Files already written by
earlier documents stay on disk.
"""

from __future__ import annotations


class BuildError(Exception):
    """Base class for all fatal build errors."""


class SourceError(BuildError):
    """A source file or directory is missing or cannot be read."""

    def __init__(self, path: object, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class MetadataError(BuildError):
    """The front-matter block of a document is not a valid YAML mapping."""

    def __init__(self, path: object, reason: str) -> None:
        self.path = str(path)
        super().__init__(f"invalid front matter in {self.path}: {reason}")


class StageError(BuildError):
    """A hook failed to load, raised, or returned a malformed response."""

    def __init__(self, stage: str, entry_point: str, reason: str) -> None:
        self.stage = stage
        self.entry_point = entry_point
        super().__init__(f"hook {stage} ({entry_point}) failed: {reason}")


class TemplateRenderError(BuildError):
    """A body, layout or snippet template has bad syntax or failed to render."""

    def __init__(self, template: str, reason: str) -> None:
        self.template = template
        super().__init__(f"template {template}: {reason}")


class PortInUseError(BuildError):
    """The preview server port is already bound by another process."""

    def __init__(self, port: int) -> None:
        self.port = port
        super().__init__(
            "port already in use, use another port with the --port flag instead"
        )
