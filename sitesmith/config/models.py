from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class MarkupConfig(BaseModel):
    highlight: bool = False
    highlight_theme: str = "bw"
    hard_wrap: bool = True


class ServerConfig(BaseModel):
    enabled: bool = False
    port: int = Field(default=3000, ge=0, le=65535)


class SiteConfig(BaseModel):
    path: str = "."
    out: str = "./dist"
    base_url: str = "/"
    hooks: str = "./hooks"
    markup: MarkupConfig = Field(default_factory=MarkupConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"

    @property
    def root_dir(self) -> Path:
        return Path(self.path)

    @property
    def pages_dir(self) -> Path:
        return self.root_dir / "pages"

    @property
    def public_dir(self) -> Path:
        return self.root_dir / "public"

    @property
    def hooks_dir(self) -> Path:
        # Hooks are always looked up relative to the project root.
        return self.root_dir / self.hooks

    @property
    def out_dir(self) -> Path:
        return Path(self.out)
