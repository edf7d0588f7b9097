"""CLI entry point for sitesmith."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax

from sitesmith.builder import SiteBuilder
from sitesmith.config import CONFIG_FILENAME, DEFAULT_CONFIG_TEMPLATE, SiteConfig, load_config
from sitesmith.errors import BuildError
from sitesmith.server import run_server

app = typer.Typer(
    name="sitesmith",
    help="Build a static site from Markdown pages, layouts and Python hooks.",
)

config_app = typer.Typer(help="Manage sitesmith configuration.")
app.add_typer(config_app, name="config")

DEBUG_ENV = "SITESMITH_DEBUG"

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

err_console = Console(stderr=True)


def _configure_logging(level: str) -> None:
    if os.environ.get(DEBUG_ENV):
        level = "debug"
    logging.basicConfig(
        level=_LOG_LEVELS[level],
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(message: str) -> None:
    err_console.print(f"[red]\\[sitesmith] {escape(message)}[/red]", highlight=False)
    raise typer.Exit(1)


def _load(config: str | None, overrides: dict | None = None) -> SiteConfig:
    try:
        cfg = load_config(config, overrides)
    except ValueError as e:
        _fail(str(e))
    _configure_logging(cfg.log_level)
    return cfg


def _serve(cfg: SiteConfig) -> None:
    rprint(f"[blue]\\[sitesmith][/blue] [green]Serving on[/green] [cyan]:{cfg.server.port}[/cyan]")
    try:
        run_server(cfg.out_dir, cfg.server.port)
    except BuildError as e:
        _fail(str(e))


@app.command()
def build(
    path: Annotated[str | None, typer.Option("--path", help="DIR to search for pages/, public/ and hooks/")] = None,
    out: Annotated[str | None, typer.Option("--out", help="DIR to output the compiled files to")] = None,
    baseurl: Annotated[str | None, typer.Option("--baseurl", help="URL to be used as the root of the project")] = None,
    hooks: Annotated[str | None, typer.Option("--hooks", help="DIR that contains hooks for the content")] = None,
    highlight: Annotated[
        bool | None, typer.Option("--highlight/--no-highlight", help="Highlight fenced code blocks")
    ] = None,
    highlight_theme: Annotated[
        str | None, typer.Option("--highlight-theme", help="THEME to use for highlighting (any pygments style)")
    ] = None,
    hard_wrap: Annotated[
        bool | None, typer.Option("--hard-wrap/--no-hard-wrap", help="Turn line breaks into <br />")
    ] = None,
    serve: Annotated[bool | None, typer.Option("--serve", help="Start a local server after building")] = None,
    port: Annotated[int | None, typer.Option("--port", help="PORT to start the server on")] = None,
    config: Annotated[str | None, typer.Option("--config", "-c", help=f"Path to {CONFIG_FILENAME}")] = None,
) -> None:
    """Compile the site."""
    overrides = {
        "path": path,
        "out": out,
        "base_url": baseurl,
        "hooks": hooks,
        "markup": {
            "highlight": highlight,
            "highlight_theme": highlight_theme,
            "hard_wrap": hard_wrap,
        },
        "server": {"enabled": serve, "port": port},
    }
    cfg = _load(config, overrides)

    try:
        report = SiteBuilder(cfg).build()
    except (BuildError, OSError, ValueError) as e:
        _fail(str(e))

    rprint(
        f'[blue]\\[sitesmith][/blue] [green]Compiled[/green] [cyan]"{cfg.path}"[/cyan] '
        f'[green]to[/green] [cyan]"{cfg.out}"[/cyan] '
        f"[dim]({report.documents} pages, {report.duration:.2f}s)[/dim]"
    )

    if cfg.server.enabled:
        _serve(cfg)


@app.command()
def serve(
    out: Annotated[str | None, typer.Option("--out", help="DIR with the compiled files")] = None,
    port: Annotated[int | None, typer.Option("--port", help="PORT to start the server on")] = None,
    config: Annotated[str | None, typer.Option("--config", "-c", help=f"Path to {CONFIG_FILENAME}")] = None,
) -> None:
    """Serve an already compiled site."""
    cfg = _load(config, {"out": out, "server": {"port": port}})
    if not cfg.out_dir.is_dir():
        _fail(f"output directory {cfg.out} does not exist, run `sitesmith build` first")
    _serve(cfg)


@config_app.command("show")
def config_show(
    config: Annotated[str | None, typer.Option("--config", "-c", help=f"Path to {CONFIG_FILENAME}")] = None,
) -> None:
    """Show current resolved configuration."""
    cfg = _load(config)
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False, sort_keys=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default sitesmith.yaml in current directory."""
    target = Path(CONFIG_FILENAME)
    if target.exists() and not force:
        rprint(f"[yellow]{CONFIG_FILENAME} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
