"""CLI commands for prefpanes."""

from __future__ import annotations

from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from prefpanes import __version__

app = typer.Typer(
    name="prefpanes",
    help="prefpanes - preferences window with lazy panes and search",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"prefpanes v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log at DEBUG level."),
) -> None:
    """prefpanes entrypoint."""
    del version
    from prefpanes.config.loader import load_config
    from prefpanes.logging_setup import configure_logging

    configure_logging(load_config().logging, verbose=verbose)


def _load(config_path: Path | None):
    from prefpanes.config.loader import load_config

    return load_config(config_path)


@app.command()
def panes(
    config_path: Path = typer.Option(None, "--config", help="Config file (default ~/.prefpanes/config.json)."),
) -> None:
    """List the panes declared in the pane manifest."""
    from prefpanes.config.loader import load_manifest

    config = _load(config_path)
    manifest_path = config.manifest_path
    if not manifest_path.exists():
        console.print(f"[red]No pane manifest at {manifest_path}[/red]")
        raise typer.Exit(1)
    manifest = load_manifest(manifest_path)

    console.print(f"Manifest: {manifest_path}\n")
    for title, entries in (("Built-in", manifest.builtin), ("Plugins", manifest.plugins)):
        if not entries:
            continue
        console.print(f"{title}:")
        for pane in entries:
            label = pane.raw_label or pane.label or ""
            parent = f" [dim](sub-pane of {pane.parent})[/dim]" if pane.parent else ""
            console.print(f"  - [cyan]{pane.id}[/cyan] {escape(label)}{parent} [dim]{pane.src or '-'}[/dim]")


@app.command()
def search(
    term: str = typer.Argument(..., help="Text to find across all panes."),
    config_path: Path = typer.Option(None, "--config", help="Config file (default ~/.prefpanes/config.json)."),
) -> None:
    """Load every pane headlessly and print where TERM matches."""
    from prefpanes.bootstrap import open_preferences

    config = _load(config_path)
    window = open_preferences(config)
    try:
        result = window.search(term)
        window.host.scheduler.run_until_idle()
    finally:
        window.on_unload()

    if not result.term:
        console.print("[yellow]Empty search term.[/yellow]")
        raise typer.Exit(1)
    if not result.matches:
        console.print(f"No matches for [bold]{escape(result.display)}[/bold].")
        raise typer.Exit(1)

    console.print(f"{len(result.matches)} matches for [bold]{escape(result.display)}[/bold]:")
    for pane_id in result.panes_with_matches:
        pane = window.registry.get(pane_id)
        console.print(f"\n[cyan]{escape(window.registry.label_for(pane.descriptor))}[/cyan] ({pane_id})")
        for match in result.matches:
            if not pane.container.contains(match.node):
                continue
            console.print(f"  - {escape(_describe(match))}")
    if result.activated_tabs:
        logger.debug(f"[cli] switched {len(result.activated_tabs)} tab boxes")


def _describe(match) -> str:
    if match.is_text:
        data = match.node.data
        before = data[max(0, match.start - 20):match.start]
        after = data[match.end:match.end + 20]
        return f"...{before}[{data[match.start:match.end]}]{after}...".replace("\n", " ")
    elem = match.node
    ident = f"#{elem.id}" if elem.id else ""
    return f"<{elem.tag}{ident}> {elem.get_attribute('label') or elem.text_content.strip()}"


@app.command()
def gui(
    pane: str = typer.Option("", "--pane", help="Pane to open instead of the last selected one."),
    tab: str = typer.Option("", "--tab", help="Tab id to select inside the pane."),
    config_path: Path = typer.Option(None, "--config", help="Config file (default ~/.prefpanes/config.json)."),
) -> None:
    """Start the preferences desktop window."""
    from prefpanes.gui.app import run_app
    from prefpanes.prefs.window import OpenRequest

    config = _load(config_path)
    request = OpenRequest(pane=pane or None, tab=tab or None)
    run_app(config, request)


@app.command()
def status(
    config_path: Path = typer.Option(None, "--config", help="Config file (default ~/.prefpanes/config.json)."),
) -> None:
    """Show prefpanes configuration status."""
    from prefpanes.config.loader import get_config_path

    config = _load(config_path)
    path = config_path or get_config_path()

    console.print("prefpanes Status\n")
    console.print(f"Config: {path} {'[green]OK[/green]' if path.exists() else '[red]NO[/red]'}")
    for title, target in (
        ("Preferences", config.store_path),
        ("Manifest", config.manifest_path),
        ("Fragments", config.fragments_dir),
    ):
        console.print(f"{title}: {target} {'[green]OK[/green]' if target.exists() else '[red]NO[/red]'}")
    for string_path in config.string_paths:
        console.print(f"Strings: {string_path} {'[green]OK[/green]' if string_path.exists() else '[red]NO[/red]'}")
    console.print(f"Default pane: [cyan]{config.window.default_pane}[/cyan]")
    console.print(f"GUI: {config.window.width}x{config.window.height}")


if __name__ == "__main__":
    app()
