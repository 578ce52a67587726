"""CLI entrypoints for Folio blog tooling."""

import json
import logging
import webbrowser
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .catalog import CatalogError, catalog_payload, check_catalog, load_catalog, sort_entries
from .config import Config, load_config
from .listing import build_listing_view
from .markdown import highlight_stylesheet
from .pages import PageRenderer
from .posts import PostPipeline
from .preview_server import bound_address, make_request_handler, serve as serve_http
from .site import build_site, reset_directory
from .sources import ResourceSource, source_from_config

console = Console()
app = typer.Typer(help="Folio blog rendering toolkit.")

ConfigPathOption = Annotated[
    str,
    typer.Option("--config", "-c", help="Path to configuration file or project directory."),
]
OutputOption = Annotated[
    Path | None,
    typer.Option("--output", "-o", help="Write the rendered HTML to this file instead of stdout."),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging."),
    ] = False,
) -> None:
    """Render a catalog-driven blog to HTML."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.command("list")
def list_posts(
    config_path: ConfigPathOption = "folio.yml",
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the sorted catalog as JSON."),
    ] = False,
) -> None:
    """Show catalog entries, newest first."""
    config = _load(config_path)
    source = source_from_config(config)

    if as_json:
        try:
            entries = sort_entries(load_catalog(source, config.catalog_path))
        except CatalogError as exc:
            console.print(f"[bold red]Catalog error[/]: {exc}")
            raise typer.Exit(code=1) from exc
        typer.echo(json.dumps(catalog_payload(entries), indent=2))
        return

    view = build_listing_view(source, config)
    if view.message:
        style = "red" if view.is_error else "yellow"
        console.print(f"[bold {style}]{view.message}[/]")
        raise typer.Exit(code=1 if view.is_error else 0)

    table = Table(title=f"{config.site_name} posts")
    table.add_column("Date", no_wrap=True)
    table.add_column("Slug", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Read time")
    table.add_column("Tags")
    for card in view.cards:
        table.add_row(card.formatted_date, card.slug, card.title, card.read_time, ", ".join(card.tags))
    console.print(table)


@app.command()
def post(
    slug: Annotated[str, typer.Argument(..., help="Slug of the post to render.")],
    config_path: ConfigPathOption = "folio.yml",
    output: OutputOption = None,
) -> None:
    """Render one post page; exits non-zero when the post cannot be loaded."""
    config = _load(config_path)
    result = PostPipeline(source_from_config(config), config).run(slug)
    html_text = PageRenderer(config).render_post(result)

    if output is None:
        typer.echo(html_text)
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(html_text, encoding="utf-8")
        console.print(f"[bold green]Rendered[/]: {_display_path(output)}")

    if result.error is not None:
        console.print(f"[bold red]{result.error.message}[/] ({slug})")
        raise typer.Exit(code=1)


@app.command()
def build(
    config_path: ConfigPathOption = "folio.yml",
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", help="Override the configured output directory."),
    ] = None,
    clean: Annotated[
        bool,
        typer.Option("--clean", help="Empty the output directory before writing."),
    ] = False,
) -> None:
    """Pre-render the listing and every post page."""
    config = _load(config_path)
    if output_dir is not None:
        config.output_dir = output_dir.resolve()
    if clean:
        console.print("[bold yellow]Clean build[/]: clearing the output directory first.")
        reset_directory(config.output_dir)

    result = build_site(config, source_from_config(config))

    if result.listing.is_error:
        console.print(f"[bold red]Listing[/]: {result.listing.message}")
        raise typer.Exit(code=1)

    console.print(f"[bold green]Listing[/]: rendered {_display_path(result.listing_path)}")
    console.print(
        "[bold green]Posts[/]: "
        f"rendered {len(result.post_paths)} page(s) in {_display_path(config.output_dir)}"
    )
    if result.pruned:
        console.print(f"[bold yellow]Posts[/]: removed {len(result.pruned)} stale page(s)")
    for failure in result.failures:
        message = failure.error.message if failure.error else "unknown error"
        console.print(f"[bold red]Failed[/]: {failure.slug} - {message}")
    if not result.ok:
        raise typer.Exit(code=1)


@app.command()
def check(config_path: ConfigPathOption = "folio.yml") -> None:
    """Verify every catalog slug is unique and has a document."""
    config = _load(config_path)
    source = source_from_config(config)
    try:
        issues = check_catalog(source, config)
    except CatalogError as exc:
        console.print(f"[bold red]Catalog error[/]: {exc}")
        raise typer.Exit(code=1) from exc

    if not issues:
        console.print("[bold green]Catalog clean[/]: every entry has a document.")
        raise typer.Exit()

    for issue in issues:
        console.print(f"[bold red]ERROR[/] {issue.slug} - {issue.message}")
    console.print(f"[bold blue]Summary[/]: {len(issues)} issue(s).")
    raise typer.Exit(code=1)


@app.command()
def styles(
    config_path: ConfigPathOption = "folio.yml",
    style: Annotated[
        str | None,
        typer.Option("--style", help="Pygments style; defaults to the configured one."),
    ] = None,
) -> None:
    """Print the CSS for highlighted code blocks."""
    config = _load(config_path)
    typer.echo(highlight_stylesheet(style or config.highlight_style))


@app.command("serve")
def serve_site(
    config_path: ConfigPathOption = "folio.yml",
    host: Annotated[
        str,
        typer.Option("--host", help="Host interface to bind the preview server."),
    ] = "127.0.0.1",
    port: Annotated[
        int,
        typer.Option("--port", "-p", help="Port for the preview server."),
    ] = 8000,
    open_browser: Annotated[
        bool,
        typer.Option(
            "--open-browser/--no-open-browser",
            help="Automatically open the listing in a browser after starting.",
        ),
    ] = False,
) -> None:
    """Serve the blog, rendering pages from the catalog on each request."""
    config = _load(config_path)
    if port < 0 or port > 65535:
        raise typer.BadParameter("Port must be between 0 and 65535.")

    source: ResourceSource = source_from_config(config)
    handler = make_request_handler(config, source)

    try:
        with serve_http(host, port, handler) as server:
            bound_host, bound_port = bound_address(server)
            url_host = "127.0.0.1" if bound_host in {"0.0.0.0", ""} else bound_host
            site_url = f"http://{url_host}:{bound_port}/{config.listing_href}"
            console.print(
                f"[bold green]Preview server[/]: serving {source!r} at {site_url} "
                "(press Ctrl+C to stop)"
            )
            if open_browser:
                webbrowser.open(site_url)
            try:
                server.serve_forever()
            except KeyboardInterrupt:
                console.print("\n[bold yellow]Stopping preview server...[/]")
    except OSError as exc:
        console.print(f"[bold red]Failed to start preview server[/]: {exc}")
        raise typer.Exit(code=1) from exc


def _display_path(path: Path) -> str:
    try:
        return path.relative_to(Path.cwd()).as_posix()
    except ValueError:
        return path.as_posix()


def _load(path: str) -> Config:
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Config file not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
