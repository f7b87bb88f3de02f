"""Command-line interface for Marrow."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from marrow import MarrowError, __version__
from marrow.config import get_config
from marrow.notebook.markdown_export import notebook_to_markdown
from marrow.parsing.notebook import NotebookParser
from marrow.settings import get_settings_store
from marrow.view import open_document, read_document

console = Console()
err_console = Console(stderr=True)


def setup_logging(level: str) -> None:
    """Route package logging through rich on stderr."""
    logger = logging.getLogger("marrow")
    logger.setLevel(level.upper())
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=err_console, show_path=False, log_time_format="[%X]"))


def fail(title: str, error: Exception) -> None:
    """Print an error panel and exit with status 1."""
    err_console.print()
    err_console.print(
        Panel.fit(
            f"[red]Error:[/red] {error}",
            border_style="red",
            title=f"[bold red]{title}[/bold red]",
        )
    )
    sys.exit(1)


def write_output(text: str, output: Optional[Path]) -> None:
    if output is None:
        click.echo(text, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    err_console.print(f"[green]✓[/green] Wrote [yellow]{output}[/yellow]")


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (default: from config or WARNING)",
)
def main(log_level: Optional[str]):
    """Marrow - Markdown and Jupyter notebook viewer.

    Renders documents to a single HTML page with source line annotations.
    """
    try:
        level = log_level or get_config().log_level
    except MarrowError as e:
        fail("Invalid Configuration", e)
    setup_logging(level)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output HTML file (default: stdout)",
)
@click.option(
    "--css",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Stylesheet to embed in the page",
)
@click.option(
    "--js",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Script to embed in the page",
)
def render(path: Path, output: Optional[Path], css: Optional[Path], js: Optional[Path]):
    """Render a Markdown file or notebook to a full HTML page.

    PATH: Path to the .md or .ipynb file
    """
    try:
        view = open_document(
            path,
            settings_store=get_settings_store(),
            css=read_document(css) if css else "",
            js=read_document(js) if js else "",
        )
        write_output(view.page_html, output)
    except (MarrowError, OSError) as e:
        fail("Render Failed", e)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def toc(path: Path):
    """Print the table of contents of a document.

    PATH: Path to the .md or .ipynb file
    """
    try:
        view = open_document(path)
    except MarrowError as e:
        fail("TOC Failed", e)

    if not view.toc:
        console.print("[yellow]No headings found.[/yellow]")
        return

    table = Table(title=view.title)
    table.add_column("Level", justify="right", style="cyan")
    table.add_column("Heading")
    table.add_column("Anchor", style="dim")
    for entry in view.toc:
        table.add_row(str(entry.level), "  " * (entry.level - 1) + entry.text, entry.slug)
    console.print(table)


@main.command()
@click.argument("notebook", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output Markdown file (default: stdout)",
)
def export_markdown(notebook: Path, output: Optional[Path]):
    """Convert a notebook to Markdown.

    NOTEBOOK: Path to the .ipynb file
    """
    try:
        markdown = notebook_to_markdown(NotebookParser().parse(notebook))
        write_output(markdown, output)
    except (MarrowError, OSError) as e:
        fail("Export Failed", e)


@main.command()
def config_show():
    """Show current configuration."""
    try:
        config = get_config()
    except MarrowError as e:
        fail("Invalid Configuration", e)

    console.print(Panel.fit("[bold cyan]Marrow Configuration[/bold cyan]", border_style="cyan"))
    console.print()
    console.print(f"[cyan]Truncate Threshold:[/cyan] {config.truncate_threshold}")
    console.print(f"[cyan]Head Lines:[/cyan] {config.head_lines}")
    console.print(f"[cyan]Tail Lines:[/cyan] {config.tail_lines}")
    console.print(f"[cyan]Reveal Step:[/cyan] {config.reveal_step}")
    console.print(f"[cyan]Settings File:[/cyan] {config.resolved_settings_path()}")
    console.print(f"[cyan]Log Level:[/cyan] {config.log_level}")


if __name__ == "__main__":
    main()
