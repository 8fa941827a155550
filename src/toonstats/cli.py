"""Command-line interface for toonstats."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
import structlog
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from toonstats import __version__
from toonstats.aggregator import CrawlProgress
from toonstats.config.config import Config, settings
from toonstats.errors import CrawlAbortedError
from toonstats.observability import configure_logging
from toonstats.output import write_csv
from toonstats.pipeline import crawl_series

console = Console(stderr=True)
logger = structlog.get_logger(__name__)


def load_config(path: Optional[Path]) -> Config:
    if path is not None:
        return Config.from_yaml(path)
    # Resolve the lazy proxy into a real instance so it can be modified
    return settings.model_copy(deep=True)


@click.command()
@click.version_option(version=__version__)
@click.option("--start", "-s", type=click.IntRange(min=1), required=True, help="First chapter to crawl")
@click.option("--end", "-e", type=click.IntRange(min=1), required=True, help="Last chapter to crawl (inclusive)")
@click.option("--pages", "-p", type=click.IntRange(min=0), required=True, help="Number of episode list pages")
@click.option("--output", "-o", type=click.Path(file_okay=False, path_type=Path), help="Output directory")
@click.option(
    "--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML config"
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (overrides the config file)",
)
def cli(
    start: int,
    end: int,
    pages: int,
    output: Optional[Path],
    config_path: Optional[Path],
    log_level: Optional[str],
) -> None:
    """Crawl chapter statistics of a web comic series into a CSV file."""
    if end < start:
        raise click.BadParameter(f"--end ({end}) must not be smaller than --start ({start})", param_hint="--end")

    config = load_config(config_path)
    if log_level:
        config.monitoring.log_level = log_level
    configure_logging(config.monitoring)

    with Progress(
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task_id = progress.add_task("Chapters", total=end - start + 1)

        def on_progress(snapshot: CrawlProgress) -> None:
            progress.update(task_id, completed=snapshot.processed)

        try:
            title, records = asyncio.run(crawl_series(start, end, pages, config, on_progress=on_progress))
        except CrawlAbortedError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)

    path = write_csv(output or config.output.path, records, title, config.series.filename)
    console.print(f"[green]Wrote {len(records)} chapters to {path}[/green]")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
