"""CLI entry point for PodArchive."""

import asyncio
import logging
import signal
import sys
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from podarchive.archive.models import PassReport
from podarchive.config.logging import setup_logging
from podarchive.config.manager import CONFIG_ENV_VAR, ConfigManager
from podarchive.config.schema import AppConfig
from podarchive.scheduler import next_run_time
from podarchive.service import ArchiverService, create_http_client
from podarchive.utils.cancellation import CancellationToken
from podarchive.utils.errors import ConfigError

app = typer.Typer(
    name="podarchive",
    help="Archive podcast feeds into tagged audio files on a daily schedule",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger("podarchive.cli")

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    envvar=CONFIG_ENV_VAR,
    help="Path to the configuration file (YAML or JSON)",
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose (DEBUG) logging"
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file"
    ),
) -> None:
    """PodArchive - Download, tag and prune podcast episodes."""
    ctx.obj = {"verbose": verbose, "log_file": log_file}
    setup_logging(verbose=verbose, log_file=log_file)


def _load_config(ctx: typer.Context, config_file: Path | None) -> AppConfig:
    """Load configuration or exit with status 1."""
    options = ctx.obj or {}
    try:
        config = ConfigManager(config_file).load_config()
    except ConfigError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        sys.exit(1)

    setup_logging(
        level=config.log_level,
        verbose=options.get("verbose", False),
        log_file=options.get("log_file") or config.log_file,
    )
    return config


async def _run_service(config: AppConfig, once: bool = False) -> PassReport | None:
    """Run the service with SIGINT/SIGTERM wired to cancellation."""
    token = CancellationToken()
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()

    def request_cancel() -> None:
        logger.info("Cancellation requested ...")
        token.cancel()
        if task is not None:
            task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_cancel)
        except (NotImplementedError, RuntimeError):
            # No loop signal support (Windows); Ctrl+C raises KeyboardInterrupt
            pass

    async with create_http_client(config) as client:
        service = ArchiverService(config, client, token)
        if once:
            return await service.run_once()
        await service.run()
    return None


def _execute(config: AppConfig, once: bool) -> PassReport | None:
    try:
        return asyncio.run(_run_service(config, once=once))
    except (asyncio.CancelledError, KeyboardInterrupt):
        logger.info("Cancelled, shutting down")
        return None
    except Exception:
        logger.exception("Unhandled exception occurred.")
        sys.exit(1)
    finally:
        logger.info("PodArchive stopped")


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from podarchive import __version__

    console.print(f"[bold cyan]PodArchive[/bold cyan] v{__version__}")


@app.command("run")
def run_command(
    ctx: typer.Context,
    config_file: Path | None = ConfigOption,
) -> None:
    """Archive all feeds now, then again at every configured time of day.

    Runs until interrupted (Ctrl+C or SIGTERM).

    Examples:
        podarchive run

        podarchive run --config /etc/podarchive/config.yaml
    """
    config = _load_config(ctx, config_file)
    _execute(config, once=False)


@app.command("once")
def once_command(
    ctx: typer.Context,
    config_file: Path | None = ConfigOption,
) -> None:
    """Archive all feeds a single time and print a summary."""
    config = _load_config(ctx, config_file)
    report = _execute(config, once=True)
    if report is None:
        return

    table = Table(title="[bold]Archive Summary[/bold]")
    table.add_column("Feed", style="cyan")
    table.add_column("Downloaded", justify="right", style="green")
    table.add_column("Skipped", justify="right")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Deleted", justify="right", style="yellow")
    table.add_column("Status")

    for feed in report.feeds:
        status = "[green]✓[/green]" if feed.ok else f"[red]✗[/red] {escape(feed.error or '')}"
        table.add_row(
            feed.title or feed.url,
            str(feed.download.downloaded),
            str(feed.download.skipped),
            str(feed.download.failed),
            str(len(feed.cleanup.deleted)),
            status,
        )

    console.print(table)


@app.command("feeds")
def list_feeds(
    ctx: typer.Context,
    config_file: Path | None = ConfigOption,
) -> None:
    """List configured podcast feeds."""
    config = _load_config(ctx, config_file)

    if not config.feeds:
        console.print("[yellow]No feeds configured yet.[/yellow]")
        return

    table = Table(title="[bold]Configured Podcast Feeds[/bold]")
    table.add_column("Title", style="cyan")
    table.add_column("URL", style="blue")
    table.add_column("Keep", justify="right", style="green")

    for feed in config.feeds:
        keep = str(feed.count) if feed.count is not None else "all"
        table.add_row(feed.title or "-", str(feed.url), keep)

    console.print(table)
    console.print(f"\n[dim]Total: {len(config.feeds)} feed(s)[/dim]")
    console.print(f"[dim]Output path: {config.output_path}[/dim]")


@app.command("next-run")
def show_next_run(
    ctx: typer.Context,
    config_file: Path | None = ConfigOption,
) -> None:
    """Show when the next scheduled run would start."""
    config = _load_config(ctx, config_file)
    next_run = next_run_time(datetime.now(), config.effective_download_times)
    console.print(f"Next run: [bold]{next_run:%Y-%m-%d %H:%M}[/bold]")


if __name__ == "__main__":
    app()
