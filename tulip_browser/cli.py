"""
Tulip Browser CLI: start the desktop reader or browse the board from a terminal.

Registered as `tulip-browser` console script via pyproject.toml.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar

import click

from .backend import HttpBackend, SettingsStore
from .config import APP_NAME, DEFAULT_FONT_SIZE, NO_RESPONSES_TEXT, NO_THREADS_TEXT, VALID_THEMES, BoardConfig
from .exceptions import TulipBrowserError
from .models import Settings
from .viewmodels import response_entry, thread_row

T = TypeVar("T")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _run_backend(ctx: click.Context, command: Callable[[HttpBackend], Awaitable[T]]) -> T:
    """Run one backend coroutine, turning backend errors into a clean exit."""
    obj = ctx.obj

    async def runner() -> T:
        async with HttpBackend(SettingsStore(obj["config_dir"]), obj["board"]) as backend:
            return await command(backend)

    try:
        return asyncio.run(runner())
    except TulipBrowserError as exc:
        click.secho(f"Error: {exc}", fg="red", err=True)
        raise SystemExit(1) from exc


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="tulip-browser")
@click.option("--board-url", envvar="TULIP_BOARD_URL", default=None, help="Board base URL.")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding setting.json.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, board_url: str | None, config_dir: Path | None, verbose: bool) -> None:
    """Tulip Browser: a desktop reader for 2ch-style discussion boards."""
    _setup_logging(verbose)
    board = BoardConfig.from_env()
    if board_url:
        board = BoardConfig(board_url=board_url, timeout=board.timeout, image_prefixes=board.image_prefixes)
    ctx.ensure_object(dict)
    ctx.obj["board"] = board
    ctx.obj["config_dir"] = config_dir or Path(click.get_app_dir(APP_NAME))


@cli.command()
def run() -> None:
    """Start the desktop reader."""
    from .app import main

    main().main_loop()


@cli.command()
@click.pass_context
def threads(ctx: click.Context) -> None:
    """List the board's threads."""

    async def fetch(backend: HttpBackend) -> list[Any]:
        return await backend.fetch_threads()

    items = _run_backend(ctx, fetch)
    if not items:
        click.echo(NO_THREADS_TEXT)
        return
    for thread in items:
        row = thread_row(thread)
        click.echo(f"{row.thread_id:>12}  {row.header:<16}  {row.response_count_label:>8}  {row.title}")


@cli.command()
@click.argument("thread_id")
@click.pass_context
def thread(ctx: click.Context, thread_id: str) -> None:
    """Print the responses of THREAD_ID."""

    async def fetch(backend: HttpBackend) -> list[Any]:
        return await backend.fetch_thread_content(thread_id)

    items = _run_backend(ctx, fetch)
    if not items:
        click.echo(NO_RESPONSES_TEXT)
        return
    for item in items:
        entry = response_entry(item)
        author = entry.author + (f" {entry.mail_label}" if entry.mail_label else "")
        badge = f" {entry.badge}" if entry.badge else ""
        click.secho(f"{entry.number} {author} {entry.date_line}{badge}", bold=True)
        click.echo(entry.content.replace("<br>", "\n"))
        click.echo()


@cli.group()
def settings() -> None:
    """Show or change display settings."""


@settings.command(name="show")
@click.pass_context
def settings_show(ctx: click.Context) -> None:
    """Print the saved settings."""

    async def fetch(backend: HttpBackend) -> Settings:
        return await backend.get_settings()

    current = _run_backend(ctx, fetch)
    click.echo(f"theme: {current.theme}")
    click.echo(f"font_size: {current.font_size}")


@settings.command(name="set")
@click.option("--theme", type=click.Choice(VALID_THEMES), default=None, help="Color theme.")
@click.option("--font-size", type=click.IntRange(min=1), default=None, help=f"Font size (default {DEFAULT_FONT_SIZE}).")
@click.pass_context
def settings_set(ctx: click.Context, theme: str | None, font_size: int | None) -> None:
    """Change and save settings."""
    if theme is None and font_size is None:
        raise click.UsageError("Pass --theme and/or --font-size.")

    async def update(backend: HttpBackend) -> Settings:
        current = await backend.get_settings()
        updated = Settings(
            theme=theme or current.theme,
            font_size=font_size or current.font_size,
        )
        await backend.save_settings(updated)
        return updated

    saved = _run_backend(ctx, update)
    click.secho(f"Saved: theme={saved.theme}, font_size={saved.font_size}", fg="green")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
