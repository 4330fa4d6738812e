"""
Command line interface for the directory poller.

Usage:
    dirpoll snapshot ROOT
    dirpoll watch ROOT [--interval SECONDS] [--cycles N] [--native/--no-native]
"""

import asyncio
import logging.config
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from dirpoll.config.settings import LogLevel, PollerConfig, get_config
from dirpoll.filesystem.local import LocalFileSystem
from dirpoll.models import BaseError, DiffEvent, DiffKind, FilesystemError, Snapshot
from dirpoll.monitoring.channel import EventChannel
from dirpoll.monitoring.poller import Poller
from dirpoll.monitoring.watch_trigger import NativeChangeTrigger
from dirpoll.scanner.snapshot_builder import SnapshotBuilder

console = Console()

KIND_MARKERS = {
    DiffKind.CREATED: ("green", "[+]"),
    DiffKind.MODIFIED: ("yellow", "[*]"),
    DiffKind.DELETED: ("red", "[-]"),
}


def render_tree(snapshot: Snapshot) -> Tree:
    """Create a rich tree for a snapshot."""
    tree = Tree(f"[bold blue]{escape(snapshot.root_path)}[/bold blue]")
    branches: dict[str, Tree] = {"": tree}

    for path, node in snapshot.root.walk("pre"):
        parent = path.rsplit('/', 1)[0] if '/' in path else ""
        if node.is_dir:
            label = f"[bold blue]{escape(node.name)}/[/bold blue]"
        else:
            label = escape(node.name)
        branches[path] = branches[parent].add(label)

    return tree


def format_event(event: DiffEvent) -> str:
    """Format a diff event as console markup."""
    style, marker = KIND_MARKERS[event.kind]
    return f"[{style}]{escape(marker)} {event.kind.value:<8}[/{style}] {escape(event.path)}"


async def _print_events(channel: EventChannel[DiffEvent]) -> None:
    async for event in channel:
        console.print(format_event(event))


async def _print_errors(channel: EventChannel[FilesystemError]) -> None:
    async for error in channel:
        console.print(f"[bold red]error[/bold red] {escape(error.message)}")


async def _watch(
    config: PollerConfig,
    root: Path,
    interval: float | None,
    cycles: int | None,
    use_native: bool,
) -> dict:
    poller = Poller(root, config=config)
    trigger: NativeChangeTrigger | None = None
    if use_native:
        trigger = NativeChangeTrigger(poller, config=config)
        trigger.start_watching(root)

    printers = [
        asyncio.create_task(_print_events(poller.events())),
        asyncio.create_task(_print_errors(poller.errors())),
    ]
    try:
        await poller.run(interval=interval, max_cycles=cycles)
    finally:
        if trigger is not None:
            trigger.stop_watching()
        poller.close()
        await asyncio.gather(*printers)

    return poller.get_stats()


@click.group()
@click.option(
    "--log-level",
    type=click.Choice([level.value for level in LogLevel], case_sensitive=False),
    default=None,
    help="Override the configured log level.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Detect created, modified and deleted entries under a directory by polling."""
    config = get_config()
    if log_level:
        config = config.model_copy(update={"log_level": LogLevel(log_level.upper())})
    logging.config.dictConfig(config.get_log_config())
    ctx.obj = config


@cli.command()
@click.argument("root", type=click.Path(path_type=Path))
@click.option("--follow-symlinks/--no-follow-symlinks", default=None, help="Descend into symlinked directories.")
@click.pass_obj
def snapshot(config: PollerConfig, root: Path, follow_symlinks: bool | None) -> None:
    """Capture ROOT once and print its tree."""
    if follow_symlinks is None:
        follow_symlinks = config.follow_symlinks
    builder = SnapshotBuilder(
        LocalFileSystem(follow_symlinks=follow_symlinks),
        should_ignore=config.should_ignore if config.ignored_patterns else None,
    )

    try:
        snap = builder.build(root)
    except FilesystemError as e:
        raise click.ClickException(e.message) from e

    console.print(render_tree(snap))
    console.print(f"[dim]{snap.entry_count} entries[/dim]")


@cli.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--interval", type=click.FloatRange(min=0.01), default=None, help="Seconds between polls.")
@click.option("--cycles", type=click.IntRange(min=1), default=None, help="Stop after this many poll cycles.")
@click.option("--native/--no-native", default=None, help="Use OS change notifications to poll early.")
@click.pass_obj
def watch(config: PollerConfig, root: Path, interval: float | None, cycles: int | None, native: bool | None) -> None:
    """Poll ROOT and print every change until interrupted."""
    use_native = config.native_trigger_enabled if native is None else native
    console.print(f"Watching [bold]{escape(str(root))}[/bold] (Ctrl+C to stop)")

    try:
        stats = asyncio.run(_watch(config, root, interval, cycles, use_native))
    except KeyboardInterrupt:
        console.print("[dim]Interrupted[/dim]")
        return
    except BaseError as e:
        raise click.ClickException(e.message) from e

    operations = stats["operations"]
    console.print(
        f"[dim]{stats['cycles']} cycles ({stats['failed_cycles']} failed): "
        f"{operations['created']} created, {operations['modified']} modified, "
        f"{operations['deleted']} deleted[/dim]"
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
