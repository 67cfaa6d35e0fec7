"""Command line interface for VaultLens."""

from __future__ import annotations

import asyncio
import difflib
import logging
import shlex
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, Iterator, Optional, Sequence, TypeVar

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from vaultlens.backend import BackendError, backend_from_config
from vaultlens.config import (
    ConfigError,
    ConfigManager,
    VaultLensConfig,
    assign_nested,
    resolve_with_precedence,
)
from vaultlens.projection import (
    BrowserNode,
    DuplicateGroup,
    SimilarityGroup,
    SmartDedupIndex,
    TimelineBucket,
    describe_threshold,
    reclaimable_bytes,
)
from vaultlens.projection.similarity import MAX_THRESHOLD, MIN_THRESHOLD, image_records
from vaultlens.records import (
    ALL_CATEGORIES,
    CATEGORIES,
    FileRecord,
    clean_modified,
    format_size,
    format_timestamp,
    path_name,
)
from vaultlens.session import (
    ActionOutcome,
    BrowseState,
    ClipboardCoordinator,
    ClipboardError,
    ClipboardItem,
    VaultCoordinator,
    VaultView,
)

console = Console()

T = TypeVar("T")

CATEGORY_CHOICES = (ALL_CATEGORIES, *CATEGORIES)


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    important_modes = {"summary", "warning", "error"}
    if summary_only and mode not in important_modes:
        return

    console.print(message)


def _format_summary_line(command: str, target: str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands.

    Args:
        command: Command name to include in the summary.
        target: Vault location or item the command acted on.
        metrics: Ordered mapping of metric names to values.

    Returns:
        str: Rich-formatted summary string.
    """

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {target}: {parts}.[/green]"


@contextmanager
def _cli_errors(action: str, json_output: bool) -> Iterator[None]:
    """Translate failures raised inside a command body into CLI errors."""
    try:
        yield
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except BackendError as exc:
        _handle_cli_error(str(exc), code="backend_error", json_output=json_output, original=exc)
    except ClipboardError as exc:
        _handle_cli_error(str(exc), code="clipboard_error", json_output=json_output, original=exc)
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_output, original=exc)
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while {action}: {exc}",
            code="internal_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )


def _configure_logging(level: str, *, verbose: bool) -> None:
    """Route VaultLens log records to stderr through rich."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    try:
        logging.getLogger("vaultlens").setLevel(logging.DEBUG if verbose else level.upper())
    except ValueError as exc:
        raise ConfigError(f"Invalid logging level {level!r}.") from exc


def _run(coroutine: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coroutine)


def _confirm_with_prompt(prompt: str) -> bool:
    return click.confirm(prompt, default=False)


def _confirm_always(_prompt: str) -> bool:
    return True


def _output_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the shared ``--json``/``--summary``/``--quiet`` flags."""
    func = click.option("--quiet", is_flag=True, help="Suppress non-error output.")(func)
    func = click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")(
        func
    )
    func = click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")(func)
    return func


def _yes_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--yes", "assume_yes", is_flag=True, help="Skip the confirmation prompt."
    )(func)


@dataclass
class _Session:
    """Resolved configuration, output preferences and coordinator for one command."""

    config: VaultLensConfig
    coordinator: VaultCoordinator
    json_output: bool
    quiet: bool
    summary_only: bool

    def emit(self, message: Any, mode: str = "detail") -> None:
        if self.json_output:
            return
        _emit_message(message, mode=mode, quiet=self.quiet, summary_only=self.summary_only)

    def fail(self, message: str, *, code: str = "backend_error") -> None:
        _handle_cli_error(message.removeprefix("Error: "), code=code, json_output=self.json_output)

    def require_records(self) -> list[FileRecord]:
        """Fetch the vault listing or fail the command."""
        if not _run(self.coordinator.refresh_vault()):
            self.fail(self.coordinator.status)
        return self.coordinator.records

    def require_history(self) -> None:
        if not _run(self.coordinator.refresh_history()):
            self.fail(self.coordinator.status)

    def report(
        self,
        outcome: ActionOutcome,
        *,
        command: str,
        target: str,
    ) -> None:
        """Print the result of a mutation or query run through the coordinator."""
        if outcome.skipped:
            if self.json_output:
                console.print_json(data={"skipped": True, "message": outcome.message})
                return
            self.emit(f"[yellow]{outcome.message}[/yellow]", mode="warning")
            return
        if not outcome.ok:
            self.fail(outcome.message)

        if self.json_output:
            console.print_json(
                data={
                    "ok": True,
                    "message": outcome.message,
                    "stale": outcome.stale,
                    "result": outcome.value,
                }
            )
            return

        self.emit(f"[green]{outcome.message}[/green]")
        if outcome.stale:
            self.emit(
                "[yellow]The vault listing could not be refreshed; "
                "run `vaultlens ls` to retry.[/yellow]",
                mode="warning",
            )
        self.emit(
            _format_summary_line(
                command, target, {"files": len(self.coordinator.records)}
            ),
            mode="summary",
        )


def _open_session(
    ctx: click.Context,
    *,
    json_output: bool = False,
    quiet: bool = False,
    summary_mode: bool = False,
    assume_yes: bool = False,
) -> _Session:
    """Load configuration and build the coordinator for a command.

    Raises:
        click.ClickException: If output flags conflict.
        ConfigError: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    manager.ensure_exists()
    config = manager.load()

    verbose = bool((ctx.find_root().obj or {}).get("verbose", False))
    _configure_logging(config.logging.level, verbose=verbose)

    quiet_enabled = quiet
    summary_only = summary_mode
    if "quiet" in ctx.params:
        explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
        explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE
        quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
        summary_only = summary_mode if explicit_summary else config.cli.summary_default

        if json_output:
            if explicit_quiet and quiet_enabled:
                raise click.ClickException("--json cannot be combined with --quiet.")
            if explicit_summary and summary_only:
                raise click.ClickException("--json cannot be combined with --summary.")
            quiet_enabled = False
            summary_only = False

        if quiet_enabled and summary_only:
            raise click.ClickException(
                "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
            )

    if assume_yes or not config.cli.confirm_destructive:
        confirm = _confirm_always
    else:
        confirm = _confirm_with_prompt

    coordinator = VaultCoordinator(backend_from_config(config), confirm=confirm)
    return _Session(
        config=config,
        coordinator=coordinator,
        json_output=json_output,
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


def _node_table(nodes: Sequence[BrowserNode], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Hash")
    for node in nodes:
        if node.is_folder:
            table.add_row(f"[bold]{node.name}/[/bold]", "folder", "")
        else:
            table.add_row(node.name, node.category, (node.hash or "")[:12])
    return table


def _duplicate_payload(group: DuplicateGroup) -> dict[str, Any]:
    return {
        "hash": group[0].hash,
        "size": group[0].size,
        "paths": [record.path for record in group],
    }


def _bucket_payload(bucket: TimelineBucket) -> dict[str, Any]:
    return {
        "date_key": bucket.date_key,
        "label": bucket.display_label,
        "files": [record.path for record in bucket.files],
    }


def _similar_payload(group: SimilarityGroup) -> dict[str, Any]:
    return {
        "representative": group.representative.path,
        "members": [member.path for member in group.members],
        "similarity_pct": group.similarity_pct,
    }


def _resolve_view(
    session: _Session,
    *,
    path: str = "",
    query: str = "",
    category: Optional[str] = None,
    timeline_mode: Optional[str] = None,
) -> VaultView:
    session.require_records()
    state = (
        BrowseState(category=category or session.config.browser.default_category)
        .go_to(path)
        .search(query)
    )
    return session.coordinator.view(
        state,
        timeline_mode=timeline_mode or session.config.timeline.mode,  # type: ignore[arg-type]
        unknown_placement=session.config.timeline.unknown_placement,
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="vaultlens")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """VaultLens browses and manages a content-addressed file vault."""
    ctx.ensure_object(dict)["verbose"] = verbose


@cli.command("ls")
@click.argument("path", required=False, default="")
@click.option("--search", "query", type=str, default="", help="Search file names instead.")
@click.option("--category", type=click.Choice(CATEGORY_CHOICES), help="Category filter.")
@_output_options
@click.pass_context
def ls_command(
    ctx: click.Context,
    path: str,
    query: str,
    category: Optional[str],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """List folders and files one level below PATH.

    With --search the listing is replaced by every file whose name contains
    the query, regardless of PATH.
    """
    with _cli_errors("listing the vault", json_output):
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        view = _resolve_view(session, path=path, query=query, category=category)
        folders = sum(1 for node in view.nodes if node.is_folder)
        counts = {"folders": folders, "files": len(view.nodes) - folders}

        if json_output:
            console.print_json(
                data={
                    "context": {
                        "path": view.state.location,
                        "search": view.state.search_query,
                        "category": view.state.category,
                    },
                    "counts": counts,
                    "nodes": [node.model_dump(mode="json") for node in view.nodes],
                }
            )
            return

        if not view.nodes:
            session.emit("[yellow]Nothing here.[/yellow]", mode="warning")
        else:
            title = (
                f"Search results for '{view.state.search_query}'"
                if view.state.searching
                else view.state.location
            )
            session.emit(_node_table(view.nodes, title))
        session.emit(_format_summary_line("List", view.state.location, counts), mode="summary")


@cli.command()
@click.option("--category", type=click.Choice(CATEGORY_CHOICES), help="Category filter.")
@_output_options
@click.pass_context
def dupes(
    ctx: click.Context,
    category: Optional[str],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Show groups of files that share identical content."""
    with _cli_errors("grouping duplicates", json_output):
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        view = _resolve_view(session, category=category)
        groups = view.duplicates
        counts = {
            "groups": len(groups),
            "files": sum(len(group) for group in groups),
            "reclaimable_bytes": reclaimable_bytes(groups),
        }

        if json_output:
            console.print_json(
                data={"counts": counts, "groups": [_duplicate_payload(g) for g in groups]}
            )
            return

        for group in groups:
            table = Table(title=f"{group[0].name} ({format_size(group[0].size)})")
            table.add_column("Path")
            for record in group:
                table.add_row(record.path)
            session.emit(table)
        if not groups:
            session.emit("[green]No duplicate files found.[/green]")
        session.emit(
            _format_summary_line(
                "Duplicates",
                view.state.category,
                {**counts, "reclaimable": format_size(counts["reclaimable_bytes"])},
            ),
            mode="summary",
        )


@cli.command()
@click.option(
    "--mode",
    type=click.Choice(["modified", "indexed"]),
    help="Bucket by modification or indexing date (defaults to configuration).",
)
@click.option("--category", type=click.Choice(CATEGORY_CHOICES), help="Category filter.")
@_output_options
@click.pass_context
def timeline(
    ctx: click.Context,
    mode: Optional[str],
    category: Optional[str],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Group files by date, newest first."""
    with _cli_errors("building the timeline", json_output):
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        view = _resolve_view(session, category=category, timeline_mode=mode)

        if json_output:
            console.print_json(data={"buckets": [_bucket_payload(b) for b in view.timeline]})
            return

        for bucket in view.timeline:
            session.emit(f"[bold]{bucket.display_label}[/bold] ({len(bucket.files)})")
            for record in bucket.files:
                session.emit(f"  - {record.name}")
        session.emit(
            _format_summary_line(
                "Timeline",
                view.state.category,
                {"buckets": len(view.timeline), "files": len(view.records)},
            ),
            mode="summary",
        )


@cli.command()
@click.option(
    "--threshold",
    type=click.IntRange(MIN_THRESHOLD, MAX_THRESHOLD),
    help="Similarity percentage (defaults to configuration).",
)
@_output_options
@click.pass_context
def similar(
    ctx: click.Context,
    threshold: Optional[int],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Find images that look nearly identical."""
    with _cli_errors("scanning for similar images", json_output):
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        records = session.require_records()
        dedup = SmartDedupIndex(threshold or session.config.smart_dedup.threshold)
        images = image_records(records)
        if not images:
            if json_output:
                console.print_json(data={"threshold": dedup.threshold, "groups": []})
                return
            session.emit("[yellow]No indexed images to compare.[/yellow]", mode="warning")
            return

        session.emit(f"Threshold {dedup.threshold}%: {describe_threshold(dedup.threshold)}.")
        outcome = _run(session.coordinator.scan_similar(dedup))
        if not outcome.ok:
            session.fail(outcome.message)
        groups: list[SimilarityGroup] = outcome.value

        if json_output:
            console.print_json(
                data={
                    "threshold": dedup.threshold,
                    "images": len(images),
                    "groups": [_similar_payload(group) for group in groups],
                }
            )
            return

        for group in groups:
            table = Table(title=f"{group.representative.name} ({group.similarity_pct:.0f}%)")
            table.add_column("Path")
            table.add_row(f"[bold]{group.representative.path}[/bold]")
            for member in group.members:
                table.add_row(member.path)
            session.emit(table)
        if not groups:
            session.emit(f"No similar images found at {dedup.threshold}% threshold.")
        session.emit(
            _format_summary_line(
                "Similar", f"{dedup.threshold}%", {"images": len(images), "groups": len(groups)}
            ),
            mode="summary",
        )


@cli.command()
@_output_options
@click.pass_context
def history(ctx: click.Context, json_output: bool, summary_mode: bool, quiet: bool) -> None:
    """Show files removed from the vault, newest first."""
    with _cli_errors("reading deletion history", json_output):
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        session.require_history()
        entries = session.coordinator.cache.deleted

        if json_output:
            console.print_json(
                data={
                    "entries": [
                        {**entry.model_dump(mode="json"), "permanent": entry.permanent}
                        for entry in entries
                    ]
                }
            )
            return

        table = Table(title="Deletion history")
        table.add_column("Name")
        table.add_column("Size", justify="right")
        table.add_column("Deleted")
        table.add_column("Status")
        for entry in entries:
            table.add_row(
                entry.name,
                format_size(entry.size),
                format_timestamp(entry.deleted_at),
                "Permanently deleted" if entry.permanent else "In Recycle Bin",
            )
        session.emit(table)
        permanent = sum(1 for entry in entries if entry.permanent)
        session.emit(
            _format_summary_line(
                "History",
                "vault",
                {"entries": len(entries), "permanent": permanent},
            ),
            mode="summary",
        )


@cli.command()
@_output_options
@click.pass_context
def snapshots(ctx: click.Context, json_output: bool, summary_mode: bool, quiet: bool) -> None:
    """List saved indexing snapshots."""
    with _cli_errors("reading snapshots", json_output):
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        session.require_history()
        items = session.coordinator.cache.snapshots

        if json_output:
            console.print_json(
                data={"snapshots": [snapshot.model_dump(mode="json") for snapshot in items]}
            )
            return

        table = Table(title="Snapshots")
        table.add_column("Name")
        table.add_column("Taken")
        table.add_column("Files", justify="right")
        table.add_column("Folder")
        for snapshot in items:
            table.add_row(
                snapshot.name,
                format_timestamp(snapshot.timestamp),
                str(snapshot.file_count),
                snapshot.folder_path,
            )
        session.emit(table)
        session.emit(
            _format_summary_line("Snapshots", "vault", {"snapshots": len(items)}),
            mode="summary",
        )


@cli.command()
@click.argument("file_hash", metavar="HASH")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
@click.pass_context
def props(ctx: click.Context, file_hash: str, json_output: bool) -> None:
    """Show properties of the file stored under HASH."""
    with _cli_errors("reading file properties", json_output):
        session = _open_session(ctx, json_output=json_output)
        outcome = _run(session.coordinator.file_properties(file_hash))
        if not outcome.ok:
            session.fail(outcome.message)
        properties = outcome.value

        if json_output:
            console.print_json(data={**properties.model_dump(mode="json"), "ghost": outcome.ghost})
            return

        table = Table(title=properties.name)
        table.add_column("Property")
        table.add_column("Value")
        table.add_row("Path", properties.path)
        table.add_row("Size", format_size(properties.size))
        table.add_row("Modified", clean_modified(properties.modified))
        table.add_row("Category", properties.category)
        table.add_row("Hash", properties.hash)
        session.emit(table)
        if outcome.ghost:
            session.emit("[yellow]Ghost file: not found on disk.[/yellow]", mode="warning")


@cli.command("folder-props")
@click.argument("folder_path", metavar="PATH")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
@click.pass_context
def folder_props(ctx: click.Context, folder_path: str, json_output: bool) -> None:
    """Show aggregate properties of the folder at PATH."""
    with _cli_errors("reading folder properties", json_output):
        session = _open_session(ctx, json_output=json_output)
        outcome = _run(session.coordinator.folder_properties(folder_path))
        if not outcome.ok:
            session.fail(outcome.message)
        properties = outcome.value

        if json_output:
            console.print_json(data={**properties.model_dump(mode="json"), "ghost": outcome.ghost})
            return

        table = Table(title=properties.name)
        table.add_column("Property")
        table.add_column("Value")
        table.add_row("Path", properties.path)
        table.add_row("Files", str(properties.file_count))
        table.add_row("Total size", format_size(properties.total_size))
        session.emit(table)
        if outcome.ghost:
            session.emit("[yellow]Ghost folder: not found on disk.[/yellow]", mode="warning")


@cli.command("open")
@click.argument("path")
@click.option("--with", "app", type=str, help="Open with this application instead.")
@click.pass_context
def open_command(ctx: click.Context, path: str, app: Optional[str]) -> None:
    """Open an indexed file from disk."""
    with _cli_errors("opening a file", False):
        session = _open_session(ctx)
        if app is not None:
            outcome = _run(session.coordinator.open_with(path, app))
        else:
            outcome = _run(session.coordinator.open_file(path))
        if outcome.ghost:
            session.emit(f"[yellow]{outcome.message}[/yellow]", mode="warning")
            return
        if outcome.skipped:
            session.emit(f"[yellow]{outcome.message}[/yellow]", mode="warning")
            return
        if not outcome.ok:
            session.fail(outcome.message)
        session.emit(f"[green]{outcome.message}[/green]")


@cli.command()
@click.argument("folder")
@click.option("--snapshot", "snapshot_name", type=str, help="Snapshot name (defaults to today).")
@_output_options
@click.pass_context
def index(
    ctx: click.Context,
    folder: str,
    snapshot_name: Optional[str],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Index FOLDER and record a snapshot of it."""
    with _cli_errors("indexing a folder", json_output):
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        outcome = _run(session.coordinator.index_folder(folder, snapshot_name))
        session.report(outcome, command="Index", target=folder)


@cli.command()
@click.argument("path")
@_output_options
@click.pass_context
def add(ctx: click.Context, path: str, json_output: bool, summary_mode: bool, quiet: bool) -> None:
    """Index a single file."""
    with _cli_errors("adding a file", json_output):
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        outcome = _run(session.coordinator.add_file(path))
        session.report(outcome, command="Add", target=path)


@cli.command()
@click.argument("file_hash", metavar="HASH")
@click.argument("path")
@_output_options
@click.pass_context
def rm(
    ctx: click.Context,
    file_hash: str,
    path: str,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Move a file to the recycle bin and drop it from the vault."""
    with _cli_errors("deleting a file", json_output):
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        outcome = _run(session.coordinator.delete_to_bin(file_hash, path))
        session.report(outcome, command="Delete", target=path)


@cli.command()
@click.argument("folder")
@_output_options
@click.pass_context
def rmdir(
    ctx: click.Context, folder: str, json_output: bool, summary_mode: bool, quiet: bool
) -> None:
    """Move a folder to the recycle bin and drop its files from the vault."""
    with _cli_errors("deleting a folder", json_output):
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        outcome = _run(session.coordinator.delete_folder_to_bin(folder))
        session.report(outcome, command="Delete", target=folder)


@cli.command()
@click.argument("file_hash", metavar="HASH")
@click.argument("path")
@_yes_option
@_output_options
@click.pass_context
def purge(
    ctx: click.Context,
    file_hash: str,
    path: str,
    assume_yes: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Permanently delete a file. This cannot be undone."""
    with _cli_errors("permanently deleting a file", json_output):
        session = _open_session(
            ctx,
            json_output=json_output,
            quiet=quiet,
            summary_mode=summary_mode,
            assume_yes=assume_yes,
        )
        outcome = _run(session.coordinator.permanent_delete(file_hash, path))
        session.report(outcome, command="Purge", target=path)


@cli.command()
@click.argument("new_name")
@click.option("--hash", "file_hash", type=str, help="Hash of the file to rename.")
@click.option("--folder", "folder_path", type=str, help="Path of the folder to rename.")
@_output_options
@click.pass_context
def rename(
    ctx: click.Context,
    new_name: str,
    file_hash: Optional[str],
    folder_path: Optional[str],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Rename a file (--hash) or folder (--folder) to NEW_NAME."""
    with _cli_errors("renaming", json_output):
        if (file_hash is None) == (folder_path is None):
            raise click.ClickException("Pass exactly one of --hash or --folder.")
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        outcome = _run(
            session.coordinator.rename(
                new_name=new_name, file_hash=file_hash, folder_path=folder_path
            )
        )
        session.report(outcome, command="Rename", target=folder_path or file_hash or "")


@cli.command()
@click.argument("destination")
@click.option("--hash", "file_hash", type=str, help="Hash of the file to move.")
@click.option("--folder", "folder_path", type=str, help="Path of the folder to move.")
@_output_options
@click.pass_context
def mv(
    ctx: click.Context,
    destination: str,
    file_hash: Optional[str],
    folder_path: Optional[str],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Move a file (--hash) or folder (--folder) into DESTINATION."""
    with _cli_errors("moving", json_output):
        if (file_hash is None) == (folder_path is None):
            raise click.ClickException("Pass exactly one of --hash or --folder.")
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        if folder_path is not None:
            item = ClipboardItem(
                name=path_name(folder_path), is_folder=True, folder_path=folder_path
            )
        else:
            records = session.require_records()
            match = next((record for record in records if record.hash == file_hash), None)
            if match is None:
                raise click.ClickException(f"No indexed file with hash {file_hash}.")
            item = ClipboardItem(
                name=match.name, is_folder=False, path=match.path, hash=match.hash
            )

        clipboard = ClipboardCoordinator(session.coordinator)
        clipboard.cut(item)
        clipboard.begin_paste()
        outcome = _run(clipboard.confirm_paste(destination))
        if outcome is None:
            raise click.ClickException("DESTINATION must not be blank.")
        session.report(outcome, command="Move", target=item.name)


@cli.command()
@click.argument("output_path")
@click.argument("paths", nargs=-1, required=True)
@_output_options
@click.pass_context
def compress(
    ctx: click.Context,
    output_path: str,
    paths: tuple[str, ...],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Write PATHS into the ZIP archive OUTPUT_PATH."""
    with _cli_errors("compressing", json_output):
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        outcome = _run(session.coordinator.compress(paths, output_path))
        session.report(outcome, command="Compress", target=output_path)


@cli.command()
@click.argument("zip_path")
@click.argument("output_dir")
@_output_options
@click.pass_context
def extract(
    ctx: click.Context,
    zip_path: str,
    output_dir: str,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Extract the archive ZIP_PATH into OUTPUT_DIR."""
    with _cli_errors("extracting", json_output):
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        outcome = _run(session.coordinator.extract(zip_path, output_dir))
        session.report(outcome, command="Extract", target=output_dir)


@cli.command("clear-history")
@_yes_option
@_output_options
@click.pass_context
def clear_history(
    ctx: click.Context, assume_yes: bool, json_output: bool, summary_mode: bool, quiet: bool
) -> None:
    """Drop every deletion record. Deleted files are not restored."""
    with _cli_errors("clearing history", json_output):
        session = _open_session(
            ctx,
            json_output=json_output,
            quiet=quiet,
            summary_mode=summary_mode,
            assume_yes=assume_yes,
        )
        outcome = _run(session.coordinator.clear_history())
        session.report(outcome, command="Clear history", target="vault")


@cli.command("drop-snapshot")
@click.argument("name")
@click.argument("timestamp", type=int)
@_yes_option
@_output_options
@click.pass_context
def drop_snapshot(
    ctx: click.Context,
    name: str,
    timestamp: int,
    assume_yes: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Delete the snapshot record NAME taken at TIMESTAMP."""
    with _cli_errors("deleting a snapshot", json_output):
        session = _open_session(
            ctx,
            json_output=json_output,
            quiet=quiet,
            summary_mode=summary_mode,
            assume_yes=assume_yes,
        )
        outcome = _run(session.coordinator.delete_snapshot(name, timestamp))
        session.report(outcome, command="Drop snapshot", target=name)


@cli.command()
@_yes_option
@_output_options
@click.pass_context
def reset(
    ctx: click.Context, assume_yes: bool, json_output: bool, summary_mode: bool, quiet: bool
) -> None:
    """Drop every record from the vault index, keeping history and snapshots."""
    with _cli_errors("resetting the vault", json_output):
        session = _open_session(
            ctx,
            json_output=json_output,
            quiet=quiet,
            summary_mode=summary_mode,
            assume_yes=assume_yes,
        )
        outcome = _run(session.coordinator.reset_vault())
        session.report(outcome, command="Reset", target="vault")


@cli.command()
@_output_options
@click.pass_context
def verify(ctx: click.Context, json_output: bool, summary_mode: bool, quiet: bool) -> None:
    """Check indexed files for content that changed since indexing."""
    with _cli_errors("verifying the vault", json_output):
        session = _open_session(
            ctx, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        outcome = _run(session.coordinator.verify_integrity())
        if not outcome.ok:
            session.fail(outcome.message)
        corrupted: list[str] = outcome.value

        if json_output:
            console.print_json(data={"corrupted": corrupted})
            return

        for path in corrupted:
            session.emit(f"[yellow]Changed: {path}[/yellow]", mode="warning")
        session.emit(
            _format_summary_line("Verify", "vault", {"changed": len(corrupted)}),
            mode="summary",
        )


_SHELL_HELP = """\
Commands:
  ls                 list the current folder
  cd NAME|..|/PATH   change folder
  search [QUERY]     search file names (no query returns to browsing)
  filter CATEGORY    filter by category (all, image, video, ...)
  cut NAME           hold a file or folder from the current listing
  paste DEST         move the held item into DEST
  cancel             drop the held item
  status             show the last status line
  exit               leave the shell"""


class _Shell:
    """Line-oriented browsing session over one coordinator."""

    def __init__(self, session: _Session) -> None:
        self._session = session
        self._clipboard = ClipboardCoordinator(session.coordinator)
        self._state = BrowseState(category=session.config.browser.default_category)

    @property
    def state(self) -> BrowseState:
        return self._state

    def prompt(self) -> str:
        held = self._clipboard.item
        suffix = f" [cut: {held.name}]" if held is not None else ""
        return f"vaultlens {self._state.location}{suffix}"

    def view(self) -> VaultView:
        return self._session.coordinator.view(
            self._state,
            timeline_mode=self._session.config.timeline.mode,
            unknown_placement=self._session.config.timeline.unknown_placement,
        )

    def execute(self, line: str) -> bool:
        """Run one command line; returns False when the shell should exit."""
        try:
            words = shlex.split(line)
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            return True
        if not words:
            return True
        command, args = words[0], words[1:]
        argument = " ".join(args)

        if command in {"exit", "quit"}:
            return False
        handler = getattr(self, f"_do_{command}", None)
        if handler is None:
            console.print(f"[red]Unknown command: {command}[/red]")
            return True
        try:
            handler(argument)
        except (ClipboardError, ValueError) as exc:
            console.print(f"[red]{exc}[/red]")
        return True

    def _do_help(self, _argument: str) -> None:
        console.print(_SHELL_HELP)

    def _do_ls(self, _argument: str) -> None:
        nodes = self.view().nodes
        if not nodes:
            console.print("[yellow]Nothing here.[/yellow]")
            return
        console.print(_node_table(nodes, self._state.location))

    def _do_cd(self, argument: str) -> None:
        if argument in {"", "/"}:
            self._state = self._state.go_to(())
        elif argument == "..":
            self._state = self._state.up()
        elif argument.startswith("/"):
            self._state = self._state.go_to(argument)
        else:
            self._state = self._state.enter(argument)

    def _do_search(self, argument: str) -> None:
        self._state = self._state.search(argument)
        self._do_ls("")

    def _do_filter(self, argument: str) -> None:
        self._state = self._state.filter(argument or ALL_CATEGORIES)

    def _do_cut(self, argument: str) -> None:
        node = next((node for node in self.view().nodes if node.name == argument), None)
        if node is None:
            raise ClipboardError(f"No item named {argument!r} here.")
        item = self._clipboard.cut(node)
        console.print(f"Cut {item.name}.")

    def _do_paste(self, argument: str) -> None:
        self._clipboard.begin_paste()
        outcome = _run(self._clipboard.confirm_paste(argument))
        if outcome is None:
            console.print("[yellow]Paste needs a destination.[/yellow]")
            return
        colour = "green" if outcome.ok else "red"
        console.print(f"[{colour}]{outcome.message}[/{colour}]")

    def _do_cancel(self, _argument: str) -> None:
        self._clipboard.cancel()

    def _do_status(self, _argument: str) -> None:
        console.print(self._session.coordinator.status)


@cli.command()
@click.pass_context
def shell(ctx: click.Context) -> None:
    """Start an interactive browsing session with cut and paste."""
    with _cli_errors("starting the shell", False):
        session = _open_session(ctx)
        session.require_records()
        repl = _Shell(session)
        console.print("Type 'help' for commands.")
        while True:
            try:
                line = click.prompt(repl.prompt(), default="", show_default=False)
            except click.Abort:
                break
            if not repl.execute(line):
                break


@cli.group()
def config() -> None:
    """Manage VaultLens configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException(
            "KEY must specify a dotted path such as 'smart_dedup.threshold'."
        )

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    file_data = manager.load_file_overrides()

    try:
        assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=VaultLensConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )

    if not diff:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=VaultLensConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
