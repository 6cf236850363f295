"""Command line interface for filesift."""

from __future__ import annotations

import difflib
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, NoReturn

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from filesift.classification import (
    CancellationSignal,
    ClassificationManager,
    FileMeta,
    LogHistory,
    RunOptions,
    RunOutcome,
    RunState,
    Severity,
)
from filesift.config import ConfigError, ConfigManager, FilesiftConfig, resolve_with_precedence
from filesift.ingestion import LocalDirectoryAccess

console = Console()

# Severity -> (rich style, output mode)
_SEVERITY_OUTPUT: dict[str, tuple[str, str]] = {
    "info": ("white", "detail"),
    "warn": ("yellow", "warning"),
    "error": ("red", "error"),
    "success": ("green", "summary"),
}
_IMPORTANT_MODES = frozenset({"summary", "warning", "error"})


@dataclass(frozen=True)
class _OutputModes:
    """Which console output a command may print.

    Attributes:
        quiet: Only errors are printed.
        summary_only: Only summary lines, warnings, and errors are printed.
        json: Console output is replaced by a single JSON document.
    """

    quiet: bool = False
    summary_only: bool = False
    json: bool = False

    def allows(self, mode: str) -> bool:
        if self.json:
            return False
        if self.quiet:
            return mode == "error"
        return not self.summary_only or mode in _IMPORTANT_MODES

    def emit(self, message: Any, mode: str) -> None:
        if self.allows(mode):
            console.print(message)


def _configure_logging(level: str) -> None:
    """Route the stdlib logging tree through Rich on stderr.

    Args:
        level: Logging level name taken from configuration.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> NoReturn:
    """Abort the command, as a JSON error document when JSON output is active.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier for JSON consumers.
        json_output: Whether the command was asked for JSON output.
        original: Exception to chain onto the click error.

    Raises:
        SystemExit: With status 1 after printing the JSON error document.
        click.ClickException: For human-readable output.
    """
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)
    raise click.ClickException(message) from original


def _resolve_output_modes(
    ctx: click.Context,
    config: FilesiftConfig,
    *,
    quiet: bool,
    summary: bool,
    json_output: bool,
) -> _OutputModes:
    """Combine CLI flags with configured defaults; explicit flags win.

    Raises:
        click.ClickException: If the requested modes conflict.
    """
    quiet_given = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    summary_given = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    if json_output:
        if quiet_given and quiet:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if summary_given and summary:
            raise click.ClickException("--json cannot be combined with --summary.")
        return _OutputModes(json=True)

    modes = _OutputModes(
        quiet=quiet if quiet_given else config.cli.quiet_default,
        summary_only=summary if summary_given else config.cli.summary_default,
    )
    if modes.quiet and modes.summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return modes


def _summary_line(root: Path, outcome: RunOutcome) -> str:
    stats = outcome.stats
    metrics = {
        "state": outcome.state.value,
        "total": stats.total,
        "classified": stats.classified,
        "high_confidence": stats.high_confidence,
        "categories": len(stats.categories),
    }
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]Scan summary for {escape(str(root))}: {parts}.[/green]"


def _category_table(categories: dict[str, int]) -> Table:
    table = Table(title="Categories")
    table.add_column("Category", style="cyan")
    table.add_column("Files", justify="right")
    for category, count in sorted(categories.items(), key=lambda item: (-item[1], item[0])):
        table.add_row(category, str(count))
    return table


def _preview_table(files: list[FileMeta]) -> Table:
    table = Table(title="Classified files")
    table.add_column("File", style="cyan", overflow="fold")
    table.add_column("Category")
    table.add_column("Subcategory")
    table.add_column("Confidence", justify="right")
    table.add_column("Reasons", overflow="fold")
    for meta in files:
        result = meta.classification
        if result is None:
            continue
        table.add_row(
            escape(meta.rel),
            result.category,
            result.subcategory or "-",
            f"{result.confidence:.2f}",
            escape("; ".join(result.reasons)),
        )
    return table


def _wait_for(
    worker: threading.Thread,
    cancel: CancellationSignal,
    on_interrupt: Callable[[], None],
) -> None:
    """Join ``worker``; the first Ctrl-C requests a stop, the second re-raises.

    Raises:
        KeyboardInterrupt: On an interrupt after cancellation was already requested.
    """
    while worker.is_alive():
        try:
            worker.join(timeout=0.1)
        except KeyboardInterrupt:
            if cancel.requested:
                raise
            cancel.request()
            on_interrupt()


def _run_interruptibly(
    manager: ClassificationManager,
    root: Path,
    options: RunOptions,
    on_interrupt: Callable[[], None],
) -> RunOutcome:
    """Run on a worker thread so Ctrl-C turns into a cooperative stop.

    The first interrupt requests cancellation; the run then ends at its next
    batch boundary and its outcome is returned as usual. A second interrupt
    propagates immediately.
    """
    cancel = CancellationSignal()
    result: dict[str, Any] = {}

    def target() -> None:
        try:
            result["outcome"] = manager.run(root, options, should_stop=cancel)
        except BaseException as exc:  # pragma: no cover - re-raised on the main thread
            result["error"] = exc

    worker = threading.Thread(target=target, name="filesift-run", daemon=True)
    worker.start()
    _wait_for(worker, cancel, on_interrupt)

    if "error" in result:
        raise result["error"]
    return result["outcome"]


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="filesift")
def cli() -> None:
    """filesift classifies every file in a directory tree by type and purpose."""


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option("--min-confidence", type=float, help="Minimum confidence counted toward a category.")
@click.option("--batch-size", type=int, help="Number of files classified concurrently.")
@click.option("--no-classify", is_flag=True, help="Discover and count files without classifying.")
@click.option("--preview", is_flag=True, help="Show a per-file classification table.")
@click.option(
    "--output",
    type=click.Path(file_okay=False, path_type=str),
    help="Record an output directory for the run (nothing is written).",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the run.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def scan(
    ctx: click.Context,
    path: str,
    min_confidence: float | None,
    batch_size: int | None,
    no_classify: bool,
    preview: bool,
    output: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Classify every file beneath PATH and report per-category statistics.

    Args:
        ctx: Click context used for parameter source inspection.
        path: Root directory to scan.
        min_confidence: Optional override of the confidence threshold.
        batch_size: Optional override of the batch size.
        no_classify: If True, only discover and count files.
        preview: If True, render a per-file result table.
        output: Optional output directory recorded for the run.
        json_output: If True, emit a JSON document describing the run.
        summary_mode: When True, limit output to summary lines and warnings.
        quiet: When True, suppress non-error CLI output entirely.

    Raises:
        click.ClickException: If configuration fails or the run fails.
    """
    overrides: dict[str, Any] = {}
    if min_confidence is not None:
        overrides["classification.min_confidence"] = min_confidence
    if batch_size is not None:
        overrides["classification.batch_size"] = batch_size
    if no_classify:
        overrides["classification.enabled"] = False
    if preview:
        overrides["classification.show_preview"] = True
    if output:
        overrides["scanning.output_dir"] = str(Path(output).expanduser().resolve())

    try:
        config = ConfigManager().load(cli_overrides=overrides)
    except ConfigError as exc:
        _fail(str(exc), code="config_error", json_output=json_output, original=exc)

    _configure_logging(config.logging.level)
    modes = _resolve_output_modes(
        ctx, config, quiet=quiet, summary=summary_mode, json_output=json_output
    )

    root = Path(path).expanduser().resolve()
    history = LogHistory(config.logging.history_limit)
    show_preview = config.classification.show_preview
    files: list[FileMeta] = []

    def on_log(message: str, severity: Severity) -> None:
        history.add(message, severity)
        style, mode = _SEVERITY_OUTPUT[severity]
        modes.emit(f"[{style}]{escape(message)}[/{style}]", mode)

    if config.scanning.output_dir:
        on_log(f"Output folder recorded: {config.scanning.output_dir}", "info")

    manager = ClassificationManager(
        on_log=on_log,
        on_file=files.append if show_preview else None,
        access=LocalDirectoryAccess(
            include_hidden=config.scanning.include_hidden,
            follow_symlinks=config.scanning.follow_symlinks,
        ),
    )
    outcome = _run_interruptibly(
        manager,
        root,
        config.classification.to_run_options(),
        lambda: on_log("Stopping job...", "warn"),
    )

    if json_output:
        payload: dict[str, Any] = {
            "root": root.as_posix(),
            "state": outcome.state.value,
            "stats": outcome.stats.model_dump(mode="json"),
            "error": outcome.error,
            "output_dir": config.scanning.output_dir,
            "logs": [event.model_dump(mode="json") for event in history],
        }
        if show_preview:
            payload["files"] = [meta.model_dump(mode="json") for meta in files]
        console.print_json(data=payload)
        if outcome.state is RunState.FAILED:
            raise SystemExit(1)
        return

    if outcome.state is RunState.FAILED:
        _fail(f"Classification failed: {outcome.error}", code="run_failed", json_output=False)

    if show_preview and files:
        modes.emit(_preview_table(files), "detail")
    if outcome.stats.categories:
        modes.emit(_category_table(outcome.stats.categories), "detail")
    modes.emit(_summary_line(root, outcome), "summary")


def _parse_mapping(text: str, *, source: str) -> dict[str, Any]:
    """Parse YAML text that must hold a top-level mapping.

    Raises:
        click.ClickException: If the text is not valid YAML or not a mapping.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML in {source}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise click.ClickException(f"{source.capitalize()} must contain a top-level mapping.")
    return data


def _check_valid(data: dict[str, Any]) -> None:
    try:
        resolve_with_precedence(defaults=FilesiftConfig(), file_overrides=data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def _set_dotted(data: dict[str, Any], key: str, value: Any) -> bool:
    """Store ``value`` under a dotted ``key`` and report whether anything changed.

    Raises:
        click.ClickException: If the key is empty or crosses a non-mapping value.
    """
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException(
            "KEY must be a dotted path such as 'classification.batch_size'."
        )
    node = data
    for segment in segments[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise click.ClickException(f"Cannot set {key}: '{segment}' is not a section.")
        node = child
    leaf = segments[-1]
    if leaf in node and node[leaf] == value:
        return False
    node[leaf] = value
    return True


@cli.group()
def config() -> None:
    """Manage filesift configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore FILESIFT__* environment overrides.")
def config_view(no_env: bool) -> None:
    """Print the effective configuration after precedence rules are applied.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    try:
        effective = ConfigManager().load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal assigned to KEY.")
def config_set(key: str, value: str) -> None:
    """Write one dotted KEY into the configuration file and show the diff.

    Raises:
        click.ClickException: If the value cannot be parsed or fails validation.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        data = manager.load_file_overrides()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    if not _set_dotted(data, key, parsed):
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return
    _check_valid(data)

    before = manager.read_text().splitlines()
    manager.save(data)
    after = manager.read_text().splitlines()
    diff = difflib.unified_diff(
        before, after, fromfile="config.yaml (before)", tofile="config.yaml (after)", lineterm=""
    )
    console.print(Syntax("\n".join(diff), "diff"))
    console.print(f"[green]Updated {key.strip()}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Edit the configuration file in $EDITOR and save it once it validates.

    Raises:
        click.ClickException: If the edited content is invalid.
    """
    manager = ConfigManager()
    manager.ensure_exists()
    original = manager.read_text()

    edited = click.edit(original, extension=".yaml")
    if edited is None or edited == original:
        console.print("[yellow]No changes detected; configuration left as is.[/yellow]")
        return

    data = _parse_mapping(edited, source="edited configuration")
    _check_valid(data)
    manager.save(data)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
