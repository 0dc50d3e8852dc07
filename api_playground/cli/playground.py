"""Interactive CLI for querying JSON API data."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

import click
import pyarrow as pa
from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.history import FileHistory

from ..catalog import SchemaSnapshot
from ..config import Config, ConfigError, load_config
from ..dataset import value_to_text
from ..export import ExportError, ExportFormat, rows_to_table
from ..session import SampleQuery, Workspace
from ..utils.logging import setup_logging


MAX_CELL_WIDTH = 40
HISTORY_FILE = ".playground_history"
EXPORT_USAGE = ".export csv|json|xlsx [PATH]"


class ResultPrinter:
    """Renders query results as a bordered text table.

    Rows go through an Arrow table first so ragged rows line up and
    numeric columns can be right-aligned by their Arrow type.
    """

    def __init__(self, emit, max_cell_width: int = MAX_CELL_WIDTH):
        self.emit = emit
        self.max_cell_width = max_cell_width

    def display_rows(
        self, rows: List[dict], elapsed_ms: float, warnings: Sequence[str] = ()
    ) -> None:
        # rows with no keys give a table with no columns and no length
        self.display(rows_to_table(rows), elapsed_ms, row_count=len(rows))
        for warning in warnings:
            self.emit(f"warning: {warning}")

    def display(
        self, table: pa.Table, elapsed_ms: float, row_count: Optional[int] = None
    ) -> None:
        names = list(table.schema.names)
        cells = self._render_columns(table)
        widths = self._column_widths(names, cells)
        right_aligned = self._numeric_columns(table)

        rule = "+" + "+".join("-" * (width + 2) for width in widths) + "+"
        self.emit(rule)
        self.emit(_join_cells([name.ljust(width) for name, width in zip(names, widths)]))
        self.emit(rule)
        for row_index in range(table.num_rows):
            padded = []
            for col_index, width in enumerate(widths):
                text = cells[col_index][row_index]
                if right_aligned[col_index]:
                    padded.append(text.rjust(width))
                else:
                    padded.append(text.ljust(width))
            self.emit(_join_cells(padded))
        self.emit(rule)

        if row_count is None:
            row_count = table.num_rows
        noun = "row" if row_count == 1 else "rows"
        self.emit(f"{row_count} {noun} in {elapsed_ms:.2f} ms")

    def _render_columns(self, table: pa.Table) -> List[List[str]]:
        columns = []
        for column in table.columns:
            columns.append([self._cell_text(value) for value in column.to_pylist()])
        return columns

    def _column_widths(self, names: List[str], cells: List[List[str]]) -> List[int]:
        widths = []
        for name, texts in zip(names, cells):
            widths.append(max([len(name)] + [len(text) for text in texts]))
        return widths

    def _numeric_columns(self, table: pa.Table) -> List[bool]:
        flags = []
        for field in table.schema:
            flags.append(pa.types.is_integer(field.type) or pa.types.is_floating(field.type))
        return flags

    def _cell_text(self, value: Any) -> str:
        if value is None:
            return "NULL"
        # API text (post bodies, descriptions) often spans lines
        text = " ".join(value_to_text(value).splitlines())
        if len(text) > self.max_cell_width:
            return text[: self.max_cell_width - 3] + "..."
        return text


def _join_cells(cells: List[str]) -> str:
    return "| " + " | ".join(cells) + " |"


class SchemaPrinter:
    """Prints the inferred columns and sample queries."""

    def __init__(self, emit):
        self.emit = emit

    def display_schema(self, schema: Optional[SchemaSnapshot], table_name: str) -> None:
        if schema is None:
            self.emit("No schema available.")
            return
        self.emit(f"\nTable: {table_name}")
        self.emit("  Columns:")
        for column in schema.columns:
            nullable = "NULL" if column.nullable else "NOT NULL"
            self.emit(f"    - {column.name}: {column.inferred_type.value} {nullable}")

    def display_samples(self, samples: List[SampleQuery]) -> None:
        if not samples:
            self.emit("No sample queries available.")
            return
        for sample in samples:
            self.emit(f"  {sample.name}: {sample.query}")


class PlaygroundRepl:
    """Interactive loop reading ';'-terminated queries."""

    def __init__(
        self,
        workspace: Workspace,
        printer: ResultPrinter,
        schema_printer: SchemaPrinter,
        session: Optional[PromptSession] = None,
    ):
        self.workspace = workspace
        self.printer = printer
        self.schema_printer = schema_printer
        self.session = session or self._create_session()

    def _create_session(self) -> PromptSession:
        """Create prompt session backed by persistent history."""
        history = FileHistory(str(self._history_path()))
        return PromptSession(history=history, auto_suggest=AutoSuggestFromHistory())

    def _history_path(self) -> Path:
        history_path = Path(HISTORY_FILE)
        if not history_path.exists():
            history_path.touch()
        return history_path

    def run(self) -> None:
        buffer: List[str] = []
        while True:
            line, should_continue = self._read_line(buffer)
            if not should_continue:
                break
            if line is None:
                continue
            if not buffer and self._is_exit_command(line):
                break
            if not buffer and self._is_shortcut_command(line):
                self._execute_shortcut(line)
                continue
            if not line.strip():
                continue
            buffer.append(line)
            if self._is_complete_statement(line):
                statement = "\n".join(buffer)
                buffer.clear()
                run_statement(self.workspace, self.printer, statement)

    def _read_line(self, buffer: List[str]) -> Tuple[Optional[str], bool]:
        prompt = "...> " if buffer else "query> "
        try:
            return self.session.prompt(prompt), True
        except EOFError:
            click.echo("")
            return None, False
        except KeyboardInterrupt:
            # Ctrl-C drops the statement being typed
            click.echo("")
            buffer.clear()
            return None, True

    def _is_exit_command(self, line: str) -> bool:
        return line.strip().lower() in ("\\q", "quit", "exit")

    def _is_shortcut_command(self, line: str) -> bool:
        return line.strip().startswith(".")

    def _execute_shortcut(self, line: str) -> None:
        parts = line.strip().split()
        command = parts[0].lower()
        session = self.workspace.session
        if command == ".schema":
            self.schema_printer.display_schema(
                session.schema, self.workspace.config.query.table_name
            )
        elif command == ".samples":
            self.schema_printer.display_samples(session.sample_queries())
        elif command == ".reset":
            original = session.reset()
            count = len(original) if isinstance(original, list) else 1
            click.echo(f"Query cleared; showing {count} original records.")
        elif command == ".export":
            self._export(parts[1:])
        else:
            click.echo(f"Unknown shortcut: {line.strip()}")
            click.echo(f"Available shortcuts: .schema, .samples, .reset, {EXPORT_USAGE}")

    def _export(self, args: List[str]) -> None:
        if not args:
            click.echo(f"usage: {EXPORT_USAGE}")
            return
        try:
            fmt = ExportFormat.parse(args[0])
            filename, payload = self.workspace.export(fmt)
        except ExportError as exc:
            click.echo(f"error: {exc}")
            return
        target = Path(args[1]) if len(args) > 1 else Path(filename)
        try:
            target.write_bytes(payload)
        except OSError as exc:
            click.echo(f"error: cannot write {target}: {exc.strerror}")
            return
        click.echo(f"Wrote {len(payload)} bytes to {target}")

    def _is_complete_statement(self, line: str) -> bool:
        return line.strip().endswith(";")


def run_statement(workspace: Workspace, printer: ResultPrinter, statement: str) -> bool:
    """Execute one statement and print its outcome; True on success."""
    clean = statement.strip()
    if clean.endswith(";"):
        clean = clean[:-1].rstrip()
    if not clean:
        return True
    start = time.time()
    rows, error = workspace.session.execute(clean)
    elapsed = (time.time() - start) * 1000
    if error is not None:
        click.echo(f"error: {error}")
        return False
    printer.display_rows(rows, elapsed, workspace.session.last_warnings)
    return True


def _load_config(
    config_path: Optional[str], aggregates: Optional[bool], log_level: Optional[str]
) -> Config:
    config = load_config(config_path) if config_path else Config()
    if aggregates is not None:
        config.query.enable_aggregates = aggregates
    if log_level:
        config.logging.level = log_level
    return config


def _load_data(workspace: Workspace, url: Optional[str], file_path: Optional[str]) -> Tuple[bool, str]:
    """Load the dataset; returns (ok, message)."""
    if file_path:
        with open(file_path, "r", encoding="utf-8") as f:
            data: Any = json.load(f)
        workspace.load(data)
        return True, f"Loaded {file_path}"
    result = workspace.fetch(url)
    if not result.success:
        return False, f"error: {result.error}"
    return True, f"Fetched {url} (HTTP {result.status})"


@click.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Path to YAML config file.",
)
@click.option("-u", "--url", help="Public JSON API endpoint to fetch.")
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Local JSON file to load instead of a URL.",
)
@click.option("-e", "--execute", "statement", help="Run one query and exit.")
@click.option(
    "--aggregates/--no-aggregates",
    default=None,
    help="Evaluate GROUP BY and aggregate functions.",
)
@click.option("--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR).")
def cli(
    config_path: Optional[str],
    url: Optional[str],
    file_path: Optional[str],
    statement: Optional[str],
    aggregates: Optional[bool],
    log_level: Optional[str],
) -> None:
    """Entry point for the api-playground CLI."""
    if not url and not file_path:
        raise click.UsageError("Provide --url or --file")
    try:
        config = _load_config(config_path, aggregates, log_level)
    except ConfigError as exc:
        raise click.UsageError(str(exc))
    setup_logging(config.logging)

    workspace = Workspace(config)
    ok, message = _load_data(workspace, url, file_path)
    click.echo(message)
    if not ok:
        raise SystemExit(1)

    printer = ResultPrinter(click.echo)
    if not workspace.session.available:
        click.echo(workspace.session.unavailable_reason)
        raise SystemExit(1)

    if statement:
        if not run_statement(workspace, printer, statement):
            raise SystemExit(1)
        return

    click.echo("Type queries terminated by ';'. Use \\q to exit.")
    click.echo(f"Use .schema, .samples, .reset or {EXPORT_USAGE}.")
    repl = PlaygroundRepl(workspace, printer, SchemaPrinter(click.echo))
    repl.run()
