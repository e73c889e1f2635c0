"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from covwatch.utils.percentage import format_percentage

if TYPE_CHECKING:
    from covwatch.agents.watchers.coverage import CoverageRegressionResult
    from covwatch.models.store import CoverageProjectStore

console = Console()


_GOOD_COVERAGE = 80.0
_FAIR_COVERAGE = 50.0
_MAX_FILE_PATH_LENGTH = 60


def _coverage_color(percentage: float) -> str:
    """Return a Rich color name for a coverage percentage."""
    if percentage >= _GOOD_COVERAGE:
        return "green"
    if percentage >= _FAIR_COVERAGE:
        return "yellow"
    return "red"


def _format_delta(delta: float) -> str:
    """Format a coverage delta with its sign taken from the displayed value."""
    text = format_percentage(delta)
    if text in ("0.0", "-0.0"):
        return "0.0"
    return text if text.startswith("-") else f"+{text}"


def _truncate_path(path: str) -> str:
    if len(path) <= _MAX_FILE_PATH_LENGTH:
        return path
    return "..." + path[-(_MAX_FILE_PATH_LENGTH - 3) :]


class CLIReporter:
    """Rich terminal output for coverage regression runs."""

    def __init__(self, output: Console | None = None) -> None:
        """Initialize the CLI reporter."""
        self.console = output or console

    def print_header(self, title: str) -> None:
        """Print a bold header."""
        self.console.print(f"\n[bold cyan]{title}[/bold cyan]\n")

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    def print_project_summary(self, store: CoverageProjectStore, project_key: str = "") -> None:
        """Print project-wide line coverage, with the previous value when known."""
        current = store.project_coverage
        if current is None:
            self.print_info("No coverable lines measured in this analysis.")
            return

        color = _coverage_color(current)
        lines = [
            f"Line coverage: [{color}]{format_percentage(current)}%[/{color}]",
            f"Lines to cover: {store.lines_to_cover}  Uncovered: {store.uncovered_lines}",
        ]
        previous = store.previous_project_coverage
        if previous is not None:
            lines.append(
                f"Previous analysis: {format_percentage(previous)}% "
                f"([bold]{_format_delta(current - previous)}[/bold] points)"
            )

        self.console.print(
            Panel(
                "\n".join(lines),
                title=f"[bold]{project_key or 'Project'}[/bold]",
                border_style="cyan",
                padding=(0, 2),
            )
        )

    def print_regressions(self, result: CoverageRegressionResult) -> None:
        """Print a table of the files whose line coverage decreased."""
        if not result.regressions:
            self.print_success(
                f"No line coverage regression in {result.files_with_baseline} "
                f"previously analyzed file(s)"
            )
            return

        table = Table(title="Line Coverage Regressions", show_lines=False)
        table.add_column("File", style="cyan")
        table.add_column("Previous", justify="right")
        table.add_column("Current", justify="right")
        table.add_column("Rule", style="dim")

        issues = {issue.file_path: issue for issue in result.issues}
        for event in result.regressions:
            color = _coverage_color(event.current_coverage)
            issue = issues.get(event.file_path)
            rule = str(issue.rule_key) if issue else "[yellow]outside review scope[/yellow]"
            table.add_row(
                _truncate_path(event.file_path),
                f"{format_percentage(event.previous_coverage)}%",
                f"[{color}]{format_percentage(event.current_coverage)}%[/{color}]",
                rule,
            )

        self.console.print(table)
        self.print_warning(
            f"{len(result.regressions)} file(s) lowered their line coverage "
            f"({len(result.issues)} issue(s) raised)"
        )


reporter = CLIReporter()
