"""
Console output for the CLI.

Banner, phase progress, messages and the run summary go to stderr
through a rich console. Reports are plain text written to stdout by the
caller so they can be piped or redirected untouched.
"""

import sys
from enum import Enum
from typing import Dict, Optional, TextIO

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich import box

from .. import __version__
from ..core.analysis import AnalysisResult, PHASE_DISTANCES, PHASE_FEATURES, PHASE_GROUPS


class VerbosityLevel(Enum):
    """Verbosity levels for output."""
    QUIET = 0    # Only errors
    NORMAL = 1   # Banner and phases
    VERBOSE = 2  # Adds the run summary
    DEBUG = 3    # Debug information


PHASE_MESSAGES = {
    PHASE_FEATURES: "Calculando características de cada archivo...",
    PHASE_DISTANCES: "Calculando distancia entre los archivos...",
    PHASE_GROUPS: "Agrupando archivos similares...",
}


class OutputManager:
    """Manages CLI messages with different verbosity levels."""

    def __init__(
        self,
        verbosity: VerbosityLevel = VerbosityLevel.NORMAL,
        use_color: bool = True,
        file: Optional[TextIO] = None
    ):
        """
        Initialize output manager.

        Args:
            verbosity: Verbosity level
            use_color: Whether to use colored output
            file: Stream for messages (default: stderr)
        """
        self.verbosity = verbosity
        self.use_color = use_color
        self.console = Console(
            file=file or sys.stderr,
            no_color=not use_color,
            highlight=False,
            soft_wrap=True,
        )
        self.phase_number = 0
        self.total_phases = 3

    def _enabled(self, level: VerbosityLevel) -> bool:
        return self.verbosity.value >= level.value

    def banner(self):
        """Print the program banner."""
        if not self._enabled(VerbosityLevel.NORMAL):
            return
        self.console.print("[bold]SISTEMA AUTOMÁTICO DE SIMILARIDAD DE CÓDIGO (SASC)[/bold]")
        self.console.print(f"Versión {__version__}")
        self.console.print("Para más información use sasc --help\n")

    def log(self, message: str, level: VerbosityLevel = VerbosityLevel.NORMAL):
        """
        Log a message at the specified verbosity level.

        Args:
            message: Message to log
            level: Verbosity level required to show this message
        """
        if not self._enabled(level):
            return
        if level == VerbosityLevel.DEBUG:
            self.console.print(f"[dim cyan][DEBUG][/dim cyan] {escape(message)}")
        elif level == VerbosityLevel.VERBOSE:
            self.console.print(f"[cyan][INFO][/cyan] {escape(message)}")
        else:
            self.console.print(escape(message))

    def error(self, message: str, hint: Optional[str] = None):
        """Log an error message (always shown)."""
        self.console.print(f"[bold red]ERROR:[/bold red] {escape(message)}")
        if hint:
            self.console.print(f"  {escape(hint)}")

    def warning(self, message: str):
        """Log a warning message."""
        if self._enabled(VerbosityLevel.NORMAL):
            self.console.print(f"[yellow]WARNING:[/yellow] {escape(message)}")

    def success(self, message: str):
        """Log a success message."""
        if self._enabled(VerbosityLevel.NORMAL):
            self.console.print(f"[green]✓[/green] {escape(message)}")

    def start_run(self, file_count: int, extension: str, root: str):
        """Announce a run."""
        self.phase_number = 0
        self.log(f"Procesando {file_count} archivos de extensión .{extension} en {root}\n")

    def phase(self, name: str):
        """Announce one analysis phase."""
        message = PHASE_MESSAGES.get(name, name)
        if name == PHASE_GROUPS:
            # Grouping belongs to the reporting phase
            self.log(message, VerbosityLevel.VERBOSE)
            return
        self.phase_number += 1
        self.log(f"Fase {self.phase_number} de {self.total_phases}: {message}")

    def report_phase(self, message: str):
        """Announce the final reporting phase."""
        self.phase_number += 1
        self.log(f"Fase {self.phase_number} de {self.total_phases}: {message}")

    def show_summary(self, result: AnalysisResult):
        """Show counts and phase timings of a run."""
        if not self._enabled(VerbosityLevel.VERBOSE):
            return

        table = Table(title="Resumen", box=box.SIMPLE)
        table.add_column("Métrica", style="cyan")
        table.add_column("Valor", justify="right")

        n = len(result.matrix)
        table.add_row("Archivos", str(n))
        table.add_row("Pares comparados", str(n * (n - 1) // 2))
        if result.threshold is not None:
            table.add_row("Distancia máxima", f"{result.threshold:.2f}")
        if result.groups is not None:
            table.add_row("Grupos", str(len(result.groups)))
        for phase_name, seconds in self._ordered_timings(result.timings).items():
            table.add_row(f"Tiempo {phase_name}", f"{seconds:.3f}s")

        self.console.print(table)

    @staticmethod
    def _ordered_timings(timings: Dict[str, float]) -> Dict[str, float]:
        order = [PHASE_FEATURES, PHASE_DISTANCES, PHASE_GROUPS]
        return {k: timings[k] for k in order if k in timings}
