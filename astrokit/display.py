"""Console rendering for run summaries and failures"""

from typing import Optional

import yaml
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from astrokit.engine.context import RunContext, StepStatus
from astrokit.exceptions import ConfigError, PipelineAbortedError

STATUS_STYLES = {
    StepStatus.COMPLETED: "[green]✓ completed[/green]",
    StepStatus.SKIPPED: "[dim]- skipped[/dim]",
    StepStatus.WARNED: "[yellow]⚠ warning[/yellow]",
    StepStatus.FAILED: "[red]✗ failed[/red]",
}

TROUBLESHOOTING_TIPS = [
    "Check your internet connection",
    "Try: npm cache clean --force",
    "Check that the project name is valid",
]


class RunReporter:
    """Render run progress, summaries and errors"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def banner(self):
        self.console.print("\n[bold blue]astrokit[/bold blue]")
        self.console.print("Interactive Astro project scaffolding\n")

    def step_table(self, ctx: RunContext) -> Table:
        table = Table(title="Steps")
        table.add_column("Step", style="cyan")
        table.add_column("Status")
        table.add_column("Detail", style="dim")

        for result in ctx.results:
            detail = ""
            if result.error:
                detail = result.error.message
                if result.command and result.command not in detail:
                    detail += f" ({result.command})"
            table.add_row(result.step, STATUS_STYLES[result.status], escape(detail))

        return table

    def summary(self, ctx: RunContext, generated_files=()):
        """Print the success summary

        Args:
            ctx: Finished run context
            generated_files: Project-relative paths of generated sources
        """
        answers = ctx.answers
        console = self.console

        console.print("\n" + "=" * 60)
        console.print("[green]✓ Project created successfully![/green]")
        console.print("=" * 60 + "\n")

        console.print(f"Project: [bold]{answers.project_name}[/bold]")
        console.print(f"Path: {ctx.project_dir}\n")

        if ctx.results:
            console.print(self.step_table(ctx))

        if generated_files:
            console.print("\nGenerated files:")
            for path in generated_files:
                console.print(f"   • {path}")

        if ctx.backend_dir:
            console.print(f"\nMedusa backend: {ctx.backend_dir}")
        elif ctx.pending_backend:
            console.print(f"\n[yellow]⚠ Partial Medusa backend left at: {ctx.pending_backend}[/yellow]")

        for result in ctx.warnings:
            console.print(f"[yellow]⚠ {result.step}: {escape(result.error.message)}[/yellow]")

        console.print("\nNext steps:")
        console.print(f"   cd {answers.project_name}")
        console.print("   npm run dev\n")

        console.print("Useful commands:")
        console.print("   npm run dev     - Development server")
        console.print("   npm run build   - Production build")
        console.print("   npm run preview - Preview the build\n")

    def error(self, error: ConfigError, ctx: Optional[RunContext] = None):
        """Print a failure banner with details and troubleshooting tips"""
        content = escape(error.message)

        if error.details:
            dump = yaml.safe_dump(error.details, default_flow_style=False, sort_keys=False).rstrip()
            content += f"\n\n[bold]Details:[/bold]\n{escape(dump)}"

        if error.help_text:
            content += f"\n\n[bold cyan]Help:[/bold cyan]\n{escape(error.help_text)}"

        self.console.print(Panel(
            content,
            title="[bold red]Error during configuration[/bold red]",
            border_style="red",
            expand=False
        ))

        if ctx is not None and ctx.results:
            self.console.print(self.step_table(ctx))

        if isinstance(error, PipelineAbortedError):
            self.console.print(f"Completed: {', '.join(error.completed_steps) or 'none'}")
            self.console.print(f"Not run: {', '.join(error.remaining_steps) or 'none'}")

        if ctx is not None and ctx.pending_backend:
            self.console.print(f"[yellow]Partial Medusa backend left at: {ctx.pending_backend}[/yellow]")

        self.console.print("\nTroubleshooting:")
        for tip in TROUBLESHOOTING_TIPS:
            self.console.print(f"   • {tip}")
        self.console.print()
