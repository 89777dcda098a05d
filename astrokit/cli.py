"""CLI entry point for astrokit"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from astrokit.config import load_settings
from astrokit.display import RunReporter
from astrokit.engine.command_runner import CommandRunner
from astrokit.engine.context import RunContext
from astrokit.exceptions import ConfigError
from astrokit.prompts.sources import FileAnswerSource, InteractiveSource, is_non_interactive

app = typer.Typer(
    name="astrokit",
    help="astrokit - Interactive Astro project scaffolding",
    add_completion=False
)
console = Console()
logger = logging.getLogger(__name__)


def configure_logging(verbose: bool):
    """Route diagnostic logging through rich

    Args:
        verbose: Emit DEBUG records instead of WARNING and above
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True
    )


def handle_config_error(error: ConfigError, ctx: Optional[RunContext] = None, exit_code: int = 1):
    """Handle astrokit errors with Rich formatting

    Args:
        error: Error to render
        ctx: Run context, if the run got far enough to have one
        exit_code: Exit code to use
    """
    RunReporter(console).error(error, ctx)
    raise typer.Exit(exit_code)


def handle_unexpected_error(error: Exception, exit_code: int = 1):
    """Handle unexpected errors with Rich formatting

    Args:
        error: Exception to handle
        exit_code: Exit code to use
    """
    error_text = Text()
    error_text.append("✗ Unexpected Error: ", style="bold red")
    error_text.append(str(error))

    logger.error("Unexpected %s", type(error).__name__, exc_info=error)
    console.print(error_text)
    console.print("\n[yellow]This is an unexpected error. Please report this issue.[/yellow]")
    console.print(f"[dim]Error type: {type(error).__name__}[/dim]")

    raise typer.Exit(exit_code)


@app.callback(invoke_without_command=True)
def create(
    typer_ctx: typer.Context,
    answers: Optional[Path] = typer.Option(None, "--answers", help="YAML answers file (non-interactive)"),
    directory: Optional[Path] = typer.Option(None, "--directory", help="Directory to create the project in"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging")
):
    """Create an Astro project via interactive prompts"""
    if typer_ctx.invoked_subcommand is not None:
        return

    from astrokit.engine.orchestrator import Orchestrator

    configure_logging(verbose)
    orchestrator = None

    try:
        settings = load_settings()

        if answers is not None:
            source = FileAnswerSource.from_file(answers, console)
        elif is_non_interactive():
            source = FileAnswerSource({}, console=console)
        else:
            source = InteractiveSource(console)

        runner = CommandRunner(
            console,
            timeout=settings.command_timeout,
            retry_delay=settings.retry_delay,
            log_dir=settings.log_dir
        )

        orchestrator = Orchestrator(console, runner, source, settings, base_dir=directory)
        orchestrator.run()

    except KeyboardInterrupt:
        console.print("\n[yellow]⚠ Configuration interrupted[/yellow]")
        raise typer.Exit(0)
    except ConfigError as e:
        handle_config_error(e, orchestrator.context if orchestrator else None)
    except Exception as e:
        handle_unexpected_error(e)


@app.command()
def version():
    """Display CLI version"""
    import importlib.metadata

    try:
        cli_version = importlib.metadata.version("astrokit")
    except importlib.metadata.PackageNotFoundError:
        from astrokit import __version__
        cli_version = __version__

    console.print(f"astrokit [green]{cli_version}[/green]")


def main():
    app()


if __name__ == "__main__":
    main()
