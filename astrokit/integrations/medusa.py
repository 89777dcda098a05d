"""Medusa e-commerce integration

Three modes: a full backend install next to the project, an existing
backend URL, or the JS client only. The full install asks for a
database, gates PostgreSQL on an explicit reachability confirmation, and
offers to continue without a backend when the install fails.
"""

import logging
from pathlib import Path
from typing import Optional

from astrokit import emitters
from astrokit.engine.context import RunContext
from astrokit.engine.steps import StepTools
from astrokit.exceptions import CommandError, ConfigError
from astrokit.models import DEFAULT_MEDUSA_URL, DatabaseType, MedusaOptions, MedusaSetup
from astrokit.utils.files import append_env_vars, ensure_dir, remove_tree, safe_write_file
from astrokit.utils.validators import is_directory

logger = logging.getLogger(__name__)

CLIENT_PACKAGE = "@medusajs/medusa-js"
BACKEND_URL_KEY = "PUBLIC_MEDUSA_BACKEND_URL"
PUBLISHABLE_KEY_KEY = "PUBLIC_MEDUSA_PUBLISHABLE_KEY"
ADMIN_URL = "http://localhost:7001"

POSTGRES_START_HINTS = [
    "Windows: start the PostgreSQL service",
    "macOS: brew services start postgresql",
    "Linux: sudo systemctl start postgresql",
]


def setup(ctx: RunContext, tools: StepTools):
    """Install the Medusa client, optionally a backend, and write .env keys"""
    options = ctx.answers.medusa
    tools.console.print("[cyan]→[/cyan] Configuring Medusa...")

    tools.console.print("[cyan]→[/cyan] Installing the Medusa JS client...")
    tools.runner.run(f"npm install {CLIENT_PACKAGE}", cwd=ctx.project_dir)

    backend_url = DEFAULT_MEDUSA_URL
    if options.setup == MedusaSetup.FULL:
        install_backend(ctx, tools, options)
    elif options.setup == MedusaSetup.EXISTING:
        backend_url = options.backend_url

    added = append_env_vars(
        ctx.project_dir / ".env",
        {BACKEND_URL_KEY: backend_url, PUBLISHABLE_KEY_KEY: ""},
        header="Medusa configuration (set the publishable key from the admin)"
    )
    if added:
        tools.console.print(f"[green]✓[/green] Added {', '.join(added)} to .env")

    _print_instructions(ctx, tools, options, backend_url)


def backend_path(ctx: RunContext, options: MedusaOptions) -> Path:
    """The backend lives next to the project, not inside it"""
    return ctx.base_dir / options.backend_dir


def generator_command(options: MedusaOptions) -> str:
    if options.db_type == DatabaseType.SQLITE:
        db_url = f"sqlite://localhost/{options.backend_dir}.db"
    else:
        db_url = options.db_url
    return f"npx create-medusa-app@latest --db-url {db_url} --skip-browser"


def install_backend(ctx: RunContext, tools: StepTools, options: MedusaOptions) -> Optional[Path]:
    """Generate the Medusa backend in a sibling directory

    Returns:
        Backend path, or None when the install was skipped or abandoned

    Raises:
        ConfigError: If PostgreSQL is not confirmed reachable, or the
            install fails and the user declines to continue without it
    """
    path = backend_path(ctx, options)

    if is_directory(path):
        tools.console.print(f"[yellow]⚠[/yellow] Folder '{options.backend_dir}' already exists")
        if not tools.source.confirm("overwrite_backend"):
            tools.console.print("[dim]Backend installation skipped[/dim]")
            return None
        remove_tree(path)

    if options.db_type == DatabaseType.POSTGRES:
        _require_reachable_database(tools)

    tools.console.print("[cyan]→[/cyan] Installing the Medusa backend (this can take 5-10 minutes)...")
    tools.console.print("[yellow]⚠[/yellow] This step needs a stable internet connection")

    try:
        ensure_dir(path)
        ctx.pending_backend = path

        tools.runner.run_with_retry(
            generator_command(options),
            retries=tools.settings.retry_attempts,
            cwd=path,
            idempotent=False,
            cleanup=lambda: _reset_directory(path)
        )

        safe_write_file(path / "start.sh", emitters.render_start_script(options.db_type), backup=False)
        try:
            tools.runner.run("chmod +x start.sh", cwd=path, silent=True)
        except CommandError as e:
            # No chmod on Windows
            logger.debug("Could not mark start.sh executable: %s", e.error)

        ctx.pending_backend = None
        ctx.backend_dir = path
        tools.console.print("[green]✓[/green] Medusa backend installed")

    except ConfigError:
        tools.console.print("[red]✗[/red] Medusa backend installation failed")
        tools.console.print("\n[bold]Manual installation:[/bold]")
        tools.console.print("   1. Create a folder for the backend")
        tools.console.print("   2. Run: npx create-medusa-app@latest")
        tools.console.print("   3. Follow the interactive instructions")
        tools.console.print("   4. Docs: https://docs.medusajs.com/create-medusa-app\n")

        if not tools.source.confirm("continue_without_backend"):
            raise

        tools.console.print("[yellow]⚠[/yellow] Continuing without the Medusa backend")
        return None

    _seed_demo_data(tools, path)
    return path


def _require_reachable_database(tools: StepTools):
    if tools.source.confirm("database_reachable"):
        return

    tools.console.print("[red]✗[/red] Start PostgreSQL before continuing")
    for hint in POSTGRES_START_HINTS:
        tools.console.print(f"[dim]{hint}[/dim]")

    raise ConfigError(
        "PostgreSQL is not reachable",
        {"database": "postgres"},
        help_text="Start PostgreSQL, or choose SQLite for local development"
    )


def _reset_directory(path: Path):
    remove_tree(path)
    ensure_dir(path)


def _seed_demo_data(tools: StepTools, path: Path):
    if not tools.source.confirm("seed_data"):
        return

    tools.console.print("[cyan]→[/cyan] Adding demo data...")
    try:
        tools.runner.run("npm run seed", cwd=path)
        tools.console.print("[green]✓[/green] Demo data added")
    except CommandError:
        tools.console.print("[yellow]⚠[/yellow] Could not add the demo data automatically")
        tools.console.print("[dim]Add it later with: npm run seed[/dim]")


def _print_instructions(ctx: RunContext, tools: StepTools, options: MedusaOptions, backend_url: str):
    console = tools.console
    console.print("\n" + "=" * 60)
    console.print("[green]✓ Medusa configured[/green]")
    console.print("=" * 60 + "\n")

    if options.setup == MedusaSetup.FULL and ctx.backend_dir:
        console.print(f"Medusa backend installed in: {ctx.backend_dir}")
        console.print("\nStart the backend:")
        console.print(f"   cd {ctx.backend_dir}")
        if options.db_type == DatabaseType.POSTGRES:
            console.print("   # Make sure PostgreSQL is running")
        console.print("   npm run dev")
        console.print(f"\nMedusa admin: {ADMIN_URL}")
    elif options.setup == MedusaSetup.FULL:
        console.print("[yellow]No backend was installed.[/yellow]")
        if ctx.pending_backend:
            console.print(f"[yellow]Partial backend left for inspection: {ctx.pending_backend}[/yellow]")
    elif options.setup == MedusaSetup.EXISTING:
        console.print(f"Medusa backend: {backend_url}")
    else:
        console.print("Manual setup required:")
        console.print("   1. Install the Medusa backend separately")
        console.print(f"   2. Update {BACKEND_URL_KEY} in .env")

    console.print("\nDocs: https://docs.medusajs.com\n")
