"""Sanity CMS integration"""

from astrokit.engine.context import RunContext
from astrokit.engine.steps import StepTools

CLIENT_PACKAGES = "@sanity/client @sanity/image-url"


def setup(ctx: RunContext, tools: StepTools):
    """Install the Sanity client and initialize a Sanity project

    'sanity init' is interactive, so its output streams to the terminal.
    """
    tools.console.print("[cyan]→[/cyan] Configuring Sanity...")

    tools.runner.run(f"npm install {CLIENT_PACKAGES}", cwd=ctx.project_dir)
    tools.runner.run("npx sanity init", cwd=ctx.project_dir)

    tools.console.print("[green]✓[/green] Sanity configured")
