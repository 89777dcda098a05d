"""Deployment adapter installation"""

from astrokit.engine.context import RunContext
from astrokit.engine.steps import StepTools
from astrokit.exceptions import ConfigError
from astrokit.models import AnswerSet, Deployment

ADAPTER_PACKAGES = {
    Deployment.NODEJS: "@astrojs/node",
    Deployment.NETLIFY: "@astrojs/netlify",
    Deployment.VERCEL: "@astrojs/vercel",
}


def is_enabled(answers: AnswerSet) -> bool:
    return answers.deployment != Deployment.NONE


def setup(ctx: RunContext, tools: StepTools):
    """Install the adapter package for the chosen platform

    Raises:
        ConfigError: If the platform is not enabled in settings
    """
    platform = ctx.answers.deployment

    if platform.value not in tools.settings.supported_platforms:
        raise ConfigError(
            f"Unsupported deployment platform: {platform.value}",
            {"supported": tools.settings.supported_platforms}
        )

    tools.console.print(f"[cyan]→[/cyan] Configuring {platform.value} deployment...")
    tools.runner.run(f"npm install {ADAPTER_PACKAGES[platform]}", cwd=ctx.project_dir)
    tools.console.print(f"[green]✓[/green] {platform.value} adapter installed")
