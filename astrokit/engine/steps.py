"""Step descriptors and the default ordered step table

Each step declares when it runs, what it does and what a failure means
for the rest of the run. The table is the single place where ordering
and fatal/non-fatal policy are decided.
"""

import json
from dataclasses import dataclass
from typing import Callable, List

from rich.console import Console

from astrokit import emitters
from astrokit.config import Settings
from astrokit.engine.command_runner import CommandRunner
from astrokit.engine.context import FailurePolicy, RunContext, RunState
from astrokit.exceptions import ConfigError
from astrokit.models import AnswerSet, Framework
from astrokit.prompts.sources import AnswerSource
from astrokit.utils.files import safe_write_file


@dataclass
class StepTools:
    """Collaborators handed to every step action"""
    runner: CommandRunner
    source: AnswerSource
    console: Console
    settings: Settings


def _always(answers: AnswerSet) -> bool:
    return True


@dataclass(frozen=True)
class Step:
    """Stateless unit of orchestration work"""
    name: str
    description: str
    phase: RunState
    action: Callable[[RunContext, StepTools], None]
    predicate: Callable[[AnswerSet], bool] = _always
    failure_policy: FailurePolicy = FailurePolicy.ABORT_RUN

    def should_run(self, answers: AnswerSet) -> bool:
        return bool(self.predicate(answers))


def install_framework(ctx: RunContext, tools: StepTools):
    framework = ctx.answers.framework.value
    tools.console.print(f"[cyan]→[/cyan] Installing {framework}...")
    tools.runner.run(f"npx astro add {framework} --yes", cwd=ctx.project_dir)
    tools.console.print(f"[green]✓[/green] {framework} integration added")


def install_tailwind(ctx: RunContext, tools: StepTools):
    tools.console.print("[cyan]→[/cyan] Installing TailwindCSS...")
    tools.runner.run("npx astro add tailwind --yes", cwd=ctx.project_dir)
    tools.console.print("[green]✓[/green] TailwindCSS integration added")


def update_manifest(ctx: RunContext, tools: StepTools):
    """Rewrite package.json with project metadata and the managed scripts"""
    manifest_path = ctx.project_dir / "package.json"

    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(
            f"Could not read {manifest_path.name}",
            {"path": str(manifest_path), "error": str(e)}
        )

    if not isinstance(manifest, dict):
        raise ConfigError(
            f"{manifest_path.name} does not contain a JSON object",
            {"path": str(manifest_path)}
        )

    updated = emitters.update_manifest(manifest, ctx.answers.project_name)
    safe_write_file(manifest_path, emitters.render_manifest(updated), backup=False)
    tools.console.print("[green]✓[/green] package.json updated")


def write_source_stubs(ctx: RunContext, tools: StepTools):
    tools.console.print("[cyan]→[/cyan] Generating components...")
    for relative_path, content in emitters.render_source_stubs(ctx.answers).items():
        safe_write_file(ctx.project_dir / relative_path, content, backup=False)
        tools.console.print(f"[green]✓[/green] {relative_path}")


def write_readme(ctx: RunContext, tools: StepTools):
    safe_write_file(ctx.project_dir / "README.md", emitters.render_readme(ctx.answers), backup=False)
    tools.console.print("[green]✓[/green] README.md created")


def write_gitignore(ctx: RunContext, tools: StepTools):
    safe_write_file(ctx.project_dir / ".gitignore", emitters.render_gitignore(ctx.answers), backup=False)
    tools.console.print("[green]✓[/green] .gitignore created")


def default_steps() -> List[Step]:
    """Steps in execution order"""
    from astrokit.integrations import deployment, medusa, sanity

    return [
        Step(
            name="framework",
            description="UI framework integration",
            phase=RunState.GENERATING,
            action=install_framework,
            predicate=lambda answers: answers.framework != Framework.NONE,
        ),
        Step(
            name="tailwind",
            description="TailwindCSS integration",
            phase=RunState.GENERATING,
            action=install_tailwind,
            predicate=lambda answers: answers.use_tailwind,
        ),
        Step(
            name="sanity",
            description="Sanity CMS integration",
            phase=RunState.GENERATING,
            action=sanity.setup,
            predicate=lambda answers: answers.use_sanity,
        ),
        Step(
            name="medusa",
            description="Medusa e-commerce integration",
            phase=RunState.GENERATING,
            action=medusa.setup,
            predicate=lambda answers: answers.use_medusa,
        ),
        Step(
            name="deployment",
            description="Deployment adapter",
            phase=RunState.GENERATING,
            action=deployment.setup,
            predicate=deployment.is_enabled,
        ),
        Step(
            name="manifest",
            description="package.json metadata and scripts",
            phase=RunState.FINALIZING,
            action=update_manifest,
            failure_policy=FailurePolicy.WARN_AND_CONTINUE,
        ),
        Step(
            name="components",
            description="Client libraries and components",
            phase=RunState.FINALIZING,
            action=write_source_stubs,
        ),
        Step(
            name="readme",
            description="README.md",
            phase=RunState.FINALIZING,
            action=write_readme,
        ),
        Step(
            name="gitignore",
            description=".gitignore",
            phase=RunState.FINALIZING,
            action=write_gitignore,
        ),
    ]
