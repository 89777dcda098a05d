"""Step orchestrator: the scaffolding pipeline state machine

Idle -> NameCollected -> ProjectScaffolded -> Configuring -> Generating
-> Finalizing -> Done, with Cancelled for deliberate early exits and
Aborted for failures and interrupts.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from rich.console import Console

from astrokit import emitters
from astrokit.config import Settings
from astrokit.display import RunReporter
from astrokit.engine.command_runner import CommandRunner
from astrokit.engine.context import FailurePolicy, RunContext, RunState, StepResult, StepStatus
from astrokit.engine.steps import Step, StepTools, default_steps
from astrokit.exceptions import (
    CommandError,
    ConfigError,
    PipelineAbortedError,
    PromptCancelled,
    ToolchainError,
)
from astrokit.models import AnswerSet
from astrokit.prompts.graph import CONFIGURE_PHASE, PROJECT_PHASE, QuestionGraph
from astrokit.prompts.sources import AnswerSource
from astrokit.utils.files import remove_tree
from astrokit.utils.validators import check_toolchain_version, is_directory, missing_project_files

logger = logging.getLogger(__name__)


class Orchestrator:
    """Drive one scaffolding run from first prompt to final summary

    Responsibilities:
    - Collect answers through the question graph
    - Create the project with the Astro generator (single attempt)
    - Run the ordered step table, applying each step's failure policy
    - Report completed and remaining steps when a fatal step fails
    """

    def __init__(
        self,
        console: Console,
        runner: CommandRunner,
        source: AnswerSource,
        settings: Settings,
        base_dir: Optional[Path] = None,
        steps: Optional[List[Step]] = None,
        graph: Optional[QuestionGraph] = None
    ):
        self.console = console
        self.runner = runner
        self.source = source
        self.settings = settings
        self.steps = steps if steps is not None else default_steps()
        self.graph = graph or QuestionGraph()
        self.reporter = RunReporter(console)
        self.tools = StepTools(runner=runner, source=source, console=console, settings=settings)
        self.context = RunContext(base_dir=Path(base_dir or Path.cwd()).resolve())

    def run(self) -> RunContext:
        """Execute the full pipeline

        Returns:
            The run context in state DONE or CANCELLED

        Raises:
            ConfigError: On any fatal step failure (state ABORTED)
        """
        ctx = self.context
        self.reporter.banner()

        try:
            self.check_toolchain()

            project_answers = self.collect_project(ctx)
            if project_answers is None:
                return ctx

            self.scaffold(ctx, project_answers)

            if self.configure(ctx, project_answers) is None:
                return ctx

            self.execute_phase(ctx, RunState.GENERATING)
            self.execute_phase(ctx, RunState.FINALIZING)

            ctx.transition(RunState.DONE)
            self.reporter.summary(ctx, list(emitters.render_source_stubs(ctx.answers)))

        except BaseException:
            ctx.abort()
            raise

        return ctx

    def check_toolchain(self):
        """Verify Node.js is installed and recent enough

        Raises:
            ToolchainError: If node is missing or below the configured floor
        """
        minimum = self.settings.min_node_version

        try:
            version = self.runner.run("node --version", silent=True).strip()
        except CommandError as e:
            logger.debug("node --version failed: %s", e.error)
            raise ToolchainError(minimum)

        if not check_toolchain_version(version, minimum):
            raise ToolchainError(minimum, version)

        logger.debug("Node.js %s satisfies >= %s", version, minimum)

    def collect_project(self, ctx: RunContext) -> Optional[Dict[str, Any]]:
        """Idle -> NameCollected

        Returns:
            Project answers, or None when the user backed out
        """
        try:
            answers = self.graph.collect(PROJECT_PHASE, self.source)
        except PromptCancelled:
            self._cancel(ctx)
            return None

        name = answers["project_name"]
        project_dir = ctx.set_project_dir(name)
        ctx.transition(RunState.NAME_COLLECTED)

        if is_directory(project_dir):
            self.console.print(f"[red]✗[/red] Folder '{name}' already exists")
            if not self.source.confirm("delete_existing"):
                self._cancel(ctx)
                return None

            remove_tree(project_dir)
            self.console.print(f"[dim]Folder '{name}' deleted[/dim]")

        return answers

    def scaffold(self, ctx: RunContext, project_answers: Dict[str, Any]):
        """NameCollected -> ProjectScaffolded

        Not retried: a half-created directory from a failed generator run
        is left for the user to inspect.

        Raises:
            ConfigError: If the generator fails or leaves required files out
        """
        name = project_answers["project_name"]
        template = project_answers["template"]

        self.console.print(f"[cyan]→[/cyan] Creating Astro project: {name}...")

        try:
            self.runner.run(
                f"npm create astro@latest {name} -- --template {template} "
                f"--install --git --typescript strict --no-dry-run",
                cwd=ctx.base_dir
            )
        except CommandError as e:
            raise ConfigError(
                "Failed to create the Astro project",
                e.details,
                help_text=f"Inspect or delete {ctx.project_dir} before running astrokit again"
            )

        missing = missing_project_files(ctx.project_dir)
        if missing:
            raise ConfigError(
                f"Missing files: {', '.join(missing)}",
                {"missing": missing, "project_dir": str(ctx.project_dir)}
            )

        ctx.transition(RunState.PROJECT_SCAFFOLDED)
        self.console.print(f"[green]✓[/green] Project '{name}' created")

    def configure(self, ctx: RunContext, project_answers: Dict[str, Any]) -> Optional[AnswerSet]:
        """ProjectScaffolded -> Configuring

        Returns:
            The frozen AnswerSet, or None when the user backed out
        """
        ctx.transition(RunState.CONFIGURING)

        try:
            answers = self.graph.collect(CONFIGURE_PHASE, self.source, project_answers)
        except PromptCancelled:
            self._cancel(ctx)
            return None

        try:
            ctx.answers = AnswerSet.from_answers(answers)
        except ValidationError as e:
            raise ConfigError(
                "Invalid configuration answers",
                {"errors": [err["msg"] for err in e.errors()]}
            )

        self.console.print(f"\nConfiguring project in: {ctx.project_dir}\n")
        return ctx.answers

    def execute_phase(self, ctx: RunContext, phase: RunState):
        """Run every step of a phase in declared order"""
        ctx.transition(phase)

        for step in self.steps:
            if step.phase == phase:
                self._run_step(ctx, step)

    def _run_step(self, ctx: RunContext, step: Step):
        if not step.should_run(ctx.answers):
            ctx.record(StepResult(step.name, StepStatus.SKIPPED))
            return

        logger.debug("Running step %s", step.name)

        try:
            step.action(ctx, self.tools)
        except ConfigError as error:
            if step.failure_policy == FailurePolicy.WARN_AND_CONTINUE:
                logger.warning("Step %s failed: %s", step.name, error.message)
                self.console.print(
                    f"[yellow]⚠[/yellow] Could not complete {step.description}: {error.message}"
                )
                ctx.record(StepResult(step.name, StepStatus.WARNED, error))
                return

            ctx.record(StepResult(step.name, StepStatus.FAILED, error))
            raise PipelineAbortedError(
                step.name,
                error,
                completed_steps=ctx.completed_steps,
                remaining_steps=self._remaining_after(step)
            ) from error

        ctx.record(StepResult(step.name, StepStatus.COMPLETED))

    def _remaining_after(self, step: Step) -> List[str]:
        """Names of later steps that would have run"""
        index = self.steps.index(step)
        return [
            later.name for later in self.steps[index + 1:]
            if later.should_run(self.context.answers)
        ]

    def _cancel(self, ctx: RunContext):
        self.console.print("[yellow]⚠ Configuration cancelled[/yellow]")
        ctx.transition(RunState.CANCELLED)
