"""Unit tests for run state and the step table"""

import io
from pathlib import Path

import pytest
from rich.console import Console

from astrokit.display import RunReporter
from astrokit.engine.context import (
    InvalidTransitionError,
    RunContext,
    RunState,
    StepResult,
    StepStatus
)
from astrokit.engine.steps import default_steps
from astrokit.exceptions import CommandError, ConfigError, PipelineAbortedError
from astrokit.models import AnswerSet


class TestRunContext:
    """Test state transitions and result bookkeeping"""

    def test_project_dir_set_once(self, tmp_path):
        ctx = RunContext(base_dir=tmp_path)

        assert ctx.set_project_dir("blog-demo") == tmp_path / "blog-demo"

        with pytest.raises(InvalidTransitionError):
            ctx.set_project_dir("other")

    def test_terminal_states_are_final(self, tmp_path):
        ctx = RunContext(base_dir=tmp_path)
        ctx.transition(RunState.NAME_COLLECTED)
        ctx.transition(RunState.CANCELLED)

        with pytest.raises(InvalidTransitionError):
            ctx.transition(RunState.PROJECT_SCAFFOLDED)

    def test_abort_keeps_finished_state(self, tmp_path):
        ctx = RunContext(base_dir=tmp_path)
        ctx.transition(RunState.DONE)

        ctx.abort()

        assert ctx.state == RunState.DONE

    def test_abort(self, tmp_path):
        ctx = RunContext(base_dir=tmp_path, state=RunState.GENERATING)

        ctx.abort()

        assert ctx.state == RunState.ABORTED

    def test_completed_steps(self, tmp_path):
        ctx = RunContext(base_dir=tmp_path)
        ctx.record(StepResult("framework", StepStatus.SKIPPED))
        ctx.record(StepResult("tailwind", StepStatus.COMPLETED))
        ctx.record(StepResult("manifest", StepStatus.WARNED, ConfigError("bad json")))

        assert ctx.completed_steps == ["tailwind", "manifest"]
        assert [result.step for result in ctx.warnings] == ["manifest"]

    def test_step_result_command(self):
        result = StepResult("sanity", StepStatus.FAILED, CommandError("npx sanity init", "exit 1"))

        assert result.command == "npx sanity init"
        assert StepResult("sanity", StepStatus.COMPLETED).command is None


class TestDefaultSteps:
    """Test the declared step table"""

    def test_order(self):
        assert [step.name for step in default_steps()] == [
            "framework", "tailwind", "sanity", "medusa", "deployment",
            "manifest", "components", "readme", "gitignore",
        ]

    def test_phases(self):
        phases = {step.name: step.phase for step in default_steps()}

        assert phases["deployment"] == RunState.GENERATING
        assert phases["manifest"] == RunState.FINALIZING

    def test_predicates(self):
        answers = AnswerSet(project_name="blog-demo", use_tailwind=False, use_sanity=True, deployment="vercel")

        active = [step.name for step in default_steps() if step.should_run(answers)]

        assert active == ["sanity", "deployment", "manifest", "components", "readme", "gitignore"]


class TestRunReporter:
    """Test error rendering"""

    def test_error_panel(self, tmp_path):
        console = Console(file=io.StringIO(), width=120)
        cause = CommandError("npx sanity init", "Command exited with code 1", stderr="[error] no auth", exit_code=1)
        error = PipelineAbortedError("sanity", cause, ["tailwind"], ["deployment", "gitignore"])
        ctx = RunContext(base_dir=tmp_path, pending_backend=Path(tmp_path / "shop-backend"))

        RunReporter(console).error(error, ctx)

        output = console.file.getvalue()
        assert "Error during configuration" in output
        assert "[error] no auth" in output
        assert "Completed: tailwind" in output
        assert "Not run: deployment, gitignore" in output
        assert "shop-backend" in output
        assert "npm cache clean --force" in output

    def test_step_table_shows_failing_command(self, tmp_path):
        """Test a failed step's command is reported next to its message"""
        console = Console(file=io.StringIO(), width=160)
        ctx = RunContext(base_dir=tmp_path)
        ctx.record(StepResult("tailwind", StepStatus.COMPLETED))
        ctx.record(StepResult(
            "medusa",
            StepStatus.FAILED,
            ConfigError("Backend install failed", {"command": "npx create-medusa-app@latest"})
        ))

        console.print(RunReporter(console).step_table(ctx))

        output = console.file.getvalue()
        assert "Backend install failed (npx create-medusa-app@latest)" in output
        assert "completed" in output

    def test_error_report_includes_step_table(self, tmp_path):
        """Test the failure report lists every recorded step"""
        console = Console(file=io.StringIO(), width=160)
        cause = CommandError("npx sanity init", "Command exited with code 1", exit_code=1)
        ctx = RunContext(base_dir=tmp_path)
        ctx.record(StepResult("framework", StepStatus.SKIPPED))
        ctx.record(StepResult("sanity", StepStatus.FAILED, cause))

        RunReporter(console).error(PipelineAbortedError("sanity", cause, [], ["deployment"]), ctx)

        output = console.file.getvalue()
        assert "skipped" in output
        assert "failed" in output
