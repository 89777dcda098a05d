"""Run context: explicit per-invocation state threaded through every step"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from astrokit.exceptions import ConfigError
from astrokit.models import AnswerSet


class RunState(str, Enum):
    IDLE = "idle"
    NAME_COLLECTED = "name_collected"
    PROJECT_SCAFFOLDED = "project_scaffolded"
    CONFIGURING = "configuring"
    GENERATING = "generating"
    FINALIZING = "finalizing"
    DONE = "done"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


TERMINAL_STATES = (RunState.DONE, RunState.CANCELLED, RunState.ABORTED)


class StepStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    WARNED = "warned"
    FAILED = "failed"


class FailurePolicy(str, Enum):
    ABORT_RUN = "abort-run"
    WARN_AND_CONTINUE = "warn-and-continue"


@dataclass
class StepResult:
    """Outcome of one step"""
    step: str
    status: StepStatus
    error: Optional[ConfigError] = None

    @property
    def command(self) -> Optional[str]:
        if self.error is None:
            return None
        return self.error.details.get("command")


class InvalidTransitionError(Exception):
    """Raised when the run state machine is driven out of order"""
    pass


@dataclass
class RunContext:
    """Mutable state for a single invocation

    base_dir never changes. project_dir is set once, when the name is
    collected. Commands receive these paths explicitly and the process
    working directory is never changed.
    """
    base_dir: Path
    project_dir: Optional[Path] = None
    answers: Optional[AnswerSet] = None
    state: RunState = RunState.IDLE
    results: List[StepResult] = field(default_factory=list)
    pending_backend: Optional[Path] = None
    backend_dir: Optional[Path] = None

    def transition(self, state: RunState):
        """Move to the next state

        Raises:
            InvalidTransitionError: If the run already reached a terminal state
        """
        if self.state in TERMINAL_STATES:
            raise InvalidTransitionError(
                f"Run already finished ({self.state.value}), cannot move to {state.value}"
            )
        self.state = state

    def abort(self):
        """Mark the run aborted unless it already finished"""
        if self.state not in TERMINAL_STATES:
            self.state = RunState.ABORTED

    def set_project_dir(self, project_name: str) -> Path:
        if self.project_dir is not None:
            raise InvalidTransitionError(f"Project directory already set: {self.project_dir}")
        self.project_dir = self.base_dir / project_name
        return self.project_dir

    def record(self, result: StepResult):
        self.results.append(result)

    def steps_with_status(self, *statuses: StepStatus) -> List[str]:
        return [result.step for result in self.results if result.status in statuses]

    @property
    def completed_steps(self) -> List[str]:
        return self.steps_with_status(StepStatus.COMPLETED, StepStatus.WARNED)

    @property
    def warnings(self) -> List[StepResult]:
        return [result for result in self.results if result.status == StepStatus.WARNED]
