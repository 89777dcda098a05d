"""Shared fakes for pipeline integration tests

The command runner is the only seam replaced: it records commands instead
of spawning node tooling, and simulates the Astro generator by writing a
package.json. Retry logic still runs through the real CommandRunner.
"""

import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from astrokit.config import Settings
from astrokit.engine.command_runner import CommandRunner
from astrokit.exceptions import CommandError
from astrokit.prompts.graph import CONFIRMATIONS
from astrokit.prompts.sources import AnswerSource

CANCEL = object()

GENERATED_MANIFEST = {
    "name": "placeholder",
    "type": "module",
    "version": "0.0.1",
    "scripts": {"dev": "astro dev", "start": "astro dev"},
    "dependencies": {"astro": "^5.0.0"},
}


class FakeRunner(CommandRunner):
    """Records commands instead of executing them

    Args:
        node_version: Output of 'node --version' (None simulates a missing node)
        failures: Command substring -> number of times it should fail
        manifest: Text written as package.json by the scaffold (None writes nothing)
        interrupt_on: Command substring that raises KeyboardInterrupt
    """

    def __init__(self, node_version="v20.11.1", failures=None, manifest=json.dumps(GENERATED_MANIFEST), interrupt_on=None):
        super().__init__(console=Console(file=io.StringIO()), retry_delay=0.5, sleep=self._record_sleep)
        self.node_version = node_version
        self.failures = dict(failures or {})
        self.manifest = manifest
        self.interrupt_on = interrupt_on
        self.commands = []
        self.sleeps = []

    def _record_sleep(self, seconds):
        self.sleeps.append(seconds)

    def run(self, command, cwd=None, silent=False, timeout=None):
        self.commands.append((command, Path(cwd) if cwd else None))

        if self.interrupt_on and self.interrupt_on in command:
            raise KeyboardInterrupt()

        for pattern, remaining in self.failures.items():
            if pattern in command and remaining > 0:
                self.failures[pattern] = remaining - 1
                raise CommandError(command, "Command exited with code 1", stderr="boom", exit_code=1)

        if command == "node --version":
            if self.node_version is None:
                raise CommandError(command, "Command exited with code 127", exit_code=127)
            return self.node_version + "\n"

        if command.startswith("npm create astro"):
            project_dir = Path(cwd) / command.split()[3]
            project_dir.mkdir(parents=True, exist_ok=True)
            if self.manifest is not None:
                (project_dir / "package.json").write_text(self.manifest)

        return ""

    def command_lines(self):
        return [command for command, _ in self.commands]

    def count(self, pattern):
        return sum(1 for command in self.command_lines() if pattern in command)

    def cwd_of(self, pattern):
        for command, cwd in self.commands:
            if pattern in command:
                return cwd
        return None


class ScriptedSource(AnswerSource):
    """Answers from a dict, question defaults otherwise

    A value of CANCEL simulates the user dismissing that prompt.
    """

    def __init__(self, answers=None, confirmations=None):
        self.answers = dict(answers or {})
        self.confirmations = dict(confirmations or {})
        self.asked = []
        self.confirmed = []

    def ask(self, question):
        self.asked.append(question.name)
        value = self.answers.get(question.name, question.default)
        if value is CANCEL:
            return None
        return value

    def confirm(self, key, message=None):
        self.confirmed.append(key)
        return self.confirmations.get(key, CONFIRMATIONS[key].default)


@pytest.fixture
def console():
    """Console writing into a buffer"""
    return Console(file=io.StringIO(), width=120)


@pytest.fixture
def settings():
    return Settings(log_dir=None)


@pytest.fixture
def make_orchestrator(console, settings, tmp_path):
    """Factory wiring an Orchestrator to a fake runner in tmp_path"""
    from astrokit.engine.orchestrator import Orchestrator

    def factory(answers=None, confirmations=None, **runner_options):
        runner = FakeRunner(**runner_options)
        source = ScriptedSource(answers, confirmations)
        orchestrator = Orchestrator(console, runner, source, settings, base_dir=tmp_path)
        return orchestrator, runner, source

    return factory


@pytest.fixture
def fake_runner_class():
    return FakeRunner


@pytest.fixture
def cancel():
    return CANCEL
