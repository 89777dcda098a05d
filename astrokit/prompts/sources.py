"""Answer sources: interactive terminal prompts or an answers file"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import questionary
import yaml
from rich.console import Console

from astrokit.exceptions import ConfigError
from astrokit.prompts.graph import CONFIRMATIONS, Question

TRUE_VALUES = ("1", "true", "yes", "y", "on")
FALSE_VALUES = ("0", "false", "no", "n", "off")


class AnswerSource(ABC):
    """Where question answers and runtime confirmations come from"""

    @abstractmethod
    def ask(self, question: Question) -> Any:
        """Return the answer, or None if the user cancelled"""
        pass

    @abstractmethod
    def confirm(self, key: str, message: Optional[str] = None) -> bool:
        """Return a yes/no decision for a runtime confirmation"""
        pass


class InteractiveSource(AnswerSource):
    """Arrow-key prompts on the controlling terminal"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def ask(self, question: Question) -> Any:
        if question.type == "select":
            choices = [questionary.Choice(title=c.title, value=c.value) for c in question.choices]
            default = next((c for c in choices if c.value == question.default), None)
            return questionary.select(question.prompt, choices=choices, default=default).ask()

        if question.type == "confirm":
            return questionary.confirm(question.prompt, default=bool(question.default)).ask()

        answer = questionary.text(
            question.prompt,
            default=str(question.default or ""),
            validate=question.validate or (lambda _: True)
        ).ask()
        return answer.strip() if answer is not None else None

    def confirm(self, key: str, message: Optional[str] = None) -> bool:
        confirmation = CONFIRMATIONS[key]
        answer = questionary.confirm(
            message or confirmation.prompt,
            default=confirmation.default
        ).ask()
        # A dismissed confirmation declines
        return bool(answer)


class FileAnswerSource(AnswerSource):
    """Answers read from a mapping, with ASTROKIT_<FIELD> env fallback

    Runs the same validators as interactive prompts. A missing answer
    uses the question default.
    """

    def __init__(self, answers: Dict[str, Any], confirmations: Optional[Dict[str, Any]] = None, console: Optional[Console] = None):
        self.answers = dict(answers)
        self.confirmations = dict(confirmations or {})
        self.console = console or Console()

    @classmethod
    def from_file(cls, path: Path, console: Optional[Console] = None) -> "FileAnswerSource":
        """Load an answers YAML file

        Raises:
            ConfigError: If the file is missing or malformed
        """
        if not path.exists():
            raise ConfigError(f"Answers file not found: {path}", {"path": str(path)})

        try:
            data = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid answers file: {path}", {"error": str(e)})

        if not isinstance(data, dict):
            raise ConfigError(
                f"Answers file must contain a mapping: {path}",
                {"found": type(data).__name__}
            )

        confirmations = data.pop("confirmations", None) or {}
        return cls(data, confirmations, console)

    def ask(self, question: Question) -> Any:
        value = self.answers.get(question.name)
        if value is None:
            value = get_env_value(question.name)

        if value is None:
            if question.default is None:
                raise ConfigError(
                    f"No answer for '{question.name}'",
                    {"question": question.prompt},
                    help_text=f"Add '{question.name}' to the answers file or set {env_name(question.name)}"
                )
            value = question.default
            self.console.print(f"[dim]{question.prompt} {value} (default)[/dim]")
        else:
            self.console.print(f"[dim]{question.prompt} {value}[/dim]")

        return self._coerce(question, value)

    def confirm(self, key: str, message: Optional[str] = None) -> bool:
        confirmation = CONFIRMATIONS[key]
        value = self.confirmations.get(key)
        if value is None:
            value = get_env_value(key)
        if value is None:
            return confirmation.default
        return _to_bool(key, value)

    def _coerce(self, question: Question, value: Any) -> Any:
        if question.type == "confirm":
            return _to_bool(question.name, value)

        value = str(value).strip()

        if question.type == "select" and value not in question.choice_values():
            raise ConfigError(
                f"Invalid answer for '{question.name}': {value}",
                {"allowed": question.choice_values()}
            )

        if question.validate:
            verdict = question.validate(value)
            if verdict is not True:
                raise ConfigError(f"Invalid answer for '{question.name}': {verdict}", {"value": value})

        return value


def env_name(field_name: str) -> str:
    return f"ASTROKIT_{field_name.upper()}"


def get_env_value(field_name: str) -> Optional[str]:
    """Get an answer from the ASTROKIT_<FIELD> environment variable"""
    return os.getenv(env_name(field_name)) or None


def is_non_interactive() -> bool:
    """Check if running in non-interactive mode"""
    return os.getenv("ASTROKIT_NON_INTERACTIVE", "").lower() in ("1", "true", "yes")


def _to_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ConfigError(f"Expected yes/no for '{name}', got: {value}")
