"""Declarative question graph over answer fields

Later questions depend on earlier answers. Instead of nesting prompt
construction, every field is declared once with its dependencies and an
activation predicate, and the same graph drives interactive and
file-driven collection.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from astrokit.exceptions import PromptCancelled
from astrokit.utils.validators import (
    validate_http_url,
    validate_not_empty,
    validate_postgres_url,
    validate_project_name,
)

Validator = Callable[[str], Union[bool, str]]

PROJECT_PHASE = "project"
CONFIGURE_PHASE = "configure"


class CircularQuestionError(Exception):
    """Raised when question dependencies form a cycle"""
    pass


@dataclass(frozen=True)
class Choice:
    title: str
    value: str


@dataclass(frozen=True)
class Question:
    """Definition for one answer field"""
    name: str
    prompt: str
    type: str  # text, select, confirm
    phase: str
    choices: Tuple[Choice, ...] = ()
    default: Optional[Any] = None
    validate: Optional[Validator] = None
    depends_on: Tuple[str, ...] = ()
    when: Optional[Callable[[Dict[str, Any]], bool]] = None

    def is_active(self, answers: Dict[str, Any]) -> bool:
        """Whether the question applies given the answers collected so far"""
        if any(dep not in answers for dep in self.depends_on):
            return False
        return self.when is None or bool(self.when(answers))

    def choice_values(self) -> List[str]:
        return [choice.value for choice in self.choices]


@dataclass(frozen=True)
class Confirmation:
    """Runtime yes/no decision asked while a step is executing"""
    key: str
    prompt: str
    default: bool


QUESTIONS: List[Question] = [
    Question(
        name="project_name",
        prompt="Project name:",
        type="text",
        phase=PROJECT_PHASE,
        default="my-astro-project",
        validate=validate_project_name,
    ),
    Question(
        name="template",
        prompt="Starter template:",
        type="select",
        phase=PROJECT_PHASE,
        choices=(
            Choice("Blog", "blog"),
            Choice("Portfolio", "portfolio"),
            Choice("Minimal", "minimal"),
        ),
        default="blog",
    ),
    Question(
        name="framework",
        prompt="UI framework to integrate:",
        type="select",
        phase=CONFIGURE_PHASE,
        choices=(
            Choice("None (pure Astro)", "none"),
            Choice("React", "react"),
            Choice("Vue", "vue"),
            Choice("Svelte", "svelte"),
            Choice("Solid", "solid"),
        ),
        default="none",
    ),
    Question(
        name="use_tailwind",
        prompt="Install TailwindCSS?",
        type="confirm",
        phase=CONFIGURE_PHASE,
        default=True,
    ),
    Question(
        name="use_sanity",
        prompt="Integrate Sanity CMS?",
        type="confirm",
        phase=CONFIGURE_PHASE,
        default=False,
    ),
    Question(
        name="use_medusa",
        prompt="Integrate Medusa e-commerce?",
        type="confirm",
        phase=CONFIGURE_PHASE,
        default=False,
    ),
    Question(
        name="deployment",
        prompt="Deployment platform:",
        type="select",
        phase=CONFIGURE_PHASE,
        choices=(
            Choice("None (static)", "none"),
            Choice("Node.js (SSR)", "nodejs"),
            Choice("Netlify", "netlify"),
            Choice("Vercel", "vercel"),
        ),
        default="none",
    ),
    Question(
        name="medusa_setup",
        prompt="Medusa setup:",
        type="select",
        phase=CONFIGURE_PHASE,
        choices=(
            Choice("Install the full backend (recommended)", "full"),
            Choice("Use an existing backend", "existing"),
            Choice("Install the client only (manual setup)", "client-only"),
        ),
        default="full",
        depends_on=("use_medusa",),
        when=lambda answers: answers["use_medusa"],
    ),
    Question(
        name="medusa_backend_url",
        prompt="URL of the existing Medusa backend:",
        type="text",
        phase=CONFIGURE_PHASE,
        default="http://localhost:9000",
        validate=validate_http_url,
        depends_on=("medusa_setup",),
        when=lambda answers: answers["medusa_setup"] == "existing",
    ),
    Question(
        name="medusa_backend_dir",
        prompt="Backend folder name:",
        type="text",
        phase=CONFIGURE_PHASE,
        default="medusa-backend",
        validate=validate_not_empty,
        depends_on=("medusa_setup",),
        when=lambda answers: answers["medusa_setup"] == "full",
    ),
    Question(
        name="medusa_db_type",
        prompt="Database type:",
        type="select",
        phase=CONFIGURE_PHASE,
        choices=(
            Choice("PostgreSQL (recommended)", "postgres"),
            Choice("SQLite (development)", "sqlite"),
        ),
        default="postgres",
        depends_on=("medusa_setup",),
        when=lambda answers: answers["medusa_setup"] == "full",
    ),
    Question(
        name="medusa_db_url",
        prompt="PostgreSQL URL:",
        type="text",
        phase=CONFIGURE_PHASE,
        default="postgres://localhost/medusa-store",
        validate=validate_postgres_url,
        depends_on=("medusa_db_type",),
        when=lambda answers: answers["medusa_db_type"] == "postgres",
    ),
]

CONFIRMATIONS: Dict[str, Confirmation] = {
    confirmation.key: confirmation
    for confirmation in [
        Confirmation("delete_existing", "Delete it and continue?", False),
        Confirmation("overwrite_backend", "Delete it and reinstall the backend?", False),
        Confirmation("database_reachable", "Is PostgreSQL running and reachable?", True),
        Confirmation("seed_data", "Add demo data (sample products)?", True),
        Confirmation("continue_without_backend", "Continue without the Medusa backend?", True),
    ]
}


def resolve_order(questions: List[Question]) -> List[Question]:
    """Topologically sort questions so dependencies are asked first

    Kahn's algorithm; among ready questions the declared order wins.

    Raises:
        KeyError: If a question depends on an undeclared field
        CircularQuestionError: If dependencies form a cycle
    """
    by_name = {question.name: question for question in questions}
    position = {question.name: index for index, question in enumerate(questions)}
    dependents = {question.name: [] for question in questions}
    in_degree = {question.name: 0 for question in questions}

    for question in questions:
        for dep in question.depends_on:
            if dep not in by_name:
                raise KeyError(f"Question '{question.name}' depends on unknown field '{dep}'")
            dependents[dep].append(question.name)
            in_degree[question.name] += 1

    ready = sorted((name for name, degree in in_degree.items() if degree == 0), key=position.get)
    result = []

    while ready:
        name = ready.pop(0)
        result.append(by_name[name])

        for dependent in dependents[name]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                ready.append(dependent)
        ready.sort(key=position.get)

    if len(result) != len(questions):
        raise CircularQuestionError("Circular dependency detected between questions")

    return result


@dataclass
class QuestionGraph:
    """Ordered question set walked phase by phase"""
    questions: List[Question] = field(default_factory=lambda: list(QUESTIONS))

    def __post_init__(self):
        self.questions = resolve_order(self.questions)

    def phase(self, phase: str) -> List[Question]:
        return [question for question in self.questions if question.phase == phase]

    def collect(self, phase: str, source: "AnswerSource", answers: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Ask every active question of a phase

        Args:
            phase: Phase to collect
            source: Where answers come from (terminal or file)
            answers: Answers from earlier phases, used for activation

        Returns:
            Copy of answers extended with this phase's fields

        Raises:
            PromptCancelled: If the user dismisses a question
        """
        collected = dict(answers or {})

        for question in self.phase(phase):
            if not question.is_active(collected):
                continue

            value = source.ask(question)
            if value is None:
                raise PromptCancelled(question.name)

            collected[question.name] = value

        return collected
