"""Answer set model shared by every step of a run"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from astrokit.utils.validators import validate_project_name


class Template(str, Enum):
    BLOG = "blog"
    PORTFOLIO = "portfolio"
    MINIMAL = "minimal"


class Framework(str, Enum):
    NONE = "none"
    REACT = "react"
    VUE = "vue"
    SVELTE = "svelte"
    SOLID = "solid"


class Deployment(str, Enum):
    NONE = "none"
    NODEJS = "nodejs"
    NETLIFY = "netlify"
    VERCEL = "vercel"


class MedusaSetup(str, Enum):
    FULL = "full"
    EXISTING = "existing"
    CLIENT_ONLY = "client-only"


class DatabaseType(str, Enum):
    POSTGRES = "postgres"
    SQLITE = "sqlite"


DEFAULT_MEDUSA_URL = "http://localhost:9000"


class MedusaOptions(BaseModel):
    """E-commerce sub-answers, present only when the integration is enabled"""
    model_config = ConfigDict(frozen=True)

    setup: MedusaSetup
    backend_url: str = DEFAULT_MEDUSA_URL
    backend_dir: Optional[str] = None
    db_type: Optional[DatabaseType] = None
    db_url: Optional[str] = None

    @model_validator(mode="after")
    def check_full_install(self):
        if self.setup == MedusaSetup.FULL:
            if not self.backend_dir:
                raise ValueError("backend_dir is required for a full backend install")
            if self.db_type is None:
                raise ValueError("db_type is required for a full backend install")
            if self.db_type == DatabaseType.POSTGRES and not self.db_url:
                raise ValueError("db_url is required for a PostgreSQL backend")
        return self


class AnswerSet(BaseModel):
    """Resolved user configuration, immutable once collected"""
    model_config = ConfigDict(frozen=True)

    project_name: str
    template: Template = Template.BLOG
    framework: Framework = Framework.NONE
    use_tailwind: bool = True
    use_sanity: bool = False
    use_medusa: bool = False
    deployment: Deployment = Deployment.NONE
    medusa: Optional[MedusaOptions] = None

    @field_validator("project_name")
    @classmethod
    def check_project_name(cls, value: str) -> str:
        verdict = validate_project_name(value)
        if verdict is not True:
            raise ValueError(verdict)
        return value

    @model_validator(mode="after")
    def check_medusa(self):
        if self.use_medusa and self.medusa is None:
            raise ValueError("medusa options are required when use_medusa is enabled")
        if not self.use_medusa and self.medusa is not None:
            raise ValueError("medusa options given but use_medusa is disabled")
        return self

    @classmethod
    def from_answers(cls, answers: Dict[str, Any]) -> "AnswerSet":
        """Build from flat prompt answers keyed by question name"""
        medusa = None
        if answers.get("use_medusa"):
            medusa = MedusaOptions(
                setup=answers["medusa_setup"],
                backend_url=answers.get("medusa_backend_url") or DEFAULT_MEDUSA_URL,
                backend_dir=answers.get("medusa_backend_dir"),
                db_type=answers.get("medusa_db_type"),
                db_url=answers.get("medusa_db_url"),
            )

        return cls(
            project_name=answers["project_name"],
            template=answers.get("template", Template.BLOG),
            framework=answers.get("framework", Framework.NONE),
            use_tailwind=answers.get("use_tailwind", True),
            use_sanity=answers.get("use_sanity", False),
            use_medusa=bool(answers.get("use_medusa", False)),
            deployment=answers.get("deployment", Deployment.NONE),
            medusa=medusa,
        )
