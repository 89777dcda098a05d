"""Template emitters: answer set in, file content out

Pure functions. Nothing here touches the filesystem; steps hand the
results to the file writer.
"""

import json
from functools import lru_cache
from typing import Any, Dict

from jinja2 import Environment, PackageLoader, StrictUndefined

from astrokit.models import AnswerSet, DatabaseType

MANIFEST_VERSION = "0.1.0"
MANIFEST_LICENSE = "MIT"

MANIFEST_SCRIPTS = {
    "dev": "astro dev",
    "build": "astro check && astro build",
    "preview": "astro preview",
    "astro": "astro",
    "check": "astro check",
    "sync": "astro sync",
}


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Shared Jinja2 environment over the packaged templates"""
    return Environment(
        loader=PackageLoader("astrokit", "templates"),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        auto_reload=False,
    )


def render_template(name: str, **context: Any) -> str:
    return get_environment().get_template(name).render(**context)


def update_manifest(manifest: Dict[str, Any], project_name: str) -> Dict[str, Any]:
    """Return a copy of package.json data with project metadata and scripts

    Scripts already defined by the generator are kept unless they are
    one of the managed entries.
    """
    updated = dict(manifest)
    updated["name"] = project_name
    updated["version"] = MANIFEST_VERSION
    updated["description"] = f"{project_name} - Astro project built with astrokit"
    updated["author"] = ""
    updated["license"] = MANIFEST_LICENSE
    updated["scripts"] = {**manifest.get("scripts", {}), **MANIFEST_SCRIPTS}
    return updated


def render_manifest(manifest: Dict[str, Any]) -> str:
    return json.dumps(manifest, indent=2) + "\n"


def render_readme(answers: AnswerSet) -> str:
    return render_template("README.md.j2", answers=answers)


def render_gitignore(answers: AnswerSet) -> str:
    backend_dir = answers.medusa.backend_dir if answers.medusa and answers.medusa.backend_dir else "backend"
    return render_template("gitignore.j2", backend_dir=backend_dir)


def render_start_script(db_type: DatabaseType) -> str:
    return render_template("start.sh.j2", postgres=db_type == DatabaseType.POSTGRES)


def render_source_stubs(answers: AnswerSet) -> Dict[str, str]:
    """Client libraries and components for the enabled integrations

    Returns:
        Mapping of project-relative path to file content
    """
    stubs = {}

    if answers.use_medusa:
        stubs["src/lib/medusa.ts"] = render_template("medusa.ts.j2")

    if answers.use_sanity:
        stubs["src/lib/sanity.ts"] = render_template("sanity.ts.j2")
        stubs["src/components/BlogCard.astro"] = render_template("BlogCard.astro.j2")

    stubs["src/components/ProductCard.astro"] = render_template(
        "ProductCard.astro.j2", has_medusa=answers.use_medusa
    )
    stubs["src/components/Header.astro"] = render_template(
        "Header.astro.j2", has_medusa=answers.use_medusa, project_name=answers.project_name
    )

    return stubs
