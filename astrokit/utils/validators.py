"""Prompt gatekeepers and filesystem probes

Every function here is total: it returns a boolean or a rejection
string and never raises, so it can back a prompt validator directly.
"""

import re
from pathlib import Path
from typing import Iterable, List, Optional, Union


MAX_PROJECT_NAME_LENGTH = 214

PROJECT_NAME_PATTERN = re.compile(
    r"^(?:@[a-z0-9-*~][a-z0-9-*._~]*/)?[a-z0-9-~][a-z0-9-._~]*$"
)

SEMVER_MAJOR_PATTERN = re.compile(r"^\s*v?(\d+)")

REQUIRED_PROJECT_FILES = ("package.json",)


def parse_major_version(version: str) -> Optional[int]:
    """Extract the major component of a version string like 'v20.11.1'"""
    if not isinstance(version, str):
        return None
    match = SEMVER_MAJOR_PATTERN.match(version)
    if not match:
        return None
    return int(match.group(1))


def check_toolchain_version(version: str, minimum: int) -> bool:
    """Return True when the version's major number meets the floor"""
    major = parse_major_version(version)
    return major is not None and major >= minimum


def validate_project_name(name: str) -> Union[bool, str]:
    """Check a project name against npm package-name rules
    
    Returns:
        True when valid, otherwise the reason the name was rejected
    """
    if not isinstance(name, str):
        return "Project name must be text"

    if not name.strip():
        return "Project name cannot be empty"
    
    if len(name) > MAX_PROJECT_NAME_LENGTH:
        return f"Project name is too long (max {MAX_PROJECT_NAME_LENGTH} characters)"
    
    if name.startswith(".") or name.startswith("_"):
        return "Project name cannot start with . or _"
    
    if not PROJECT_NAME_PATTERN.match(name):
        return "Project name may only contain lowercase letters, digits, hyphens and underscores"
    
    return True


def validate_not_empty(value: str) -> Union[bool, str]:
    if isinstance(value, str) and value.strip():
        return True
    return "Value cannot be empty"


def validate_http_url(value: str) -> Union[bool, str]:
    if isinstance(value, str) and value.startswith("http"):
        return True
    return "Invalid URL (must start with http:// or https://)"


def validate_postgres_url(value: str) -> Union[bool, str]:
    if isinstance(value, str) and "postgres://" in value:
        return True
    return "Invalid PostgreSQL URL (expected postgres://...)"


def path_exists(path: Union[str, Path]) -> bool:
    """Probe for existence, treating any I/O error as absent"""
    try:
        return Path(path).exists()
    except (OSError, ValueError):
        return False


def is_directory(path: Union[str, Path]) -> bool:
    """Probe for a directory, treating any I/O error as absent"""
    try:
        return Path(path).is_dir()
    except (OSError, ValueError):
        return False


def missing_project_files(
    project_dir: Union[str, Path],
    required: Iterable[str] = REQUIRED_PROJECT_FILES
) -> List[str]:
    """List required files that are absent from a generated project"""
    return [name for name in required if not path_exists(Path(project_dir) / name)]
