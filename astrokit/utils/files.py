"""Scoped file writes with optional backup copies"""

import logging
import shutil
from pathlib import Path
from typing import Dict, List, Union

from astrokit.exceptions import ConfigError
from astrokit.utils.validators import path_exists

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


def ensure_dir(path: Union[str, Path]) -> Path:
    """Create a directory and its parents (no-op when it exists)"""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_write_file(path: Union[str, Path], content: str, backup: bool = True) -> bool:
    """Write a file's full content in a single call
    
    When backup is set and the file exists, the current content is copied
    to '<path>.backup' first. A failed backup aborts the write. A failed
    write after a successful backup leaves the backup in place.
    
    Args:
        path: Destination file
        content: Complete new content
        backup: Preserve the previous version before overwriting
    
    Returns:
        True on success
    
    Raises:
        ConfigError: If the backup or the write fails
    """
    path = Path(path)
    
    if backup and path_exists(path):
        backup_path = path.with_name(path.name + BACKUP_SUFFIX)
        try:
            shutil.copyfile(path, backup_path)
        except OSError as e:
            raise ConfigError(
                f"Could not back up {path}",
                {"path": str(path), "error": str(e)}
            )
        logger.info("Backup created: %s", backup_path)
    
    try:
        ensure_dir(path.parent)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            f"Could not write {path}",
            {"path": str(path), "error": str(e)}
        )
    
    return True


def read_file_if_exists(path: Union[str, Path]) -> str:
    """Return file content, or an empty string when unreadable"""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return ""


def remove_tree(path: Union[str, Path]):
    """Delete a directory tree, raising ConfigError if it cannot be removed"""
    path = Path(path)
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return
    except OSError as e:
        raise ConfigError(
            f"Could not remove {path}",
            {"path": str(path), "error": str(e)}
        )


def append_env_vars(env_path: Union[str, Path], values: Dict[str, str], header: str = None) -> List[str]:
    """Append KEY=value lines for keys the file does not define yet
    
    Existing values are never overwritten, so calling this twice is a no-op.
    
    Args:
        env_path: Path to the .env file (created when missing)
        values: Keys and values to add, in order
        header: Optional comment line written above the new block
    
    Returns:
        Keys that were appended
    """
    content = read_file_if_exists(env_path)
    defined = set()
    for line in content.splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            defined.add(line.split("=", 1)[0].strip())
    
    added = [key for key in values if key not in defined]
    if not added:
        return []
    
    block = []
    if content and not content.endswith("\n"):
        block.append("")
    block.append("")
    if header:
        block.append(f"# {header}")
    block.extend(f"{key}={values[key]}" for key in added)
    
    safe_write_file(env_path, content + "\n".join(block) + "\n", backup=False)
    return added
