"""Runtime settings with file and environment overrides"""

import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from astrokit.exceptions import ConfigError


DEFAULT_CONFIG_PATH = Path.home() / ".astrokit" / "config.yaml"

# Environment variable -> Settings field
ENV_OVERRIDES = {
    "ASTROKIT_COMMAND_TIMEOUT": "command_timeout",
    "ASTROKIT_MIN_NODE_VERSION": "min_node_version",
    "ASTROKIT_RETRY_ATTEMPTS": "retry_attempts",
}


class Settings(BaseModel):
    """Process-wide tunables for a scaffolding run"""
    
    min_node_version: int = Field(18, ge=1)
    command_timeout: float = Field(300, gt=0)
    retry_attempts: int = Field(2, ge=0)
    retry_delay: float = Field(1.0, ge=0)
    supported_platforms: List[str] = ["nodejs", "netlify", "vercel"]
    log_dir: Optional[Path] = Path.home() / ".astrokit" / "logs"


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from defaults, config file and environment
    
    Args:
        config_path: Explicit settings file (falls back to $ASTROKIT_CONFIG,
            then ~/.astrokit/config.yaml)
    
    Returns:
        Validated Settings
    
    Raises:
        ConfigError: If the file cannot be parsed or a value is invalid
    """
    if config_path is None:
        env_path = os.getenv("ASTROKIT_CONFIG")
        config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
    
    data = {}
    source = "defaults"
    
    if config_path.exists():
        source = str(config_path)
        try:
            data = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid settings file: {config_path}",
                {"error": str(e)}
            )
        if not isinstance(data, dict):
            raise ConfigError(
                f"Settings file must contain a mapping: {config_path}",
                {"found": type(data).__name__}
            )
    
    for env_var, field_name in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            data[field_name] = value
            source = f"{source} + {env_var}"
    
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(
            "Invalid astrokit settings",
            {"source": source, "errors": [err["msg"] for err in e.errors()]},
            help_text=f"Fix the values in {config_path} or the ASTROKIT_* environment variables"
        )
