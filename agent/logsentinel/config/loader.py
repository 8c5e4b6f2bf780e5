import os
from pathlib import Path
from typing import Optional
import yaml
from pydantic import ValidationError

from .schema import SentinelConfig
from .defaults import CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH

class ConfigLoader:
    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH):
        self.config_path = config_path

    def load(self) -> SentinelConfig:
        """
        Load configuration from YAML file, validation with Pydantic schema.
        Returns default config if file does not exist.
        """
        if not self.config_path.exists():
            return SentinelConfig()

        try:
            with open(self.config_path, "r") as f:
                raw_config = yaml.safe_load(f) or {}

            if not isinstance(raw_config, dict):
                raise ValueError(f"Config file {self.config_path} must contain a mapping")
            return SentinelConfig(**raw_config)
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing config file: {e}")
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e}")

def resolve_config_path(path: Optional[Path] = None) -> Path:
    """Explicit path, then $LOGSENTINEL_CONFIG, then the system default."""
    if path:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    return Path(env_path) if env_path else DEFAULT_CONFIG_PATH

def load_config(path: Optional[Path] = None) -> SentinelConfig:
    """Helper function to load config from a specific path or default."""
    loader = ConfigLoader(resolve_config_path(path))
    return loader.load()
