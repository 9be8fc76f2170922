"""Shared application config persisted as config.json"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from oauth.errors import ConfigurationError
from oauth.models import OAuthClient
from settings import CONFIG_DIR, DEFAULT_PROFILE
from utils.storage import write_private_file

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"


class AppConfig(BaseModel):
    """Settings shared by all profiles"""
    default_profile: str = DEFAULT_PROFILE
    oauth_client: OAuthClient = Field(default_factory=OAuthClient)
    scopes: List[str] = Field(default_factory=list)


class ConfigStore:
    """Reads and writes AppConfig in the config directory"""

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        self.config_dir = Path(config_dir if config_dir else CONFIG_DIR)

    @property
    def config_path(self) -> Path:
        return self.config_dir / CONFIG_FILE_NAME

    def load(self) -> AppConfig:
        """Load config.json, returning defaults when it does not exist yet

        Raises:
            ConfigurationError: The file exists but cannot be read or parsed
        """
        path = self.config_path
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"No config at {path}, using defaults")
            return AppConfig()
        except OSError as e:
            raise ConfigurationError(f"failed to read config {path}: {e}") from e

        try:
            cfg = AppConfig.model_validate_json(raw)
        except ValidationError as e:
            raise ConfigurationError(f"failed to parse config {path}: {e}") from e

        if not cfg.default_profile.strip():
            cfg.default_profile = DEFAULT_PROFILE
        return cfg

    def save(self, cfg: AppConfig) -> None:
        """Write config.json with owner-only permissions"""
        write_private_file(self.config_path, cfg.model_dump_json(indent=2))
        logger.debug(f"Saved config to {self.config_path}")


def choose_profile(flag_value: str = "", default_profile: str = "", env_value: Optional[str] = None) -> str:
    """Resolve the active profile: flag > GCHATCTL_PROFILE > config default > "default"

    Args:
        flag_value: Value of --profile
        default_profile: default_profile from the saved config
        env_value: Override for the environment lookup (read from os.environ when None)
    """
    if env_value is None:
        env_value = os.getenv("GCHATCTL_PROFILE", "")
    for candidate in (flag_value, env_value, default_profile):
        if candidate and candidate.strip():
            return candidate.strip()
    return DEFAULT_PROFILE
