"""Configuration management for pipehook.

Configuration Discovery Precedence (Highest to Lowest Priority):
===============================================================

1. **PIPEHOOK_CONFIG_DIR Environment Variable** (Highest Priority)
   - Looks for: `${PIPEHOOK_CONFIG_DIR}/pipehook.yaml`
   - Use case: CI pipelines, per-project overrides

2. **Current Working Directory**
   - Looks for: `./pipehook.yaml`
   - Use case: running the compiler next to a schema project

3. **~/.pipehook Directory** (Fallback)
   - Looks for: `~/.pipehook/pipehook.yaml`
   - Use case: user-wide defaults

The first existing `pipehook.yaml` found in this order is used.
If no `pipehook.yaml` is found, default configuration is applied.

Individual settings can also be overridden with `PIPEHOOK_*` environment
variables (e.g. `PIPEHOOK_STACK_NAME=AuditHooks`).

Example pipehook.yaml:
---------------------
pipehook:
  debug: false
  stack_name: HookDirectiveStack
  api_logical_id: GraphQLAPI
"""

import logging
import os
import threading
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "pipehook.yaml"


class PipehookConfig(BaseSettings):
    """Main configuration for pipehook that reads from pipehook.yaml."""

    model_config = SettingsConfigDict(
        env_prefix="PIPEHOOK_",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False

    # Deployment group (nested stack) receiving every resource the compiler creates
    stack_name: str = "HookDirectiveStack"

    # Logical id of the GraphQL API resource owning all AppSync resources
    api_logical_id: str = "GraphQLAPI"

    # Deployment environment parameter and the condition that tests for it
    env_parameter: str = "env"
    env_condition: str = "HasEnvironmentParameter"

    # AppSync mapping template / function version
    function_version: str = "2018-05-29"

    # Service principal allowed to assume the hook execution role
    service_principal: str = "appsync.amazonaws.com"

    # Path of the file this configuration was read from
    config_path: Path | None = Field(default=None)

    @classmethod
    def from_yaml(cls, yaml_path: Path, **kwargs: Any) -> "PipehookConfig":
        """Load configuration from a pipehook.yaml file.

        Args:
            yaml_path: Path to the pipehook.yaml file
            **kwargs: Additional keyword arguments

        Returns:
            PipehookConfig instance
        """
        data: dict[str, Any] = {}
        if yaml_path.exists():
            with yaml_path.open() as f:
                raw = yaml.safe_load(f) or {}
            section = raw.get("pipehook", {})
            if isinstance(section, dict):
                data = section
            else:
                logger.warning("Invalid pipehook section in %s: %s", yaml_path, type(section).__name__)

        data.update(kwargs)
        return cls(config_path=yaml_path, **data)


# Global configuration instance
_config_instance: PipehookConfig | None = None
_config_lock = threading.Lock()


def _discover_config_path() -> Path | None:
    """Return the first existing pipehook.yaml in discovery order."""
    env_config_dir = os.environ.get("PIPEHOOK_CONFIG_DIR")
    candidates: list[Path] = []
    if env_config_dir:
        candidates.append(Path(env_config_dir) / CONFIG_FILENAME)
    candidates.append(Path.cwd() / CONFIG_FILENAME)
    candidates.append(Path.home() / ".pipehook" / CONFIG_FILENAME)

    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def get_config() -> PipehookConfig:
    """Get the configuration instance."""
    global _config_instance

    if _config_instance is None:
        with _config_lock:
            # Double-check locking pattern
            if _config_instance is None:
                config_path = _discover_config_path()
                if config_path is not None:
                    logger.info("Loading pipehook config from: %s", config_path)
                    _config_instance = PipehookConfig.from_yaml(config_path)
                else:
                    logger.debug("No pipehook.yaml found, using default config")
                    _config_instance = PipehookConfig()

                if _config_instance.debug:
                    logging.getLogger("pipehook").setLevel(logging.DEBUG)

    return _config_instance


def set_config_instance(config: PipehookConfig) -> None:
    """Set the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = config


def clear_config_instance() -> None:
    """Clear the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = None
