"""
Hierarchical configuration management.

Loads configuration from multiple sources with this precedence (highest wins):
    1. Environment variables (PREFIX_SECTION__KEY)
    2. Config file (YAML or JSON)
    3. Built-in defaults

The merged dict is validated into an immutable ``StorageSettings`` by
``Config.settings()``; nothing reads the dict after that.

Usage:
    config = Config(config_file="~/.atrest/config.yaml")
    settings = config.settings(secrets=SecretsManager([YamlFileProvider("~/.atrest/secrets.yaml")]))
    storage = create_storage(settings)
"""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from atrest.config_schema import StorageSettings
from atrest.exceptions import ConfigurationError

if TYPE_CHECKING:
    from atrest.secrets import SecretsManager

_DEFAULT_ENV_PREFIX = "ATREST_"

# Config keys that may also come from a secrets provider
SECRET_KEYS = (
    "crypto.secret",
    "crypto.salt",
    "s3.access_key_id",
    "s3.secret_access_key",
)


class Config:
    """
    Layered configuration loader.

    Env vars use double-underscore to denote nesting:
    ATREST_S3__BUCKET=backups -> config["s3"]["bucket"] = "backups"
    """

    def __init__(
        self,
        config_file: str | None = None,
        env_prefix: str = _DEFAULT_ENV_PREFIX,
        defaults: dict[str, Any] | None = None,
    ):
        """
        Args:
            config_file: Path to YAML or JSON configuration file.
            env_prefix: Prefix for environment variable overrides. Empty disables them.
            defaults: Additional default values to merge (consumer-specific).
        """
        self.config_file = os.path.expanduser(config_file) if config_file else None
        self.env_prefix = env_prefix or ""
        self._extra_defaults = defaults or {}
        self.config_data: dict[str, Any] = {}

        self._load_config()

    def _load_config(self) -> None:
        self.config_data = self._get_default_config()

        if self._extra_defaults:
            self._update_dict(self.config_data, self._extra_defaults)

        if self.config_file and os.path.exists(self.config_file):
            file_config = self._load_file(self.config_file)
            self._update_dict(self.config_data, file_config)

        self._load_from_env()

    @staticmethod
    def _get_default_config() -> dict[str, Any]:
        defaults = StorageSettings()
        return defaults.model_dump(mode="json")

    @staticmethod
    def _load_file(path: str) -> dict[str, Any]:
        """Load a YAML or JSON config file."""
        ext = os.path.splitext(path)[1].lower()
        try:
            with open(path) as f:
                if ext in (".yaml", ".yml"):
                    data = yaml.safe_load(f) or {}
                elif ext == ".json":
                    data = json.load(f)
                else:
                    raise ConfigurationError(f"Unsupported config file type: {path}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot parse config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return data

    def _update_dict(self, target: dict, source: dict) -> None:
        """Recursively merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._update_dict(target[key], value)
            else:
                target[key] = value

    def _load_from_env(self) -> None:
        if not self.env_prefix:
            return
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(self.env_prefix):
                continue
            config_key = env_key[len(self.env_prefix) :].lower()
            key_parts = config_key.split("__")
            # only sections the schema knows; other ATREST_* vars belong to someone else
            if key_parts[0] not in self.config_data:
                continue

            current = self.config_data
            for part in key_parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]
            current[key_parts[-1]] = env_value

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a config value by dot-notation path.

        Args:
            key_path: e.g. "backend", "s3.bucket"
            default: Returned when key is not found.
        """
        current = self.config_data
        for part in key_path.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def set(self, key_path: str, value: Any) -> None:
        """Set a config value by dot-notation path, creating intermediate dicts."""
        parts = key_path.split(".")
        current = self.config_data
        for part in parts[:-1]:
            if part not in current:
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    def settings(self, secrets: SecretsManager | None = None) -> StorageSettings:
        """Validate the merged configuration into ``StorageSettings``.

        Values found in ``secrets`` for SECRET_KEYS override the config data.

        Raises:
            ConfigurationError: The configuration does not validate.
        """
        if secrets is not None:
            for key_path in SECRET_KEYS:
                value = secrets.get(key_path)
                if value is not None:
                    self.set(key_path, value)

        try:
            return StorageSettings.model_validate(self.config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid storage configuration: {e}") from e
