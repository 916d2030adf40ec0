"""failure_core configuration from YAML file.

Settings live under a single ``failure_core`` section:

    failure_core:
      logging:
        level: INFO
        json: true
        log_dir: ${FAILURE_CORE_LOG_DIR:-}
      redaction:
        extra_sensitive_keys: [ssn, iban]
        mask_phone_numbers: false
      classification:
        max_message_length: 500

Environment variables ARE supported using ${VAR_NAME} syntax in YAML files.
FAILURE_CORE_LOG_LEVEL and FAILURE_CORE_JSON_LOGS override the file.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from failure_core.errors.exceptions import ConfigurationError
from failure_core.redaction.redactor import Redactor

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_CONFIG_FILE = Path("config") / "failure_core.yaml"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-(([^}]*))?)?\}")


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return _ENV_VAR_PATTERN.sub(replacer, data)
    else:
        return data


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class FailureCoreConfig:
    """failure_core configuration.

    All fields have defaults, so an empty or missing file yields a working
    configuration.
    """

    # =========================================================================
    # LOGGING
    # =========================================================================
    log_level: str = "INFO"
    json_logs: bool = True
    log_dir: Optional[str] = None

    # =========================================================================
    # REDACTION
    # =========================================================================
    extra_sensitive_keys: List[str] = field(default_factory=list)
    mask_phone_numbers: bool = False

    # =========================================================================
    # CLASSIFICATION
    # =========================================================================
    max_message_length: int = 500

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If any value is out of range
        """
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"logging.level must be one of {VALID_LOG_LEVELS}, got '{self.log_level}'"
            )

        if self.max_message_length < 1:
            raise ConfigurationError(
                f"classification.max_message_length must be >= 1, got {self.max_message_length}"
            )

        for key in self.extra_sensitive_keys:
            if not isinstance(key, str) or not key.strip():
                raise ConfigurationError(
                    f"redaction.extra_sensitive_keys entries must be non-empty strings, got {key!r}"
                )

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level.upper())


def load_config(config_path: Optional[Path] = None) -> FailureCoreConfig:
    """Load failure_core configuration from YAML with environment overrides.

    Args:
        config_path: Path to YAML file (default: config/failure_core.yaml)

    Returns:
        Validated FailureCoreConfig

    Raises:
        ConfigurationError: If the file cannot be parsed or values are invalid
    """
    config_path = config_path or DEFAULT_CONFIG_FILE
    logger.debug(f"Loading configuration from {config_path}")

    try:
        raw = load_yaml(config_path)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {config_path}", cause=e) from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at the top level")

    section = _expand_env_vars(raw.get("failure_core", raw)) or {}
    logging_section = section.get("logging", {}) or {}
    redaction_section = section.get("redaction", {}) or {}
    classification_section = section.get("classification", {}) or {}

    log_dir = os.getenv("FAILURE_CORE_LOG_DIR") or logging_section.get("log_dir") or None

    extra_keys = redaction_section.get("extra_sensitive_keys", []) or []
    if isinstance(extra_keys, str):
        extra_keys = [extra_keys]

    try:
        config = FailureCoreConfig(
            log_level=str(
                os.getenv("FAILURE_CORE_LOG_LEVEL") or logging_section.get("level", "INFO")
            ).upper(),
            json_logs=_parse_bool(
                os.getenv("FAILURE_CORE_JSON_LOGS", logging_section.get("json", True))
            ),
            log_dir=log_dir,
            extra_sensitive_keys=list(extra_keys),
            mask_phone_numbers=_parse_bool(redaction_section.get("mask_phone_numbers", False)),
            max_message_length=int(classification_section.get("max_message_length", 500)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}", cause=e) from e

    config.validate()
    logger.debug("Configuration validation passed")

    return config


def build_redactor(config: FailureCoreConfig) -> Redactor:
    """Create a Redactor honouring the configured extra keys and phone masking."""
    return Redactor(
        extra_patterns=config.extra_sensitive_keys,
        mask_phone_numbers=config.mask_phone_numbers,
    )


_config: Optional[FailureCoreConfig] = None


def get_config() -> FailureCoreConfig:
    """Get or load the singleton config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: FailureCoreConfig) -> None:
    """Set the singleton config instance (useful for testing)."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the singleton config instance (forces reload on next get_config() call)."""
    global _config
    _config = None


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "FailureCoreConfig",
    "build_redactor",
    "get_config",
    "load_config",
    "load_yaml",
    "reset_config",
    "set_config",
]
