"""Configuration loader with environment variable substitution."""

import os
import yaml
from dotenv import find_dotenv, load_dotenv
from pathlib import Path
from typing import Dict, Any, Optional
import logging
import re

from ..errors import ConfigError

logger = logging.getLogger(__name__)

# ${VAR_NAME} or ${VAR_NAME:default_value}
ENV_PATTERN = re.compile(r'\$\{([A-Z_][A-Z0-9_]*?)(?::([^}]*))?\}')

# Keys that must be positive numbers when present, per section
_POSITIVE_KEYS = {
    'http': ['timeout', 'connect_timeout', 'max_connections', 'max_keepalive_connections'],
    'retry': ['initial_delay', 'max_delay', 'backoff_factor'],
    'rate_limit': ['requests', 'per_seconds'],
    'cache': ['ttl_seconds', 'max_entries'],
}


class ConfigLoader:
    """Load and validate configuration from YAML file."""

    def __init__(self, config_path: str = "config/config.yaml",
                 env_file: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to configuration YAML file
            env_file: .env file to load before substitution (searched
                upwards from the working directory when omitted)
        """
        self.config_path = Path(config_path)
        self.env_file = env_file

    def load(self) -> Dict[str, Any]:
        """Load configuration with environment variable substitution.

        Returns:
            Configuration dictionary

        Raises:
            ConfigError: If the file is missing, not valid YAML, or fails validation
        """
        if not self.config_path.exists():
            example_path = Path(str(self.config_path) + ".example")
            if example_path.exists():
                logger.warning(
                    f"Config file not found: {self.config_path}. "
                    f"Using example: {example_path}"
                )
                self.config_path = example_path
            else:
                raise ConfigError(f"Configuration file not found: {self.config_path}")

        # Existing environment variables win over .env entries
        load_dotenv(self.env_file or find_dotenv(usecwd=True), override=False)

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration root must be a mapping: {self.config_path}")

        config = self._substitute_env_vars(config)
        self._validate(config)

        logger.info(f"Configuration loaded from: {self.config_path}")
        return config

    def _substitute_env_vars(self, config: Any) -> Any:
        """Recursively substitute ${VAR} / ${VAR:default} patterns."""
        if isinstance(config, dict):
            return {k: self._substitute_env_vars(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [self._substitute_env_vars(item) for item in config]
        elif isinstance(config, str):
            return self._substitute_string(config)
        else:
            return config

    def _substitute_string(self, value: str) -> str:
        def replace(match):
            var_name = match.group(1)
            default = match.group(2) if match.group(2) is not None else ""

            env_value = os.getenv(var_name)

            if env_value is None:
                if default:
                    logger.debug(
                        f"Environment variable {var_name} not set, "
                        f"using default: {default}"
                    )
                    return default
                else:
                    logger.warning(
                        f"Environment variable {var_name} not set and no default provided"
                    )
                    return match.group(0)

            return env_value

        return ENV_PATTERN.sub(replace, value)

    def _validate(self, config: Dict) -> None:
        """Validate configuration sections.

        Raises:
            ConfigError: If the http section is missing or a limit is not positive
        """
        if 'http' not in config:
            raise ConfigError("Missing required config section: http")

        for section, keys in _POSITIVE_KEYS.items():
            values = config.get(section) or {}
            if not isinstance(values, dict):
                raise ConfigError(f"Config section '{section}' must be a mapping")
            for key in keys:
                if key not in values:
                    continue
                value = values[key]
                if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                    raise ConfigError(f"{section}.{key} must be a positive number, got {value!r}")

        retry = config.get('retry') or {}
        max_retries = retry.get('max_retries', 0)
        if isinstance(max_retries, bool) or not isinstance(max_retries, int) or max_retries < 0:
            raise ConfigError(f"retry.max_retries must be a non-negative integer, got {max_retries!r}")

        # Credentials left as unresolved placeholders are treated as absent
        for backend, creds in (config.get('credentials') or {}).items():
            creds = creds or {}
            api_key = creds.get('api_key') or ''
            if not api_key or '${' in str(api_key):
                logger.warning(
                    f"{backend} API credentials not configured. "
                    "Requests will be sent anonymously."
                )

        logger.debug("Configuration validation passed")


def load_config(config_path: str = "config/config.yaml") -> Dict[str, Any]:
    """Convenience function to load configuration.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    loader = ConfigLoader(config_path)
    return loader.load()


def get_credentials(config: Dict[str, Any], backend: str) -> Optional[Dict[str, str]]:
    """Return ``{'api_key', 'user_id'}`` for a backend, or None if unset.

    Values still holding an unresolved ``${VAR}`` placeholder count as unset.
    """
    creds = (config.get('credentials') or {}).get(backend) or {}
    api_key = creds.get('api_key')
    user_id = creds.get('user_id')
    if not api_key or not user_id:
        return None
    if '${' in str(api_key) or '${' in str(user_id):
        return None
    return {'api_key': str(api_key), 'user_id': str(user_id)}
