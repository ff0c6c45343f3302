"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and an optional
YAML configuration file (~/.interviewer/config.yaml), and builds the
validated `AIConfig` used by the clients.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from interviewer.domain.models.config import AIConfig

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".interviewer"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, None: 1.0}

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Turns nested YAML sections into dotted keys ({'ai': {'x': 1}} -> {'ai.x': 1})."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{full_key}."))
        else:
            flat[full_key] = value
    return flat


def load_configuration(
    config_file: Path = DEFAULT_CONFIG_FILE,
    env_file: Optional[Path] = None,
    force: bool = False,
) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. YAML file (lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
        else:
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a mapping.")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. .env file; override=False so real environment variables win
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug(".env file not found at or above current directory.")

    # 3. Environment variables are read on demand in get_config
    _loaded = True


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd, *cwd.parents]:
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


def _coerce(value: str) -> Any:
    lowered = value.lower()
    if lowered == 'true':
        return True
    if lowered == 'false':
        return False
    try:
        return float(value) if '.' in value else int(value)
    except ValueError:
        return value


def get_config(key: str, default: Any = None) -> Any:
    """Get a configuration value by key.

    Priority:
    1. Test configuration (set via set_config_for_testing)
    2. Environment variable (key upper-cased, dots become underscores)
    3. YAML config
    4. Default value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = key.upper().replace('.', '_')
    if env_key in os.environ:
        return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    return default


def _lookup(env_key: str, yaml_key: str, default: Any) -> Any:
    value = get_config(env_key)
    if value is None or value == "":
        value = get_config(yaml_key)
    return default if value is None or value == "" else value


def _as_int(env_key: str, yaml_key: str, default: int) -> int:
    value = _lookup(env_key, yaml_key, default)
    if isinstance(value, bool):
        logger.warning(f"Invalid integer for {env_key}: {value!r}. Using default {default}.")
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid integer for {env_key}: {value!r}. Using default {default}.")
        return default


def _as_float(env_key: str, yaml_key: str, default: float) -> float:
    value = _lookup(env_key, yaml_key, default)
    if isinstance(value, bool):
        logger.warning(f"Invalid number for {env_key}: {value!r}. Using default {default}.")
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid number for {env_key}: {value!r}. Using default {default}.")
        return default


def _as_bool(env_key: str, yaml_key: str, default: bool) -> bool:
    value = _lookup(env_key, yaml_key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("1", "yes", "on"):
        return True
    if isinstance(value, str) and value.lower() in ("0", "no", "off"):
        return False
    if isinstance(value, int):
        return value != 0
    logger.warning(f"Invalid boolean for {env_key}: {value!r}. Using default {default}.")
    return default


def _as_str(env_key: str, yaml_key: str, default: str) -> str:
    return str(_lookup(env_key, yaml_key, default))


def parse_duration(value: Any) -> float:
    """Parses '60', '60s', '2m', '500ms' or '1h' into seconds.

    Raises:
        ValueError: If the value is not a recognised duration.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    match = _DURATION_PATTERN.match(str(value))
    if not match:
        raise ValueError(f"invalid duration: {value!r}")
    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit]


def _as_duration(env_key: str, yaml_key: str, default: float) -> float:
    value = _lookup(env_key, yaml_key, default)
    try:
        return parse_duration(value)
    except ValueError:
        logger.warning(f"Invalid duration for {env_key}: {value!r}. Using default {default}s.")
        return default


def load_ai_config(validate: bool = True) -> AIConfig:
    """Builds the AIConfig from environment, .env and YAML settings.

    Args:
        validate: Run AIConfig.validate() before returning.

    Raises:
        ConfigurationError: If validation is requested and fails.
    """
    load_configuration()
    defaults = AIConfig()

    config = AIConfig(
        openai_api_key=_as_str("OPENAI_API_KEY", "openai.api_key", defaults.openai_api_key),
        gemini_api_key=_as_str("GEMINI_API_KEY", "gemini.api_key", defaults.gemini_api_key),
        openai_base_url=_as_str("OPENAI_BASE_URL", "openai.base_url", defaults.openai_base_url),
        gemini_base_url=_as_str("GEMINI_BASE_URL", "gemini.base_url", defaults.gemini_base_url),
        default_provider=_as_str("AI_DEFAULT_PROVIDER", "ai.default_provider", defaults.default_provider),
        default_model=_as_str("AI_DEFAULT_MODEL", "ai.default_model", defaults.default_model),
        max_retries=_as_int("AI_MAX_RETRIES", "ai.max_retries", defaults.max_retries),
        request_timeout=_as_duration("AI_REQUEST_TIMEOUT", "ai.request_timeout", defaults.request_timeout),
        default_max_tokens=_as_int("AI_DEFAULT_MAX_TOKENS", "ai.default_max_tokens", defaults.default_max_tokens),
        default_temperature=_as_float("AI_DEFAULT_TEMPERATURE", "ai.default_temperature", defaults.default_temperature),
        enable_caching=_as_bool("AI_ENABLE_CACHING", "ai.enable_caching", defaults.enable_caching),
        enable_metrics=_as_bool("AI_ENABLE_METRICS", "ai.enable_metrics", defaults.enable_metrics),
        enable_streaming=_as_bool("AI_ENABLE_STREAMING", "ai.enable_streaming", defaults.enable_streaming),
        rate_limit_rpm=_as_int("AI_RATE_LIMIT_RPM", "ai.rate_limit_rpm", defaults.rate_limit_rpm),
        rate_limit_tpm=_as_int("AI_RATE_LIMIT_TPM", "ai.rate_limit_tpm", defaults.rate_limit_tpm),
        daily_token_limit=_as_int("AI_DAILY_TOKEN_LIMIT", "ai.daily_token_limit", defaults.daily_token_limit),
        cost_per_token=_as_float("AI_COST_PER_TOKEN", "ai.cost_per_token", defaults.cost_per_token),
        max_cost_per_day=_as_float("AI_MAX_COST_PER_DAY", "ai.max_cost_per_day", defaults.max_cost_per_day),
    )

    if validate:
        config.validate()
    logger.debug(
        f"AI config loaded: provider={config.default_provider}, model={config.default_model}, "
        f"openai_key={'set' if config.openai_api_key else 'unset'}, "
        f"gemini_key={'set' if config.gemini_api_key else 'unset'}"
    )
    return config


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """Overrides configuration values for tests. Takes priority over everything."""
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration keys: {sorted(config_dict)}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
