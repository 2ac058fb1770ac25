"""Configuration for the DevTools client.

Supports multiple configuration sources with precedence:
CLI flags > Environment variables > Config file > Defaults

Usage:
    >>> config = Configuration()
    >>> config.load_from_file("~/.devtoolsrc")
    >>> config.load_from_env()
    >>> config.merge(timeout=5.0)  # CLI overrides
    >>> print(config.websocket_url)
    ws://127.0.0.1:9222/devtools/browser
"""

import os
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "~/.devtoolsrc"


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _parse_optional_float(value: str):
    if value.strip().lower() in ("", "none"):
        return None
    return float(value)


class Configuration:
    """Configuration manager with layered precedence.

    Precedence order (highest to lowest):
    1. CLI arguments (via merge method)
    2. Environment variables (CHROME_DEVTOOLS_URL, CDP_* prefix)
    3. Config file (~/.devtoolsrc JSON)
    4. Default values

    Attributes:
        websocket_url: Browser WebSocket debugger URL
        timeout: WebSocket connect timeout in seconds (default: 15.0)
        max_size: Maximum WebSocket message size in bytes (default: 2MB)
        load_timeout: Seconds to wait for Page.loadEventFired (None = forever)
        strict_protocol: Raise on unmatched/malformed messages instead of dropping
        log_level: Logging level (default: "INFO")
        log_format: Log output format "text" or "json" (default: "text")
    """

    DEFAULTS = {
        "websocket_url": "ws://127.0.0.1:9222/devtools/browser",
        "timeout": 15.0,
        "max_size": 2_097_152,  # 2MB
        "load_timeout": None,
        "strict_protocol": False,
        "log_level": "INFO",
        "log_format": "text",
    }

    ENV_MAPPINGS = {
        "CHROME_DEVTOOLS_URL": ("websocket_url", str),
        "CDP_TIMEOUT": ("timeout", float),
        "CDP_MAX_SIZE": ("max_size", int),
        "CDP_LOAD_TIMEOUT": ("load_timeout", _parse_optional_float),
        "CDP_STRICT_PROTOCOL": ("strict_protocol", _parse_bool),
        "CDP_LOG_LEVEL": ("log_level", str),
        "CDP_LOG_FORMAT": ("log_format", str),
    }

    def __init__(self):
        for key, value in self.DEFAULTS.items():
            setattr(self, key, value)

    def load_from_file(self, file_path: str = DEFAULT_CONFIG_FILE) -> None:
        """Load configuration from a JSON file.

        Note:
            Invalid JSON or missing file is ignored with a log line.
            Partial configs are merged with existing values.
        """
        path = Path(file_path).expanduser()

        if not path.exists():
            logger.debug(f"Config file not found: {path}")
            return

        try:
            with open(path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON in config file {path}: {e}")
            return
        except OSError as e:
            logger.warning(f"Error loading config file {path}: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Config file {path} must contain a JSON object")
            return

        self._merge_dict(data)
        logger.info(f"Loaded configuration from {path}")

    def load_from_env(self) -> None:
        """Load configuration from environment variables.

        Invalid values are ignored with a warning log.
        """
        for env_var, (attr_name, type_converter) in self.ENV_MAPPINGS.items():
            value = os.getenv(env_var)
            if value is None:
                continue
            try:
                converted_value = type_converter(value)
            except (ValueError, TypeError) as e:
                logger.warning(f"Invalid value for {env_var}: {value} ({e})")
                continue
            setattr(self, attr_name, converted_value)
            logger.debug(f"Loaded {attr_name}={converted_value} from {env_var}")

    def merge(self, **kwargs) -> None:
        """Merge CLI arguments into configuration (highest precedence).

        None values are skipped so unset flags do not clobber lower layers.
        """
        self._merge_dict(kwargs)

    def _merge_dict(self, data: dict) -> None:
        for key, value in data.items():
            if key in self.DEFAULTS and value is not None:
                setattr(self, key, value)
                logger.debug(f"Set {key}={value}")
            elif key not in self.DEFAULTS:
                logger.debug(f"Ignoring unknown config key: {key}")

    def to_dict(self) -> dict:
        return {key: getattr(self, key) for key in self.DEFAULTS}

    def __repr__(self) -> str:
        return f"Configuration({self.to_dict()})"
