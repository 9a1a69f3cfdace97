"""Configuration loading and validation for the average calculator."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any
from .categories import VALID_CATEGORY_IDS
from .constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_ENVIRONMENT,
    PRODUCTION_ENVIRONMENT,
    DEFAULT_WINDOW_SIZE,
    DEFAULT_FETCH_TIMEOUT_MS,
    DEFAULT_PROCESSING_WARN_MS,
    DEFAULT_ENDPOINTS,
    DEFAULT_LOG_MAX_BYTES,
    DEFAULT_LOG_BACKUP_COUNT,
)


class Config:
    """Configuration container with environment variable overrides."""

    def __init__(self, config_path: str = None, create_if_missing: bool = True):
        """
        Load configuration from YAML file with environment variable overrides.

        Configuration precedence (highest to lowest):
        1. Environment variables (AC_* prefix, plus PORT)
        2. config.local.yaml (if exists, local overrides)
        3. config.yaml (main config file)
        4. Default values

        Args:
            config_path: Path to config.yaml. If None, searches for config.yaml
                        in current directory and parent directories.
            create_if_missing: If True and config_path is None, create default config
                              if not found. If config_path is explicitly provided,
                              this is ignored (file must exist).
        """
        if config_path is None:
            config_path = self._find_config_file()
            if create_if_missing and not Path(config_path).exists():
                self._create_default_config(config_path)
        elif not Path(config_path).exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        self._raw: Dict[str, Any] = {}
        if Path(config_path).exists():
            with open(config_path, 'r') as f:
                self._raw = yaml.safe_load(f) or {}

        local_config_path = Path(config_path).parent / "config.local.yaml"
        if local_config_path.exists():
            with open(local_config_path, 'r') as f:
                self._deep_merge(self._raw, yaml.safe_load(f) or {})

        self._apply_env_overrides()
        self._validate()

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Config":
        """Build a config from an in-memory mapping, still honouring env overrides."""
        config = cls.__new__(cls)
        config._raw = {}
        config._deep_merge(config._raw, raw)
        config._apply_env_overrides()
        config._validate()
        return config

    def _find_config_file(self) -> str:
        """Find config.yaml in current directory or parents."""
        current = Path.cwd()
        for path in [current] + list(current.parents):
            config_file = path / "config.yaml"
            if config_file.exists():
                return str(config_file)
        return str(current / "config.yaml")

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Recursively merge override dict into base dict."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            elif isinstance(value, dict):
                base[key] = {}
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _create_default_config(self, path: str):
        """Create a default config.yaml file."""
        default_config = {
            "server": {
                "host": DEFAULT_HOST,
                "port": DEFAULT_PORT,
                "environment": DEFAULT_ENVIRONMENT
            },
            "window": {
                "size": DEFAULT_WINDOW_SIZE
            },
            "upstream": {
                "timeout_ms": DEFAULT_FETCH_TIMEOUT_MS,
                "endpoints": dict(DEFAULT_ENDPOINTS)
            },
            "processing": {
                "warn_ms": DEFAULT_PROCESSING_WARN_MS
            },
            "logging": {
                "level": "INFO",
                "console_level": "INFO",
                "access_log": True,
                "log_dir": "logs",
                "rotation": {
                    "max_bytes": DEFAULT_LOG_MAX_BYTES,
                    "backup_count": DEFAULT_LOG_BACKUP_COUNT,
                    "when": "midnight"
                }
            }
        }
        with open(path, 'w') as f:
            yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)

    def _apply_env_overrides(self):
        """Apply environment variable overrides using AC_ prefix."""
        # Server settings; bare PORT is honoured for container platforms
        if os.getenv("PORT"):
            self._raw.setdefault("server", {})["port"] = int(os.getenv("PORT"))
        if os.getenv("AC_PORT"):
            self._raw.setdefault("server", {})["port"] = int(os.getenv("AC_PORT"))
        if os.getenv("AC_HOST"):
            self._raw.setdefault("server", {})["host"] = os.getenv("AC_HOST")
        if os.getenv("AC_ENV"):
            self._raw.setdefault("server", {})["environment"] = os.getenv("AC_ENV")

        # Window and upstream settings
        if os.getenv("AC_WINDOW_SIZE"):
            self._raw.setdefault("window", {})["size"] = int(os.getenv("AC_WINDOW_SIZE"))
        if os.getenv("AC_FETCH_TIMEOUT_MS"):
            self._raw.setdefault("upstream", {})["timeout_ms"] = int(os.getenv("AC_FETCH_TIMEOUT_MS"))
        if os.getenv("AC_WARN_MS"):
            self._raw.setdefault("processing", {})["warn_ms"] = int(os.getenv("AC_WARN_MS"))
        for cid in VALID_CATEGORY_IDS:
            url = os.getenv(f"AC_URL_{cid.upper()}")
            if url:
                self._raw.setdefault("upstream", {}).setdefault("endpoints", {})[cid] = url

        # Logging settings
        if os.getenv("AC_LOG_DIR"):
            self._raw.setdefault("logging", {})["log_dir"] = os.getenv("AC_LOG_DIR")
        if os.getenv("AC_LOG_LEVEL"):
            self._raw.setdefault("logging", {})["level"] = os.getenv("AC_LOG_LEVEL")
        if os.getenv("AC_CONSOLE_LEVEL"):
            self._raw.setdefault("logging", {})["console_level"] = os.getenv("AC_CONSOLE_LEVEL")
        if os.getenv("AC_ACCESS_LOG"):
            self._raw.setdefault("logging", {})["access_log"] = os.getenv("AC_ACCESS_LOG").lower() == "true"

    def _validate(self):
        """Validate and normalize configuration values."""
        if self.window_size < 1:
            raise ValueError(f"window.size must be at least 1, got {self.window_size}")
        if self.fetch_timeout_ms <= 0:
            raise ValueError(f"upstream.timeout_ms must be positive, got {self.fetch_timeout_ms}")
        missing = [cid for cid in VALID_CATEGORY_IDS if not self.endpoints.get(cid)]
        if missing:
            raise ValueError(f"upstream.endpoints missing categories: {', '.join(missing)}")

    @property
    def host(self) -> str:
        return self._raw.get("server", {}).get("host", DEFAULT_HOST)

    @property
    def port(self) -> int:
        return int(self._raw.get("server", {}).get("port", DEFAULT_PORT))

    @property
    def environment(self) -> str:
        return str(self._raw.get("server", {}).get("environment", DEFAULT_ENVIRONMENT)).lower()

    @property
    def is_production(self) -> bool:
        return self.environment == PRODUCTION_ENVIRONMENT

    @property
    def window_size(self) -> int:
        return int(self._raw.get("window", {}).get("size", DEFAULT_WINDOW_SIZE))

    @property
    def fetch_timeout_ms(self) -> int:
        return int(self._raw.get("upstream", {}).get("timeout_ms", DEFAULT_FETCH_TIMEOUT_MS))

    @property
    def processing_warn_ms(self) -> int:
        return int(self._raw.get("processing", {}).get("warn_ms", DEFAULT_PROCESSING_WARN_MS))

    @property
    def endpoints(self) -> Dict[str, str]:
        """Get upstream URL per category, filling gaps with the defaults."""
        configured = self._raw.get("upstream", {}).get("endpoints", {}) or {}
        return {cid: configured.get(cid, DEFAULT_ENDPOINTS.get(cid)) for cid in VALID_CATEGORY_IDS}

    @property
    def log_level(self) -> str:
        return self._raw.get("logging", {}).get("level", "INFO")

    @property
    def log_dir(self) -> str:
        return self._raw.get("logging", {}).get("log_dir", "logs")

    @property
    def console_level(self) -> str:
        return self._raw.get("logging", {}).get("console_level", "INFO")

    @property
    def access_log(self) -> bool:
        return bool(self._raw.get("logging", {}).get("access_log", True))

    @property
    def log_rotation(self) -> Dict[str, Any]:
        """Get log rotation configuration with defaults."""
        rotation = self._raw.get("logging", {}).get("rotation", {})
        return {
            "max_bytes": rotation.get("max_bytes", DEFAULT_LOG_MAX_BYTES),
            "backup_count": rotation.get("backup_count", DEFAULT_LOG_BACKUP_COUNT),
            "when": rotation.get("when", "midnight")
        }
