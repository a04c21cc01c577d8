"""
Configuration loader for the Polymarket gateway.

Looks for config.yaml in this order:
1. Explicit path passed to Config
2. Environment variable CONFIG_PATH
3. ./config.yaml (local development)
4. Falls back to default config

Environment variables (POLYMARKET_API_URL, POLYMARKET_API_TIMEOUT in
milliseconds, POLYMARKET_CACHE_TTL, POLYMARKET_CACHE_ENABLED, ...) take
precedence over the file.
"""

import os
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml

from .errors import ConfigurationError

DEFAULT_CONFIG: dict[str, Any] = {
    "gateway": {
        "gamma_api_url": "https://gamma-api.polymarket.com",
        "data_api_url": "https://data-api.polymarket.com",
        "bridge_api_url": "https://bridge.polymarket.com",
        "request_timeout_seconds": 10,
        "server": {"host": "0.0.0.0", "port": 8002},
        "cache": {
            "enabled": True,
            "max_entries": 500,
            "default_ttl_seconds": 60,
            "extended_ttl_seconds": 300,
            "builders_leaderboard_ttl_seconds": 300,
            "builders_volume_ttl_seconds": 600,
        },
    }
}


class Config:
    def __init__(self, config_path: str | None = None, data: dict[str, Any] | None = None):
        if config_path:
            self.config_path = Path(config_path)
        elif os.getenv("CONFIG_PATH"):
            self.config_path = Path(os.environ["CONFIG_PATH"])
        elif Path("./config.yaml").exists():
            self.config_path = Path("./config.yaml")
        else:
            self.config_path = None

        # Tests hand in a dict directly instead of writing YAML to disk.
        self._config = data if data is not None else self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """
        Load configuration from the YAML file.

        Returns the default config if the file is missing or unreadable.
        """
        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, encoding="utf-8") as f:
                    config_data = yaml.safe_load(f) or {}
                    print(f"✓ Loaded config from: {self.config_path}")
                    return config_data
            except (OSError, yaml.YAMLError) as e:
                print(f"✗ Error loading config from {self.config_path}: {e}")
        elif self.config_path:
            print(f"⚠ Config file not found, using defaults. Tried: {self.config_path}")

        return DEFAULT_CONFIG

    def _section(self, *path: str) -> dict[str, Any]:
        node: Any = self._config.get("gateway", {})
        for name in path:
            node = node.get(name, {}) if isinstance(node, dict) else {}
        return node if isinstance(node, dict) else {}

    def _default(self, *path: str) -> Any:
        node: Any = DEFAULT_CONFIG["gateway"]
        for name in path:
            node = node[name]
        return node

    # =========================================================================
    # Upstream APIs
    # =========================================================================

    @property
    def gamma_api_url(self) -> str:
        env_url = os.getenv("POLYMARKET_API_URL")
        if env_url:
            return env_url
        return self._section().get("gamma_api_url", self._default("gamma_api_url"))

    @property
    def data_api_url(self) -> str:
        env_url = os.getenv("POLYMARKET_DATA_API_URL")
        if env_url:
            return env_url
        return self._section().get("data_api_url", self._default("data_api_url"))

    @property
    def bridge_api_url(self) -> str:
        env_url = os.getenv("POLYMARKET_BRIDGE_API_URL")
        if env_url:
            return env_url
        return self._section().get("bridge_api_url", self._default("bridge_api_url"))

    @property
    def request_timeout(self) -> float:
        """Upstream request timeout in seconds (env value is in milliseconds)."""
        env_timeout = os.getenv("POLYMARKET_API_TIMEOUT")
        if env_timeout:
            return _parse_int(env_timeout, "POLYMARKET_API_TIMEOUT") / 1000
        return self._section().get(
            "request_timeout_seconds", self._default("request_timeout_seconds")
        )

    # =========================================================================
    # Server
    # =========================================================================

    @property
    def server_host(self) -> str:
        return self._section("server").get("host", self._default("server", "host"))

    @property
    def server_port(self) -> int:
        return self._section("server").get("port", self._default("server", "port"))

    # =========================================================================
    # Cache
    # =========================================================================

    @property
    def cache_enabled(self) -> bool:
        env_enabled = os.getenv("POLYMARKET_CACHE_ENABLED")
        if env_enabled is not None:
            return env_enabled.strip().lower() == "true"
        return self._section("cache").get("enabled", self._default("cache", "enabled"))

    @property
    def cache_ttl(self) -> float:
        """Default TTL in seconds for list and entity lookups."""
        env_ttl = os.getenv("POLYMARKET_CACHE_TTL")
        if env_ttl:
            return _parse_int(env_ttl, "POLYMARKET_CACHE_TTL")
        return self._section("cache").get(
            "default_ttl_seconds", self._default("cache", "default_ttl_seconds")
        )

    @property
    def cache_max_entries(self) -> int:
        return self._section("cache").get(
            "max_entries", self._default("cache", "max_entries")
        )

    @property
    def extended_cache_ttl(self) -> float:
        """TTL for rarely changing data such as bridge supported assets."""
        return self._section("cache").get(
            "extended_ttl_seconds", self._default("cache", "extended_ttl_seconds")
        )

    @property
    def builders_leaderboard_ttl(self) -> float:
        return self._section("cache").get(
            "builders_leaderboard_ttl_seconds",
            self._default("cache", "builders_leaderboard_ttl_seconds"),
        )

    @property
    def builders_volume_ttl(self) -> float:
        return self._section("cache").get(
            "builders_volume_ttl_seconds",
            self._default("cache", "builders_volume_ttl_seconds"),
        )

    def validate(self) -> "Config":
        """
        Check every value the gateway depends on.

        Raises:
            ConfigurationError: On the first invalid value found
        """
        for name in ("gamma_api_url", "data_api_url", "bridge_api_url"):
            if not _is_valid_url(getattr(self, name)):
                raise ConfigurationError(f"{name} must be a valid http(s) URL")

        if not isinstance(self.request_timeout, (int, float)) or self.request_timeout <= 0:
            raise ConfigurationError("request timeout must be a positive number")

        for name in ("cache_ttl", "extended_cache_ttl", "builders_leaderboard_ttl", "builders_volume_ttl"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or value < 0:
                raise ConfigurationError(f"{name} must be a non-negative number")

        if not isinstance(self.cache_max_entries, int) or self.cache_max_entries <= 0:
            raise ConfigurationError("cache max_entries must be a positive integer")

        if not isinstance(self.cache_enabled, bool):
            raise ConfigurationError("cache enabled must be a boolean")

        return self


def _is_valid_url(url: Any) -> bool:
    if not url or not isinstance(url, str):
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _parse_int(raw: str, name: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


# Global config singleton used across the gateway
config = Config()
