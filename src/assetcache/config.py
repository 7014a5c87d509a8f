"""Configuration: frozen Config resolved from arguments and the environment."""

from __future__ import annotations

from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version
import os

from dotenv import load_dotenv

from assetcache.errors import ConfigurationError

load_dotenv()

_TIMEOUT_ENV = "ASSETCACHE_TIMEOUT_S"
_TTL_ENV = "ASSETCACHE_CACHE_TTL_S"
_REDIRECTS_ENV = "ASSETCACHE_FOLLOW_REDIRECTS"
_USER_AGENT_ENV = "ASSETCACHE_USER_AGENT"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _package_version() -> str:
    try:
        return version("assetcache")
    except PackageNotFoundError:
        return "0.0.0+unknown"


def _env_float(name: str) -> float | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be a number, got {raw!r}",
            hint=f"Unset {name} or set it to a value like '30'.",
        ) from e


def _env_bool(name: str) -> bool | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"{name} must be a boolean, got {raw!r}",
        hint="Use one of: 1/0, true/false, yes/no, on/off.",
    )


@dataclass(frozen=True)
class Config:
    """Immutable configuration for the default transport and cache store.

    Fields left as *None* are auto-resolved from ``ASSETCACHE_*`` environment
    variables, then from built-in defaults.

    Example:
        config = Config(timeout_s=10.0)
        transport = HttpxTransport(config=config)
    """

    #: Auto-resolved from ``ASSETCACHE_TIMEOUT_S``; default 30 seconds.
    timeout_s: float | None = None
    #: Auto-resolved from ``ASSETCACHE_CACHE_TTL_S``; *None* keeps entries
    #: until the store is cleared.
    cache_ttl_seconds: float | None = None
    follow_redirects: bool | None = None
    user_agent: str | None = None

    def __post_init__(self) -> None:
        """Resolve environment overrides and validate."""
        if self.timeout_s is None:
            timeout = _env_float(_TIMEOUT_ENV)
            object.__setattr__(self, "timeout_s", 30.0 if timeout is None else timeout)
        if self.cache_ttl_seconds is None:
            object.__setattr__(self, "cache_ttl_seconds", _env_float(_TTL_ENV))
        if self.follow_redirects is None:
            redirects = _env_bool(_REDIRECTS_ENV)
            object.__setattr__(
                self, "follow_redirects", True if redirects is None else redirects
            )
        if self.user_agent is None:
            object.__setattr__(
                self,
                "user_agent",
                os.environ.get(_USER_AGENT_ENV) or f"assetcache/{_package_version()}",
            )

        if self.timeout_s is None or self.timeout_s <= 0:
            raise ConfigurationError(
                f"timeout_s must be > 0, got {self.timeout_s}",
                hint="This bounds each network fetch in seconds.",
            )
        if self.cache_ttl_seconds is not None and self.cache_ttl_seconds < 0:
            raise ConfigurationError(
                f"cache_ttl_seconds must be >= 0, got {self.cache_ttl_seconds}",
                hint="Use None to keep cached responses until the store is cleared.",
            )
        if not self.user_agent or not self.user_agent.strip():
            raise ConfigurationError(
                "user_agent must be a non-empty string",
                hint=f"Set {_USER_AGENT_ENV} or pass user_agent=...",
            )
