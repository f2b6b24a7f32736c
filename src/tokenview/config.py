"""Client configuration for tokenview."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from tokenview._constants import API_PATH, BASE_URL, FETCH_LIMIT, MAX_TOKENS, PAGE_SIZE
from tokenview.exceptions import TokenViewConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise TokenViewConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class TokenViewConfig:
    """Feed configuration.

    Parameters
    ----------
    base_url : str
        Server origin serving both the REST API and the push channel.
    api_path : str
        Path prefix of the REST API (``/api``).
    fetch_limit : int
        ``limit`` sent with every bulk fetch.
    page_size : int
        Records per display page.
    max_tokens : int
        Soft upper bound of the state store; new-token events beyond it
        evict the oldest inserted record.
    refresh_interval : float
        Seconds between periodic bulk refreshes.  ``0`` disables the
        background refresh loop.
    stream_enabled : bool
        Connect the push channel on startup.
    request_timeout : float
        Total timeout for a bulk fetch in seconds.
    """

    base_url: str = BASE_URL
    api_path: str = API_PATH
    fetch_limit: int = FETCH_LIMIT
    page_size: int = PAGE_SIZE
    max_tokens: int = MAX_TOKENS
    refresh_interval: float = 0.0
    stream_enabled: bool = True
    request_timeout: float = 10.0

    def __post_init__(self) -> None:
        if not self.base_url.strip():
            raise TokenViewConfigError("base_url must be non-empty")
        if self.fetch_limit < 1:
            raise TokenViewConfigError(f"fetch_limit must be >= 1, got {self.fetch_limit}")
        if self.page_size < 1:
            raise TokenViewConfigError(f"page_size must be >= 1, got {self.page_size}")
        if self.max_tokens < 1:
            raise TokenViewConfigError(f"max_tokens must be >= 1, got {self.max_tokens}")
        if self.refresh_interval < 0:
            raise TokenViewConfigError(f"refresh_interval must be >= 0, got {self.refresh_interval}")
        if self.request_timeout <= 0:
            raise TokenViewConfigError(f"request_timeout must be > 0, got {self.request_timeout}")

    @property
    def api_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.api_path}"

    @classmethod
    def from_env(cls, **overrides: Any) -> TokenViewConfig:
        """Create configuration from environment variables.

        Reads optional ``TOKENVIEW_*`` variables.  Explicit keyword
        arguments override environment values.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}

        for env_key, field_name in (
            ("TOKENVIEW_BASE_URL", "base_url"),
            ("TOKENVIEW_API_PATH", "api_path"),
        ):
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "TOKENVIEW_FETCH_LIMIT": ("fetch_limit", int),
            "TOKENVIEW_PAGE_SIZE": ("page_size", int),
            "TOKENVIEW_MAX_TOKENS": ("max_tokens", int),
            "TOKENVIEW_REFRESH_INTERVAL": ("refresh_interval", float),
            "TOKENVIEW_REQUEST_TIMEOUT": ("request_timeout", float),
        }
        for env_key, (field_name, cast) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        if "stream_enabled" not in overrides:
            config_kwargs["stream_enabled"] = _env_bool(env.get("TOKENVIEW_STREAM_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
