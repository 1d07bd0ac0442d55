"""Router configuration for pymagnum."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pymagnum._constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_LEVEL_COUNT,
    DEFAULT_SYNC_QUIET_PERIOD,
    MAX_LEVEL_COUNT,
)
from pymagnum.exceptions import MagnumConfigError


def _env_int(env: Mapping[str, str], key: str) -> int | None:
    value = env.get(key)
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError as exc:
        raise MagnumConfigError(f"{key} must be an integer, got {value!r}") from exc


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    value = env.get(key)
    if value is None:
        return None
    try:
        return float(value.strip())
    except ValueError as exc:
        raise MagnumConfigError(f"{key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class MagnumConfig:
    """Router connection and sizing configuration.

    Parameters
    ----------
    host : str
        Hostname or IP address of the Magnum Quartz interface.
    port : int
        TCP port of the Quartz interface.
    source_count : int
        Number of sources exposed by the router. Source ids run
        ``1..source_count``; ``0`` means "no source".
    destination_count : int
        Number of destinations exposed by the router.
    level_count : int
        Number of levels on the Quartz interface, at most 26. Typically 17
        (1 video + 16 audio channels).
    connect_timeout : float
        Seconds to wait for the TCP connection to open.
    sync_quiet_period : float
        Seconds without inbound traffic after which the initial bulk sync is
        assumed complete (see :meth:`MagnumRouter.wait_for_sync`).
    """

    host: str
    port: int
    source_count: int
    destination_count: int
    level_count: int = DEFAULT_LEVEL_COUNT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    sync_quiet_period: float = DEFAULT_SYNC_QUIET_PERIOD

    def validate(self) -> MagnumConfig:
        """Check sizes and timeouts, returning ``self`` for chaining."""
        if not self.host:
            raise MagnumConfigError("host must be non-empty")
        if not 0 < self.port < 65536:
            raise MagnumConfigError(f"port must be between 1 and 65535, got {self.port}")
        if self.source_count < 1:
            raise MagnumConfigError(f"source_count must be positive, got {self.source_count}")
        if self.destination_count < 1:
            raise MagnumConfigError(f"destination_count must be positive, got {self.destination_count}")
        if not 1 <= self.level_count <= MAX_LEVEL_COUNT:
            raise MagnumConfigError(
                f"level_count must be between 1 and {MAX_LEVEL_COUNT}, got {self.level_count}"
            )
        if self.connect_timeout <= 0:
            raise MagnumConfigError("connect_timeout must be positive")
        if self.sync_quiet_period <= 0:
            raise MagnumConfigError("sync_quiet_period must be positive")
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> MagnumConfig:
        """Create configuration from environment variables.

        Reads ``MAGNUM_HOST``, ``MAGNUM_PORT``, ``MAGNUM_SOURCE_COUNT`` and
        ``MAGNUM_DESTINATION_COUNT``, plus the optional
        ``MAGNUM_LEVEL_COUNT``, ``MAGNUM_CONNECT_TIMEOUT`` and
        ``MAGNUM_SYNC_QUIET_PERIOD``. Explicit keyword arguments override
        environment values.

        Returns
        -------
        MagnumConfig
            Populated and validated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        host = env.get("MAGNUM_HOST")
        if host is not None:
            config_kwargs["host"] = host.strip()

        _ENV_INT_MAP = {
            "MAGNUM_PORT": "port",
            "MAGNUM_SOURCE_COUNT": "source_count",
            "MAGNUM_DESTINATION_COUNT": "destination_count",
            "MAGNUM_LEVEL_COUNT": "level_count",
        }
        for env_key, field_name in _ENV_INT_MAP.items():
            if field_name in overrides:
                continue
            int_value = _env_int(env, env_key)
            if int_value is not None:
                config_kwargs[field_name] = int_value

        _ENV_FLOAT_MAP = {
            "MAGNUM_CONNECT_TIMEOUT": "connect_timeout",
            "MAGNUM_SYNC_QUIET_PERIOD": "sync_quiet_period",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            if field_name in overrides:
                continue
            float_value = _env_float(env, env_key)
            if float_value is not None:
                config_kwargs[field_name] = float_value

        config_kwargs.update(overrides)

        required = [f.name for f in dataclasses.fields(cls) if f.default is dataclasses.MISSING]
        missing = [name for name in required if name not in config_kwargs]
        if missing:
            raise MagnumConfigError(f"missing required configuration: {', '.join(missing)}")

        return cls(**config_kwargs).validate()
