"""Service settings read from the process environment."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field, fields
from typing import Any, Mapping

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_OCTAL = re.compile(r"[+-]?0[0-7_]+")


def _parse_int(key: str, raw: str) -> int:
    """Parse an integer the way the environment loader always has: base by prefix."""
    try:
        value = int(raw, 0)
    except ValueError:
        if not _OCTAL.fullmatch(raw):
            raise ValueError(f"{key}: cannot convert {raw!r} to int") from None
        value = int(raw.replace("_", ""), 8)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"{key}: value {raw!r} out of range")
    return value


def _int_setting(default: int, env: str | None = None) -> Any:
    metadata: dict[str, Any] = {"integer": True}
    if env is not None:
        metadata["env"] = env
    return field(default=default, metadata=metadata)


@dataclass(frozen=True)
class Config:
    """Ports and database settings of the billing service.

    Each setting is read from the environment variable named like the field in
    upper case, unless the field names another variable explicitly.
    """

    grpc_port: str = "9090"
    rest_port: str = "80"
    postgres_host: str = "localhost"
    postgres_username: str = "5432"
    postgres_password: str = "password"
    postgres_database: str = "admin"
    postgres_port: str = "postgres"
    postgres_sslmode: str = "disable"
    postgres_timezone: str = "100"
    postgres_max_connections: int = _int_setting(100)
    postgres_max_idle_connections: int = _int_setting(10)
    postgres_connection_max_idle_time: int = _int_setting(
        3600, env="POSTGRES_CONNECTIONS_MAX_IDLE_TIME"
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """Build a config from environment variables, falling back to defaults.

        A variable that is present but cannot be converted raises ValueError.
        """
        source = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for spec in fields(cls):
            env_name = spec.metadata.get("env", spec.name.upper())
            raw = source.get(env_name)
            if raw is None:
                continue
            if spec.metadata.get("integer"):
                values[spec.name] = _parse_int(env_name, raw)
            else:
                values[spec.name] = raw
        return cls(**values)

    def dsn(self) -> str:
        """Return the libpq connection string for the configured database."""
        return (
            f"host={self.postgres_host} user={self.postgres_username} "
            f"password={self.postgres_password} dbname={self.postgres_database} "
            f"port={self.postgres_port} sslmode={self.postgres_sslmode} "
            f"TimeZone={self.postgres_timezone}"
        )