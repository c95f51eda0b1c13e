"""Connection configuration.

`ConnectionConfig` is pure data: it is built once at process start and only
read afterwards. Nothing is validated at construction; an unreachable host or an
unsupported scheme surfaces when a connection is actually opened.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping
from urllib.parse import urlsplit

from .. import global_config as g


@dataclass(frozen=True)
class Endpoint:
    """Parsed host endpoint: transport scheme, address and port.

    For SQLite endpoints ``address`` is the directory holding the database
    files (or ``:memory:``) and ``port`` is None.
    """

    scheme: str
    address: str
    port: int | None = None


def parse_endpoint(host: str) -> Endpoint:
    """Split a host string such as ``tcp://127.0.0.1:3306`` into parts.

    A bare ``host[:port]`` is read as ``tcp``. ``sqlite://`` endpoints keep
    everything after the scheme as the address, so both
    ``sqlite:///var/lib/userdb`` and ``sqlite://:memory:`` work.
    """
    if "://" not in host:
        host = f"tcp://{host}"

    scheme, _, rest = host.partition("://")
    scheme = scheme.lower()

    if scheme == "sqlite":
        return Endpoint(scheme=scheme, address=rest or ":memory:")

    parts = urlsplit(f"{scheme}://{rest}")
    port = parts.port if parts.port is not None else g.DEFAULT_MYSQL_PORT
    return Endpoint(scheme=scheme, address=parts.hostname or "127.0.0.1", port=port)


@dataclass(frozen=True)
class ConnectionConfig:
    """Static connection parameters (endpoint, credentials, target schema)."""

    host: str = g.DEFAULT_HOST
    user: str = g.DEFAULT_USER
    password: str = g.DEFAULT_PASSWORD
    schema: str = g.DEFAULT_SCHEMA

    @property
    def endpoint(self) -> Endpoint:
        return parse_endpoint(self.host)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ConnectionConfig:
        """Build a config from ``USERDB_*`` variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        return cls(
            host=env.get(g.ENV_HOST, g.DEFAULT_HOST),
            user=env.get(g.ENV_USER, g.DEFAULT_USER),
            password=env.get(g.ENV_PASSWORD, g.DEFAULT_PASSWORD),
            schema=env.get(g.ENV_SCHEMA, g.DEFAULT_SCHEMA),
        )

    def __repr__(self) -> str:
        return (
            f"ConnectionConfig(host={self.host!r}, user={self.user!r}, "
            f"password='***', schema={self.schema!r})"
        )


def validate_schema_name(name: str) -> None:
    """Validate a schema name before it is used in SQL or as a file name.

    Checks that the name contains only alphanumeric characters and
    underscores. This is a basic safeguard, not comprehensive protection.

    Raises:
        ValueError: If the name is empty or contains unsafe characters.
    """
    if not name:
        msg = "Schema name must not be empty"
        raise ValueError(msg)
    if not name.replace("_", "").isalnum():
        msg = f"Unsafe SQL identifier: {name!r}"
        raise ValueError(msg)
