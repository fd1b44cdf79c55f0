"""
Connection configuration for the SurrealDB engine.

Provides an immutable settings container, loadable from the environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class EngineConfig:
    """
    Immutable configuration for a SurrealDB HTTP connection.

    Attributes:
        url: The URL of the SurrealDB instance.
        namespace: The namespace to select after connecting.
        database: The database to select after connecting.
        username: Username for root/namespace/database sign-in.
        password: Password for sign-in.
        timeout: HTTP request timeout in seconds.
        version_check: Whether to probe the server version on connect.
        version_check_timeout: Timeout in seconds for the version probe.
    """

    url: str
    namespace: str | None = None
    database: str | None = None
    username: str | None = None
    password: str | None = None
    timeout: float = 30.0
    version_check: bool = True
    version_check_timeout: float = 5.0

    @property
    def credentials(self) -> dict[str, str] | None:
        """Sign-in parameters, or None when no username is configured."""
        if not self.username:
            return None
        creds = {"user": self.username}
        if self.password:
            creds["pass"] = self.password
        return creds

    @classmethod
    def from_env(cls, prefix: str = "SURREALDB_", environ: Mapping[str, str] | None = None) -> EngineConfig:
        """
        Build a configuration from environment variables.

        Reads ``<prefix>URL`` (default ``http://localhost:8000``),
        ``NAMESPACE``, ``DATABASE``, ``USER``, ``PASS``, ``TIMEOUT`` and
        ``VERSION_CHECK``.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            return env.get(f"{prefix}{name}") or None

        timeout = get("TIMEOUT")
        version_check = get("VERSION_CHECK")
        return cls(
            url=get("URL") or "http://localhost:8000",
            namespace=get("NAMESPACE"),
            database=get("DATABASE"),
            username=get("USER"),
            password=get("PASS"),
            timeout=float(timeout) if timeout else 30.0,
            version_check=version_check.lower() in _TRUE_VALUES if version_check else True,
        )


__all__ = ["EngineConfig"]
