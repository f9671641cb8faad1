"""incusdash configuration -- layered: CLI flags > env vars > .env > defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger("incusdash.config")

_TRUTHY = ("true", "1", "yes")


def _load_dotenv(start: Path | None = None) -> dict[str, str]:
    """Parse the nearest ``.env`` file and return its key-value pairs.

    Walks up from ``start`` (default: CWD) and stops at the first directory
    containing ``.git``.  Values are NOT injected into ``os.environ``.
    """
    cwd = start or Path.cwd()
    for parent in [cwd, *cwd.parents]:
        env_file = parent / ".env"
        if env_file.is_file():
            pairs: dict[str, str] = {}
            for line in env_file.read_text(encoding="utf-8").splitlines():
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, _, value = line.partition("=")
                pairs[key.strip()] = value.strip().strip("'\"")
            logger.debug("Loaded %d vars from %s", len(pairs), env_file)
            return pairs
        if (parent / ".git").exists():
            break
    return {}


# Read at most once per process.
_dotenv: dict[str, str] | None = None


def _get_dotenv() -> dict[str, str]:
    global _dotenv
    if _dotenv is None:
        _dotenv = _load_dotenv()
    return _dotenv


def _env(key: str, *fallback_keys: str, default: str = "") -> str:
    """Look up a config value: INCUSDASH_* env var > .env keys > default."""
    val = os.environ.get(key)
    if val:
        return val
    dotenv = _get_dotenv()
    for k in (key, *fallback_keys):
        val = dotenv.get(k)
        if val:
            return val
    return default


@dataclass
class IncusDashConfig:
    """Connection and output settings."""

    # Connection
    api_url: str = field(
        default_factory=lambda: _env("INCUSDASH_API_URL", "INCUS_URL", default="https://localhost:8443")
    )
    api_prefix: str = field(
        default_factory=lambda: _env("INCUSDASH_API_PREFIX", default="/1.0")
    )
    socket_path: str | None = field(
        default_factory=lambda: _env("INCUSDASH_SOCKET", "INCUS_SOCKET") or None
    )
    client_cert: str | None = field(
        default_factory=lambda: _env("INCUSDASH_CLIENT_CERT") or None
    )
    client_key: str | None = field(
        default_factory=lambda: _env("INCUSDASH_CLIENT_KEY") or None
    )
    verify_tls: bool = field(
        default_factory=lambda: _env("INCUSDASH_VERIFY_TLS", default="true").lower() in _TRUTHY
    )
    timeout: float = field(
        default_factory=lambda: float(_env("INCUSDASH_TIMEOUT", default="30.0"))
    )

    # Navigation
    dashboard_root: str = field(
        default_factory=lambda: _env("INCUSDASH_DASHBOARD_ROOT", default="/dashboard")
    )

    # Logging
    log_level: str = field(
        default_factory=lambda: _env("INCUSDASH_LOG_LEVEL", default="INFO")
    )
    log_format: str = field(
        default_factory=lambda: _env("INCUSDASH_LOG_FORMAT", default="text")
    )
    log_file: str | None = field(
        default_factory=lambda: os.environ.get("INCUSDASH_LOG_FILE")
    )

    def cert_pair(self) -> tuple[str, str] | None:
        """Client certificate tuple for TLS auth, or None when not configured."""
        if self.client_cert and self.client_key:
            return (self.client_cert, self.client_key)
        return None
