"""
Client settings, optionally read from environment variables.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ClientSettings:
    """Construction options for HTTPClient."""

    timeout: float = 10.0  # Per-request read timeout, seconds
    trusted_ssl_domain: str | None = None  # Exact host whose certificate is accepted
    resource_timeout: float = 10.0  # Whole-request timeout, seconds

    @classmethod
    def from_env(cls, prefix: str = "TYPED_HTTP_") -> "ClientSettings":
        """
        Read settings from environment variables.

        Reads `{prefix}TIMEOUT`, `{prefix}RESOURCE_TIMEOUT` and
        `{prefix}TRUSTED_SSL_DOMAIN`. Unset variables keep their defaults and
        an empty domain means no trusted domain.

        Raises:
            ValueError: If a timeout variable is not a number
        """
        defaults = cls()
        return cls(
            timeout=_float_from_env(f"{prefix}TIMEOUT", defaults.timeout),
            trusted_ssl_domain=os.getenv(f"{prefix}TRUSTED_SSL_DOMAIN") or None,
            resource_timeout=_float_from_env(f"{prefix}RESOURCE_TIMEOUT", defaults.resource_timeout),
        )


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from None
