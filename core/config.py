# =============================================================================
# core/config.py  -  Process Configuration
# =============================================================================
#
# All settings come from environment variables.  main.py calls
# dotenv.load_dotenv() first, so a local .env file works too:
#
#   OPINE_API_KEY          (required)  API key sent as X-API-Key
#   OPINE_BASE_URL         (optional)  defaults to the production API
#   OPINE_TIMEOUT_SECONDS  (optional)  per-request timeout, default 30
#   OPINE_LOG_LEVEL        (optional)  stdlib logging level, default INFO
#
# The config object is built once at startup and handed to the client.
# Nothing reads os.environ after that.
# =============================================================================

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from core.errors import ConfigError

DEFAULT_BASE_URL = "https://api.tryopine.com/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class OpineConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL

    def __repr__(self) -> str:
        # Keep the key out of logs and tracebacks.
        return (
            f"OpineConfig(api_key='***', base_url={self.base_url!r}, "
            f"timeout={self.timeout!r}, log_level={self.log_level!r})"
        )


def load_config(environ: Optional[Mapping[str, str]] = None) -> OpineConfig:
    """Build an OpineConfig from environment variables.

    Args:
        environ: Mapping to read from.  Defaults to ``os.environ``.

    Raises:
        ConfigError: OPINE_API_KEY is missing or blank,
            OPINE_TIMEOUT_SECONDS is not a positive number, or
            OPINE_LOG_LEVEL is not a known level.
    """
    env = os.environ if environ is None else environ

    api_key = env.get("OPINE_API_KEY", "").strip()
    if not api_key:
        raise ConfigError("OPINE_API_KEY environment variable is required")

    base_url = env.get("OPINE_BASE_URL", "").strip().rstrip("/") or DEFAULT_BASE_URL

    raw_timeout = env.get("OPINE_TIMEOUT_SECONDS", "").strip()
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigError(
                f"OPINE_TIMEOUT_SECONDS must be a number, got {raw_timeout!r}"
            ) from None
        if timeout <= 0:
            raise ConfigError(f"OPINE_TIMEOUT_SECONDS must be positive, got {timeout}")
    else:
        timeout = DEFAULT_TIMEOUT_SECONDS

    log_level = env.get("OPINE_LOG_LEVEL", "").strip().upper() or DEFAULT_LOG_LEVEL
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"OPINE_LOG_LEVEL is not a logging level: {log_level!r}")

    return OpineConfig(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
        log_level=log_level,
    )
