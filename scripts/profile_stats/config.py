from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Iterator, Mapping

from profile_stats.domain.errors import ConfigError

log = logging.getLogger(__name__)

GITHUB_API_URL      = "https://api.github.com/graphql"
DEFAULT_RETRY_DELAY = 1.0
DEFAULT_TIMEOUT     = 30.0

# Order matters: it is the order credentials are tried in.
TOKEN_ENV_NAMES = ("GITHUB_TOKEN1", "GITHUB_TOKEN2")


@dataclass(frozen=True)
class CredentialPool:
    """
    Ordered, read-only list of GitHub tokens.

    Built once at startup and handed to the orchestrator by reference.
    Attempt i of a query always uses `pool[i]`.
    """
    tokens: tuple[str, ...]

    @classmethod
    def from_env(cls,environ: Mapping[str, str] | None = None,names: tuple[str, ...] = TOKEN_ENV_NAMES) -> CredentialPool:
        environ = os.environ if environ is None else environ
        tokens = []
        for name in names:
            token = (environ.get(name) or "").strip()
            if token:
                tokens.append(token)
            else:
                log.warning("%s is not set — skipping it", name)

        if not tokens:
            raise ConfigError(f"at least one of {', '.join(names)} is required")
        return cls(tokens=tuple(tokens))

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, index: int) -> str:
        return self.tokens[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self.tokens)

    def __repr__(self) -> str:
        # never leak tokens into logs or tracebacks
        return f"CredentialPool(size={len(self.tokens)})"


@dataclass(frozen=True)
class Settings:
    credentials:     CredentialPool
    api_url:         str   = GITHUB_API_URL
    retry_delay:     float = DEFAULT_RETRY_DELAY
    request_timeout: float = DEFAULT_TIMEOUT


def _read_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Read every setting from environment variables.
    Fails fast with ConfigError rather than starting half-configured.
    """
    environ = os.environ if environ is None else environ
    return Settings(
        credentials     = CredentialPool.from_env(environ),
        api_url         = environ.get("GITHUB_API_URL") or GITHUB_API_URL,
        retry_delay     = _read_float(environ, "GITHUB_RETRY_DELAY", DEFAULT_RETRY_DELAY),
        request_timeout = _read_float(environ, "GITHUB_REQUEST_TIMEOUT", DEFAULT_TIMEOUT),
    )
