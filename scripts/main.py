"""
main.py — Dependency Wiring (Composition Root)
------------------------------------------------
This file has ONE job: wire all the pieces together and run the app.

It does NOT contain any business logic. It just:
  1. Reads configuration from environment variables
  2. Creates the concrete GitHub dispatcher over an httpx client
  3. Injects it, with the credential pool, into the orchestrator
  4. Calls the top-level use case (ProfileOrchestrator.resolve_user_profile)
  5. Prints the metrics as JSON, or reports the error and exits

Dependency graph (what depends on what):
                     main.py  (wires everything)
                        │
              ┌─────────┴──────────┐
              ▼                    ▼
     ProfileOrchestrator      Settings / CredentialPool
              │
    ┌─────────┼──────────────┐
    ▼         ▼              ▼
RetryRotator  GitHubClient   aggregate_metrics
              (IQueryDispatcher)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import httpx

# Application layer
from profile_stats.application.orchestrator import ProfileOrchestrator
from profile_stats.config import Settings, load_settings
from profile_stats.domain.errors import ConfigError, ServiceError, ServiceErrorKind

# Infrastructure layer
from profile_stats.infrastructure.github_client import GitHubClient

log = logging.getLogger("profile_stats")

EXIT_ERROR        = 1
EXIT_RATE_LIMITED = 2


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )


# ---------------------------------------------------------------------------
# Dependency wiring
# ---------------------------------------------------------------------------

async def build_and_run(settings: Settings, username: str, rotate_on_rate_limit: bool = False, retry_transport_errors: bool = False) -> int:
    """
    Wires all dependencies together and resolves one profile.
    Returns the process exit status.
    """
    client = httpx.AsyncClient()

    try:
        github_client = GitHubClient(
            client  = client,       # injected — GitHubClient doesn't create this
            api_url = settings.api_url,
            timeout = settings.request_timeout,
        )
        orchestrator = ProfileOrchestrator(
            dispatcher             = github_client,         # injected IQueryDispatcher
            credentials            = settings.credentials,  # read once at startup
            retry_delay            = settings.retry_delay,
            rotate_on_rate_limit   = rotate_on_rate_limit,
            retry_transport_errors = retry_transport_errors,
        )

        result = await orchestrator.resolve_user_profile(username)

        if isinstance(result, ServiceError):
            log.error("❌ %s | %s", result.kind.value, result.message)
            return EXIT_RATE_LIMITED if result.kind is ServiceErrorKind.RATE_LIMIT else EXIT_ERROR

        print(json.dumps(result.to_dict(), indent=2))
        log.info("✅ Resolved profile metrics for %s", username)
        return 0

    finally:
        await client.aclose()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Aggregate GitHub profile statistics for one user"
    )
    parser.add_argument("username", help="GitHub login to resolve")
    parser.add_argument(
        "--log-level",
        default = "INFO",
        help    = "Logging level (default: INFO)",
    )
    parser.add_argument(
        "--rotate-on-rate-limit",
        action = "store_true",
        help   = "Try the next token when one is rate limited instead of returning partial data",
    )
    parser.add_argument(
        "--retry-transport-errors",
        action = "store_true",
        help   = "Try the next token after a network error instead of failing the query",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    try:
        settings = load_settings()
    except ConfigError as exc:
        log.error("%s", exc)
        return EXIT_ERROR

    return asyncio.run(build_and_run(settings, args.username, args.rotate_on_rate_limit, args.retry_transport_errors))


if __name__ == "__main__":
    sys.exit(main())
