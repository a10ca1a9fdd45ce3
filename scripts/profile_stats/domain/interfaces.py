"""
Domain Layer — Interfaces (Abstract Contracts)
-----------------------------------------------
The application layer depends on these, never on httpx or on GitHub's
wire format. Tests swap GitHubClient for a fake dispatcher that records
which credential each attempt was given.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Mapping

from .entities import QueryOutcome


class IQueryDispatcher(ABC):
    """
    Contract for anything that can run one GraphQL query with one credential.
    """

    @abstractmethod
    async def execute(self,document: str,variables: Mapping[str, Any],credential: str) -> QueryOutcome:
        """
        Perform exactly one network call and classify the response.

        Returns:
            Success(payload) — the envelope carried a `user` object
            Degraded()       — the remote API signalled its rate limit
            Failure(error)   — any other error envelope

        Raises TransportError when the call itself fails or the body
        cannot be decoded.
        """
        ...
