"""Primary/fallback execution of GraphQL query shapes."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.infrastructure.github_client import GitHubClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryOutcome:
    """What a strategy run produced; ``data`` is None when every attempt failed."""

    data: Optional[Dict[str, Any]]
    attempt: Optional[str]
    errors: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.data is not None


@dataclass(frozen=True)
class QueryStrategy:
    """
    A GraphQL query with an optional reduced fallback.

    Some query arguments are not accepted by every GitHub API deployment.
    The primary query is tried first; if it fails for any reason the fallback
    is tried exactly once. If both fail the outcome carries no data
    and the errors are kept for logging.
    """

    name: str
    primary: str
    fallback: Optional[str] = None

    async def execute(
        self, client: GitHubClient, variables: Dict[str, Any], token: str
    ) -> QueryOutcome:
        attempts = [("primary", self.primary)]
        if self.fallback:
            attempts.append(("fallback", self.fallback))

        errors = []
        for label, query in attempts:
            try:
                data = await client.graphql(query, variables, token)
            except Exception as e:
                logger.warning(f"{self.name} {label} query failed: {e}")
                errors.append(f"{label}: {e}")
                continue
            return QueryOutcome(data=data, attempt=label, errors=errors)

        return QueryOutcome(data=None, attempt=None, errors=errors)
