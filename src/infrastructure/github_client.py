"""GitHub REST and GraphQL API client with retry logic."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from src.infrastructure.credentials import resolve_token

logger = logging.getLogger(__name__)


class HttpError(Exception):
    """Raised when the GitHub API answers with a non-success status."""

    def __init__(self, status: int, url: str):
        super().__init__(f"GitHub API {status} for {url}")
        self.status = status
        self.url = url


class GraphQLError(Exception):
    """Raised when a GraphQL response carries errors or no data."""

    def __init__(self, messages: List[str], data: Optional[Dict[str, Any]] = None):
        super().__init__("; ".join(messages) if messages else "GitHub GraphQL error")
        self.messages = messages
        # Partial payload the server returned next to the errors, if any.
        self.data = data


class GitHubClient:
    """Client for the GitHub REST and GraphQL APIs."""

    API_ROOT = "https://api.github.com"
    GRAPHQL_ENDPOINT = "https://api.github.com/graphql"
    API_VERSION = "2022-11-28"
    DEFAULT_USER_AGENT = "github-snapshot-sync"
    MAX_RETRIES = 3
    RETRY_DELAY_SECONDS = 1
    REQUEST_TIMEOUT_SECONDS = 30

    def __init__(self, token: Optional[str] = None, user_agent: Optional[str] = None):
        """
        Initialize GitHub client.

        Args:
            token: GitHub personal access token. If None, resolved from the environment.
            user_agent: Identifier sent as the User-Agent header.
        """
        if token is None:
            token = resolve_token()

        self.token = token
        self.user_agent = user_agent or self.DEFAULT_USER_AGENT

    def headers(self, token: Optional[str] = None) -> Dict[str, str]:
        """Build the standard request headers; Authorization only when a token is known."""
        token = token or self.token
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.API_VERSION,
            "User-Agent": self.user_agent,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Issue a request on a worker thread, retrying transport failures.

        HTTP status failures are returned to the caller untouched; only
        connection errors and timeouts are retried with exponential backoff.
        """
        send = requests.get if method == "GET" else requests.post

        for attempt in range(self.MAX_RETRIES):
            try:
                return await asyncio.to_thread(
                    send, url, timeout=self.REQUEST_TIMEOUT_SECONDS, **kwargs
                )
            except (requests.ConnectionError, requests.Timeout) as e:
                if attempt < self.MAX_RETRIES - 1:
                    delay = self.RETRY_DELAY_SECONDS * (2 ** attempt)
                    logger.warning(
                        f"{method} {url} failed (attempt {attempt + 1}/{self.MAX_RETRIES}): {e}. "
                        f"Retrying in {delay}s..."
                    )
                    await asyncio.sleep(delay)
                else:
                    raise

        raise RuntimeError("Max retries exceeded")

    async def get_json(self, path: str, token: Optional[str] = None) -> Any:
        """
        GET a REST resource and decode its JSON body.

        Args:
            path: Absolute URL or path relative to the API root.
            token: Credential overriding the client's own token.

        Raises:
            HttpError: If the response status is not a success.
        """
        url = path if path.startswith("http") else f"{self.API_ROOT}/{path.lstrip('/')}"
        response = await self._send("GET", url, headers=self.headers(token))

        if not response.ok:
            raise HttpError(response.status_code, url)
        return response.json()

    async def graphql(self, query: str, variables: Dict[str, Any], token: str) -> Dict[str, Any]:
        """
        Execute a GraphQL query and return its ``data`` payload.

        Callers must check for a credential before calling; GraphQL is never
        attempted anonymously.

        Raises:
            HttpError: If the response status is not a success.
            GraphQLError: If the body carries errors or no data.
        """
        if not token:
            raise ValueError("GitHub GraphQL requires a token")

        headers = self.headers(token)
        headers["Content-Type"] = "application/json"
        response = await self._send(
            "POST",
            self.GRAPHQL_ENDPOINT,
            json={"query": query, "variables": variables},
            headers=headers,
        )

        if not response.ok:
            raise HttpError(response.status_code, self.GRAPHQL_ENDPOINT)

        body = response.json() or {}
        data = body.get("data")
        errors = body.get("errors") or []
        if errors:
            messages = [err.get("message", "") for err in errors]
            raise GraphQLError(messages, data=data or None)
        if not data:
            raise GraphQLError(["GitHub GraphQL empty data"])
        return data
