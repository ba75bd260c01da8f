"""Fetchers for a user's profile, own, pinned and contributed-to repositories."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from src.application.pr_count_batcher import PullRequestCountBatcher
from src.application.query_strategy import QueryStrategy
from src.domain.repository import ContributedRepository, Repository, User
from src.infrastructure.github_client import GitHubClient
from src.infrastructure.github_responses import (
    parse_repository_connection,
    parse_rest_repository,
    parse_rest_user,
    unique_by_full_name,
)
from src.infrastructure.request_cache import RequestCache

logger = logging.getLogger(__name__)

REPOSITORY_FIELDS = """
                    name
                    nameWithOwner
                    url
                    description
                    isFork
                    isArchived
                    stargazerCount
                    pushedAt
                    primaryLanguage { name }
"""

PINNED_REPOS_QUERY = """
query($login: String!, $first: Int!) {
    user(login: $login) {
        pinnedItems(first: $first, types: [REPOSITORY]) {
            nodes {
                ... on Repository {%s}
            }
        }
    }
}
""" % REPOSITORY_FIELDS

CONTRIBUTED_REPOS_STRATEGY = QueryStrategy(
    name="repositoriesContributedTo",
    primary="""
query($login: String!, $first: Int!) {
    user(login: $login) {
        repositoriesContributedTo(
            first: $first
            includeUserRepositories: false
            contributionTypes: [COMMIT, ISSUE, PULL_REQUEST, PULL_REQUEST_REVIEW]
            orderBy: { field: STARGAZERS, direction: DESC }
        ) {
            nodes {%s}
        }
    }
}
""" % REPOSITORY_FIELDS,
    fallback="""
query($login: String!, $first: Int!) {
    user(login: $login) {
        repositoriesContributedTo(
            first: $first
            includeUserRepositories: false
        ) {
            nodes {%s}
        }
    }
}
""" % REPOSITORY_FIELDS,
)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _pushed_key(repo: Repository) -> datetime:
    return repo.pushed_at or _EPOCH


class RepositoryFetcher:
    """
    Fail-soft fetchers for the data shown on the site.

    Every public method is memoized through the shared RequestCache and never
    raises: failures are logged and resolve to an empty result.
    """

    OWN_REPOS_PAGE_SIZE = 100

    def __init__(
        self,
        client: GitHubClient,
        cache: Optional[RequestCache] = None,
        batcher: Optional[PullRequestCountBatcher] = None,
    ):
        self.client = client
        self.cache = cache if cache is not None else RequestCache()
        self.batcher = batcher if batcher is not None else PullRequestCountBatcher(client)

    async def fetch_user(self, username: str) -> Optional[User]:
        key = RequestCache.make_key("user", username, token=self.client.token)
        return await self.cache.get_or_create(key, lambda: self._load_user(username))

    async def fetch_own_repos(self, username: str, limit: int = 6) -> List[Repository]:
        key = RequestCache.make_key("repos", username, limit, token=self.client.token)
        return await self.cache.get_or_create(key, lambda: self._load_own_repos(username, limit))

    async def fetch_pinned_repos(self, username: str, limit: int = 6) -> List[Repository]:
        token = self.client.token
        if not token:
            logger.info("No GitHub token; skipping pinned repositories")
            return []

        key = RequestCache.make_key("pinned", username, limit, token=token)
        return await self.cache.get_or_create(
            key, lambda: self._load_pinned_repos(username, limit, token)
        )

    async def fetch_contributed_repos(
        self, username: str, limit: int = 50, min_stars: int = 1000
    ) -> List[ContributedRepository]:
        token = self.client.token
        if not token:
            logger.info("No GitHub token; skipping contributed repositories")
            return []

        key = RequestCache.make_key("contributed", username, limit, min_stars, token=token)
        return await self.cache.get_or_create(
            key, lambda: self._load_contributed_repos(username, limit, min_stars, token)
        )

    async def _load_user(self, username: str) -> Optional[User]:
        try:
            payload = await self.client.get_json(f"/users/{username}")
            return parse_rest_user(payload)
        except Exception as e:
            logger.warning(f"Could not fetch user {username}: {e}")
            return None

    async def _load_own_repos(self, username: str, limit: int) -> List[Repository]:
        path = (
            f"/users/{username}/repos"
            f"?per_page={self.OWN_REPOS_PAGE_SIZE}&sort=pushed&direction=desc"
        )
        try:
            payload = await self.client.get_json(path)
            repos = [parse_rest_repository(item) for item in payload]
        except Exception as e:
            logger.warning(f"Could not fetch repositories for {username}: {e}")
            return []

        repos = unique_by_full_name([repo for repo in repos if repo.is_listable])
        # The API already orders by push time; sorting again is stable and guards the order.
        repos.sort(key=_pushed_key, reverse=True)
        logger.info(f"Fetched {len(repos)} listable repositories for {username}")
        return repos[:limit]

    async def _load_pinned_repos(self, username: str, limit: int, token: str) -> List[Repository]:
        try:
            data = await self.client.graphql(
                PINNED_REPOS_QUERY, {"login": username, "first": limit}, token
            )
            connection = parse_repository_connection(data, "pinnedItems")
        except Exception as e:
            logger.warning(f"Could not fetch pinned repositories for {username}: {e}")
            return []

        if not connection.user_found:
            logger.warning(f"User {username} not found while fetching pinned repositories")
        return unique_by_full_name([repo for repo in connection.repositories if repo.is_listable])

    async def _load_contributed_repos(
        self, username: str, limit: int, min_stars: int, token: str
    ) -> List[ContributedRepository]:
        outcome = await CONTRIBUTED_REPOS_STRATEGY.execute(
            self.client, {"login": username, "first": limit}, token
        )
        if not outcome.succeeded:
            logger.warning(f"Contributed repositories unavailable for {username}: {outcome.errors}")
            return []

        try:
            connection = parse_repository_connection(outcome.data, "repositoriesContributedTo")
        except Exception as e:
            logger.warning(f"Could not read contributed repositories for {username}: {e}")
            return []

        candidates = unique_by_full_name([
            repo for repo in connection.repositories
            if repo.is_listable and repo.stargazers_count >= min_stars
        ])
        logger.info(
            f"Found {len(candidates)} contributed repositories with >= {min_stars} stars "
            f"(via {outcome.attempt} query)"
        )
        if not candidates:
            return []

        try:
            pr_counts = await self.batcher.count_merged(
                username, [repo.full_name for repo in candidates], token
            )
        except Exception as e:
            logger.warning(f"Could not count pull requests for {username}: {e}")
            pr_counts = {}

        return [
            ContributedRepository.from_repository(repo, pr_counts.get(repo.full_name, 0))
            for repo in candidates
        ]
