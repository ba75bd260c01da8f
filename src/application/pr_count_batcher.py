"""Batched merged-pull-request counts per repository."""

import logging
from typing import Dict, List, Sequence

import requests

from src.infrastructure.github_client import GitHubClient, GraphQLError, HttpError
from src.infrastructure.github_responses import parse_issue_counts

logger = logging.getLogger(__name__)


def chunked(items: Sequence[str], size: int) -> List[List[str]]:
    if size <= 0:
        return [list(items)]
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def escape_graphql_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class PullRequestCountBatcher:
    """Counts merged PRs a user authored in each repository, many repositories per query."""

    # Keeps each query well under GitHub's complexity and alias limits.
    CHUNK_SIZE = 24

    def __init__(self, client: GitHubClient, chunk_size: int = CHUNK_SIZE):
        self.client = client
        self.chunk_size = chunk_size

    @staticmethod
    def build_query(username: str, full_names: Sequence[str]) -> tuple[str, Dict[str, str]]:
        """
        Build one query with an aliased ``search`` field per repository.

        Returns:
            Tuple of (query string, alias -> full name)
        """
        aliases = {}
        fields = []
        for i, full_name in enumerate(full_names):
            alias = f"r{i}"
            aliases[alias] = full_name
            search = f"repo:{full_name} is:pr is:merged author:{username}"
            fields.append(
                f'{alias}: search(query: "{escape_graphql_string(search)}", type: ISSUE, first: 1) '
                "{ issueCount }"
            )

        query = "query {\n  " + "\n  ".join(fields) + "\n}"
        return query, aliases

    async def count_merged(self, username: str, full_names: Sequence[str], token: str) -> Dict[str, int]:
        """
        Count merged PRs by ``username`` in each repository.

        Chunks are sent one after another. A chunk that fails is skipped and
        the rest still run; when a chunk returns errors next to partial data,
        the aliases that did resolve are kept. Repositories missing from the
        result should be treated as zero.
        """
        counts: Dict[str, int] = {}
        chunks = chunked(full_names, self.chunk_size)

        for index, chunk in enumerate(chunks, start=1):
            query, aliases = self.build_query(username, chunk)
            try:
                data = await self.client.graphql(query, {}, token)
            except GraphQLError as e:
                if not e.data:
                    logger.warning(f"PR count chunk {index}/{len(chunks)} failed: {e}")
                    continue
                logger.warning(f"PR count chunk {index}/{len(chunks)} partially failed: {e}")
                data = e.data
            except (HttpError, requests.RequestException) as e:
                logger.warning(f"PR count chunk {index}/{len(chunks)} failed: {e}")
                continue

            counts.update(parse_issue_counts(data, aliases))

        logger.info(f"Resolved PR counts for {len(counts)}/{len(full_names)} repositories")
        return counts
