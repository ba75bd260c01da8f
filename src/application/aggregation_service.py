"""Application service that assembles the GitHub snapshot."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Tuple

from src.application.repository_fetchers import RepositoryFetcher
from src.config import SyncSettings
from src.domain.repository import ContributedRepository, Repository, Snapshot

logger = logging.getLogger(__name__)


def contribution_sort_key(repo: ContributedRepository) -> Tuple[int, int, str]:
    """PR count descending, then stars descending, then full name ascending."""
    return (-repo.pr_count, -repo.stargazers_count, repo.full_name)


def select_contributed(
    contributed: Iterable[ContributedRepository], displayed: Iterable[Repository]
) -> List[ContributedRepository]:
    """
    Keep contributed repositories worth listing next to the displayed ones.

    Drops anything already displayed and anything without a merged PR, then
    orders the rest deterministically.
    """
    displayed_names = {repo.full_name for repo in displayed}
    selected = [
        repo for repo in contributed
        if repo.full_name not in displayed_names and repo.pr_count > 0
    ]
    selected.sort(key=contribution_sort_key)
    return selected


async def _no_contributions() -> List[ContributedRepository]:
    return []


class AggregationService:
    """Service for building one snapshot of a user's GitHub activity."""

    def __init__(self, fetcher: RepositoryFetcher, settings: SyncSettings):
        """
        Initialize aggregation service.

        Args:
            fetcher: Repository fetcher bound to a client and request cache
            settings: Sync settings for this run
        """
        self.fetcher = fetcher
        self.settings = settings

    async def build_snapshot(self) -> Snapshot:
        """
        Fetch everything concurrently and assemble the snapshot.

        Returns:
            The snapshot; sub-fetches that failed appear as empty values.
        """
        settings = self.settings
        username = settings.username
        logger.info(f"Building GitHub snapshot for {username}")

        if settings.contributed_enabled:
            contributed_call = self.fetcher.fetch_contributed_repos(
                username,
                limit=settings.contributed_limit,
                min_stars=settings.contributed_min_stars,
            )
        else:
            contributed_call = _no_contributions()

        user, own_repos, pinned, contributed_raw = await asyncio.gather(
            self.fetcher.fetch_user(username),
            self.fetcher.fetch_own_repos(username, limit=settings.recent_limit),
            self.fetcher.fetch_pinned_repos(username, limit=settings.pinned_limit),
            contributed_call,
        )

        recent = own_repos[:settings.recent_display_limit]
        contributed = select_contributed(contributed_raw, recent)

        logger.info(
            f"Kept {len(contributed)}/{len(contributed_raw)} contributed repositories "
            f"after removing displayed ones and those without merged PRs"
        )

        return Snapshot(
            generated_at=datetime.now(timezone.utc),
            user=user,
            recent=recent,
            pinned=pinned,
            contributed=contributed,
            contributed_min_stars=settings.contributed_min_stars,
        )
