#!/usr/bin/env python3
"""Script to sync GitHub profile and repository data into the site's data file."""

import asyncio
import logging
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from src.config import SyncSettings
from src.infrastructure.github_client import GitHubClient
from src.infrastructure.request_cache import RequestCache
from src.infrastructure.snapshot_writer import SnapshotWriter
from src.application.pr_count_batcher import PullRequestCountBatcher
from src.application.repository_fetchers import RepositoryFetcher
from src.application.aggregation_service import AggregationService

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main():
    """Fetch GitHub data and write the snapshot file."""
    try:
        settings = SyncSettings.from_env()

        github_client = GitHubClient(user_agent=settings.user_agent)
        if not github_client.token:
            logger.warning("No GitHub token found. Pinned and contributed repositories will be skipped.")

        fetcher = RepositoryFetcher(
            github_client,
            cache=RequestCache(),
            batcher=PullRequestCountBatcher(github_client),
        )
        service = AggregationService(fetcher, settings)

        snapshot = asyncio.run(service.build_snapshot())
        output_file = SnapshotWriter(settings.output_file).write(snapshot)

        logger.info(
            f"Wrote {output_file}: user={snapshot.user.login if snapshot.user else None} "
            f"recent={len(snapshot.recent)} pinned={len(snapshot.pinned)} "
            f"contributed={len(snapshot.contributed)} "
            f"(>={snapshot.contributed_min_stars} stars, merged PRs only)"
        )
        if not snapshot.contributed:
            logger.info("Contributed is empty: set GITHUB_TOKEN to fetch contributed repositories")

        return 0

    except Exception as e:
        logger.error(f"GitHub sync failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
