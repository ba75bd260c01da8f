import unittest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from src.application.aggregation_service import AggregationService, select_contributed
from src.config import SyncSettings
from src.domain.repository import ContributedRepository, Repository


def repo(full_name, stars=0, pushed_day=1):
    return Repository(
        name=full_name.split("/", 1)[1],
        full_name=full_name,
        html_url=f"https://github.com/{full_name}",
        description=None,
        fork=False,
        archived=False,
        stargazers_count=stars,
        language=None,
        pushed_at=datetime(2024, 1, pushed_day, tzinfo=timezone.utc),
    )


def contributed(full_name, pr_count, stars):
    return ContributedRepository.from_repository(repo(full_name, stars=stars), pr_count)


class TestSelectContributed(unittest.TestCase):

    def test_orders_by_prs_then_stars_then_name(self):
        a = contributed("org/a", pr_count=3, stars=500)
        b = contributed("org/b", pr_count=3, stars=200)
        c = contributed("org/c", pr_count=5, stars=10)

        self.assertEqual(select_contributed([a, b, c], []), [c, a, b])

    def test_name_breaks_remaining_ties_case_sensitively(self):
        lower = contributed("org/alpha", pr_count=1, stars=100)
        upper = contributed("Org/zeta", pr_count=1, stars=100)

        self.assertEqual(select_contributed([lower, upper], []), [upper, lower])

    def test_drops_displayed_and_zero_pr_entries(self):
        shown = repo("octo/shown")
        entries = [
            contributed("octo/shown", pr_count=9, stars=5000),
            contributed("org/starred", pr_count=0, stars=8000),
            contributed("org/kept", pr_count=1, stars=1000),
        ]

        self.assertEqual([r.full_name for r in select_contributed(entries, [shown])], ["org/kept"])


class TestAggregationService(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.fetcher = MagicMock()
        self.fetcher.fetch_user = AsyncMock(return_value=None)
        self.fetcher.fetch_own_repos = AsyncMock(
            return_value=[repo(f"octo/r{i}", pushed_day=10 - i) for i in range(8)]
        )
        self.fetcher.fetch_pinned_repos = AsyncMock(return_value=[repo("octo/pinned")])
        self.fetcher.fetch_contributed_repos = AsyncMock(return_value=[
            contributed("octo/r1", pr_count=4, stars=3000),
            contributed("octo/r7", pr_count=2, stars=3000),
            contributed("big/project", pr_count=2, stars=9000),
            contributed("big/starred", pr_count=0, stars=9000),
        ])
        self.settings = SyncSettings(
            username="octo",
            contributed_min_stars=1000,
            recent_limit=8,
            recent_display_limit=6,
            contributed_limit=100,
            pinned_limit=4,
        )

    async def test_builds_disjoint_sorted_snapshot(self):
        service = AggregationService(self.fetcher, self.settings)

        snapshot = await service.build_snapshot()

        self.assertEqual([r.full_name for r in snapshot.recent], [f"octo/r{i}" for i in range(6)])
        # octo/r7 was fetched but not displayed, so it may appear as a contribution.
        self.assertEqual([r.full_name for r in snapshot.contributed], ["big/project", "octo/r7"])
        recent_names = {r.full_name for r in snapshot.recent}
        self.assertFalse(recent_names & {r.full_name for r in snapshot.contributed})
        self.assertEqual([r.full_name for r in snapshot.pinned], ["octo/pinned"])
        self.assertEqual(snapshot.contributed_min_stars, 1000)
        self.assertIsNone(snapshot.user)

        self.fetcher.fetch_own_repos.assert_awaited_once_with("octo", limit=8)
        self.fetcher.fetch_pinned_repos.assert_awaited_once_with("octo", limit=4)
        self.fetcher.fetch_contributed_repos.assert_awaited_once_with(
            "octo", limit=100, min_stars=1000
        )

    async def test_degraded_fetches_still_produce_snapshot(self):
        self.fetcher.fetch_own_repos.return_value = []
        self.fetcher.fetch_pinned_repos.return_value = []
        self.fetcher.fetch_contributed_repos.return_value = []

        snapshot = await AggregationService(self.fetcher, self.settings).build_snapshot()

        self.assertEqual(snapshot.recent, [])
        self.assertEqual(snapshot.contributed, [])
        self.assertEqual(snapshot.to_dict()["contributed"], [])


if __name__ == "__main__":
    unittest.main()
