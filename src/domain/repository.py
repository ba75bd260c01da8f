"""Domain entities for GitHub users, repositories and the published snapshot."""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Render a datetime the way the GitHub API does (UTC, ``Z`` suffix)."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class User:
    """Immutable GitHub user profile."""

    login: str
    name: Optional[str]
    html_url: str
    avatar_url: str
    bio: Optional[str]
    blog: Optional[str]
    company: Optional[str]
    location: Optional[str]
    twitter_username: Optional[str]
    public_repos: int
    followers: int
    following: int
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["created_at"] = format_timestamp(self.created_at)
        return data


@dataclass(frozen=True)
class Repository:
    """Immutable repository entity, identical for REST and GraphQL sources."""

    name: str
    full_name: str
    html_url: str
    description: Optional[str]
    fork: bool
    archived: bool
    stargazers_count: int
    language: Optional[str]
    pushed_at: Optional[datetime]

    @property
    def is_listable(self) -> bool:
        """Forks and archived repositories never appear in any output."""
        return not self.fork and not self.archived

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["pushed_at"] = format_timestamp(self.pushed_at)
        return data


@dataclass(frozen=True)
class ContributedRepository(Repository):
    """A repository plus the number of merged pull requests the user authored there."""

    pr_count: int = 0

    @classmethod
    def from_repository(cls, repo: Repository, pr_count: int) -> "ContributedRepository":
        values = {f.name: getattr(repo, f.name) for f in fields(Repository)}
        return cls(pr_count=max(int(pr_count), 0), **values)


@dataclass(frozen=True)
class Snapshot:
    """The single artifact produced per sync run."""

    generated_at: datetime
    user: Optional[User]
    recent: List[Repository] = field(default_factory=list)
    pinned: List[Repository] = field(default_factory=list)
    contributed: List[ContributedRepository] = field(default_factory=list)
    contributed_min_stars: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the key names the site templates read."""
        return {
            "generatedAt": format_timestamp(self.generated_at),
            "user": self.user.to_dict() if self.user else None,
            "recent": [repo.to_dict() for repo in self.recent],
            "pinned": [repo.to_dict() for repo in self.pinned],
            "contributed": [repo.to_dict() for repo in self.contributed],
            "contributedMinStars": self.contributed_min_stars,
        }
