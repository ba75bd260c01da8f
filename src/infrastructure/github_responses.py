"""Narrow raw GitHub REST/GraphQL payloads into domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from src.domain.repository import Repository, User
from src.infrastructure.github_client import GraphQLError


@dataclass(frozen=True)
class RepositoryConnection:
    """Result of a ``user { <connection> { nodes } }`` query."""

    user_found: bool
    repositories: List[Repository] = field(default_factory=list)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_rest_user(payload: Dict[str, Any]) -> User:
    return User(
        login=payload["login"],
        name=payload.get("name"),
        html_url=payload["html_url"],
        avatar_url=payload["avatar_url"],
        bio=payload.get("bio"),
        blog=payload.get("blog"),
        company=payload.get("company"),
        location=payload.get("location"),
        twitter_username=payload.get("twitter_username"),
        public_repos=payload.get("public_repos", 0),
        followers=payload.get("followers", 0),
        following=payload.get("following", 0),
        created_at=parse_timestamp(payload["created_at"]),
    )


def parse_rest_repository(payload: Dict[str, Any]) -> Repository:
    return Repository(
        name=payload["name"],
        full_name=payload["full_name"],
        html_url=payload["html_url"],
        description=payload.get("description"),
        fork=bool(payload.get("fork", False)),
        archived=bool(payload.get("archived", False)),
        stargazers_count=payload.get("stargazers_count", 0),
        language=payload.get("language"),
        pushed_at=parse_timestamp(payload.get("pushed_at")),
    )


def parse_repository_node(node: Optional[Dict[str, Any]]) -> Optional[Repository]:
    """
    Convert a GraphQL ``Repository`` node.

    Pinned items may contain non-repository nodes, which come back as null
    or as empty objects; those yield None.
    """
    if not node or "nameWithOwner" not in node:
        return None

    primary_language = node.get("primaryLanguage") or {}
    return Repository(
        name=node["name"],
        full_name=node["nameWithOwner"],
        html_url=node["url"],
        description=node.get("description"),
        fork=bool(node.get("isFork", False)),
        archived=bool(node.get("isArchived", False)),
        stargazers_count=node.get("stargazerCount", 0),
        language=primary_language.get("name"),
        pushed_at=parse_timestamp(node.get("pushedAt")),
    )


def parse_repository_connection(data: Dict[str, Any], connection: str) -> RepositoryConnection:
    """
    Narrow ``data.user.<connection>.nodes`` into repositories.

    Raises:
        GraphQLError: If the payload does not have the expected shape.
    """
    user = data.get("user")
    if user is None:
        return RepositoryConnection(user_found=False)

    nodes = (user.get(connection) or {}).get("nodes")
    if not isinstance(nodes, list):
        raise GraphQLError([f"unexpected response shape for {connection}"])

    repositories = []
    for node in nodes:
        repo = parse_repository_node(node)
        if repo is not None:
            repositories.append(repo)
    return RepositoryConnection(user_found=True, repositories=repositories)


def parse_issue_counts(data: Dict[str, Any], aliases: Dict[str, str]) -> Dict[str, int]:
    """
    Read ``issueCount`` for each aliased search field.

    Args:
        data: GraphQL data payload (possibly partial).
        aliases: Mapping of alias to repository full name.

    Returns:
        Mapping of full name to count, only for aliases present in ``data``.
    """
    counts = {}
    for alias, full_name in aliases.items():
        result = data.get(alias)
        if isinstance(result, dict) and isinstance(result.get("issueCount"), int):
            counts[full_name] = result["issueCount"]
    return counts


def unique_by_full_name(repositories: Sequence[Repository]) -> List[Repository]:
    """Drop repeated full names, keeping the first occurrence."""
    seen = set()
    unique = []
    for repo in repositories:
        if repo.full_name not in seen:
            seen.add(repo.full_name)
            unique.append(repo)
    return unique
