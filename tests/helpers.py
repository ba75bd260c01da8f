"""Payload builders shared by the test modules."""

from unittest.mock import AsyncMock, MagicMock


def rest_repo(name, pushed_at, owner="octo", fork=False, archived=False, stars=0):
    return {
        "name": name,
        "full_name": f"{owner}/{name}",
        "html_url": f"https://github.com/{owner}/{name}",
        "description": f"{name} description",
        "fork": fork,
        "archived": archived,
        "stargazers_count": stars,
        "language": "Python",
        "pushed_at": pushed_at,
    }


def graphql_repo(full_name, stars=0, fork=False, archived=False, pushed_at="2024-05-01T00:00:00Z"):
    return {
        "name": full_name.split("/", 1)[1],
        "nameWithOwner": full_name,
        "url": f"https://github.com/{full_name}",
        "description": None,
        "isFork": fork,
        "isArchived": archived,
        "stargazerCount": stars,
        "pushedAt": pushed_at,
        "primaryLanguage": {"name": "Go"},
    }


def user_payload(login="octo"):
    return {
        "login": login,
        "name": "Octo Cat",
        "html_url": f"https://github.com/{login}",
        "avatar_url": f"https://avatars.githubusercontent.com/{login}",
        "bio": None,
        "blog": "https://octo.example",
        "company": None,
        "location": "Earth",
        "twitter_username": None,
        "public_repos": 10,
        "followers": 5,
        "following": 1,
        "created_at": "2015-03-01T12:00:00Z",
    }


def fake_client(token="test-token"):
    """A GitHubClient stand-in with awaitable fetch methods."""
    client = MagicMock()
    client.token = token
    client.get_json = AsyncMock()
    client.graphql = AsyncMock()
    return client


def fake_response(status=200, body=None):
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.json.return_value = body
    return response
