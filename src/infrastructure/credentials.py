"""Bearer credential lookup for the GitHub API."""

import os
from typing import Mapping, Optional

# Checked in order; the first non-empty value wins.
TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN", "GITHUB_API_TOKEN")


def resolve_token(env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Return the GitHub token from the environment, or None if none is set.

    Args:
        env: Mapping to read from. Defaults to ``os.environ``.
    """
    if env is None:
        env = os.environ

    for name in TOKEN_ENV_VARS:
        value = (env.get(name) or "").strip()
        if value:
            return value
    return None
