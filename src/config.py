"""Sync settings read from environment variables."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_OUTPUT_FILE = os.path.join("src", "data", "github.json")


class ConfigurationError(Exception):
    """Raised when required settings are missing."""
    pass


def positive_int(value: Optional[str], default: int) -> int:
    """Parse a positive integer, falling back to ``default`` on anything else."""
    try:
        number = int((value or "").strip())
    except ValueError:
        return default
    return number if number > 0 else default


@dataclass(frozen=True)
class SyncSettings:
    """Settings for one snapshot sync run."""

    username: str
    contributed_min_stars: int = 1000
    recent_limit: int = 8
    recent_display_limit: int = 6
    contributed_limit: int = 100
    pinned_limit: int = 6
    output_file: str = DEFAULT_OUTPUT_FILE
    user_agent: str = ""

    @property
    def contributed_enabled(self) -> bool:
        return self.contributed_limit > 0 and self.contributed_min_stars > 0

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "SyncSettings":
        """
        Build settings from the environment.

        Raises:
            ConfigurationError: If GITHUB_USERNAME is not set.
        """
        if env is None:
            env = os.environ

        username = (env.get("GITHUB_USERNAME") or "").strip()
        if not username:
            raise ConfigurationError("Missing GITHUB_USERNAME")

        recent_limit = positive_int(env.get("RECENT_LIMIT"), 8)
        # Only what was fetched can be displayed.
        recent_display_limit = min(positive_int(env.get("RECENT_DISPLAY_LIMIT"), 6), recent_limit)

        return cls(
            username=username,
            contributed_min_stars=positive_int(env.get("CONTRIBUTED_MIN_STARS"), 1000),
            recent_limit=recent_limit,
            recent_display_limit=recent_display_limit,
            contributed_limit=positive_int(env.get("CONTRIBUTED_LIMIT"), 100),
            pinned_limit=positive_int(env.get("PINNED_LIMIT"), 6),
            output_file=env.get("GITHUB_SNAPSHOT_PATH") or DEFAULT_OUTPUT_FILE,
            user_agent=env.get("SITE_ID") or f"{username}.github.io",
        )
