"""Run configuration: which timestamp to trust and how to report."""

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List

from gitchrono.errors import ConfigurationError
from gitchrono.git_objects.models import CommitMetadata


class TimeSource(str, Enum):
    """Which of a commit's two timestamps is checked for consistency."""

    AUTHOR = "author"
    COMMITTER = "committer"

    @classmethod
    def parse(cls, value: str) -> "TimeSource":
        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError):
            raise ConfigurationError(
                f'time source must be either "author" or "committer", got {value!r}'
            ) from None

    def pick(self, metadata: CommitMetadata) -> datetime:
        if self is TimeSource.AUTHOR:
            return metadata.author_time
        return metadata.committer_time


class OutputMode(str, Enum):
    """Report flavour; each mode is a distinct value."""

    SHORT = "short"
    LONG = "long"
    ERRORS = "errors"

    @classmethod
    def parse(cls, value: str) -> "OutputMode":
        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError):
            raise ConfigurationError(
                f'output must be either "short", "long" or "errors", got {value!r}'
            ) from None


@dataclass
class Settings:
    """Settings for the HTTP API, read from the environment."""

    repo_path: Path = Path(".")
    time_source: TimeSource = TimeSource.AUTHOR
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        # GIT_DIR may point at a working tree or a bare git directory
        repo_path = Path(os.getenv("GIT_DIR", "."))
        time_source = TimeSource.parse(os.getenv("GIT_CHRONO_TIME_SOURCE", "author"))
        # In production, set ALLOWED_ORIGINS to a comma-separated list of domains
        allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "*")
        allowed_origins = [origin.strip() for origin in allowed_origins_env.split(",")]
        return cls(repo_path=repo_path, time_source=time_source, allowed_origins=allowed_origins)
