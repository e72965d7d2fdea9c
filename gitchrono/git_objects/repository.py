import logging
import os
import subprocess
import zlib
from pathlib import Path
from typing import List, Union

from gitchrono.errors import CommitReadError, RepositoryOpenError
from gitchrono.git_objects.models import CommitMetadata
from gitchrono.git_objects.parser import (
    enumerate_objects,
    enumerate_packed_objects,
    has_packs,
    read_loose_type,
    read_object,
)

logger = logging.getLogger(__name__)


def _is_git_dir(path: Path) -> bool:
    return (path / "objects").is_dir() and (path / "HEAD").is_file()


class GitRepository:
    """Reads commits straight from a repository's object storage."""

    def __init__(self, git_dir: Path):
        self.git_dir = git_dir

    @classmethod
    def open(cls, path: Union[str, os.PathLike]) -> "GitRepository":
        """Opens a working tree (containing .git) or a bare git directory."""
        raw = str(path).strip()
        if not raw:
            raise RepositoryOpenError(path, "empty repository path")
        root = Path(raw)
        if not root.exists():
            raise RepositoryOpenError(root, "no such directory")

        candidates = [root / ".git", root]
        for candidate in candidates:
            if _is_git_dir(candidate):
                logger.debug("Opened git directory %s", candidate)
                return cls(candidate.resolve())
        raise RepositoryOpenError(root)

    def enumerate_commits(self) -> List[str]:
        """Returns the id of every commit object in storage, once each."""
        seen = set()
        commits = []

        for oid in enumerate_objects(self.git_dir):
            try:
                obj_type = read_loose_type(oid, self.git_dir)
            except (OSError, ValueError, zlib.error) as e:
                logger.warning("Skipping unreadable loose object %s: %s", oid, e)
                continue
            if obj_type == b"commit" and oid not in seen:
                seen.add(oid)
                commits.append(oid)

        if has_packs(self.git_dir):
            try:
                packed = enumerate_packed_objects(self.git_dir)
            except (OSError, subprocess.CalledProcessError) as e:
                logger.warning("Cannot list packed objects in %s: %s", self.git_dir, e)
                packed = []
            for oid, obj_type in packed:
                if obj_type == b"commit" and oid not in seen:
                    seen.add(oid)
                    commits.append(oid)

        logger.debug("Enumerated %d commits in %s", len(commits), self.git_dir)
        return commits

    def get_commit_metadata(self, oid: str) -> CommitMetadata:
        try:
            commit = read_object(oid, self.git_dir)
            return CommitMetadata.from_commit(oid, commit)
        except (OSError, ValueError) as e:
            raise CommitReadError(oid, str(e)) from e
