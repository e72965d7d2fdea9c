import hashlib
import zlib
from datetime import timedelta
from pathlib import Path

import pytest

from gitchrono.errors import CommitReadError
from gitchrono.git_objects.models import EPOCH, CommitMetadata, CommitObject, Signature


def ts(seconds):
    """Timestamp `seconds` after the epoch, in UTC."""
    return EPOCH + timedelta(seconds=seconds)


class FakeReader:
    """In-memory stand-in for GitRepository."""

    def __init__(self):
        self.commits = {}
        self.order = []
        self.reads = []

    def add(self, oid, when, parents=(), committer_when=None, author="Alice"):
        self.commits[oid] = CommitMetadata(
            oid=oid,
            author=Signature(author, f"{author.lower()}@example.com", ts(when)),
            committer=Signature("Carol", "carol@example.com", ts(committer_when if committer_when is not None else when)),
            parent_oids=list(parents),
        )
        self.order.append(oid)
        return oid

    def enumerate_commits(self):
        return list(self.order)

    def get_commit_metadata(self, oid):
        self.reads.append(oid)
        if oid not in self.commits:
            raise CommitReadError(oid, "object not found")
        return self.commits[oid]


@pytest.fixture
def reader():
    return FakeReader()


class RepoBuilder:
    """Writes loose objects into a fresh .git directory."""

    def __init__(self, root: Path):
        self.root = root
        self.git_dir = root / ".git"
        (self.git_dir / "objects").mkdir(parents=True)
        (self.git_dir / "refs" / "heads").mkdir(parents=True)
        (self.git_dir / "HEAD").write_text("ref: refs/heads/main\n")
        self.tree_oid = self.write(b"tree", b"")

    def write(self, obj_type: bytes, data: bytes) -> str:
        store = obj_type + f" {len(data)}".encode() + b"\x00" + data
        oid = hashlib.sha1(store).hexdigest()
        path = self.git_dir / "objects" / oid[:2] / oid[2:]
        path.parent.mkdir(exist_ok=True)
        path.write_bytes(zlib.compress(store))
        return oid

    def commit(self, when, parents=(), message="", committer_when=None, name="Alice"):
        author = Signature(name, f"{name.lower()}@example.com", ts(when))
        committer = Signature("Carol", "carol@example.com", ts(committer_when if committer_when is not None else when))
        c = CommitObject(
            tree_oid=self.tree_oid,
            parent_oids=list(parents),
            author=author.serialize(),
            committer=committer.serialize(),
            message=message or f"commit at {when}",
        )
        return self.write(b"commit", c.serialize())


@pytest.fixture
def repo(tmp_path):
    return RepoBuilder(tmp_path / "repo")
