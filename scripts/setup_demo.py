import hashlib
import shutil
import zlib
from datetime import datetime, timezone
from pathlib import Path

from gitchrono.config import OutputMode, TimeSource
from gitchrono.dag.resolver import ConsistencyResolver
from gitchrono.git_objects.models import CommitObject, Signature
from gitchrono.git_objects.repository import GitRepository
from gitchrono.report import render

EMPTY_TREE = b""


def write_object(obj_type: bytes, data: bytes, git_dir: Path) -> str:
    # Compute header and content
    header = obj_type + f" {len(data)}".encode() + b"\x00"
    store = header + data

    # Compute OID
    oid = hashlib.sha1(store).hexdigest()

    # Write to disk
    obj_dir = git_dir / "objects" / oid[:2]
    obj_dir.mkdir(parents=True, exist_ok=True)
    obj_file = obj_dir / oid[2:]

    if not obj_file.exists():
        obj_file.write_bytes(zlib.compress(store))

    return oid


def commit(git_dir: Path, tree_oid: str, parents, when: datetime, message: str) -> str:
    signature = Signature("User", "user@example.com", when).serialize()
    obj = CommitObject(
        tree_oid=tree_oid,
        parent_oids=list(parents),
        author=signature,
        committer=signature,
        message=message,
    )
    oid = write_object(obj.type, obj.serialize(), git_dir)
    print(f"Created {message!r}: {oid} at {when.isoformat()}")
    return oid


def main():
    repo_dir = Path("demo_repo")
    if repo_dir.exists():
        shutil.rmtree(repo_dir)

    git_dir = repo_dir / ".git"
    (git_dir / "objects").mkdir(parents=True)
    (git_dir / "refs" / "heads").mkdir(parents=True)
    (git_dir / "HEAD").write_text("ref: refs/heads/main\n")

    print(f"Creating demo repo in {repo_dir}...")
    tree_oid = write_object(b"tree", EMPTY_TREE, git_dir)

    # The second commit claims to predate the first, and the merge predates both
    c1 = commit(git_dir, tree_oid, [], datetime(2024, 5, 1, 12, tzinfo=timezone.utc), "Initial commit")
    c2 = commit(git_dir, tree_oid, [c1], datetime(2024, 4, 1, 12, tzinfo=timezone.utc), "Clock skew")
    c3 = commit(git_dir, tree_oid, [c1], datetime(2024, 5, 2, 12, tzinfo=timezone.utc), "Feature")
    c4 = commit(git_dir, tree_oid, [c2, c3], datetime(2024, 3, 1, 12, tzinfo=timezone.utc), "Merge")
    (git_dir / "refs" / "heads" / "main").write_text(c4 + "\n")

    repository = GitRepository.open(repo_dir)
    resolution = ConsistencyResolver(repository, TimeSource.AUTHOR).resolve_all()

    print("\n--- Changes ---")
    for line in render(OutputMode.LONG, resolution, repository, TimeSource.AUTHOR):
        print(line)

if __name__ == "__main__":
    main()
