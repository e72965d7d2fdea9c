import logging
import zlib
import subprocess
from pathlib import Path
from typing import List, Tuple

from .models import CommitObject

logger = logging.getLogger(__name__)

# Enough of the inflated stream to cover any "type size\0" header
_HEADER_PROBE = 64


def _loose_path(oid: str, git_dir: Path) -> Path:
    return git_dir / "objects" / oid[:2] / oid[2:]


def _split_header(raw_data: bytes) -> Tuple[bytes, bytes]:
    # format: "type size\0content"
    null_idx = raw_data.find(b"\x00")
    if null_idx == -1:
        raise ValueError("Invalid object format (no null byte)")

    header = raw_data[:null_idx]
    parts = header.split(b" ")
    if len(parts) != 2:
        raise ValueError(f"Invalid object header: {header!r}")
    return parts[0], raw_data[null_idx + 1:]


def _git(git_dir: Path, *args: str) -> bytes:
    cmd = ["git", "--git-dir", str(git_dir), *args]
    proc = subprocess.run(cmd, capture_output=True, check=True)
    return proc.stdout


def read_raw_object(oid: str, git_dir: Path = Path(".git")) -> Tuple[bytes, bytes]:
    """Read an object by its SHA-1 hash, returning its type and raw content."""
    if len(oid) != 40:
        raise ValueError(f"Invalid Object ID: {oid}")

    path = _loose_path(oid, git_dir)
    if not path.exists():
        # Fallback: Try to read from git (handles packed objects)
        logger.debug("Object %s is not loose, asking git", oid)
        try:
            obj_type = _git(git_dir, "cat-file", "-t", oid).strip()
            # 'git cat-file <type>' returns the RAW content, '-p' would pretty print
            raw_data = _git(git_dir, "cat-file", obj_type.decode(), oid)
        except FileNotFoundError as e:
            raise FileNotFoundError(f"Object {oid} not found in {path} and git is unavailable") from e
        except subprocess.CalledProcessError as e:
            # If git fails too, then it's really gone
            stderr_msg = e.stderr.decode(errors="replace").strip() if e.stderr else "No stderr"
            raise FileNotFoundError(f"Object {oid} not found in {path} or packfiles. Git Error: {stderr_msg}") from e
        return obj_type, raw_data

    try:
        raw_data = zlib.decompress(path.read_bytes())
    except zlib.error as e:
        raise ValueError(f"Corrupt object {oid}: {e}") from e
    return _split_header(raw_data)


def read_object(oid: str, git_dir: Path = Path(".git")) -> CommitObject:
    """Read a commit object from the git directory by its SHA-1 hash."""
    obj_type, content = read_raw_object(oid, git_dir)
    if obj_type != b"commit":
        raise ValueError(f"Object {oid} is a {obj_type.decode(errors='replace')}, not a commit")

    obj = CommitObject.deserialize(content)
    obj.oid = oid
    return obj


def read_loose_type(oid: str, git_dir: Path = Path(".git")) -> bytes:
    """Returns the type of a loose object, inflating only its header."""
    decompressor = zlib.decompressobj()
    with open(_loose_path(oid, git_dir), "rb") as f:
        head = decompressor.decompress(f.read(4096), _HEADER_PROBE)
    obj_type, _ = _split_header(head)
    return obj_type


def enumerate_objects(git_dir: Path = Path(".git")) -> List[str]:
    """Returns all loose object IDs found in the .git/objects/ directory."""
    objects_dir = git_dir / "objects"
    if not objects_dir.exists():
        return []

    oids = []
    # .git/objects/XX/YYYY...
    for subdir in sorted(objects_dir.iterdir()):
        if subdir.is_dir() and len(subdir.name) == 2:
            try:
                # Check if it's hex
                int(subdir.name, 16)
            except ValueError:
                continue

            for file in sorted(subdir.iterdir()):
                if file.is_file():
                    oid = subdir.name + file.name
                    oids.append(oid)
    return oids


def has_packs(git_dir: Path = Path(".git")) -> bool:
    pack_dir = git_dir / "objects" / "pack"
    return pack_dir.is_dir() and any(pack_dir.glob("*.pack"))


def enumerate_packed_objects(git_dir: Path = Path(".git")) -> List[Tuple[str, bytes]]:
    """Lists (oid, type) for every object git knows about, packed ones included."""
    output = _git(
        git_dir,
        "cat-file",
        "--batch-check=%(objectname) %(objecttype)",
        "--batch-all-objects",
    )
    entries = []
    for line in output.splitlines():
        parts = line.split(b" ")
        if len(parts) == 2:
            entries.append((parts[0].decode(), parts[1]))
    return entries
