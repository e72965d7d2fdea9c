from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional
import re

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# "Name <email> 1234567890 +0200"
_SIGNATURE_RE = re.compile(
    r"^(?P<name>.*?)\s*<(?P<email>[^>]*)>\s+(?P<seconds>-?\d+)\s+(?P<offset>[+-]\d{4})\s*$"
)


@dataclass(frozen=True)
class Signature:
    name: str
    email: str
    when: datetime

    @classmethod
    def parse(cls, raw: str) -> "Signature":
        """Parses an author/committer header value into a timezone-aware signature."""
        match = _SIGNATURE_RE.match(raw)
        if not match:
            raise ValueError(f"Invalid signature: {raw!r}")

        offset = match.group("offset")
        minutes = int(offset[1:3]) * 60 + int(offset[3:5])
        if offset[0] == "-":
            minutes = -minutes
        tz = timezone(timedelta(minutes=minutes))

        # Arithmetic on EPOCH keeps pre-1970 timestamps portable
        try:
            when = (EPOCH + timedelta(seconds=int(match.group("seconds")))).astimezone(tz)
        except OverflowError:
            raise ValueError(f"Invalid signature: {raw!r}") from None
        return cls(name=match.group("name"), email=match.group("email"), when=when)

    def serialize(self) -> str:
        seconds = int((self.when - EPOCH).total_seconds())
        offset = self.when.utcoffset() or timedelta(0)
        total = int(offset.total_seconds()) // 60
        sign = "-" if total < 0 else "+"
        hours, minutes = divmod(abs(total), 60)
        return f"{self.name} <{self.email}> {seconds} {sign}{hours:02d}{minutes:02d}"

    def identity(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass
class GitObject(ABC):
    oid: Optional[str] = field(default=None, init=False)

    @property
    @abstractmethod
    def type(self) -> bytes:
        pass

    @abstractmethod
    def serialize(self) -> bytes:
        pass

    @classmethod
    @abstractmethod
    def deserialize(cls, data: bytes) -> "GitObject":
        pass


@dataclass
class CommitObject(GitObject):
    tree_oid: str
    parent_oids: List[str]
    author: str
    committer: str
    message: str

    @property
    def type(self) -> bytes:
        return b"commit"

    @property
    def author_signature(self) -> Signature:
        return Signature.parse(self.author)

    @property
    def committer_signature(self) -> Signature:
        return Signature.parse(self.committer)

    def serialize(self) -> bytes:
        lines = []
        lines.append(f"tree {self.tree_oid}".encode())
        for p in self.parent_oids:
            lines.append(f"parent {p}".encode())
        lines.append(f"author {self.author}".encode())
        lines.append(f"committer {self.committer}".encode())
        lines.append(b"")
        lines.append(self.message.encode())

        return b"\n".join(lines)

    @classmethod
    def deserialize(cls, data: bytes) -> "CommitObject":
        # Commit headers may carry legacy encodings; identities are all we need
        content = data.decode(errors="replace")
        lines = content.split("\n")

        tree_oid = ""
        parent_oids = []
        author = ""
        committer = ""

        i = 0
        # Parse headers
        while i < len(lines):
            line = lines[i]
            if not line:
                # Empty line indicates end of headers
                i += 1
                break

            if line.startswith("tree "):
                tree_oid = line[5:]
            elif line.startswith("parent "):
                parent_oids.append(line[7:])
            elif line.startswith("author "):
                author = line[7:]
            elif line.startswith("committer "):
                committer = line[10:]
            i += 1

        # The rest is the message
        message = "\n".join(lines[i:])

        return cls(
            tree_oid=tree_oid,
            parent_oids=parent_oids,
            author=author,
            committer=committer,
            message=message
        )


@dataclass(frozen=True)
class CommitMetadata:
    """What the resolver and the reports need to know about one commit."""

    oid: str
    author: Signature
    committer: Signature
    parent_oids: List[str] = field(default_factory=list)

    @property
    def author_time(self) -> datetime:
        return self.author.when

    @property
    def committer_time(self) -> datetime:
        return self.committer.when

    @classmethod
    def from_commit(cls, oid: str, commit: CommitObject) -> "CommitMetadata":
        return cls(
            oid=oid,
            author=commit.author_signature,
            committer=commit.committer_signature,
            parent_oids=list(commit.parent_oids),
        )
