from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Set


@dataclass
class CommitNode:
    oid: str
    timestamp: datetime
    parents: List[str] = field(default_factory=list)
    children: Set[str] = field(default_factory=set)
    # Set exactly once, when the node's parents have all been resolved
    resolved_timestamp: Optional[datetime] = None

    @property
    def is_resolved(self) -> bool:
        return self.resolved_timestamp is not None


@dataclass(frozen=True)
class Change:
    """A commit whose timestamp precedes one of its parents, and its fix."""

    commit_oid: str
    original_timestamp: datetime
    corrected_timestamp: datetime
    # None only for a root commit dated before the epoch
    causing_parent_oid: Optional[str]


@dataclass(frozen=True)
class TraversalError:
    """A commit that could not be read while resolving the graph."""

    parent_oid: str
    message: str
    # The commit that was waiting on parent_oid; None for an enumerated commit
    commit_oid: Optional[str] = None
