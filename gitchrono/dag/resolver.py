import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from gitchrono.config import TimeSource
from gitchrono.dag.cache import CommitGraphCache
from gitchrono.dag.models import Change, CommitNode, TraversalError
from gitchrono.errors import CommitReadError
from gitchrono.git_objects.models import EPOCH

logger = logging.getLogger(__name__)

# A corrected commit lands strictly after its causing parent
CORRECTION_STEP = timedelta(seconds=1)


@dataclass
class _Frame:
    node: CommitNode
    next_parent: int = 0
    best_time: datetime = EPOCH
    best_parent: Optional[str] = None


@dataclass
class Resolution:
    changes: Dict[str, Change] = field(default_factory=dict)
    errors: List[TraversalError] = field(default_factory=list)
    commit_count: int = 0


class ConsistencyResolver:
    """Assigns every commit a timestamp no earlier than its parents'.

    ``reader`` is any object offering ``enumerate_commits()`` and
    ``get_commit_metadata(oid)``; ``GitRepository`` is the real one.

    Each commit is resolved once, after all of its parents. The walk uses an
    explicit stack so arbitrarily long histories never hit the recursion
    limit.
    """

    def __init__(self, reader, time_source: TimeSource = TimeSource.AUTHOR,
                 cache: Optional[CommitGraphCache] = None):
        self.reader = reader
        self.time_source = time_source
        self.cache = cache if cache is not None else CommitGraphCache()
        self.changes: Dict[str, Change] = {}
        self.errors: List[TraversalError] = []

    def resolve_all(self) -> Resolution:
        """Resolves every commit the reader enumerates."""
        oids = self.reader.enumerate_commits()
        for oid in oids:
            self.resolve(oid)
        logger.debug(
            "Resolved %d commits: %d changes, %d errors",
            len(self.cache), len(self.changes), len(self.errors),
        )
        return Resolution(changes=self.changes, errors=self.errors, commit_count=len(self.cache))

    def resolve(self, oid: str) -> Optional[datetime]:
        """Returns the resolved timestamp of ``oid``, or None if it cannot be read."""
        node = self.cache.get(oid)
        if node is not None:
            return node.resolved_timestamp

        try:
            node = self._load(oid)
        except CommitReadError as e:
            self._skip(None, oid, str(e))
            return None

        stack = [_Frame(node)]
        resolved = node.timestamp
        while stack:
            frame = stack[-1]
            current = frame.node

            if frame.next_parent < len(current.parents):
                parent_oid = current.parents[frame.next_parent]
                frame.next_parent += 1

                parent = self.cache.get(parent_oid)
                if parent is None:
                    try:
                        parent = self._load(parent_oid)
                    except CommitReadError as e:
                        self._skip(current.oid, parent_oid, str(e))
                        continue
                    # Descend; the frame picks the parent up once it is resolved
                    stack.append(_Frame(parent))
                elif not parent.is_resolved:
                    # Only a commit still on the stack is cached but unresolved
                    self._skip(current.oid, parent_oid, "cycle detected in commit graph")
                else:
                    self._adopt(frame, parent)
                continue

            stack.pop()
            resolved = self._finalize(frame)
            if stack:
                self._adopt(stack[-1], current)

        return resolved

    def _read(self, oid: str) -> Tuple[datetime, List[str]]:
        metadata = self.reader.get_commit_metadata(oid)
        return self.time_source.pick(metadata), metadata.parent_oids

    def _load(self, oid: str) -> CommitNode:
        node, _ = self.cache.get_or_create(oid, lambda: self._read(oid))
        return node

    def _adopt(self, frame: _Frame, parent: CommitNode) -> None:
        self.cache.register_child(parent, frame.node)
        # Strict comparison: the first parent reaching the maximum keeps it
        if parent.resolved_timestamp > frame.best_time:
            frame.best_time = parent.resolved_timestamp
            frame.best_parent = parent.oid

    def _finalize(self, frame: _Frame) -> datetime:
        node = frame.node
        if node.timestamp >= frame.best_time:
            resolved = node.timestamp
        else:
            resolved = frame.best_time + CORRECTION_STEP
            self.changes[node.oid] = Change(
                commit_oid=node.oid,
                original_timestamp=node.timestamp,
                corrected_timestamp=resolved,
                causing_parent_oid=frame.best_parent,
            )
        self.cache.record_resolved(node, resolved)
        return resolved

    def _skip(self, commit_oid: Optional[str], parent_oid: str, message: str) -> None:
        if commit_oid is None:
            logger.warning("Skipping commit %s: %s", parent_oid, message)
        else:
            logger.warning("Skipping parent %s of %s: %s", parent_oid, commit_oid, message)
        self.errors.append(TraversalError(parent_oid=parent_oid, message=message, commit_oid=commit_oid))


def find_changes(reader, time_source: TimeSource = TimeSource.AUTHOR) -> Resolution:
    return ConsistencyResolver(reader, time_source).resolve_all()
