from datetime import datetime
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from gitchrono.dag.models import CommitNode
from gitchrono.errors import GraphStateError

# Returns the commit's own (timestamp, ordered parent ids)
MetadataFn = Callable[[], Tuple[datetime, List[str]]]


class CommitGraphCache:
    """One node per visited commit, keyed by oid. Holds no traversal logic."""

    def __init__(self):
        self.nodes: Dict[str, CommitNode] = {}

    def __contains__(self, oid: str) -> bool:
        return oid in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[CommitNode]:
        return iter(self.nodes.values())

    def get(self, oid: str) -> Optional[CommitNode]:
        return self.nodes.get(oid)

    def get_or_create(self, oid: str, metadata_fn: MetadataFn) -> Tuple[CommitNode, bool]:
        """Returns (node, already_existed).

        ``metadata_fn`` is only called for unknown ids. If it raises, the
        exception propagates and nothing is cached.
        """
        node = self.nodes.get(oid)
        if node is not None:
            return node, True

        timestamp, parent_oids = metadata_fn()
        node = CommitNode(oid=oid, timestamp=timestamp, parents=list(parent_oids))
        self.nodes[oid] = node
        return node, False

    def register_child(self, parent: CommitNode, child: Optional[CommitNode]) -> None:
        if child is None:
            return
        parent.children.add(child.oid)

    def record_resolved(self, node: CommitNode, value: datetime) -> None:
        if node.resolved_timestamp is not None:
            raise GraphStateError(f"Commit {node.oid} was already resolved")
        node.resolved_timestamp = value
