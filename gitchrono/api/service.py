import logging
from pathlib import Path
from typing import List, Optional

from gitchrono.api.schemas import (
    ChangeResponse,
    ParentResponse,
    SummaryResponse,
    TraversalErrorResponse,
)
from gitchrono.config import OutputMode, TimeSource
from gitchrono.dag.models import Change
from gitchrono.dag.resolver import ConsistencyResolver, Resolution
from gitchrono.git_objects.repository import GitRepository
from gitchrono.report import describe_change, format_timestamp

logger = logging.getLogger(__name__)


class ChronologyService:
    def __init__(self, repo_path: Path = Path("."), time_source: TimeSource = TimeSource.AUTHOR):
        self.repo_path = repo_path
        self.time_source = time_source
        self.repository: Optional[GitRepository] = None
        self.resolution: Optional[Resolution] = None

    def configure(self, repo_path: Path, time_source: Optional[TimeSource] = None):
        """Points the service at another repository and drops the cached result."""
        self.repo_path = repo_path
        if time_source is not None:
            self.time_source = time_source
        self.repository = None
        self.resolution = None

    def refresh(self):
        """Reopens the repository and resolves it again."""
        # RepositoryOpenError propagates to the caller
        self.repository = GitRepository.open(self.repo_path)
        self.resolution = ConsistencyResolver(self.repository, self.time_source).resolve_all()
        logger.info(
            "Resolved %s: %d commits, %d changes",
            self.repository.git_dir, self.resolution.commit_count, len(self.resolution.changes),
        )

    def ensure_loaded(self):
        if self.resolution is None:
            self.refresh()

    def get_summary(self) -> SummaryResponse:
        self.ensure_loaded()
        return SummaryResponse(
            repo=str(self.repository.git_dir),
            time_source=self.time_source.value,
            commits=self.resolution.commit_count,
            changes=len(self.resolution.changes),
            errors=len(self.resolution.errors),
        )

    def get_changes(self, mode: OutputMode = OutputMode.SHORT) -> List[ChangeResponse]:
        self.ensure_loaded()
        return [self._to_response(change, mode) for change in self.resolution.changes.values()]

    def get_change(self, oid: str, mode: OutputMode = OutputMode.LONG) -> Optional[ChangeResponse]:
        self.ensure_loaded()
        change = self.resolution.changes.get(oid)
        if not change:
            return None
        return self._to_response(change, mode)

    def get_errors(self) -> List[TraversalErrorResponse]:
        self.ensure_loaded()
        return [
            TraversalErrorResponse(
                commit_oid=error.commit_oid,
                parent_oid=error.parent_oid,
                message=error.message,
            )
            for error in self.resolution.errors
        ]

    def _to_response(self, change: Change, mode: OutputMode) -> ChangeResponse:
        response = ChangeResponse(
            commit_oid=change.commit_oid,
            original=format_timestamp(change.original_timestamp),
            corrected=format_timestamp(change.corrected_timestamp),
            causing_parent_oid=change.causing_parent_oid,
        )
        if mode is not OutputMode.LONG:
            return response

        detail = describe_change(change, self.resolution.changes, self.repository, self.time_source)
        response.author = detail.commit.author.identity()
        response.committer = detail.commit.committer.identity()
        if detail.parent is not None:
            response.parent = ParentResponse(
                oid=detail.parent.oid,
                current=format_timestamp(detail.parent_current),
                changed_by=detail.parent_changed_by,
                author=detail.parent.author.identity(),
                committer=detail.parent.committer.identity(),
            )
        return response
