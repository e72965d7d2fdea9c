"""Human readable renderings of a resolution.

The long report re-reads identities from the repository; the resolver keeps
only timestamps and edges in memory.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from gitchrono.config import OutputMode, TimeSource
from gitchrono.dag.models import Change, TraversalError
from gitchrono.dag.resolver import Resolution
from gitchrono.errors import ConfigurationError
from gitchrono.git_objects.models import CommitMetadata

SEPARATOR = "-" * 45


def format_timestamp(when: datetime) -> str:
    """UTC, ISO-8601, explicit offset: 2021-03-04T05:06:07+00:00."""
    return when.astimezone(timezone.utc).isoformat()


@dataclass(frozen=True)
class ChangeDetail:
    """A change together with everything the long report prints about it."""

    change: Change
    commit: CommitMetadata
    parent: Optional[CommitMetadata]
    # The parent's timestamp as the resolver saw it
    parent_current: Optional[datetime]
    # Set when the parent was itself corrected, to the commit that caused that
    parent_changed_by: Optional[str]


def describe_change(change: Change, changes: Dict[str, Change], reader,
                    time_source: TimeSource) -> ChangeDetail:
    commit = reader.get_commit_metadata(change.commit_oid)
    if change.causing_parent_oid is None:
        return ChangeDetail(change, commit, None, None, None)

    parent = reader.get_commit_metadata(change.causing_parent_oid)
    parent_change = changes.get(change.causing_parent_oid)
    if parent_change is not None:
        return ChangeDetail(
            change, commit, parent,
            parent_current=parent_change.corrected_timestamp,
            parent_changed_by=parent_change.causing_parent_oid,
        )
    return ChangeDetail(change, commit, parent, time_source.pick(parent), None)


def render_short(changes: Dict[str, Change]) -> List[str]:
    return [
        f'commit "{oid}" from "{format_timestamp(change.original_timestamp)}" '
        f'to "{format_timestamp(change.corrected_timestamp)}"'
        for oid, change in changes.items()
    ]


def _render_detail(detail: ChangeDetail) -> str:
    change = detail.change
    lines = [
        SEPARATOR,
        f"commit:       {change.commit_oid}",
        f"author:       {detail.commit.author.identity()}",
        f"committer:    {detail.commit.committer.identity()}",
        f"original:     {format_timestamp(change.original_timestamp)}",
        f"changed:      {format_timestamp(change.corrected_timestamp)}",
    ]
    if detail.parent is None:
        lines.append("parent causing the change: none (commit predates the epoch)")
        return "\n".join(lines)

    current = format_timestamp(detail.parent_current)
    if detail.parent_changed_by is not None:
        current = f"{current} (changed by commit {detail.parent_changed_by})"
    lines += [
        "parent causing the change:",
        f"  commit:     {detail.parent.oid}",
        f"  current:    {current}",
        f"  author:     {detail.parent.author.identity()}",
        f"  committer:  {detail.parent.committer.identity()}",
    ]
    return "\n".join(lines)


def render_long(changes: Dict[str, Change], reader, time_source: TimeSource) -> List[str]:
    return [
        _render_detail(describe_change(change, changes, reader, time_source))
        for change in changes.values()
    ]


def render_errors(errors: Iterable[TraversalError]) -> List[str]:
    lines = []
    for error in errors:
        if error.commit_oid is None:
            lines.append(f'#ERROR commit "{error.parent_oid}": {error.message}')
        else:
            lines.append(
                f'#ERROR commit "{error.parent_oid}" (parent of "{error.commit_oid}"): {error.message}'
            )
    return lines


def render(mode: OutputMode, resolution: Resolution, reader, time_source: TimeSource) -> List[str]:
    if mode is OutputMode.SHORT:
        return render_short(resolution.changes)
    if mode is OutputMode.LONG:
        return render_long(resolution.changes, reader, time_source)
    if mode is OutputMode.ERRORS:
        return render_errors(resolution.errors)
    raise ConfigurationError(f"Unknown output mode: {mode!r}")
