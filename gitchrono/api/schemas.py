from typing import List, Optional
from pydantic import BaseModel

class ParentResponse(BaseModel):
    oid: str
    # Resolved time of the parent; corrected if the parent was itself changed
    current: str
    changed_by: Optional[str] = None
    author: str
    committer: str

class ChangeResponse(BaseModel):
    commit_oid: str
    original: str
    corrected: str
    causing_parent_oid: Optional[str] = None
    # Only filled in for output=long
    author: Optional[str] = None
    committer: Optional[str] = None
    parent: Optional[ParentResponse] = None

class TraversalErrorResponse(BaseModel):
    commit_oid: Optional[str] = None
    parent_oid: str
    message: str

class SummaryResponse(BaseModel):
    repo: str
    time_source: str
    commits: int
    changes: int
    errors: int
