from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from typing import List

from gitchrono.api.service import ChronologyService
from gitchrono.api.schemas import ChangeResponse, SummaryResponse, TraversalErrorResponse
from gitchrono.config import OutputMode, Settings
from gitchrono.errors import CommitReadError, ConfigurationError, RepositoryOpenError

import logging

# Configure Logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = Settings.from_env()

app = FastAPI(title="Git Chronology API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize Service
# By default look in CWD. Can be overridden by env var GIT_DIR.
service = ChronologyService(settings.repo_path, settings.time_source)


def _loaded(reload: bool = False) -> ChronologyService:
    try:
        if reload:
            service.refresh()
        else:
            service.ensure_loaded()
    except RepositoryOpenError as e:
        logger.error(f"Failed to open repository: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    return service


def _parse_mode(output: str) -> OutputMode:
    try:
        mode = OutputMode.parse(output)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if mode is OutputMode.ERRORS:
        raise HTTPException(status_code=400, detail="Traversal errors are served by /api/errors")
    return mode


@app.get("/api/summary", response_model=SummaryResponse)
def get_summary():
    """Counts of commits, changes and traversal errors."""
    return _loaded().get_summary()

@app.get("/api/changes", response_model=List[ChangeResponse])
def get_changes(output: str = "short"):
    """Commits whose timestamp had to be corrected."""
    mode = _parse_mode(output)
    try:
        return _loaded().get_changes(mode)
    except CommitReadError as e:
        raise HTTPException(status_code=500, detail=str(e))

@app.get("/api/changes/{oid}", response_model=ChangeResponse)
def get_change(oid: str, output: str = "long"):
    mode = _parse_mode(output)
    try:
        change = _loaded().get_change(oid, mode)
    except CommitReadError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not change:
        raise HTTPException(status_code=404, detail="Change not found")
    return change

@app.post("/api/refresh", response_model=SummaryResponse)
def refresh():
    """Re-reads the repository, picking up new commits."""
    return _loaded(reload=True).get_summary()

@app.get("/api/errors", response_model=List[TraversalErrorResponse])
def get_errors():
    """Commits that could not be read while resolving the graph."""
    return _loaded().get_errors()

@app.get("/health")
def health_check():
    return {"status": "ok", "repo": str(service.repo_path), "time_source": service.time_source.value}
