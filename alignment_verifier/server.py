"""HTTP API for alignment verification."""

import os
from pathlib import Path

import structlog
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from alignment_verifier.config.settings import AppSettings
from alignment_verifier.engine.verifier import run_verification
from alignment_verifier.exceptions import AlignmentVerifierError, ConfigurationError, ExternalServiceError
from alignment_verifier.providers.factory import create_task_tracker

log = structlog.get_logger(__name__)

app = FastAPI(title="Alignment Verifier")

# Global state
settings: AppSettings | None = None


class VerifyAlignmentRequest(BaseModel):
    """Body of POST /verify-alignment."""

    repo: str = Field(..., min_length=1, description="Repository name on the code host")
    project: str | None = Field(default=None, description="Project key or name; omit for all projects")
    statuses: list[str] | None = Field(default=None, description="Status fragments to restrict to")
    max_tasks: int | None = Field(default=None, ge=1, description="Maximum number of tasks to check")


def load_settings() -> AppSettings:
    """Load settings from ALIGNMENT_CONFIG (a YAML path) or the environment."""
    config_path = os.getenv("ALIGNMENT_CONFIG", "alignment_config.yaml")
    if Path(config_path).exists():
        return AppSettings.from_yaml(config_path)
    return AppSettings()


@app.on_event("startup")
async def startup() -> None:
    """Initialize on startup."""
    global settings
    try:
        settings = load_settings()
        log.info("server_started")
    except ConfigurationError as e:
        log.error("server_startup_failed", error=e.message, exc_info=True)
        raise


def get_settings() -> AppSettings:
    if settings is None:
        return load_settings()
    return settings


@app.post("/verify-alignment")
async def verify_alignment(body: VerifyAlignmentRequest, app_settings: AppSettings = Depends(get_settings)) -> dict:
    """Verify task statuses of a project against a repository."""
    log.info("verify_request_received", repo=body.repo, project=body.project)

    try:
        report = await run_verification(
            app_settings,
            body.repo,
            project_hint=body.project,
            status_filter=body.statuses,
            max_tasks=body.max_tasks,
        )
    except ConfigurationError as e:
        log.warning("verify_request_misconfigured", service=e.service, error=e.message)
        raise HTTPException(status_code=400, detail=e.message) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except AlignmentVerifierError as e:
        log.error("verify_request_failed", error=e.message, exc_info=True)
        raise HTTPException(status_code=422, detail=e.message) from e

    return {"ok": True, **report.to_dict()}


@app.get("/projects")
async def list_projects(app_settings: AppSettings = Depends(get_settings)) -> dict:
    """List projects visible in the task tracker."""
    try:
        async with create_task_tracker(app_settings) as tracker:
            found = await tracker.list_projects()
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=e.message) from e
    except ExternalServiceError as e:
        log.error("project_listing_failed", error=e.message, status=e.status_code)
        raise HTTPException(status_code=502, detail=e.message) from e

    return {
        "ok": True,
        "projects": [{"id": p.id, "key": p.key, "name": p.name} for p in found],
    }


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "service": "alignment-verifier"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)  # nosec B104 # Development server binding
