from __future__ import annotations

import datetime
from typing import Annotated

from fastapi import APIRouter, Query, status
from fastapi.responses import FileResponse
from pydantic import BaseModel

from personal_blog.api.dependencies import TrackerDep
from personal_blog.services.log_tasks import LogTaskStatus

router = APIRouter(prefix="/api/logs", tags=["logs"])


class LogTaskOut(BaseModel):
    task_id: str
    status: LogTaskStatus


class LogTaskStatusOut(BaseModel):
    task_id: str
    status: LogTaskStatus
    date: datetime.date | None


@router.post("", response_model=LogTaskOut, status_code=status.HTTP_202_ACCEPTED)
def create_log_task(
    tracker: TrackerDep,
    date: Annotated[str, Query(description="Day to export, YYYY-MM-DD")],
) -> LogTaskOut:
    task_id = tracker.submit(date)
    return LogTaskOut(task_id=task_id, status=LogTaskStatus.IN_PROGRESS)


@router.get("/{task_id}/status", response_model=LogTaskStatusOut)
def get_log_task_status(task_id: str, tracker: TrackerDep) -> LogTaskStatusOut:
    info = tracker.get_status(task_id)
    return LogTaskStatusOut(task_id=info.task_id, status=info.status, date=info.date)


@router.get("/{task_id}/download", response_class=FileResponse)
def download_log(task_id: str, tracker: TrackerDep) -> FileResponse:
    artifact = tracker.get_artifact(task_id)
    return FileResponse(
        artifact.path,
        media_type="application/octet-stream",
        headers={
            "Content-Disposition": f'attachment; filename="{artifact.download_name}"'
        },
    )
