"""FastAPI web application for the task time tracker."""

from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Dict, List, Optional
from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from tasktracker.database.database import get_db, init_db
from tasktracker.engine.categories import CategoryAnalysis
from tasktracker.engine.progress import TaskProgress
from tasktracker.errors import ErrorKind
from tasktracker.models.remaining_hours import RemainingHoursEntry
from tasktracker.models.task import EstimationData, Level, Task, TaskFilters, TaskStatus
from tasktracker.models.task_factory import create_task_base
from tasktracker.models.time_log import TimeLog
from tasktracker.services.tracker import OperationResult, TrackerService


ERROR_STATUS_CODES = {
    ErrorKind.INVALID_TRANSITION.value: 409,
    ErrorKind.INVALID_TASK_STATE.value: 409,
    ErrorKind.VALIDATION_ERROR.value: 422,
    ErrorKind.NOT_FOUND.value: 404,
    ErrorKind.STORE_FAILURE.value: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Task Time Tracker API",
    description="Task lifecycle, status history and time ledger",
    version="0.1.0",
    lifespan=lifespan,
)


def get_service(db: Session = Depends(get_db)) -> TrackerService:
    return TrackerService(db)


def _unwrap(result: OperationResult) -> Any:
    """Return the result's data or raise the matching HTTP error."""
    if result.success:
        return result.data
    status_code = ERROR_STATUS_CODES.get(result.error, 500)
    raise HTTPException(status_code=status_code, detail={"error": result.error, "message": result.message})


# Request models
class TaskCreateRequest(BaseModel):
    """Request model for creating a task."""
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    urgency: Optional[Level] = None
    importance: Optional[Level] = None
    estimate: Optional[float] = Field(None, ge=0)
    remaining_hours: Optional[float] = Field(None, ge=0)
    due_on: Optional[date] = None
    project_id: Optional[str] = None
    phase_key: Optional[str] = None
    category_lists: List[str] = Field(default_factory=list)
    estimation_data: Optional[EstimationData] = None


class TaskUpdateRequest(BaseModel):
    """Request model for editing a task. Omitted fields keep their stored value."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    urgency: Optional[Level] = None
    importance: Optional[Level] = None
    estimate: Optional[float] = Field(None, ge=0)
    remaining_hours: Optional[float] = Field(None, ge=0)
    due_on: Optional[date] = None
    project_id: Optional[str] = None
    phase_key: Optional[str] = None
    category_lists: Optional[List[str]] = None
    estimation_data: Optional[EstimationData] = None


class TimeLogCreateRequest(BaseModel):
    """Request model for logging time."""
    task_id: str
    hours: float
    date_logged: Optional[date] = None
    category_key: Optional[str] = None
    notes: Optional[str] = None
    decrement_remaining: bool = Field(True, description="Burn the task's remaining hours down by this log")


class RemainingHoursUpdateRequest(BaseModel):
    """Request model for setting remaining hours."""
    remaining_hours: float = Field(..., ge=0)
    note: str = ""


class CategoryAnalysisRequest(BaseModel):
    """Which time logs to analyze by category."""
    task_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# Response models
class TaskResponse(BaseModel):
    """Response for a single task."""
    task: Task


class TaskListResponse(BaseModel):
    """Response for a task listing."""
    tasks: List[Task]
    count: int


class TaskProgressResponse(BaseModel):
    """Response for a task's progress."""
    task_id: str
    progress: TaskProgress


class RemainingHoursResponse(BaseModel):
    """Response for the remaining-hours ledger."""
    task_id: str
    remaining_hours: Optional[float]
    history: List[RemainingHoursEntry]


class RemainingHoursUpdateResponse(BaseModel):
    """Response for a remaining-hours update."""
    task_id: str
    remaining_hours: float
    changed: bool


class TimeLogResponse(BaseModel):
    """Response for a saved time log."""
    time_log: TimeLog


class TimeLogListResponse(BaseModel):
    """Response for a time log listing."""
    time_logs: List[TimeLog]
    count: int
    total_hours: float


class DeleteResponse(BaseModel):
    """Response for a delete."""
    deleted: str


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/tasks", response_model=TaskListResponse)
async def list_tasks(
    status: Optional[TaskStatus] = None,
    urgency: Optional[Level] = None,
    project_id: Optional[str] = None,
    due_on: Optional[date] = None,
    include_all: bool = Query(False, description="Include Completed, Abandoned and Archived tasks"),
    service: TrackerService = Depends(get_service),
):
    """List tasks, newest first."""
    filters = TaskFilters(status=status, urgency=urgency, project_id=project_id, due_on=due_on)
    tasks = _unwrap(service.get_tasks(filters, include_all))
    return TaskListResponse(tasks=tasks, count=len(tasks))


@app.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(request: TaskCreateRequest, service: TrackerService = Depends(get_service)):
    """Create a task."""
    task = create_task_base(**request.model_dump(exclude_none=True))
    return TaskResponse(task=_unwrap(service.create_task(task)))


@app.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, service: TrackerService = Depends(get_service)):
    """Get a task by ID."""
    return TaskResponse(task=_unwrap(service.get_task(task_id)))


@app.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(task_id: str, request: TaskUpdateRequest, service: TrackerService = Depends(get_service)):
    """Edit a task. A status change must be a legal transition."""
    current = _unwrap(service.get_task(task_id))
    changes: Dict[str, Any] = request.model_dump(exclude_unset=True)
    for key in ("title", "status", "urgency", "importance", "category_lists"):
        if key in changes and changes[key] is None:
            del changes[key]
    edited = Task(**{**current.model_dump(), **changes})
    return TaskResponse(task=_unwrap(service.update_task(edited)))


@app.delete("/tasks/{task_id}", response_model=DeleteResponse)
async def delete_task(task_id: str, service: TrackerService = Depends(get_service)):
    """Delete a task with its time logs and remaining-hours history."""
    return DeleteResponse(deleted=_unwrap(service.delete_task(task_id)))


@app.get("/tasks/{task_id}/progress", response_model=TaskProgressResponse)
async def get_task_progress(task_id: str, service: TrackerService = Depends(get_service)):
    """Logged hours against the estimate."""
    task = _unwrap(service.get_task(task_id))
    progress = _unwrap(service.calculate_task_progress(task))
    return TaskProgressResponse(task_id=task_id, progress=progress)


@app.get("/tasks/{task_id}/remaining-hours", response_model=RemainingHoursResponse)
async def get_remaining_hours(task_id: str, service: TrackerService = Depends(get_service)):
    """Current remaining hours and the burn-down ledger."""
    task = _unwrap(service.get_task(task_id))
    history = _unwrap(service.get_remaining_hours_history(task_id))
    return RemainingHoursResponse(task_id=task_id, remaining_hours=task.remaining_hours, history=history)


@app.put("/tasks/{task_id}/remaining-hours", response_model=RemainingHoursUpdateResponse)
async def update_remaining_hours(
    task_id: str,
    request: RemainingHoursUpdateRequest,
    service: TrackerService = Depends(get_service),
):
    """Set remaining hours. Setting the current value is a no-op."""
    data = _unwrap(service.update_remaining_hours(task_id, request.remaining_hours, request.note))
    return RemainingHoursUpdateResponse(**data)


@app.get("/time-logs", response_model=TimeLogListResponse)
async def list_time_logs(
    task_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    service: TrackerService = Depends(get_service),
):
    """List time logs. The date range applies only when both bounds are given."""
    logs = _unwrap(service.get_time_logs(task_id, start_date, end_date))
    return TimeLogListResponse(time_logs=logs, count=len(logs), total_hours=sum(log.hours for log in logs))


@app.post("/time-logs", response_model=TimeLogResponse, status_code=201)
async def create_time_log(request: TimeLogCreateRequest, service: TrackerService = Depends(get_service)):
    """Log time against an Estimated or InProgress task."""
    log = TimeLog(**request.model_dump(exclude={"decrement_remaining"}))
    if request.decrement_remaining:
        result = service.log_time(log)
    else:
        result = service.save_time_log(log)
    return TimeLogResponse(time_log=_unwrap(result))


@app.delete("/time-logs/{log_id}", response_model=DeleteResponse)
async def delete_time_log(
    log_id: str,
    restore_remaining: bool = Query(False, description="Add the log's hours back to the task's remaining hours"),
    service: TrackerService = Depends(get_service),
):
    """Delete a time log. Remaining hours are only restored when asked."""
    if restore_remaining:
        result = service.remove_time_log_and_restore(log_id)
    else:
        result = service.delete_time_log(log_id)
    return DeleteResponse(deleted=_unwrap(result))


@app.post("/time-logs/categories", response_model=CategoryAnalysis)
async def analyze_time_log_categories(
    request: CategoryAnalysisRequest,
    service: TrackerService = Depends(get_service),
):
    """Hours per category and per category list."""
    logs = _unwrap(service.get_time_logs(request.task_id, request.start_date, request.end_date))
    return _unwrap(service.analyze_categories_in_time_logs(logs))
