"""API routes for timemaster.

Every route is a thin wrapper over ``TaskCommands``. Typed task errors
raised by a command are turned into ``{"error", "detail"}`` bodies by
the handlers registered in ``create_app``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timemaster import __version__
from timemaster.domain.task import (
    IllegalTransitionError,
    ImmutableFieldError,
    NotFound,
    StorageError,
    TaskError,
    ValidationError,
)
from timemaster.interfaces.api.schemas import (
    CreateTaskRequest,
    ErrorResponse,
    ImportReport,
    ImportTasksRequest,
    Task,
    TaskStats,
    UpdateTaskRequest,
)
from timemaster.interfaces.commands import TaskCommands

logger = logging.getLogger(__name__)

STATUS_CODES: dict[type[TaskError], int] = {
    ValidationError: 422,
    NotFound: 404,
    ImmutableFieldError: 409,
    IllegalTransitionError: 409,
    StorageError: 503,
}


# =============================================================================
# Router
# =============================================================================


router = APIRouter(
    prefix="/api",
    responses={code: {"model": ErrorResponse} for code in sorted(set(STATUS_CODES.values()))},
)


def get_commands(request: Request) -> TaskCommands:
    return request.app.state.commands


@router.get("/tasks", response_model=list[Task])
def list_tasks(status: Optional[str] = None, commands: TaskCommands = Depends(get_commands)):
    """List tasks, most recently updated first."""
    return commands.list_tasks(status)


@router.post("/tasks", response_model=Task, status_code=201)
def create_task(req: CreateTaskRequest, commands: TaskCommands = Depends(get_commands)):
    return commands.create_task(req)


@router.get("/tasks/stats", response_model=TaskStats)
def task_stats(commands: TaskCommands = Depends(get_commands)):
    return commands.task_stats()


@router.post("/tasks/import", response_model=ImportReport)
def import_tasks(req: ImportTasksRequest, commands: TaskCommands = Depends(get_commands)):
    """Create many tasks; failures are reported per item."""
    return commands.import_tasks(req.tasks)


@router.get("/tasks/{task_id}", response_model=Task)
def get_task(task_id: str, commands: TaskCommands = Depends(get_commands)):
    return commands.get_task({"id": task_id})


@router.put("/tasks/{task_id}", response_model=Task)
def update_task(task_id: str, req: UpdateTaskRequest, commands: TaskCommands = Depends(get_commands)):
    """Edit a task. The id in the path wins over any id in the body."""
    fields = req.model_dump(exclude_none=True)
    fields["id"] = task_id
    return commands.update_task(fields)


@router.delete("/tasks/{task_id}", status_code=204)
def delete_task(task_id: str, commands: TaskCommands = Depends(get_commands)):
    commands.delete_task({"id": task_id})


@router.post("/tasks/{task_id}/progress", response_model=Task)
def increase_task_progress(task_id: str, commands: TaskCommands = Depends(get_commands)):
    return commands.increase_task_progress({"id": task_id})


@router.post("/tasks/{task_id}/archive", response_model=Task)
def archive_task(task_id: str, commands: TaskCommands = Depends(get_commands)):
    return commands.archive_task({"id": task_id})


@router.post("/tasks/{task_id}/reopen", response_model=Task)
def reopen_task(task_id: str, commands: TaskCommands = Depends(get_commands)):
    return commands.reopen_task({"id": task_id})


# =============================================================================
# Error Handlers
# =============================================================================


async def task_error_handler(request: Request, exc: TaskError) -> JSONResponse:
    status_code = STATUS_CODES.get(type(exc), 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    detail = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'] if part != 'body')}: {err['msg']}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=422, content={"error": "validation_error", "detail": detail})


# =============================================================================
# App Factory
# =============================================================================


def create_app(commands: TaskCommands | None = None) -> FastAPI:
    """Create the FastAPI application.

    Without ``commands`` the store is selected from the global settings.
    """
    commands = commands or TaskCommands.from_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        commands.engine.repository.close()

    app = FastAPI(
        title="timemaster",
        description="Personal task tracking with once, cycle and long-term tasks",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.commands = commands

    # CORS for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:1420", "tauri://localhost"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TaskError, task_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router)

    @app.get("/")
    def root():
        return {"name": "timemaster", "version": __version__}

    return app
