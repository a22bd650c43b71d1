"""FastAPI app factory.

Endpoints are thin wrappers over :class:`WorkflowService`. Run with::

    uvicorn workflow_engine.server.app:serve --factory
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from workflow_engine import __version__
from workflow_engine.engine.config import EngineSettings
from workflow_engine.engine.errors import NotFound, RejectionKind, WorkflowRejected
from workflow_engine.engine.loader import load_definitions
from workflow_engine.engine.logging import configure_logging
from workflow_engine.engine.models import WorkflowDefinition, WorkflowInstance
from workflow_engine.engine.service import WorkflowService
from workflow_engine.server.config import ServerSettings
from workflow_engine.server.models import ApiError, Health

logger = logging.getLogger(__name__)

_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    400: {"model": ApiError},
    404: {"model": ApiError},
    409: {"model": ApiError},
}


def _rejection_status(kind: RejectionKind) -> int:
    if kind is RejectionKind.DUPLICATE_DEFINITION_ID:
        return 409
    return 400


def _seed_definitions(service: WorkflowService, settings: EngineSettings) -> None:
    if settings.definitions_file is None:
        return
    definitions = load_definitions(settings.definitions_file)
    for definition in definitions:
        service.create_definition(definition)
    logger.info(
        "Seeded workflow definitions",
        extra={"path": str(settings.definitions_file), "count": len(definitions)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc), "kind": "not_found"})

    @app.exception_handler(WorkflowRejected)
    async def rejected_handler(request: Request, exc: WorkflowRejected) -> JSONResponse:
        return JSONResponse(
            status_code=_rejection_status(exc.kind),
            content={"detail": exc.message, "kind": exc.kind.value},
        )


def create_app(
    service: WorkflowService | None = None,
    *,
    settings: ServerSettings | None = None,
    engine_settings: EngineSettings | None = None,
) -> FastAPI:
    settings = settings or ServerSettings()
    engine_settings = engine_settings or EngineSettings()

    if service is None:
        service = WorkflowService()
        _seed_definitions(service, engine_settings)

    app = FastAPI(
        title=settings.title,
        version=__version__,
        description="Define finite-state workflows and drive instances through them.",
    )
    app.state.settings = settings
    app.state.service = service

    origins = settings.parsed_cors_origins()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    @app.get("/health", response_model=Health)
    def health() -> Health:
        return Health(
            status="ok",
            version=__version__,
            definitions=len(service.list_definitions()),
            instances=len(service.list_instances()),
        )

    @app.post(
        "/workflows",
        response_model=WorkflowDefinition,
        status_code=201,
        responses=_ERROR_RESPONSES,
    )
    def create_definition(definition: WorkflowDefinition, response: Response) -> WorkflowDefinition:
        stored = service.create_definition(definition)
        response.headers["Location"] = f"/workflows/{stored.id}"
        return stored

    @app.get("/workflows", response_model=list[WorkflowDefinition])
    def list_definitions() -> list[WorkflowDefinition]:
        return service.list_definitions()

    @app.get(
        "/workflows/{definition_id}",
        response_model=WorkflowDefinition,
        responses=_ERROR_RESPONSES,
    )
    def get_definition(definition_id: str) -> WorkflowDefinition:
        return service.get_definition(definition_id)

    @app.post(
        "/workflows/{definition_id}/instances",
        response_model=WorkflowInstance,
        status_code=201,
        responses=_ERROR_RESPONSES,
    )
    def create_instance(definition_id: str, response: Response) -> WorkflowInstance:
        instance = service.create_instance(definition_id)
        response.headers["Location"] = f"/instances/{instance.id}"
        return instance

    @app.get("/instances", response_model=list[WorkflowInstance])
    def list_instances() -> list[WorkflowInstance]:
        return service.list_instances()

    @app.get(
        "/instances/{instance_id}",
        response_model=WorkflowInstance,
        responses=_ERROR_RESPONSES,
    )
    def get_instance(instance_id: str) -> WorkflowInstance:
        return service.get_instance(instance_id)

    @app.post(
        "/instances/{instance_id}/actions/{action_id}",
        response_model=WorkflowInstance,
        responses=_ERROR_RESPONSES,
    )
    def execute_action(instance_id: str, action_id: str) -> WorkflowInstance:
        return service.execute_action(instance_id, action_id)

    return app


def serve() -> FastAPI:
    """Process entry point for uvicorn: configure logging once, then build the app."""

    engine_settings = EngineSettings()
    configure_logging(engine_settings.log_level)
    return create_app(engine_settings=engine_settings)
