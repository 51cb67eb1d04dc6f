from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable, TypeVar

import structlog
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from .config import get_settings
from .db import Database
from .errors import DuplicateRecordError, PodomusError, RecordNotFoundError, ReferenceNotFoundError
from .logging_config import configure_logging
from .schemas import (
    AppointmentCreateIn,
    AppointmentsByDateRangeIn,
    AppointmentStatusUpdateIn,
    ContactMessageCreateIn,
    ContactMessageStatusUpdateIn,
    PatientByEmailIn,
    PatientCreateIn,
    ServiceBySlugIn,
    ServiceCreateIn,
)
from .seed import seed_services
from .services import (
    create_appointment,
    create_contact_message,
    create_patient,
    create_service,
    get_active_services,
    get_appointments_by_date_range,
    get_contact_messages,
    get_patient_by_email,
    get_service_by_slug,
    get_services,
    init_db,
    update_appointment_status,
    update_contact_message_status,
)

log = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

# Procedures live under /trpc/<name>:
# - queries   : GET, input as JSON in the "input" query parameter
# - mutations : POST, input as JSON body
# Success: {"result": {"data": ...}}; failure: {"error": {...}} (see _error_response)
router = APIRouter(prefix="/trpc")


# Dependencies

def get_db(request: Request) -> Database:
    return request.app.state.db


def query_input(model: type[M]) -> Callable[..., M]:
    """Dependency parsing the JSON "input" query parameter into `model`."""

    def dependency(input: str | None = Query(default=None)) -> M:
        try:
            raw = json.loads(input) if input else {}
        except json.JSONDecodeError:
            raise RequestValidationError(
                [{"type": "json_invalid", "loc": ("query", "input"), "msg": "Input is not valid JSON", "input": input}]
            ) from None
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            raise RequestValidationError(e.errors(include_url=False, include_context=False)) from None

    return dependency


def _ok(data: Any) -> dict[str, Any]:
    return {"result": {"data": jsonable_encoder(data)}}


# Health

@router.get("/healthcheck")
def healthcheck() -> dict[str, Any]:
    return _ok({"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()})


# Patients

@router.post("/createPatient")
def rpc_create_patient(payload: PatientCreateIn, db: Database = Depends(get_db)) -> dict[str, Any]:
    return _ok(create_patient(db, payload))


@router.get("/getPatientByEmail")
def rpc_get_patient_by_email(
    payload: PatientByEmailIn = Depends(query_input(PatientByEmailIn)),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    return _ok(get_patient_by_email(db, payload))


# Appointments

@router.post("/createAppointment")
def rpc_create_appointment(payload: AppointmentCreateIn, db: Database = Depends(get_db)) -> dict[str, Any]:
    return _ok(create_appointment(db, payload))


@router.get("/getAppointmentsByDateRange")
def rpc_get_appointments_by_date_range(
    payload: AppointmentsByDateRangeIn = Depends(query_input(AppointmentsByDateRangeIn)),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    return _ok(get_appointments_by_date_range(db, payload))


@router.post("/updateAppointmentStatus")
def rpc_update_appointment_status(payload: AppointmentStatusUpdateIn, db: Database = Depends(get_db)) -> dict[str, Any]:
    return _ok(update_appointment_status(db, payload))


# Contact messages

@router.post("/createContactMessage")
def rpc_create_contact_message(payload: ContactMessageCreateIn, db: Database = Depends(get_db)) -> dict[str, Any]:
    return _ok(create_contact_message(db, payload))


@router.get("/getContactMessages")
def rpc_get_contact_messages(db: Database = Depends(get_db)) -> dict[str, Any]:
    return _ok(get_contact_messages(db))


@router.post("/updateContactMessageStatus")
def rpc_update_contact_message_status(
    payload: ContactMessageStatusUpdateIn, db: Database = Depends(get_db)
) -> dict[str, Any]:
    return _ok(update_contact_message_status(db, payload))


# Services

@router.post("/createService")
def rpc_create_service(payload: ServiceCreateIn, db: Database = Depends(get_db)) -> dict[str, Any]:
    return _ok(create_service(db, payload))


@router.get("/getServices")
def rpc_get_services(db: Database = Depends(get_db)) -> dict[str, Any]:
    return _ok(get_services(db))


@router.get("/getActiveServices")
def rpc_get_active_services(db: Database = Depends(get_db)) -> dict[str, Any]:
    return _ok(get_active_services(db))


@router.get("/getServiceBySlug")
def rpc_get_service_by_slug(
    payload: ServiceBySlugIn = Depends(query_input(ServiceBySlugIn)),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    return _ok(get_service_by_slug(db, payload))


# Errors

def _error_response(request: Request, http_status: int, code: str, message: str, **extra: Any) -> JSONResponse:
    procedure = request.url.path.rsplit("/", 1)[-1]
    data = {"code": code, "httpStatus": http_status, "path": procedure, **extra}
    return JSONResponse(
        status_code=http_status,
        content=jsonable_encoder({"error": {"message": message, "code": code, "data": data}}),
    )


def _issue(err: dict[str, Any]) -> dict[str, Any]:
    loc = [p for p in err.get("loc", ()) if p not in ("body", "query")]
    return {"path": loc, "message": err.get("msg", ""), "code": err.get("type", "")}


async def on_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    issues = [_issue(e) for e in exc.errors()]
    message = "; ".join(f"{'.'.join(map(str, i['path'])) or 'input'}: {i['message']}" for i in issues)
    return _error_response(request, status.HTTP_400_BAD_REQUEST, "BAD_REQUEST", message, issues=issues)


async def on_domain_error(request: Request, exc: PodomusError) -> JSONResponse:
    if isinstance(exc, RecordNotFoundError):
        http_status, code = status.HTTP_404_NOT_FOUND, "NOT_FOUND"
    elif isinstance(exc, DuplicateRecordError):
        http_status, code = status.HTTP_409_CONFLICT, "CONFLICT"
    elif isinstance(exc, ReferenceNotFoundError):
        http_status, code = status.HTTP_400_BAD_REQUEST, "BAD_REQUEST"
    else:
        http_status, code = status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_SERVER_ERROR"
    return _error_response(request, http_status, code, exc.message, cause=exc.code)


async def on_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    # store details stay in the log
    log.error("rpc_call_failed", path=request.url.path, error=str(exc), exc_type=type(exc).__name__)
    return _error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_SERVER_ERROR", "Internal server error"
    )


# App

def create_app(database: Database | None = None, seed: bool = True) -> FastAPI:
    settings = get_settings()
    db = database or Database(settings.database_url, echo=settings.sql_echo)

    app = FastAPI(title="Podomus API", version="1.0.0")
    app.state.db = db

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, on_validation_error)
    app.add_exception_handler(PodomusError, on_domain_error)
    app.add_exception_handler(Exception, on_unexpected_error)
    app.include_router(router)

    @app.on_event("startup")
    def startup() -> None:
        # tables + service catalog (idempotent)
        init_db(db)
        if seed:
            seed_services(db)
        log.info("api_started", database=str(db.engine.url))

    @app.on_event("shutdown")
    def shutdown() -> None:
        db.dispose()

    return app


app = create_app()


def main() -> None:
    settings = get_settings()
    configure_logging()
    log.info(
        "podomus_rpc_server",
        port=settings.server_port,
        patients="createPatient, getPatientByEmail",
        appointments="createAppointment, getAppointmentsByDateRange, updateAppointmentStatus",
        contact="createContactMessage, getContactMessages, updateContactMessageStatus",
        services="createService, getServices, getActiveServices, getServiceBySlug",
    )
    uvicorn.run(app, host="0.0.0.0", port=settings.server_port)


if __name__ == "__main__":
    main()
