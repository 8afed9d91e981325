import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from portal.api.v1.router import router as v1_router
from portal.core.errors import PortalError
from portal.core.telemetry import setup_logging, setup_telemetry
from portal.schemas.common import ErrorResponse

log = logging.getLogger(__name__)

setup_logging()

app = FastAPI(title="Realty Portal API", version="0.1.0")

setup_telemetry(app)
app.include_router(v1_router)


def _error(status_code: int, code: str, message: str, details: list | None = None) -> JSONResponse:
    body = ErrorResponse(code=code, message=message, details=details or [])
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(PortalError)
async def handle_portal_error(request: Request, exc: PortalError) -> JSONResponse:
    if exc.status_code in (401, 403):
        log.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return _error(exc.status_code, exc.code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ())),
            "type": err.get("type"),
            "message": err.get("msg"),
        }
        for err in exc.errors()
    ]
    return _error(400, "validation_error", "Validation failed", details)


@app.exception_handler(IntegrityError)
async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    log.warning("integrity error at %s %s: %s", request.method, request.url.path, exc.orig)
    return _error(409, "conflict", "Constraint violation")


@app.exception_handler(Exception)
async def handle_unhandled(request: Request, exc: Exception) -> JSONResponse:
    log.error("unhandled error at %s %s", request.method, request.url.path, exc_info=exc)
    return _error(500, "internal_error", "Internal server error")
