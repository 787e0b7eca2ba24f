"""Map stock errors onto HTTP responses carrying the ``{kind, message}`` contract."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from stockledger.exceptions import CollaboratorUnavailableError, StockLedgerError, describe_error

logger = structlog.get_logger(__name__)

STATUS_BY_KIND = {
    "NotFound": 404,
    "DuplicateKey": 409,
    "InvalidArgument": 400,
    "InsufficientStock": 400,
    "Internal": 500,
}


def error_response(exc: Exception) -> JSONResponse:
    body = describe_error(exc)
    return JSONResponse(status_code=STATUS_BY_KIND.get(body["kind"], 500), content=body)


def _request_validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(messages) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StockLedgerError)
    async def _stock_error(request: Request, exc: StockLedgerError):
        if exc.kind == "Internal":
            logger.error("Stock request failed", path=request.url.path, error=exc.message)
        return error_response(exc)

    @app.exception_handler(ValidationError)
    async def _validation_error(_request: Request, exc: ValidationError):
        return error_response(exc)

    @app.exception_handler(ObjectNotFoundError)
    async def _not_found(_request: Request, exc: ObjectNotFoundError):
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def _bad_request(_request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"kind": "InvalidArgument", "message": _request_validation_message(exc)},
        )

    @app.exception_handler(CollaboratorUnavailableError)
    async def _collaborator_down(request: Request, exc: CollaboratorUnavailableError):
        logger.error("Collaborator unavailable", path=request.url.path, error=str(exc))
        return error_response(exc)

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path)
        return error_response(exc)
