import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError as FastAPIValidationError
from fastapi.responses import JSONResponse

from kafkalens.core.exceptions import ErrorCode, KafkaLensError, ProblemDetail

logger = logging.getLogger(__name__)

_STATUS = {
    ErrorCode.CLUSTER_NOT_FOUND: 404,
    ErrorCode.TOPIC_NOT_FOUND: 404,
    ErrorCode.CONSUMER_GROUP_NOT_FOUND: 404,
    ErrorCode.BROKER_NOT_FOUND: 404,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.CLUSTER_CONFIG_ERROR: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.KAFKA_AUTH_ERROR: 401,
    ErrorCode.KAFKA_AUTHORIZATION_ERROR: 403,
    ErrorCode.KAFKA_TIMEOUT: 504,
    ErrorCode.KAFKA_CONNECTION_ERROR: 503,
}

_TITLES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    500: "Internal Server Error",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


def status_for(code: ErrorCode) -> int:
    return _STATUS.get(code, 500)


def _problem(status: int, code: ErrorCode, detail: str, details: dict | None = None) -> JSONResponse:
    body = ProblemDetail(
        title=_TITLES.get(status, "Error"),
        status=status,
        detail=detail,
        code=code.value,
        details=details or {},
    )
    return JSONResponse(
        status_code=status,
        content=body.model_dump(mode="json"),
        media_type="application/problem+json",
    )


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(KafkaLensError)
    async def kafka_lens_error_handler(_: Request, exc: KafkaLensError):
        status = status_for(exc.code)
        logger.warning("Request failed: %s - %s", exc.code.value, exc.message)
        return _problem(status, exc.code, exc.message, exc.details)

    @app.exception_handler(FastAPIValidationError)
    async def validation_error_handler(_: Request, exc: FastAPIValidationError):
        errors = {".".join(str(p) for p in e["loc"]): e["msg"] for e in exc.errors()}
        return _problem(400, ErrorCode.VALIDATION_ERROR, "Validation failed", errors)

    # Catch-all
    @app.exception_handler(Exception)
    async def unhandled(_: Request, exc: Exception):
        logger.exception("Unexpected error")
        return _problem(500, ErrorCode.INTERNAL_ERROR, "An unexpected error occurred")
