import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.endpoints import router
from app.core.config import settings
from app.shared.correlation import CorrelationMiddleware
from app.shared.errors import (
    ErrorCode,
    error_response,
    get_correlation_id,
    internal_error,
    not_found_error,
    validation_error,
)
from app.shared.logging_config import setup_logging

setup_logging(service_name=settings.SERVICE_NAME)
logger = logging.getLogger("Journal.Intelligence.Main")

app = FastAPI(
    title="Reflection Journal",
    description="Generates reflections on journal entries",
    version="1.0.0"
)

app.add_middleware(CorrelationMiddleware)
app.include_router(router, prefix="/api")


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return validation_error(
        message="Invalid request body",
        details={"errors": [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]},
        correlation_id=get_correlation_id(request),
    )


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return not_found_error(correlation_id=get_correlation_id(request))
    return error_response(
        code=ErrorCode.VALIDATION_ERROR if exc.status_code < 500 else ErrorCode.INTERNAL_ERROR,
        message=str(exc.detail),
        status_code=exc.status_code,
        correlation_id=get_correlation_id(request),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error")
    return internal_error(correlation_id=get_correlation_id(request))


@app.get("/")
async def root():
    return {"message": "Reflection Journal Service Running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
