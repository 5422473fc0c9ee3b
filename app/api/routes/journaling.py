"""
Journaling API Routes

`POST /journal` takes a journal entry and returns a generated reflection:

    request:  {"prompt": "today I ran 5k"}
    response: {"result": "Great job on your run! ..."}

Provider failures return 502 with the standard error envelope. Nothing is
stored server-side; the client keeps its own entries.
"""

import logging

from fastapi import APIRouter, Depends, Request

from app.api.dependencies import get_reflector
from app.api.models import ReflectionRequest, ReflectionResponse
from app.core.logging_utils import preview
from app.shared.errors import ErrorResponse, external_service_error, get_correlation_id

router = APIRouter(tags=["Journaling"])
logger = logging.getLogger("Journal.Intelligence.API.Journaling")


# Sync handler: FastAPI runs it in the threadpool, the Anthropic client blocks
@router.post(
    "/journal",
    response_model=ReflectionResponse,
    responses={502: {"model": ErrorResponse}},
)
def create_reflection(
    body: ReflectionRequest,
    request: Request,
    reflector=Depends(get_reflector),
):
    """Generate a reflection on a journal entry."""
    logger.info("Received journal entry: %s", preview(body.prompt))

    try:
        result = reflector.reflect(body.prompt)
    except Exception:  # pylint: disable=broad-except
        logger.exception("Failed to generate reflection")
        return external_service_error(
            service_name=reflector.name,
            message="Error calling reflection provider",
            correlation_id=get_correlation_id(request),
        )

    logger.info("Reflection ready: %s", preview(result))
    return ReflectionResponse(result=result)
