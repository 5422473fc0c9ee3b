from fastapi import APIRouter, Depends

from app.api.dependencies import get_reflector
from app.api.models import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(reflector=Depends(get_reflector)) -> HealthResponse:
    """Simple health endpoint for monitoring."""
    return HealthResponse(status="healthy", provider=reflector.name)
