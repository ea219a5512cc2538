"""
Health router: GET /health endpoint.

Used by liveness/readiness probes; also reports which guidance bundle
version is being served.
"""

from fastapi import APIRouter, Request

from wa_guidance.core.telemetry import SERVICE_NAME
from wa_guidance.services.guidance_loader import get_guidance_metadata

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(request: Request):
    """Return a simple health status plus guidance metadata (blocking file read, runs in the threadpool)."""
    service = getattr(request.app.state, "chat_service", None)
    guidance_dir = service.guidance_dir if service is not None else None
    metadata = get_guidance_metadata(guidance_dir)
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "guidance": metadata.model_dump(by_alias=True),
    }
