"""
Health check router.

Provides a simple health endpoint for liveness/readiness probes.
Returns application status, version and whether the filter has targets.
"""

from fastapi import APIRouter, Request

from meshproblem.interfaces.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application health status and version.",
)
def health_check(request: Request) -> HealthResponse:
    """Return current application health status."""
    plugin = request.app.state.problem_plugin
    return HealthResponse(
        status="ok",
        version=request.app.state.settings.version,
        target_url_prefixes=len(plugin.configuration.target_url_prefixes),
    )
