"""
Local reply handlers for FastAPI.

Unhandled exceptions are rendered by Starlette outside the middleware
stack, so their 500 responses never reach the problem filter's body
stage. These handlers render them directly in the same problem+json
envelope. No stack traces or internal details are exposed to clients.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from meshproblem.application.problem.local_reply import BuildLocalReplyUseCase
from meshproblem.application.problem.plugin import ProblemDetailsPlugin
from meshproblem.infrastructure.problem.asgi_host import AsgiExchangeHost
from meshproblem.interfaces.schemas import ProblemDetailsSchema

logger = logging.getLogger(__name__)

HTTP_500 = 500
INTERNAL_ERROR_DETAIL = "Internal server error"


def _error_response(status_code: int, error: str) -> JSONResponse:
    """Build a plain JSON error response for out-of-scope requests."""
    return JSONResponse(status_code=status_code, content={"error": error})


def build_local_reply(
    request: Request, plugin: ProblemDetailsPlugin, status_code: int, detail: str
) -> JSONResponse:
    """Render a locally generated error, in problem+json when eligible.

    Args:
        request: The request that failed.
        plugin: Plugin holding the active configuration.
        status_code: HTTP status of the local reply.
        detail: Client-safe description of the failure.

    Returns:
        A problem+json response, or a plain JSON error if not eligible.
    """
    use_case = BuildLocalReplyUseCase(plugin.configuration, plugin.defaults)
    problem = use_case.execute(AsgiExchangeHost(request.scope), status_code, detail)
    if problem is None:
        return _error_response(status_code, detail)
    return JSONResponse(
        status_code=status_code,
        content=ProblemDetailsSchema.model_validate(problem.to_dict()).model_dump(),
        media_type=plugin.defaults.media_type,
    )


def register_local_reply_handlers(app: FastAPI, plugin: ProblemDetailsPlugin) -> None:
    """Register the local reply handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
        plugin: Plugin whose configuration decides eligibility.
    """

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return build_local_reply(request, plugin, HTTP_500, INTERNAL_ERROR_DETAIL)
