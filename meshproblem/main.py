"""
Application entry point.

Creates the FastAPI application and wires together:
- Problem details filter (plugin configuration, ASGI middleware)
- Local reply handlers for errors raised outside the filter
- Routers
- Logging configuration

No filter logic belongs here.
"""

from typing import Optional

from fastapi import FastAPI

from meshproblem.application.problem.plugin import ProblemDetailsPlugin
from meshproblem.core.config import Settings, settings as default_settings
from meshproblem.infrastructure.problem.middleware import ProblemDetailsMiddleware
from meshproblem.interfaces.health import router as health_router
from meshproblem.shared.errors.local_reply import register_local_reply_handlers
from meshproblem.shared.logging import configure_logging


def create_app(
    settings: Optional[Settings] = None,
    plugin: Optional[ProblemDetailsPlugin] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Starts the problem details plugin, registers the middleware, local
    reply handlers and routers. This is the composition root.

    Args:
        settings: Process settings. Defaults to the environment-loaded ones.
        plugin: An already started plugin. Built from settings when omitted.

    Returns:
        A fully configured FastAPI application instance.

    Raises:
        ConfigError: If the plugin configuration is present but invalid.
    """
    settings = settings or default_settings
    configure_logging(level=settings.log_level)

    if plugin is None:
        plugin = ProblemDetailsPlugin()
        plugin.start(settings.load_plugin_configuration())

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.problem_plugin = plugin

    # --- Problem Details Filter ---
    app.add_middleware(ProblemDetailsMiddleware, plugin=plugin)

    # --- Local Replies ---
    register_local_reply_handlers(app, plugin)

    # --- Routers ---
    app.include_router(health_router)

    return app


app = create_app()
