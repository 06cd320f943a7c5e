"""
Problem details ASGI middleware.

Acts as the host runtime for the problem filter: one exchange per HTTP
request, hooks driven in strict order (request headers, request body,
response headers, response body, response trailers, done).

Body chunks are only forwarded when the response body hook answers
Action.CONTINUE; on Action.PAUSE they stay in the host buffer.

Uses pure ASGI instead of BaseHTTPMiddleware so that streamed bodies
are seen chunk by chunk.
"""

import logging

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from meshproblem.application.problem.plugin import ProblemDetailsPlugin
from meshproblem.domain.problem.entities import Action
from meshproblem.infrastructure.problem.asgi_host import AsgiExchangeHost

logger = logging.getLogger(__name__)

# Body-less response extensions bypass the body hook, so the wrapped app
# must not see them advertised.
BODYLESS_SEND_EXTENSIONS = ("http.response.pathsend", "http.response.zerocopysend")


def _without_bodyless_extensions(scope: Scope) -> Scope:
    extensions = scope.get("extensions")
    if not extensions or not any(name in extensions for name in BODYLESS_SEND_EXTENSIONS):
        return scope
    scope = dict(scope)
    scope["extensions"] = {
        name: value
        for name, value in extensions.items()
        if name not in BODYLESS_SEND_EXTENSIONS
    }
    return scope


class ProblemDetailsMiddleware:
    """Rewrites eligible error responses of the wrapped app into problem+json."""

    def __init__(self, app: ASGIApp, plugin: ProblemDetailsPlugin) -> None:
        self.app = app
        self.plugin = plugin

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        scope = _without_bodyless_extensions(scope)
        host = AsgiExchangeHost(scope)
        exchange = self.plugin.new_exchange(host)
        exchange.on_request_headers(end_of_stream=False)
        response_started = False
        response_complete = False

        async def receive_wrapper() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                body = message.get("body", b"")
                exchange.on_request_body(len(body), not message.get("more_body", False))
            return message

        async def send_body(chunk: bytes, more_body: bool) -> None:
            nonlocal response_complete
            host.append_response_body(chunk)
            action = exchange.on_response_body(len(chunk), not more_body)
            if action is Action.PAUSE:
                return
            await send(
                {
                    "type": "http.response.body",
                    "body": host.take_response_body(),
                    "more_body": more_body,
                }
            )
            response_complete = not more_body

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            message_type = message["type"]
            if message_type == "http.response.start":
                host.set_response_start(message)
                exchange.on_response_headers(end_of_stream=False)
                await send(message)
                response_started = True
                return

            if message_type == "http.response.body":
                await send_body(message.get("body", b""), message.get("more_body", False))
                return

            if message_type == "http.response.trailers":
                exchange.on_response_trailers()
            await send(message)

        try:
            await self.app(scope, receive_wrapper, send_wrapper)
            if response_started and not response_complete:
                logger.debug("Response ended without a final body message")
                await send_body(b"", False)
        finally:
            exchange.on_done()
