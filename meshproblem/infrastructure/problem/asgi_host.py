"""
ASGI adapter for the HttpHost port.

Exposes one ASGI exchange the way a proxy host would: request
pseudo-headers synthesised from the scope, response headers taken from
the http.response.start message, and a host-side body buffer that holds
withheld chunks until the filter lets them through.
"""

from typing import Optional

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import Message, Scope

from meshproblem.domain.problem.errors import HostCallError
from meshproblem.domain.problem.ports import HttpHost


def _lowercased(raw_headers) -> list[tuple[bytes, bytes]]:
    return [(bytes(key).lower(), bytes(value)) for key, value in raw_headers]


class AsgiExchangeHost(HttpHost):
    """HttpHost over a single ASGI HTTP exchange."""

    def __init__(self, scope: Scope) -> None:
        self._scope = scope
        self._request_headers = Headers(raw=_lowercased(scope.get("headers", [])))
        self._response_start: Optional[Message] = None
        self._response_headers: Optional[MutableHeaders] = None
        self._body = bytearray()

    # -- request side -----------------------------------------------------

    def get_request_header(self, name: str) -> str:
        if name.startswith(":"):
            value = self._request_pseudo_header(name)
        else:
            value = self._request_headers.get(name)
        if value is None:
            raise HostCallError("get_request_header", f"{name} not found")
        return value

    def _request_pseudo_header(self, name: str) -> Optional[str]:
        if name == ":scheme":
            return self._scope.get("scheme", "http")
        if name == ":authority":
            host = self._request_headers.get("host")
            if host:
                return host
            server = self._scope.get("server")
            if server is None:
                return None
            server_host, server_port = server
            return server_host if server_port is None else f"{server_host}:{server_port}"
        if name == ":path":
            raw_path = self._scope.get("raw_path")
            path = raw_path.decode("latin-1") if raw_path else self._scope.get("path", "")
            query_string = self._scope.get("query_string", b"")
            if query_string:
                path = f"{path}?{query_string.decode('latin-1')}"
            return path
        return None

    # -- response side ----------------------------------------------------

    def set_response_start(self, message: Message) -> None:
        """Attach the http.response.start message whose headers are exposed."""
        message["headers"] = _lowercased(message.get("headers", []))
        self._response_start = message
        self._response_headers = MutableHeaders(scope=message)

    def _headers(self, operation: str) -> MutableHeaders:
        if self._response_headers is None:
            raise HostCallError(operation, "response headers not available yet")
        return self._response_headers

    def get_response_header(self, name: str) -> str:
        headers = self._headers("get_response_header")
        if name == ":status":
            return str(self._response_start["status"])
        value = headers.get(name)
        if value is None:
            raise HostCallError("get_response_header", f"{name} not found")
        return value

    def remove_response_header(self, name: str) -> None:
        headers = self._headers("remove_response_header")
        del headers[name]

    def replace_response_header(self, name: str, value: str) -> None:
        headers = self._headers("replace_response_header")
        if name.startswith(":"):
            raise HostCallError("replace_response_header", f"cannot set {name}")
        try:
            headers[name] = value
        except UnicodeEncodeError as exc:
            raise HostCallError("replace_response_header", str(exc)) from exc

    def append_response_body(self, chunk: bytes) -> None:
        """Add a body chunk received from the application to the buffer."""
        self._body.extend(chunk)

    def get_response_body(self, start: int, size: int) -> bytes:
        if start < 0 or size < 0 or start + size > len(self._body):
            raise HostCallError(
                "get_response_body",
                f"range {start}+{size} outside buffered {len(self._body)} bytes",
            )
        return bytes(self._body[start : start + size])

    def replace_response_body(self, body: bytes) -> None:
        self._body = bytearray(body)

    def take_response_body(self) -> bytes:
        """Return the buffered body and empty the buffer."""
        body = bytes(self._body)
        self._body.clear()
        return body
