"""
Port interfaces (ABCs) for the problem bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod

from meshproblem.domain.problem.entities import Action


class HttpHost(ABC):
    """Port for reading and mutating one exchange on the proxy data path.

    Every method raises HostCallError when the host cannot satisfy the call.
    """

    @abstractmethod
    def get_request_header(self, name: str) -> str:
        """Return a request header or pseudo-header (e.g. ":path")."""
        raise NotImplementedError

    @abstractmethod
    def get_response_header(self, name: str) -> str:
        """Return a response header or pseudo-header (e.g. ":status")."""
        raise NotImplementedError

    @abstractmethod
    def remove_response_header(self, name: str) -> None:
        """Remove every value of a response header."""
        raise NotImplementedError

    @abstractmethod
    def replace_response_header(self, name: str, value: str) -> None:
        """Set a response header, replacing any existing value."""
        raise NotImplementedError

    @abstractmethod
    def get_response_body(self, start: int, size: int) -> bytes:
        """Return `size` bytes of the buffered response body from `start`."""
        raise NotImplementedError

    @abstractmethod
    def replace_response_body(self, body: bytes) -> None:
        """Replace the buffered response body."""
        raise NotImplementedError


class ExchangeHooks(ABC):
    """Port for the full exchange lifecycle as driven by the host.

    The host calls these in strict order for one exchange:
    request headers, request body*, request trailers, response headers,
    response body*, response trailers, done. Never concurrently.
    """

    @abstractmethod
    def on_request_headers(self, end_of_stream: bool) -> Action:
        """Request headers are available; pseudo-headers included."""
        raise NotImplementedError

    @abstractmethod
    def on_request_body(self, body_size: int, end_of_stream: bool) -> Action:
        """A request body chunk of `body_size` bytes arrived."""
        raise NotImplementedError

    @abstractmethod
    def on_request_trailers(self) -> Action:
        """Request trailers arrived."""
        raise NotImplementedError

    @abstractmethod
    def on_response_headers(self, end_of_stream: bool) -> Action:
        """Response headers are available and may still be mutated."""
        raise NotImplementedError

    @abstractmethod
    def on_response_body(self, body_size: int, end_of_stream: bool) -> Action:
        """A response body chunk was buffered.

        Returning Action.PAUSE withholds the buffered body from the client
        until a later call returns Action.CONTINUE.
        """
        raise NotImplementedError

    @abstractmethod
    def on_response_trailers(self) -> Action:
        """Response trailers arrived."""
        raise NotImplementedError

    @abstractmethod
    def on_done(self) -> None:
        """The exchange is complete; its state may be discarded."""
        raise NotImplementedError
