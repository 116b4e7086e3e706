"""
=============================================================================
MIDDLEWARE BASE
=============================================================================

Middleware wraps the request handler the way layers wrap an onion. Each one
gets the request and an awaitable `next`, and returns a response:

        ┌───────────────────────────────────────────────┐
        │  LoggingMiddleware                            │
        │  ┌─────────────────────────────────────────┐  │
        │  │  StaticFileHandler.handle  (+ hook)     │  │
        │  └─────────────────────────────────────────┘  │
        └───────────────────────────────────────────────┘

Everything is async: `next` is awaited, and a middleware that does I/O must
not block the event loop either.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


NextHandler = Callable[[HTTPRequest], Awaitable[HTTPResponse]]


class Middleware(ABC):
    """
    Base class for middleware.

        class Timing(Middleware):
            async def __call__(self, request, next):
                response = await next(request)   # continue the chain
                return response.with_header("X-Seen", "1")

    Returning without awaiting `next` short-circuits the chain.
    """

    @abstractmethod
    async def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Args:
            request: The incoming request.
            next: The rest of the chain.

        Returns:
            The response, from next() or produced directly.
        """

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware around a final handler.

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())
        handler = pipeline.wrap(static.handle)
        response = await handler(request)

    First added is outermost: it sees the request first and the response
    last.
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug("Added middleware: %s", middleware.name)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build the chain. Given [MW1, MW2] and handler the result calls
        MW1 → MW2 → handler.
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(self, middleware: Middleware, next_handler: NextHandler) -> NextHandler:
        async def wrapped(request: HTTPRequest) -> HTTPResponse:
            return await middleware(request, next_handler)

        return wrapped
