"""
=============================================================================
HTTP SERVER (asyncio transport)
=============================================================================

Accepts connections, turns bytes into HTTPRequest objects, runs them
through the middleware pipeline and the static handler, and writes the
responses back.

    asyncio.start_server
         │  one task per connection
         ▼
    _handle_connection ──► read head (until \r\n\r\n)
         │                 parse_head()   ── HTTPParseError ──► 400/413/505
         │                 read body (Content-Length)
         ▼
    pipeline: LoggingMiddleware → StaticFileHandler.handle (→ hook)
         │                       ── exception ──► logged, 500, close
         ▼
    response.to_bytes() ──► writer, then keep-alive or close

Nothing here blocks the event loop: socket reads and writes are awaited
and file access happens on the executor inside the handler. Requests on
one keep-alive connection are handled one after another; separate
connections are fully independent.

=============================================================================
"""

import asyncio
import logging
from typing import Optional, Set

from .config import ServerConfig
from .handlers.static import StaticFileHandler, error_response
from .http.request import HTTPParseError, HTTPRequest, RequestParser
from .http.response import HTTPResponse
from .http.status_codes import HTTPStatus
from .middleware import LoggingMiddleware, MiddlewarePipeline, NextHandler
from .rendering import check_templates


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Static file server on asyncio streams.

        config = ServerConfig.from_args("./site", "127.0.0.1:4000")
        server = HTTPServer(config)
        server.run()             # blocks until Ctrl+C

    Or from inside an event loop:

        await server.start()
        ...
        await server.stop()
    """

    def __init__(self, config: Optional[ServerConfig] = None, handler: Optional[StaticFileHandler] = None):
        """
        Args:
            config: Server configuration, validated here; from the
                    environment when omitted.
            handler: Request handler; a StaticFileHandler for config by default.

        Raises:
            ConfigError: Invalid configuration.
            TemplateError: The bundled page template is unusable.
        """
        self.config = config or ServerConfig.from_env()
        self.config.validate()
        check_templates()

        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._static = handler or StaticFileHandler(self.config)

        self._middleware = MiddlewarePipeline()
        self._middleware.add(LoggingMiddleware(log_format=self.config.access_log_format))

        self._handler: Optional[NextHandler] = None
        self._server: Optional[asyncio.AbstractServer] = None
        self._stopping: Optional[asyncio.Event] = None
        self._connections: Set[asyncio.StreamWriter] = set()

    @property
    def port(self) -> int:
        """The bound port (useful when configured with port 0)."""
        if self._server is None or not self._server.sockets:
            return self.config.port
        return self._server.sockets[0].getsockname()[1]

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self) -> None:
        """Configure logging and serve until interrupted (blocking)."""
        self._setup_logging()
        try:
            asyncio.run(self.serve_forever())
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        logger.info("Server stopped")

    async def start(self) -> None:
        """Bind the listening socket and start accepting connections."""
        self._handler = self._middleware.wrap(self._static.handle)
        self._stopping = asyncio.Event()
        self._server = await asyncio.start_server(
            self._handle_connection,
            self.config.host,
            self.config.port,
            limit=self.config.max_request_size,
        )
        logger.info("Serving %s on %s:%d", self.config.root_dir, self.config.host, self.port)

    async def serve_forever(self) -> None:
        """Start if needed, then serve until stop() is called."""
        if self._server is None:
            await self.start()
        try:
            await self._stopping.wait()
        finally:
            await self._close()

    def request_stop(self) -> None:
        """Ask serve_forever() to return. Must run on the server's loop."""
        if self._stopping is not None:
            self._stopping.set()

    async def stop(self) -> None:
        """Stop accepting, close open connections and wait for them."""
        self.request_stop()
        await self._close()

    async def _close(self) -> None:
        if self._server is None:
            return
        server, self._server = self._server, None
        server.close()
        for writer in list(self._connections):
            writer.close()
        await server.wait_closed()
        logger.info("Listener closed")

    def _setup_logging(self) -> None:
        level = self.config.logging_level()
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("basic_http_server").setLevel(level)

    # =========================================================================
    # CONNECTIONS
    # =========================================================================

    async def _handle_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        """
        Serve every request on one connection.

        Loop: read head → parse → read body → handle → write → keep-alive?
        The connection is closed on parse errors, handler failures, idle
        timeout, "Connection: close" and client disconnect.
        """
        peer = writer.get_extra_info("peername") or ("", 0)
        client_address = (peer[0], peer[1])
        self._connections.add(writer)
        served = 0

        try:
            while True:
                try:
                    head = await asyncio.wait_for(
                        reader.readuntil(b"\r\n\r\n"),
                        timeout=self.config.keep_alive_timeout,
                    )
                except asyncio.IncompleteReadError:
                    break
                except asyncio.LimitOverrunError:
                    await self._send_error(writer, HTTPStatus.PAYLOAD_TOO_LARGE)
                    break
                except asyncio.TimeoutError:
                    if served == 0:
                        await self._send_error(writer, HTTPStatus.REQUEST_TIMEOUT)
                    break

                try:
                    request = self._parser.parse_head(head, client_address)
                except HTTPParseError as e:
                    logger.info("Bad request from %s: %s", client_address[0], e)
                    await self._send_error(writer, HTTPStatus(e.status_code))
                    break

                if request.content_length:
                    body = await reader.readexactly(request.content_length)
                    request = RequestParser.with_body(request, body)

                try:
                    response = await self._handler(request)
                except Exception:
                    logger.exception("Handler error for %s %s", request.method, request.target)
                    await self._send_error(writer, HTTPStatus.INTERNAL_SERVER_ERROR)
                    break

                keep_alive = request.is_keep_alive and not self._stopping.is_set()
                await self._send(writer, request, response, keep_alive)
                served += 1

                if not keep_alive:
                    break
        except (ConnectionError, asyncio.IncompleteReadError) as e:
            logger.debug("Connection from %s lost: %s", client_address[0], e)
        finally:
            self._connections.discard(writer)
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass

    async def _send(
        self,
        writer: asyncio.StreamWriter,
        request: HTTPRequest,
        response: HTTPResponse,
        keep_alive: bool,
    ) -> None:
        response = response.with_header("Connection", "keep-alive" if keep_alive else "close")
        writer.write(response.to_bytes(
            self.config.server_name,
            include_body=request.method != "HEAD",
        ))
        await writer.drain()

    async def _send_error(self, writer: asyncio.StreamWriter, status: HTTPStatus) -> None:
        """Error page for failures outside the handler; the connection then closes."""
        response = error_response(status).with_header("Connection", "close")
        writer.write(response.to_bytes(self.config.server_name))
        await writer.drain()
