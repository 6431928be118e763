"""
Middleware guarding every request to the preview server.
"""

import asyncio, logging, time
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp
from localify.core.config import Settings
from localify.services.metrics import PerformanceMonitor

log = logging.getLogger("localify.requests")


def text_response(status_code: int, text: str) -> Response:
    return Response(content=text, status_code=status_code, media_type="text/plain")


class RequestGuardMiddleware(BaseHTTPMiddleware):
    """Counts and times requests and rejects the ones the server won't handle.

    Rejections: no Accept and no Content-Type header (400), more than
    MAX_REQUESTS requests in this run (429), advertised Content-Length over
    MAX_FILE_SIZE (413). Handlers running past REQUEST_TIMEOUT_S get a 504.
    """

    def __init__(self, app: ASGIApp, settings: Settings, monitor: PerformanceMonitor):
        super().__init__(app)
        self.settings = settings
        self.monitor = monitor

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        seq = self.monitor.start_request()
        started = time.perf_counter()
        log.info("request #%d: %s %s", seq, request.method, request.url.path)
        response = None
        try:
            response = self._reject(request, seq)
            if response is None:
                try:
                    response = await asyncio.wait_for(
                        call_next(request), timeout=self.settings.REQUEST_TIMEOUT_S
                    )
                except asyncio.TimeoutError:
                    log.warning("request #%d timed out", seq)
                    response = text_response(504, "Request timed out")
            return response
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            status = response.status_code if response is not None else 500
            self.monitor.end_request(elapsed_ms, status)

    def _reject(self, request: Request, seq: int) -> Response | None:
        headers = request.headers
        if (
            self.settings.REQUIRE_CLIENT_HEADERS
            and "accept" not in headers
            and "content-type" not in headers
        ):
            return text_response(400, "Missing required headers")

        if seq > self.settings.MAX_REQUESTS:
            return text_response(429, "Too many requests")

        content_length = headers.get("content-length")
        if content_length:
            try:
                length = int(content_length)
            except ValueError:
                return text_response(400, "Invalid Content-Length")
            if length > self.settings.MAX_FILE_SIZE:
                log.warning(
                    "request size %d exceeds limit %d", length, self.settings.MAX_FILE_SIZE
                )
                return text_response(413, "Request entity too large")
        return None
