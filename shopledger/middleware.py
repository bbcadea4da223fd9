"""Request logging and auditing middleware"""

import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from shopledger.audit import audit_recorder
from shopledger.logging_config import get_logger

logger = get_logger("http")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log all requests with timing and status, and hand each one to the
    audit recorder.

    The audit entry is written before the request is routed, so unmatched
    paths and failed requests are recorded too. Recording errors are
    handled inside the recorder.
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        client = request.client.host if request.client else "unknown"

        logger.info(f"[REQUEST] {request.method} {request.url.path} - Client: {client}")

        # Starlette caches the body, so the endpoint still receives it
        body = await request.body()
        audit_recorder.record(request.method, request_endpoint(request), body)

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"[ERROR] {request.method} {request.url.path} - "
                f"Duration: {process_time:.2f}ms - Error: {str(e)}",
                exc_info=True
            )
            raise

        process_time = (time.perf_counter() - start_time) * 1000  # ms
        logger.info(
            f"[RESPONSE] {request.method} {request.url.path} - "
            f"Status: {response.status_code} - Duration: {process_time:.2f}ms"
        )
        response.headers["X-Process-Time"] = f"{process_time:.2f}ms"
        return response


def request_endpoint(request: Request) -> str:
    """Path plus query string, as the client sent it."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path
