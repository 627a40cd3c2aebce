# RequestEnvelopeMiddleware
import logging
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from fastapi import Request, Response

logger = logging.getLogger(__name__)


class RequestEnvelopeMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        start = time.time()
        request_id = request.headers.get("x-request-id", str(uuid.uuid4())[:8])
        request.state.rid = request_id
        response: Response = await call_next(request)
        elapsed_ms = (time.time() - start) * 1000
        response.headers.setdefault("x-request-id", request_id)
        response.headers.setdefault("x-content-type-options", "nosniff")
        response.headers.setdefault("referrer-policy", "same-origin")
        response.headers["server-timing"] = f"total;dur={elapsed_ms:.2f}"
        logger.debug("[%s] %s %s -> %s (%.1f ms)", request_id, request.method, request.url.path, response.status_code, elapsed_ms)
        return response
