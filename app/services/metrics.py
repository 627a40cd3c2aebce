"""
Prometheus metrics for the album service
"""

import time
import os
from fastapi import Request
from fastapi.responses import Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

REQUESTS_TOTAL = Counter(
    "albumdrop_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"]
)

REQUEST_DURATION = Histogram(
    "albumdrop_http_request_seconds",
    "Request duration in seconds",
    ["method", "path"]
)

ALBUMS_CREATED = Counter(
    "albumdrop_albums_created_total",
    "Album creation attempts",
    ["status"]
)

ALBUMS_VIEWED = Counter(
    "albumdrop_albums_viewed_total",
    "Album fetches",
    ["status"]
)

PHOTOS_STORED = Counter(
    "albumdrop_photos_stored_total",
    "Photos written to album directories"
)

ENABLED = os.getenv("METRICS_ENABLED") == "1"

async def metrics_endpoint():
    if not ENABLED:
        return Response(b"metrics disabled", media_type="text/plain")
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

def metrics_middleware(app):
    """Add request metrics middleware to the app"""
    if not ENABLED:
        return

    @app.middleware("http")
    async def _metrics(request: Request, call_next):
        start = time.time()
        response = await call_next(request)

        # route template keeps album ids out of label values
        route = request.scope.get("route")
        path = getattr(route, "path", None) or "unmatched"
        REQUESTS_TOTAL.labels(
            method=request.method,
            path=path,
            status=str(response.status_code)
        ).inc()

        REQUEST_DURATION.labels(
            method=request.method,
            path=path
        ).observe(time.time() - start)

        return response

def record_album_created(status: str, photos: int = 0):
    ALBUMS_CREATED.labels(status=status).inc()
    if photos:
        PHOTOS_STORED.inc(photos)

def record_album_viewed(status: str):
    ALBUMS_VIEWED.labels(status=status).inc()
