# Top imports
import uvicorn
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
import sentry_sdk
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from app.config import settings
from app.core.errors import register_exception_handlers
from app.core.middleware import RequestEnvelopeMiddleware
from app.core.rate_limit import limiter
from app.routers import router
from app.services.metrics import metrics_middleware, metrics_endpoint

# Logging setup
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

if settings.SENTRY_DSN:
    sentry_sdk.init(dsn=settings.SENTRY_DSN, traces_sample_rate=0.1, environment=settings.APP_ENV)

# Albums are served straight from disk, so the directory has to exist before the mount below.
settings.albums_dir.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.info("Starting AlbumDrop (env=%s)", settings.APP_ENV)
    logging.info("Albums directory: %s", settings.albums_dir.resolve())
    yield
    logging.info("Shutting down AlbumDrop")

app = FastAPI(
    title="AlbumDrop API",
    description="Upload photo batches per customer and share them as albums with a ZIP and a QR code",
    version="1.0.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

register_exception_handlers(app)

app.include_router(router)
logging.info("Registered routes count: %s", len(app.routes))

app.mount("/albums", StaticFiles(directory=settings.albums_dir), name="albums")

# Middleware setup
app.add_middleware(RequestEnvelopeMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Prometheus request metrics when METRICS_ENABLED=1
metrics_middleware(app)

@app.get("/metrics", include_in_schema=False)
async def prometheus_metrics():
    return await metrics_endpoint()


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=3000, reload=False)
