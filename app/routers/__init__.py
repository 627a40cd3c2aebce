from fastapi import APIRouter
import logging

from .upload import router as upload_router
from .album import router as album_router
from .pages import router as pages_router


def build_router() -> APIRouter:
    router = APIRouter()
    log = logging.getLogger("routers")

    for name, sub in (("upload", upload_router), ("album", album_router), ("pages", pages_router)):
        router.include_router(sub)
        log.info("Loaded router: %s", name)
    return router

# Export module-level router so app.main can import it
router = build_router()
