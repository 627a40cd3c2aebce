from datetime import datetime
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse

from app.config import settings
from app.services.storage import ALBUM_ID_RE

router = APIRouter(tags=["pages"])


def _page(name: str):
    path = Path(settings.FRONTEND_DIR) / name
    if not path.is_file():
        return JSONResponse(status_code=404, content={"error": "Page not found"})
    return FileResponse(path, media_type="text/html")


@router.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/admin")


@router.get("/admin", include_in_schema=False)
async def admin_page():
    return _page("admin.html")


@router.get("/view/{album_id}", include_in_schema=False)
async def customer_page(album_id: str):
    # the page itself fetches /api/album/{album_id}
    if not ALBUM_ID_RE.match(album_id):
        return JSONResponse(status_code=404, content={"error": "Album not found"})
    return _page("customer.html")


@router.get("/health")
async def health():
    return {"status": "OK", "timestamp": datetime.now().isoformat()}
