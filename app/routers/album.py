from fastapi import APIRouter, Request
from fastapi.responses import FileResponse
from starlette.concurrency import run_in_threadpool

from app.core.urls import public_base_url
from app.schemas.album import AlbumView, ErrorOut
from app.services.albums import album_archive, get_album

router = APIRouter(prefix="/api/album", tags=["album"])


@router.get(
    "/{album_id}",
    response_model=AlbumView,
    responses={404: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
async def fetch_album(album_id: str, request: Request):
    return await run_in_threadpool(get_album, album_id, public_base_url(request))


@router.get("/{album_id}/download", responses={404: {"model": ErrorOut}})
async def download_album(album_id: str):
    """ZIP bundle under a readable, customer-named filename."""
    path, filename = await run_in_threadpool(album_archive, album_id)
    return FileResponse(path, media_type="application/zip", filename=filename)
