from typing import List

from fastapi import APIRouter, File, Form, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from app.config import settings
from app.core.errors import ValidationError
from app.core.rate_limit import limiter
from app.core.urls import public_base_url
from app.schemas.album import AlbumCreated, ErrorOut
from app.services.albums import create_album
from app.services.upload_validate import read_upload

router = APIRouter(prefix="/api/upload", tags=["upload"])


@router.post(
    "",
    response_model=AlbumCreated,
    responses={400: {"model": ErrorOut}, 413: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
@limiter.limit(settings.UPLOAD_RATE_LIMIT)
async def upload_album(
    request: Request,
    customerName: str = Form(default=""),
    photos: List[UploadFile] = File(default=[]),
):
    """Create an album from a batch of images for one customer."""
    if len(photos) > settings.MAX_FILES_PER_UPLOAD:
        raise ValidationError(f"Too many files (max {settings.MAX_FILES_PER_UPLOAD})")
    files = [await read_upload(f) for f in photos]
    return await run_in_threadpool(create_album, customerName, files, public_base_url(request))
