from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List
from datetime import date
import io


class AlbumManifest(BaseModel):
    """Shape of ``data.json``; field names on disk are camelCase."""
    model_config = ConfigDict(populate_by_name=True)

    album_id: str = Field(alias="albumId")
    customer_name: str = Field(alias="customerName")
    created_at: date = Field(alias="createdAt")
    photos: List[str]
    zip: str
    qr: str


class UploadedPhoto(BaseModel):
    """One ingested file; ``source`` is a readable binary stream (usually the spooled upload)."""
    original_name: str
    content_type: str
    size: int
    source: Any

    @classmethod
    def from_bytes(cls, original_name: str, content_type: str, data: bytes) -> "UploadedPhoto":
        return cls(original_name=original_name, content_type=content_type, size=len(data), source=io.BytesIO(data))


class AlbumCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    album_id: str = Field(alias="albumId")
    link: str
    zip_url: str = Field(alias="zipUrl")
    qr_url: str = Field(alias="qrUrl")
    customer_name: str = Field(alias="customerName")
    photo_count: int = Field(alias="photoCount")
    photos: List[str]


class AlbumView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    album_id: str = Field(alias="albumId")
    customer_name: str = Field(alias="customerName")
    created_at: date = Field(alias="createdAt")
    photos: List[str]
    photo_count: int = Field(alias="photoCount")
    zip: str
    qr: str
    zip_url: str = Field(alias="zipUrl")
    qr_url: str = Field(alias="qrUrl")
    view_url: str = Field(alias="viewUrl")


class ErrorOut(BaseModel):
    error: str
    details: str | None = None
