"""Google Drive file metadata."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DriveDocument(BaseModel):
    """A file listed from a Drive folder."""

    id: str
    name: str
    created_time: datetime = Field(..., alias="createdTime")

    model_config = ConfigDict(populate_by_name=True)


class UploadedDocument(BaseModel):
    """Result of a successful upload."""

    drive_file_id: str
    shareable_link: str
    mime_type: str


__all__ = ["DriveDocument", "UploadedDocument"]
