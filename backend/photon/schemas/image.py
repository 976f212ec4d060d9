from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ImageRead(BaseModel):
    """Snapshot of an image's metadata, with its resolved URL."""
    id: int
    user_id: int
    name: str
    storage_key: str
    mime_type: str
    size_bytes: int
    in_trash: bool
    favourite: bool
    archived: bool
    created_at: Optional[datetime] = None
    url: Optional[str] = None

    class Config:
        from_attributes = True
