from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class UserContact(BaseModel):
    """Identifying contact info shown back to the acting user."""
    user_id: int
    email: str
    full_name: Optional[str] = None

    class Config:
        from_attributes = True


class SharedImage(BaseModel):
    """An image shared with the current user, together with its owner."""
    # Image fields
    image_id: int
    image: str  # storage reference
    name: str
    created_at: Optional[datetime] = None

    # Owner fields
    owner_id: int
    owner_email: str
