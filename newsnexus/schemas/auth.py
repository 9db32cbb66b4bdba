"""Authentication-related schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class CurrentUser(BaseModel):
    """Current authenticated user information."""

    id: int = Field(..., description="User ID (users.id)")
    email: Optional[str] = Field(None, description="User email")
    username: Optional[str] = Field(None, description="Display name")
    is_admin: bool = Field(default=False, description="May use the admin routes")
