from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime


# --- User ---

class UserBase(BaseModel):
    username: str = Field(max_length=50)
    email: str = Field(max_length=255)


class UserCreate(UserBase):
    pass


class UserResponse(UserBase):
    id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Post ---

class PostCreate(BaseModel):
    content: str = Field(min_length=1)
    slug: str | None = Field(None, max_length=350)


class PostUpdate(BaseModel):
    content: str | None = Field(None, min_length=1)
    slug: str | None = Field(None, max_length=350)

    @field_validator("content")
    @classmethod
    def content_not_null(cls, v: str | None) -> str:
        # Omitting content leaves it unchanged; an explicit null is rejected
        if v is None:
            raise ValueError("content cannot be null")
        return v


# --- Comment ---

class CommentCreate(BaseModel):
    content: str = Field(min_length=1)


# --- Envelope ---

class ApiResponse(BaseModel):
    """Shape shared by every post endpoint: ``{status, data?, message?}``."""

    status: bool
    data: dict | list | None = None
    message: str | None = None
