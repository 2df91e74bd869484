from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


def split_list(value):
    """Accept a list or a comma separated string; trim and drop empties."""
    if value is None:
        return value
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return value
    return [item.strip() for item in value if item and item.strip()]


# ============================================================================
# Blog posts
# ============================================================================


class BlogPostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, title="Title")
    body: str = Field(..., min_length=1, title="Body", description="Markdown source of the post.")
    tags: List[str] = Field(default_factory=list, description="Tags, as a list or 'a, b, c'.")
    cover_image_url: Optional[str] = Field(None, title="Cover Image URL")

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, value):
        return split_list(value)


class BlogPostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    body: Optional[str] = Field(None, min_length=1)
    tags: Optional[List[str]] = None
    cover_image_url: Optional[str] = None

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, value):
        return split_list(value)


class BlogPost(BaseModel):
    id: str
    title: str
    body: str
    tags: List[str] = Field(default_factory=list)
    cover_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, value):
        return split_list(value) or []


class BlogPostDetail(BlogPost):
    html: str = Field(..., description="Rendered, sanitized HTML body.")
    read_time_minutes: int = Field(..., ge=1)


# ============================================================================
# Projects
# ============================================================================


class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    github_url: Optional[str] = None
    live_url: Optional[str] = None
    tech_stack: List[str] = Field(default_factory=list)

    @field_validator("tech_stack", mode="before")
    @classmethod
    def normalize_tech(cls, value):
        return split_list(value)


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    image_url: Optional[str] = None
    github_url: Optional[str] = None
    live_url: Optional[str] = None
    tech_stack: Optional[List[str]] = None

    @field_validator("tech_stack", mode="before")
    @classmethod
    def normalize_tech(cls, value):
        return split_list(value)


class Project(BaseModel):
    id: str
    title: str
    description: str
    image_url: Optional[str] = None
    github_url: Optional[str] = None
    live_url: Optional[str] = None
    tech_stack: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    @field_validator("tech_stack", mode="before")
    @classmethod
    def normalize_tech(cls, value):
        return split_list(value) or []


# ============================================================================
# Contact messages
# ============================================================================


class ContactMessageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr = Field(..., description="A valid email address.")
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)


class ContactMessage(BaseModel):
    id: str
    name: str
    email: str
    subject: str
    message: str
    read: bool = False
    created_at: Optional[datetime] = None
