from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


def file_name_from_url(url: str) -> str:
    """Last path segment of ``url`` without query string or fragment."""
    path = urlparse(url or "").path
    return path.rstrip("/").split("/")[-1] if path else ""


class ContentImage(BaseModel):
    """One image of a post that should become a Contentful asset."""

    model_config = ConfigDict(populate_by_name=True)

    link: str
    description: str = ""
    title: str = ""
    media_id: Optional[int] = Field(None, alias="mediaId")
    post_id: Optional[int] = Field(None, alias="postId")
    featured: bool = False

    @field_validator("description", "title", mode="before")
    @classmethod
    def _as_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @property
    def file_name(self) -> str:
        return file_name_from_url(self.link)


class WordPressPost(BaseModel):
    """A WordPress post reduced to the fields the migration uses."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: int
    internal_name: str = Field(..., alias="internalName")
    title: str
    slug: str
    content: str = ""
    published_date: Optional[str] = Field(None, alias="publishedDate")
    featured_image: int = Field(0, alias="featuredImage")
    author_id: Optional[int] = Field(None, alias="authorId")
    author_name: Optional[str] = Field(None, alias="authorName")
    seo_title: str = Field("", alias="seoTitle")
    seo_description: str = Field("", alias="seoDescription")
    tags: List[int] = Field(default_factory=list)
    categories: List[int] = Field(default_factory=list)
    content_images: List[ContentImage] = Field(default_factory=list, alias="contentImages")

    @field_validator("featured_image", mode="before")
    @classmethod
    def _media_id(cls, v: Any) -> int:
        return int(v or 0)

    @property
    def featured_content_image(self) -> Optional[ContentImage]:
        return next((img for img in self.content_images if img.featured), None)

    def snapshot(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
