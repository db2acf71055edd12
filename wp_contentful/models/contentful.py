from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def link(link_type: str, target_id: str) -> Dict[str, Any]:
    """A Contentful link object, e.g. ``link("Asset", "abc")``."""
    return {"sys": {"type": "Link", "linkType": link_type, "id": target_id}}


class AssetRecord(BaseModel):
    """Maps an uploaded Contentful asset back to its source file name."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    file_name: str = Field(..., alias="fileName")
    asset_id: str = Field(..., alias="assetId")


class AuthorRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    author_id: int = Field(..., alias="authorId")
    author_name: str = Field(..., alias="authorName")
    contentful_id: str = Field(..., alias="contentfulId")


class TagRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    tag_id: int = Field(..., alias="tagId")
    tag_name: str = Field(..., alias="tagName")
    contentful_id: str = Field(..., alias="contentfulId")


class BlogPostFields(BaseModel):
    """Field values of a ``pageBlogPost`` entry before localisation."""

    model_config = ConfigDict(populate_by_name=True)

    internal_name: str = Field(..., alias="internalName")
    title: str
    slug: str
    content: Dict[str, Any]
    published_date: Optional[str] = Field(None, alias="publishedDate")
    seo_title: Optional[str] = Field(None, alias="seoTitle")
    seo_description: Optional[str] = Field(None, alias="seoDescription")
    author: Optional[Dict[str, Any]] = None
    tags: Optional[List[Dict[str, Any]]] = None
    featured_image: Optional[Dict[str, Any]] = Field(None, alias="featuredImage")

    def to_contentful_fields(self, locale: str) -> Dict[str, Any]:
        """Wrap every set field in a ``{locale: value}`` map, as the CMA expects."""
        values = self.model_dump(by_alias=True, exclude_none=True)
        return {name: {locale: value} for name, value in values.items()}
