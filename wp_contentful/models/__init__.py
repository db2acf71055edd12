"""
Typed records passed between migration stages.

WordPress-side models live in :mod:`wp_contentful.models.wordpress_post`;
Contentful-side records and the entry field builder in
:mod:`wp_contentful.models.contentful`.
"""

from .contentful import AssetRecord, AuthorRecord, BlogPostFields, TagRecord, link
from .wordpress_post import ContentImage, WordPressPost, file_name_from_url

__all__ = [
    "AssetRecord",
    "AuthorRecord",
    "BlogPostFields",
    "ContentImage",
    "TagRecord",
    "WordPressPost",
    "file_name_from_url",
    "link",
]
