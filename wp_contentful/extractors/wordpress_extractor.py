"""
WordPress REST API extraction.

The collections needed by the migration (posts, tags, categories, media and
users) are fetched from ``{endpoint}{resource}`` following WordPress
pagination.  Posts are requested with ``_embed`` so that featured media is
available inline.  Raw records are then reduced to
:class:`~wp_contentful.models.WordPressPost` models carrying only the fields
used by later stages, together with the list of images to upload.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests
from bs4 import BeautifulSoup
from pydantic import ValidationError

from wp_contentful.models.wordpress_post import ContentImage, WordPressPost, file_name_from_url
from wp_contentful.utils.errors import ItemResult, SourceFetchError
from wp_contentful.utils.labels import normalize_label
from wp_contentful.utils.logger import get_logger

logger = get_logger(__name__)

RESOURCES = ("posts", "tags", "categories", "media", "users")

# WordPress resized copies: photo-300x200.jpg, photo-scaled.jpg
_SIZE_SUFFIX = re.compile(r"-(?:\d+x\d+|scaled)(?=\.[^.]+$|$)")


@dataclass
class WordPressData:
    """Raw WordPress collections, passed explicitly between stages."""

    posts: List[Dict[str, Any]] = field(default_factory=list)
    tags: List[Dict[str, Any]] = field(default_factory=list)
    categories: List[Dict[str, Any]] = field(default_factory=list)
    media: List[Dict[str, Any]] = field(default_factory=list)
    users: List[Dict[str, Any]] = field(default_factory=list)


def collection_url(endpoint: str, resource: str) -> str:
    return f"{endpoint.rstrip('/')}/{resource}"


def fetch_collection(cfg: Dict[str, Any], resource: str, *, limit: Optional[int] = None) -> ItemResult[List[Dict[str, Any]]]:
    """
    Fetch every page of one WordPress collection.

    :param cfg: Full configuration; the ``wordpress`` section provides
        ``endpoint``, ``per_page`` and ``timeout``.
    :param resource: Collection name, e.g. ``"posts"``.
    :param limit: Stop paging once this many records were read.
    :return: A successful result holding the records, or a failure with the
        reason when any page could not be loaded.
    """
    wp = cfg["wordpress"]
    url = collection_url(wp["endpoint"], resource)
    params: Dict[str, Any] = {"per_page": wp.get("per_page", 100)}
    if resource == "posts":
        params["_embed"] = 1

    items: List[Dict[str, Any]] = []
    page = 1
    while True:
        params["page"] = page
        try:
            resp = requests.get(url, params=params, timeout=wp.get("timeout", 30))
            resp.raise_for_status()
            batch = resp.json()
            total_pages = int(resp.headers.get("X-WP-TotalPages") or 1)
        except requests.HTTPError as e:
            # WordPress answers 400 when asked for a page past the last one
            if e.response is not None and e.response.status_code == 400 and page > 1:
                break
            status = e.response.status_code if e.response is not None else "?"
            body = e.response.text if e.response is not None else ""
            logger.error("Error fetching %s: status %s %s", url, status, body[:500])
            return ItemResult.failure("SOURCE_FETCH", f"{url}: {e}")
        except (requests.RequestException, ValueError) as e:
            logger.error("Error fetching %s: %s", url, e)
            return ItemResult.failure("SOURCE_FETCH", f"{url}: {e}")

        if not isinstance(batch, list):
            return ItemResult.failure("SOURCE_FETCH", f"{url}: expected a JSON list, got {type(batch).__name__}")

        items.extend(batch)
        if not batch or page >= total_pages or (limit and len(items) >= limit):
            break
        page += 1

    return ItemResult.success(items)


def fetch_wordpress_data(cfg: Dict[str, Any]) -> WordPressData:
    """
    Load all collections.  Failing to load posts is fatal; any other
    collection degrades to an empty list so that the run can continue.

    :raises SourceFetchError: if the posts collection cannot be loaded.
    """
    limit = cfg["migration"].get("limit")
    data = WordPressData()
    for resource in RESOURCES:
        logger.info("Fetching WordPress %s", resource)
        result = fetch_collection(cfg, resource, limit=limit if resource == "posts" else None)
        if not result.ok:
            if resource == "posts":
                raise SourceFetchError(f"No posts data available from WordPress API ({result.reason})")
            logger.warning("⚠ Could not load WordPress %s, continuing without them: %s", resource, result.reason)
            continue
        setattr(data, resource, result.value or [])
        logger.info("  %d %s", len(result.value or []), resource)
    return data


def find_by_id(records: List[Dict[str, Any]], record_id: Any) -> Optional[Dict[str, Any]]:
    return next((r for r in records if r.get("id") == record_id), None)


def get_author_name(users: List[Dict[str, Any]], author_id: Any) -> Optional[str]:
    """Display name of a WordPress user, or ``None`` with a warning."""
    if not users:
        logger.warning("⚠ No users data available")
        return None
    user = find_by_id(users, author_id)
    if user and user.get("name"):
        return normalize_label(user["name"])
    logger.warning("⚠ Could not find user with ID: %s", author_id)
    return None


def base_image_name(url: str) -> str:
    """File name with the WordPress size suffix removed."""
    return _SIZE_SUFFIX.sub("", file_name_from_url(url), count=1)


def is_same_image(url_a: str, url_b: str) -> bool:
    """True when two URLs point to size variants of the same uploaded image."""
    a, b = base_image_name(url_a), base_image_name(url_b)
    return bool(a) and a == b


def _featured_media_object(post: Dict[str, Any], media: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    embedded = (post.get("_embedded") or {}).get("wp:featuredmedia") or []
    if embedded and isinstance(embedded[0], dict) and embedded[0].get("source_url"):
        logger.debug("  ✓ Found featured media in _embedded data")
        return embedded[0]
    return find_by_id(media, post.get("featured_media"))


def get_post_body_images(post: Dict[str, Any], media: List[Dict[str, Any]]) -> List[ContentImage]:
    """
    Collect the images of a post: the featured image first (flagged
    ``featured``), then every ``<img>`` of the body that is not a size
    variant of the featured image.
    """
    images: List[ContentImage] = []
    post_id = post.get("id")
    title = normalize_label((post.get("title") or {}).get("rendered") or "")
    featured_url: Optional[str] = None

    if post.get("featured_image_url"):
        featured_url = post["featured_image_url"]
        og_images = (post.get("yoast_head_json") or {}).get("og_image") or [{}]
        images.append(
            ContentImage(
                link=featured_url,
                description=og_images[0].get("alt") or "Featured image",
                title=title or "Featured image",
                mediaId=post.get("featured_media"),
                postId=post_id,
                featured=True,
            )
        )
    elif (post.get("featured_media") or 0) > 0:
        media_obj = _featured_media_object(post, media)
        if media_obj and media_obj.get("source_url"):
            featured_url = media_obj["source_url"]
            alt = media_obj.get("alt_text") or "Featured image"
            images.append(
                ContentImage(
                    link=featured_url,
                    description=alt,
                    title=alt,
                    mediaId=media_obj.get("id"),
                    postId=media_obj.get("post") or post_id,
                    featured=True,
                )
            )
        else:
            logger.info("  ✗ No media object found for featured_media ID %s", post.get("featured_media"))

    html = (post.get("content") or {}).get("rendered") or ""
    for img in BeautifulSoup(html, "html.parser").find_all("img"):
        src = img.get("src")
        if not src:
            continue
        if featured_url and is_same_image(src, featured_url):
            continue
        alt = img.get("alt")
        label = alt if alt is not None else str(post_id)
        images.append(ContentImage(link=src, description=label, title=label, postId=post_id, featured=False))

    return images


def map_post(post: Dict[str, Any], data: WordPressData) -> WordPressPost:
    """Reduce a raw WordPress post to the fields used by the migration."""
    title = normalize_label(post["title"]["rendered"])
    yoast = post.get("yoast_head_json") or {}
    tags = list(post.get("tags") or [])
    categories = list(post.get("categories") or [])
    date_gmt = post.get("date_gmt")
    return WordPressPost(
        id=post["id"],
        internalName=title,
        title=title,
        slug=post["slug"],
        content=(post.get("content") or {}).get("rendered") or "",
        publishedDate=f"{date_gmt}+00:00" if date_gmt else None,
        featuredImage=post.get("featured_media") or 0,
        authorId=post.get("author"),
        authorName=get_author_name(data.users, post.get("author")),
        seoTitle=normalize_label(yoast.get("title") or "") or title,
        seoDescription=yoast.get("description") or "",
        # Contentful has a single tag field: WordPress tags, then categories
        tags=tags + [c for c in categories if c not in tags],
        categories=categories,
        contentImages=get_post_body_images(post, data.media),
    )


def map_posts(data: WordPressData, limit: Optional[int] = None) -> List[WordPressPost]:
    """
    Map the fetched posts, keeping at most ``limit`` of them (``None`` or
    ``0`` means all).  Malformed records are logged and skipped.
    """
    raw_posts = data.posts[:limit] if limit else data.posts
    if limit:
        logger.info("TEST MODE: Processing only %d posts", limit)

    posts: List[WordPressPost] = []
    for raw in raw_posts:
        logger.info("Parsing %s", raw.get("slug"))
        try:
            posts.append(map_post(raw, data))
        except (KeyError, TypeError, ValidationError) as e:
            logger.error("❌ Skipping malformed post %s: %s", raw.get("id"), e)
    return posts


def write_snapshot(posts: List[WordPressPost], path: str) -> str:
    """Write the mapped posts to a JSON file for inspection and return its path."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"posts": [p.snapshot() for p in posts]}, f, ensure_ascii=False, indent=2)
    return path
