"""
High-level orchestration of the WordPress → Contentful migration.

This module defines a :class:`ContentfulMigrationTool` class that ties
together the extractors, parsers, migrators and utilities into a complete
pipeline.  The stages run in a fixed order and hand their results to the
next stage explicitly::

    fetch → transform → create_assets → create_authors → create_tags → create_posts

Every remote call for one item (asset, author, tag, post) is wrapped so that
a failure is reported and the item skipped; the run always finishes with a
completion message.  Only a failure to load the WordPress posts stops it.

Configuration is supplied via a JSON file path or directly as a dictionary
(see :mod:`wp_contentful.utils.config`).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from wp_contentful.extractors.wordpress_extractor import (
    WordPressData,
    fetch_wordpress_data,
    find_by_id,
    get_author_name,
    map_posts,
    write_snapshot,
)
from wp_contentful.migrators.contentful_migrator import (
    RateLimiter,
    create_asset,
    create_entry,
    create_upload,
    download_image,
    error_details,
    get_asset,
    guess_content_type,
    list_published_assets,
    process_asset,
    publish_asset,
    publish_entry,
)
from wp_contentful.models import AssetRecord, AuthorRecord, BlogPostFields, ContentImage, TagRecord, WordPressPost, link
from wp_contentful.parsers.asset_embedder import AVAILABLE_PREVIEW
from wp_contentful.parsers.rich_text_parser import convert_html_to_rich_text
from wp_contentful.parsers.rich_text_schema import error_document
from wp_contentful.utils.config import load_config
from wp_contentful.utils.errors import ItemResult, report_error, report_ok
from wp_contentful.utils.labels import normalize_label
from wp_contentful.utils.logger import get_logger

logger = get_logger(__name__)

LOG_SEPARATOR = "-------"


@dataclass
class MigrationSummary:
    posts: int = 0
    assets: int = 0
    authors: int = 0
    tags: int = 0
    published: int = 0
    drafts: int = 0
    failed: int = 0
    dry_run: bool = False


class ContentfulMigrationTool:
    """
    Encapsulates the configuration and the stages required to migrate a
    WordPress site to Contentful.  Stages do not share mutable state: each
    takes the output of the previous one as an argument.  Detailed success
    and failure information is recorded using the
    :mod:`wp_contentful.utils.errors` module.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, *, config_file: Optional[str] = None) -> None:
        self.config = load_config(config, config_file=config_file)
        throttle = self.config["migration"]["throttle"]
        self.asset_limiter = RateLimiter(throttle["asset_rpm"])
        self.entry_limiter = RateLimiter(throttle["entry_rpm"])
        self.post_limiter = RateLimiter(throttle["post_rpm"])

    @property
    def ctf(self) -> Dict[str, Any]:
        return self.config["contentful"]

    @property
    def locale(self) -> str:
        return self.ctf["locale"]

    def content_type(self, role: str) -> str:
        return self.ctf["content_types"][role]

    def log_message(self, message: str, level: str = "INFO") -> None:
        logger.log(getattr(logging, level.upper(), logging.INFO), message)

    def _phase(self, title: str) -> None:
        logger.info(LOG_SEPARATOR)
        logger.info(title)
        logger.info(LOG_SEPARATOR)

    # ------------------------------------------------------------------
    # Source stages
    # ------------------------------------------------------------------

    def fetch(self) -> WordPressData:
        self._phase("Getting WordPress API data")
        return fetch_wordpress_data(self.config)

    def transform(self, data: WordPressData) -> List[WordPressPost]:
        """Map the raw posts and write the JSON snapshot of the result."""
        logger.info("Reducing API data to only include fields we want")
        posts = map_posts(data, self.config["migration"].get("limit"))
        path = write_snapshot(posts, self.config["migration"]["snapshot_path"])
        logger.info("Wrote %d posts to %s", len(posts), path)
        return posts

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def collect_images(self, posts: List[WordPressPost]) -> List[ContentImage]:
        """Every image of every post, once per file name."""
        images: List[ContentImage] = []
        seen = set()
        for post in posts:
            for image in post.content_images:
                if not image.file_name or image.file_name in seen:
                    continue
                seen.add(image.file_name)
                images.append(image)
        return images

    def asset_fields(self, image: ContentImage, upload_id: str) -> Dict[str, Any]:
        loc = self.locale
        return {
            "title": {loc: image.title},
            "description": {loc: image.description},
            "file": {
                loc: {
                    "contentType": guess_content_type(image.file_name),
                    "fileName": image.file_name,
                    "uploadFrom": link("Upload", upload_id),
                }
            },
        }

    def _asset_file_name(self, asset: Dict[str, Any]) -> str:
        return ((asset.get("fields") or {}).get("file") or {}).get(self.locale, {}).get("fileName", "")

    def create_one_asset(self, image: ContentImage) -> ItemResult[Dict[str, Any]]:
        """Download, upload, create and process the asset of one image."""
        file_name = image.file_name
        item = {"fileName": file_name}
        try:
            local_path = download_image(image.link, file_name, self.config["migration"]["temp_image_dir"])
        except (requests.RequestException, OSError) as e:
            report_error("ASSET_DOWNLOAD", item, e)
            return ItemResult.failure("ASSET_DOWNLOAD", str(e))
        logger.info("  Downloaded to: %s", local_path)

        try:
            with open(local_path, "rb") as f:
                upload_id = create_upload(self.ctf, f.read())
            logger.info("  Uploaded, creating asset...")
            asset = create_asset(self.ctf, self.asset_fields(image, upload_id))
            logger.info("  Processing asset...")
            asset = process_asset(self.ctf, asset, self.locale)
        except (requests.RequestException, OSError) as e:
            report_error("ASSET_CREATE", item, e)
            return ItemResult.failure("ASSET_CREATE", error_details(e))
        finally:
            if os.path.exists(local_path):
                os.remove(local_path)

        report_ok("ASSET_CREATED", item, {"asset_id": asset["sys"]["id"]})
        return ItemResult.success(asset)

    def publish_one_asset(self, asset: Dict[str, Any]) -> ItemResult[AssetRecord]:
        """
        Publish the latest version of a created asset.  The record is
        returned even when publishing fails, so the asset can still be
        linked.
        """
        asset_id = asset["sys"]["id"]
        record = AssetRecord(fileName=self._asset_file_name(asset), assetId=asset_id)
        item = {"fileName": record.file_name}
        try:
            latest = get_asset(self.ctf, asset_id)
            if latest["sys"].get("publishedVersion"):
                logger.info("⚠ Asset already published: %s", record.file_name)
                return ItemResult.success(record)
            publish_asset(self.ctf, latest)
        except requests.RequestException as e:
            report_error("ASSET_PUBLISH", item, e)
            return ItemResult.failure("ASSET_PUBLISH", error_details(e), value=record)
        report_ok("ASSET_PUBLISHED", item, {"asset_id": asset_id})
        return ItemResult.success(record)

    def merge_published_assets(self, records: List[AssetRecord]) -> List[AssetRecord]:
        """Append assets already published in the space that this run did not create."""
        try:
            published = list_published_assets(self.ctf, self.locale)
        except requests.RequestException as e:
            logger.warning("⚠ Could not list published assets: %s", error_details(e))
            return records
        known = {r.asset_id for r in records}
        extra = [
            AssetRecord(fileName=a["fileName"], assetId=a["id"])
            for a in published
            if a["id"] not in known and a.get("fileName")
        ]
        if extra:
            logger.info("Found %d previously published assets", len(extra))
        return records + extra

    def create_assets(self, posts: List[WordPressPost]) -> List[AssetRecord]:
        self._phase("Creating Contentful Assets...")
        images = self.collect_images(posts)
        logger.info("Downloading and creating %d assets...", len(images))

        created: List[Dict[str, Any]] = []
        for i, image in enumerate(images, start=1):
            self.asset_limiter.wait()
            logger.info("[%d/%d] Downloading: %s", i, len(images), image.file_name)
            result = self.create_one_asset(image)
            if result.ok:
                created.append(result.value)

        logger.info("Publishing %d assets...", len(created))
        records: List[AssetRecord] = []
        for asset in created:
            self.entry_limiter.wait()
            result = self.publish_one_asset(asset)
            if result.value is not None:
                records.append(result.value)

        logger.info("Successfully processed/stored %d assets", len(records))
        return self.merge_published_assets(records)

    # ------------------------------------------------------------------
    # Authors and tags
    # ------------------------------------------------------------------

    def _create_published_entry(self, role: str, fields: Dict[str, Any], item: Dict[str, Any], code_prefix: str) -> ItemResult[Dict[str, Any]]:
        self.entry_limiter.wait()
        try:
            entry = create_entry(self.ctf, self.content_type(role), fields)
            logger.info("  Created draft %s: %s", role, item.get("name"))
            published = publish_entry(self.ctf, entry)
        except requests.RequestException as e:
            report_error(f"{code_prefix}_CREATE", item, e)
            return ItemResult.failure(f"{code_prefix}_CREATE", error_details(e))
        report_ok(f"{code_prefix}_PUBLISHED", item, {"contentful_id": published["sys"]["id"]})
        return ItemResult.success(published)

    def create_authors(self, posts: List[WordPressPost], data: WordPressData) -> List[AuthorRecord]:
        self._phase("Creating Contentful Authors...")
        author_ids = list(dict.fromkeys(p.author_id for p in posts if p.author_id is not None))
        logger.info("Found %d unique authors to create", len(author_ids))

        authors: List[AuthorRecord] = []
        for author_id in author_ids:
            name = get_author_name(data.users, author_id)
            if not name:
                logger.warning("⚠ Skipping author with ID %s - no name found", author_id)
                continue
            logger.info("Creating author: %s", name)
            result = self._create_published_entry("author", {"name": {self.locale: name}}, {"name": name}, "AUTHOR")
            if result.ok:
                authors.append(AuthorRecord(authorId=author_id, authorName=name, contentfulId=result.value["sys"]["id"]))

        logger.info("Successfully created %d authors", len(authors))
        return authors

    def create_tags(self, posts: List[WordPressPost], data: WordPressData) -> List[TagRecord]:
        self._phase("Creating Contentful Tags (from WordPress tags and categories)...")
        tag_ids = list(dict.fromkeys(tag_id for p in posts for tag_id in p.tags))
        logger.info("Found %d unique tags/categories to create", len(tag_ids))

        if not data.tags and not data.categories:
            logger.warning("⚠ No WordPress tag or category data available, skipping tag creation")
            return []

        tags: List[TagRecord] = []
        for tag_id in tag_ids:
            wp_item, kind = find_by_id(data.tags, tag_id), "tag"
            if wp_item is None:
                wp_item, kind = find_by_id(data.categories, tag_id), "category"
            if not wp_item or not wp_item.get("name"):
                logger.warning("⚠ Skipping item with ID %s - no name found", tag_id)
                continue

            name = normalize_label(wp_item["name"])
            logger.info("Creating tag from WordPress %s: %s", kind, name)
            result = self._create_published_entry("tag", {"name": {self.locale: name}}, {"name": name}, "TAG")
            if result.ok:
                tags.append(TagRecord(tagId=tag_id, tagName=name, contentfulId=result.value["sys"]["id"]))

        logger.info("Successfully created %d tags (combined from WordPress tags and categories)", len(tags))
        return tags

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def _featured_image_link(self, post: WordPressPost, assets: List[AssetRecord]) -> Optional[Dict[str, Any]]:
        if post.featured_image <= 0:
            return None
        if not assets:
            logger.warning("⚠ No assets available to link featured image for post: %s", post.slug)
            return None
        image = post.featured_content_image
        if image is None:
            logger.warning("⚠ No featured image found in contentImages for post: %s", post.slug)
            return None
        match = next((a for a in assets if a.file_name == image.file_name), None)
        if match is None:
            logger.warning("⚠ Could not find matching asset for: %s", image.file_name)
            logger.warning("  Available assets: %s...", ", ".join(a.file_name for a in assets[:AVAILABLE_PREVIEW]))
            return None
        logger.info("✓ Linked featured image: %s", image.file_name)
        return link("Asset", match.asset_id)

    def build_post_fields(
        self,
        post: WordPressPost,
        assets: List[AssetRecord],
        authors: List[AuthorRecord],
        tags: List[TagRecord],
    ) -> BlogPostFields:
        """
        Build the ``pageBlogPost`` fields of one post.  Content conversion
        errors fall back to a single error paragraph; references that cannot
        be resolved are omitted.
        """
        try:
            content = convert_html_to_rich_text(post.content, assets)
        except Exception as e:
            report_error("CONTENT_CONVERSION", {"slug": post.slug, "title": post.title}, e)
            content = error_document()

        author_link = None
        if post.author_id is not None:
            author = next((a for a in authors if a.author_id == post.author_id), None)
            if author:
                author_link = link("Entry", author.contentful_id)
                logger.info("✓ Linked author: %s", author.author_name)
            else:
                logger.warning("⚠ Could not find Contentful author for ID: %s", post.author_id)

        tag_links = [link("Entry", t.contentful_id) for tag_id in post.tags for t in tags if t.tag_id == tag_id]
        if tag_links:
            logger.info("✓ Linked %d tags", len(tag_links))

        return BlogPostFields(
            internalName=post.internal_name,
            title=post.title,
            slug=post.slug,
            content=content,
            publishedDate=post.published_date,
            seoTitle=post.seo_title or None,
            seoDescription=post.seo_description or None,
            author=author_link,
            tags=tag_links or None,
            featuredImage=self._featured_image_link(post, assets),
        )

    def create_posts(self, field_sets: List[BlogPostFields]) -> List[ItemResult[Dict[str, Any]]]:
        """
        Create and publish one entry per post.  A post whose publish call is
        rejected stays as a draft and counts as created.
        """
        self._phase("Creating Contentful Posts...")
        results: List[ItemResult[Dict[str, Any]]] = []
        for fields in field_sets:
            item = {"slug": fields.slug, "title": fields.title}
            self.post_limiter.wait()
            logger.info("Attempting: %s", fields.slug)
            try:
                entry = create_entry(self.ctf, self.content_type("post"), fields.to_contentful_fields(self.locale))
            except requests.RequestException as e:
                report_error("POST_CREATE", item, e)
                results.append(ItemResult.failure("POST_CREATE", error_details(e)))
                continue
            report_ok("DRAFT_CREATED", item, {"entry_id": entry["sys"]["id"]})

            try:
                published = publish_entry(self.ctf, entry)
            except requests.RequestException as e:
                logger.info("Could not publish %s - left as draft. Error: %s", fields.slug, error_details(e))
                report_error("POST_PUBLISH", item, e)
                results.append(ItemResult.success(entry, code="DRAFT"))
                continue
            report_ok("PUBLISHED", item, {"entry_id": published["sys"]["id"]})
            results.append(ItemResult.success(published, code="PUBLISHED"))
        return results

    # ------------------------------------------------------------------

    def run(self) -> MigrationSummary:
        """
        Run every stage in order.  When ``dry_run`` is enabled only the
        WordPress data is fetched and mapped; nothing is written to
        Contentful.

        :raises SourceFetchError: if the WordPress posts cannot be loaded.
        """
        data = self.fetch()
        posts = self.transform(data)
        summary = MigrationSummary(posts=len(posts))

        if self.config["migration"].get("dry_run"):
            images = self.collect_images(posts)
            logger.info("Dry-run: would create %d assets and %d posts", len(images), len(posts))
            summary.dry_run = True
            return summary

        assets = self.create_assets(posts)
        authors = self.create_authors(posts, data)
        tags = self.create_tags(posts, data)

        self._phase("Building Contentful post fields...")
        field_sets = []
        for post in posts:
            logger.info("Converting content for %s", post.slug)
            field_sets.append(self.build_post_fields(post, assets, authors, tags))
        results = self.create_posts(field_sets)

        summary.assets = len(assets)
        summary.authors = len(authors)
        summary.tags = len(tags)
        summary.published = sum(1 for r in results if r.ok and r.code == "PUBLISHED")
        summary.drafts = sum(1 for r in results if r.ok and r.code == "DRAFT")
        summary.failed = sum(1 for r in results if not r.ok)

        self._phase("The migration has completed.")
        logger.info(
            "%d posts published, %d left as drafts, %d failed (%d assets, %d authors, %d tags)",
            summary.published, summary.drafts, summary.failed, summary.assets, summary.authors, summary.tags,
        )
        return summary
