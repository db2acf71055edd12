"""
Replace image placeholders in a Rich Text document with embedded assets.

During HTML → Markdown conversion each ``<img>`` is turned into a text marker
``[CONTENTFUL_IMAGE:<fileName>]``.  After the Markdown has been converted to
Rich Text, those markers end up as paragraphs holding a single text node.
:func:`embed_assets_in_rich_text` swaps each such paragraph for an
``embedded-asset-block`` that links the asset uploaded from the same file.

Usage example::

    from wp_contentful.models import AssetRecord
    from wp_contentful.parsers.asset_embedder import embed_assets_in_rich_text

    assets = [AssetRecord(fileName="pic.jpg", assetId="A1")]
    doc = embed_assets_in_rich_text(rich_text_doc, assets)

Only the first placeholder of a paragraph is considered.  The Markdown
converter always puts an image on its own line, so a paragraph carries at
most one marker.  Placeholders without a matching asset are left in place
(and logged) rather than dropped.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from wp_contentful.models.contentful import AssetRecord
from wp_contentful.utils.logger import get_logger
from .rich_text_schema import embedded_asset_block

logger = get_logger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\[CONTENTFUL_IMAGE:([^\]]+)\]")
AVAILABLE_PREVIEW = 5


def image_placeholder(file_name: str) -> str:
    return f"[CONTENTFUL_IMAGE:{file_name}]"


def find_placeholder(node: Mapping[str, Any]) -> Optional[str]:
    """File name of the first placeholder among the direct text children of a paragraph."""
    if node.get("nodeType") != "paragraph":
        return None
    children = node.get("content")
    if not isinstance(children, list):
        return None
    for child in children:
        if not isinstance(child, dict) or child.get("nodeType") != "text":
            continue
        m = PLACEHOLDER_PATTERN.search(child.get("value") or "")
        if m:
            return m.group(1)
    return None


def _index_assets(assets: Sequence[AssetRecord]) -> Dict[str, AssetRecord]:
    index: Dict[str, AssetRecord] = {}
    for asset in assets:
        index.setdefault(asset.file_name, asset)
    return index


def _rewrite(content: List[Any], index: Dict[str, AssetRecord], available: List[str], stats: Dict[str, int]) -> List[Any]:
    new_content: List[Any] = []
    for node in content:
        if not isinstance(node, dict):
            new_content.append(node)
            continue

        file_name = find_placeholder(node)
        if file_name:
            stats["found"] += 1
            asset = index.get(file_name)
            if asset:
                new_content.append(embedded_asset_block(asset.asset_id))
                stats["embedded"] += 1
                continue
            logger.warning("⚠ Could not find asset for inline image: %s", file_name)
            logger.warning("  Available assets: %s...", ", ".join(available[:AVAILABLE_PREVIEW]))
            new_content.append(node)
            continue

        children = node.get("content")
        if isinstance(children, list):
            node = {**node, "content": _rewrite(children, index, available, stats)}
        new_content.append(node)
    return new_content


def embed_assets_in_rich_text(document: Optional[Dict[str, Any]], assets: Sequence[AssetRecord]) -> Optional[Dict[str, Any]]:
    """
    Return ``document`` with every image placeholder paragraph replaced by an
    ``embedded-asset-block`` linking the asset of the same file name.

    :param document: A Rich Text document; ``None`` or a document without a
        ``content`` list is returned unchanged.
    :param assets: Uploaded assets.  When two records share a file name the
        first one wins.
    :return: The rewritten document.  Nodes are copied rather than mutated,
        so the caller should continue with the returned value.
    """
    if not document or not isinstance(document.get("content"), list):
        return document

    if not assets:
        logger.warning("⚠ No assets available for embedding in Rich Text")
        return document

    index = _index_assets(assets)
    available = [a.file_name for a in assets]
    stats = {"found": 0, "embedded": 0}
    new_content = _rewrite(document["content"], index, available, stats)

    if stats["found"]:
        logger.info("  ✓ Embedded %d of %d inline images in Rich Text", stats["embedded"], stats["found"])

    return {**document, "content": new_content}
