"""
Rich Text conversion orchestration.

A WordPress body goes through three steps: HTML → Markdown (images become
placeholders), Markdown → Rich Text, and finally placeholder paragraphs are
replaced with embedded asset blocks.  Errors are not handled here; the
migration tool catches them per post and falls back to
:func:`~wp_contentful.parsers.rich_text_schema.error_document`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from wp_contentful.models.contentful import AssetRecord
from .asset_embedder import embed_assets_in_rich_text
from .markdown_converter import html_to_markdown
from .rich_text_markdown import markdown_to_rich_text

__all__ = [
    "convert_html_to_rich_text",
]


def convert_html_to_rich_text(html: Optional[str], assets: Sequence[AssetRecord]) -> Dict[str, Any]:
    """
    Converts a WordPress HTML body to a Contentful Rich Text document with
    inline images embedded as asset blocks.

    Args:
        html: The rendered post HTML.
        assets: Assets uploaded during this run, matched by file name.

    Returns:
        A dictionary representing the Rich Text document.
    """
    markdown = html_to_markdown(html)
    rich_text = markdown_to_rich_text(markdown)
    return embed_assets_in_rich_text(rich_text, assets)
