"""
Parsers and converters used by the migration pipeline.

This subpackage exposes ``convert_html_to_rich_text`` from
:mod:`wp_contentful.parsers.rich_text_parser` and the image embedding
transform ``embed_assets_in_rich_text``.
"""

from .asset_embedder import embed_assets_in_rich_text
from .rich_text_parser import convert_html_to_rich_text

__all__ = ["convert_html_to_rich_text", "embed_assets_in_rich_text"]
