"""
HTML → Markdown conversion for WordPress post bodies.

The markdownify converter is extended with two WordPress-specific rules:
fenced code blocks keep the ``language-*`` class of the inner ``<code>``
element, and every ``<img>`` becomes an image placeholder on its own line so
that it survives the Markdown → Rich Text step and can later be swapped for
an embedded asset block.  File names are escaped so that markdown-it reads
the marker back as plain text.  Images inside headings are moved after the
heading; images inside table cells become links, since a cell can only hold
paragraphs.
"""

from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup, Tag
from markdownify import ATX, MarkdownConverter

from wp_contentful.models.wordpress_post import file_name_from_url
from .asset_embedder import image_placeholder

_CAPTION_SHORTCODE = re.compile(r"\[/?caption[^\]]*\]", re.IGNORECASE)
_LANGUAGE_CLASS = re.compile(r"language-(\S+)")
_MARKDOWN_SPECIAL = re.compile(r"([\\`*_\[\]<>&!~|#])")
_HEADING_TAG = re.compile(r"h[1-6]$")
_CELL_TAGS = {"td", "th"}


def code_language(el: Tag) -> str:
    """Language of a ``<pre><code class="language-x">`` block, or ``""``."""
    code = el.find("code")
    if not isinstance(code, Tag):
        return ""
    classes = code.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    for cls in classes:
        m = _LANGUAGE_CLASS.match(cls)
        if m:
            return m.group(1)
    return ""


def _image_src(el: Tag) -> str:
    src = el.get("src") or ""
    if isinstance(src, list):
        src = src[0] if src else ""
    return src


def escape_markdown(value: str) -> str:
    """Backslash-escape characters markdown-it would read as inline markup."""
    return _MARKDOWN_SPECIAL.sub(r"\\\1", value)


def markdown_placeholder(file_name: str) -> str:
    """Image placeholder as Markdown source; parses back to the literal marker."""
    return image_placeholder(escape_markdown(file_name))


class WordPressMarkdownConverter(MarkdownConverter):
    """markdownify converter that replaces images with placeholders."""

    def convert_img(self, el, text, parent_tags):
        src = _image_src(el)
        file_name = file_name_from_url(src)
        if not file_name:
            return ""
        if parent_tags & _CELL_TAGS:
            # table cells only hold paragraphs, so the image stays a link
            label = el.get("alt") or file_name
            return f" [{escape_markdown(label)}](<{src}>) "
        if any(_HEADING_TAG.match(tag) for tag in parent_tags):
            # emitted after the heading by convert_hN
            return ""
        marker = markdown_placeholder(file_name)
        if "_inline" in parent_tags:
            return f" {marker} "
        return f"\n\n{marker}\n\n"

    def convert_hN(self, n, el, text, parent_tags):
        heading = super().convert_hN(n, el, text, parent_tags) if text.strip() else ""
        if "_inline" in parent_tags:
            return heading
        markers = [
            markdown_placeholder(file_name_from_url(_image_src(img)))
            for img in el.find_all("img")
            if file_name_from_url(_image_src(img))
        ]
        return heading + "".join(f"\n\n{marker}\n\n" for marker in markers)

    def convert_a(self, el, text, parent_tags):
        # <a href="full.jpg"><img ...></a> keeps only the image placeholder
        if el.find("img") is not None and not el.get_text(strip=True):
            return text
        return super().convert_a(el, text, parent_tags)


def html_to_markdown(html: Optional[str]) -> str:
    """Convert WordPress post HTML into Markdown with image placeholders."""
    cleaned_html = _CAPTION_SHORTCODE.sub("", html or "")
    soup = BeautifulSoup(cleaned_html, "html.parser")

    for bad in soup.find_all(["script", "style"]):
        bad.decompose()

    converter = WordPressMarkdownConverter(
        heading_style=ATX,
        code_language_callback=code_language,
    )
    return converter.convert_soup(soup).strip()
