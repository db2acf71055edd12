from __future__ import annotations

from typing import Any, Dict, List, Optional

from wp_contentful.models.contentful import link


BLOCK_TYPES = {
    "paragraph",
    "heading-1",
    "heading-2",
    "heading-3",
    "heading-4",
    "heading-5",
    "heading-6",
    "unordered-list",
    "ordered-list",
    "list-item",
    "blockquote",
    "hr",
    "table",
    "table-row",
    "table-cell",
    "table-header-cell",
    "embedded-asset-block",
}
INLINE_TYPES = {"text", "hyperlink"}

CONVERSION_ERROR_TEXT = "Content conversion error. Please check source."


# --- Builders for common Rich Text nodes ---

def document(content: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {"nodeType": "document", "data": {}, "content": content or []}


def block(node_type: str, content: Optional[List[Dict[str, Any]]] = None, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"nodeType": node_type, "data": data or {}, "content": content or []}


def paragraph(content: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return block("paragraph", content or [text("")])


def text(value: str, marks: Optional[List[str]] = None) -> Dict[str, Any]:
    return {
        "nodeType": "text",
        "value": value or "",
        "marks": [{"type": m} for m in (marks or [])],
        "data": {},
    }


def hyperlink(uri: str, content: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {
        "nodeType": "hyperlink",
        "data": {"uri": uri},
        "content": content if content is not None else [text(uri)],
    }


def hr() -> Dict[str, Any]:
    return block("hr")


def embedded_asset_block(asset_id: str) -> Dict[str, Any]:
    return {"nodeType": "embedded-asset-block", "data": {"target": link("Asset", asset_id)}, "content": []}


def error_document(message: str = CONVERSION_ERROR_TEXT) -> Dict[str, Any]:
    """Single-paragraph document used when a post body cannot be converted."""
    return document([paragraph([text(message)])])


# --- Minimal validator/normalizer ---

def validate_rich_text(doc: Dict[str, Any]) -> Dict[str, Any]:
    """
    Ensure the document follows basic Rich Text expectations.
    - Root is a ``document`` with a ``content`` list.
    - Stray inline nodes at document level are wrapped in a paragraph.
    - Nodes with an unknown ``nodeType`` are dropped.
    """
    content = doc.get("content") if isinstance(doc, dict) else None
    if not isinstance(content, list):
        return document([])

    fixed: List[Dict[str, Any]] = []
    for n in content:
        if not isinstance(n, dict):
            continue
        t = n.get("nodeType")
        if t in INLINE_TYPES:
            fixed.append(paragraph([n]))
        elif t in BLOCK_TYPES:
            fixed.append(n)
    return document(fixed)
