"""
Markdown → Contentful Rich Text conversion.

The Markdown is tokenized with markdown-it-py (CommonMark plus tables) and
the flat token stream is folded into a Rich Text tree.  Block tokens open and
close nodes on a stack; ``inline`` tokens are expanded into text and
hyperlink nodes carrying ``bold``/``italic``/``code`` marks.  Code blocks
become paragraphs with ``code``-marked text, matching how Contentful renders
Markdown imports.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from markdown_it import MarkdownIt
from markdown_it.token import Token

from .rich_text_schema import block, document, hr, hyperlink, paragraph, text, validate_rich_text

_BLOCKS = {
    "paragraph_open": "paragraph",
    "bullet_list_open": "unordered-list",
    "ordered_list_open": "ordered-list",
    "list_item_open": "list-item",
    "blockquote_open": "blockquote",
    "table_open": "table",
    "tr_open": "table-row",
    "th_open": "table-header-cell",
    "td_open": "table-cell",
}
_MARKS = {
    "strong_open": "bold",
    "strong_close": "bold",
    "em_open": "italic",
    "em_close": "italic",
}
_TEXT_BLOCKS = {"paragraph", "heading-1", "heading-2", "heading-3", "heading-4", "heading-5", "heading-6"}
_CELLS = {"table-cell", "table-header-cell"}

_parser = MarkdownIt("commonmark").enable("table")

Node = Dict[str, Any]


def _append_text(target: List[Node], value: str, marks: List[str]) -> None:
    if not value:
        return
    last = target[-1] if target else None
    if last and last.get("nodeType") == "text" and [m["type"] for m in last["marks"]] == marks:
        last["value"] += value
        return
    target.append(text(value, list(marks)))


def _drop_mark(marks: List[str], mark: str) -> None:
    for i in range(len(marks) - 1, -1, -1):
        if marks[i] == mark:
            del marks[i]
            return


def inline_nodes(children: List[Token]) -> List[Node]:
    """Convert the children of an ``inline`` token into Rich Text inline nodes."""
    result: List[Node] = []
    marks: List[str] = []
    current_link: Optional[Node] = None

    for tok in children:
        target = current_link["content"] if current_link is not None else result
        kind = tok.type
        if kind in ("text", "text_special"):
            _append_text(target, tok.content, marks)
        elif kind.endswith("_open") and kind in _MARKS:
            marks.append(_MARKS[kind])
        elif kind.endswith("_close") and kind in _MARKS:
            _drop_mark(marks, _MARKS[kind])
        elif kind == "code_inline":
            _append_text(target, tok.content, marks + ["code"])
        elif kind == "softbreak":
            _append_text(target, " ", marks)
        elif kind == "hardbreak":
            _append_text(target, "\n", marks)
        elif kind == "link_open":
            current_link = hyperlink(str(tok.attrGet("href") or ""), [])
            result.append(current_link)
        elif kind == "link_close":
            if current_link is not None and not current_link["content"]:
                current_link["content"].append(text(current_link["data"]["uri"]))
            current_link = None
        elif kind == "image":
            src = str(tok.attrGet("src") or "")
            label = tok.content or src
            if current_link is not None:
                _append_text(target, label, marks)
            elif src:
                result.append(hyperlink(src, [text(label, list(marks))]))
            else:
                _append_text(target, label, marks)
        # html_inline and unknown inline tokens carry markup only
    return result


def markdown_to_rich_text(markdown: Optional[str]) -> Node:
    """Parse ``markdown`` and return a Contentful Rich Text document."""
    root = document([])
    stack: List[Node] = [root]

    for tok in _parser.parse(markdown or ""):
        parent = stack[-1]

        if tok.nesting == 1:
            if tok.type == "heading_open":
                node: Optional[Node] = block(f"heading-{int(tok.tag[1])}")
            else:
                node = block(_BLOCKS[tok.type]) if tok.type in _BLOCKS else None
            if node is None:
                # thead/tbody have no Rich Text counterpart
                stack.append(parent)
                continue
            parent["content"].append(node)
            stack.append(node)

        elif tok.nesting == -1:
            node = stack.pop()
            if node is stack[-1] or node["content"]:
                continue
            if node["nodeType"] in _TEXT_BLOCKS:
                node["content"].append(text(""))
            elif node["nodeType"] in _CELLS or node["nodeType"] == "list-item":
                node["content"].append(paragraph())

        elif tok.type == "inline":
            inlines = inline_nodes(tok.children or [])
            if parent["nodeType"] in _TEXT_BLOCKS:
                parent["content"].extend(inlines)
            else:
                parent["content"].append(paragraph(inlines))

        elif tok.type in ("fence", "code_block"):
            parent["content"].append(paragraph([text(tok.content.rstrip("\n"), ["code"])]))

        elif tok.type == "hr":
            parent["content"].append(hr())

        elif tok.type == "html_block":
            raw = tok.content.strip()
            if raw:
                parent["content"].append(paragraph([text(raw)]))

    return validate_rich_text(root)
