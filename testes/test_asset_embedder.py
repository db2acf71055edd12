import copy
import logging
import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from wp_contentful.models import AssetRecord
from wp_contentful.parsers.asset_embedder import embed_assets_in_rich_text, find_placeholder, image_placeholder
from wp_contentful.parsers.rich_text_schema import block, document, paragraph, text


def _image_paragraph(file_name):
    return paragraph([text(image_placeholder(file_name))])


def _asset(file_name, asset_id):
    return AssetRecord(fileName=file_name, assetId=asset_id)


def test_document_without_placeholders_is_unchanged():
    doc = document([
        block("heading-2", [text("Title")]),
        paragraph([text("Hello "), text("world", ["bold"])]),
    ])
    out = embed_assets_in_rich_text(doc, [_asset("pic.jpg", "A1")])
    assert out == doc


def test_single_placeholder_becomes_embedded_asset_block():
    doc = document([paragraph([text("Intro")]), _image_paragraph("pic.jpg"), paragraph([text("Outro")])])
    out = embed_assets_in_rich_text(doc, [_asset("pic.jpg", "A1")])

    assert [n["nodeType"] for n in out["content"]] == ["paragraph", "embedded-asset-block", "paragraph"]
    assert out["content"][1] == {
        "nodeType": "embedded-asset-block",
        "data": {"target": {"sys": {"type": "Link", "linkType": "Asset", "id": "A1"}}},
        "content": [],
    }
    assert out["content"][0] == doc["content"][0]
    assert out["content"][2] == doc["content"][2]


def test_empty_asset_list_returns_document_and_warns(caplog):
    doc = document([_image_paragraph("pic.jpg")])
    with caplog.at_level(logging.WARNING, logger="wp_contentful"):
        out = embed_assets_in_rich_text(doc, [])
    assert out == doc
    assert "No assets available for embedding in Rich Text" in caplog.text


def test_missing_asset_keeps_paragraph_and_lists_available(caplog):
    doc = document([_image_paragraph("foo.jpg")])
    with caplog.at_level(logging.WARNING, logger="wp_contentful"):
        out = embed_assets_in_rich_text(doc, [_asset("bar.jpg", "B1")])
    assert out["content"] == doc["content"]
    assert "Could not find asset for inline image: foo.jpg" in caplog.text
    assert "bar.jpg" in caplog.text


def test_nested_placeholders_are_replaced_in_place():
    doc = document([
        block("unordered-list", [
            block("list-item", [paragraph([text("first")])]),
            block("list-item", [_image_paragraph("a.png")]),
        ]),
        block("blockquote", [paragraph([text("quote")]), _image_paragraph("b.png")]),
    ])
    out = embed_assets_in_rich_text(doc, [_asset("a.png", "A"), _asset("b.png", "B")])

    items = out["content"][0]["content"]
    assert items[0] == doc["content"][0]["content"][0]
    assert items[1]["content"][0]["nodeType"] == "embedded-asset-block"
    assert items[1]["content"][0]["data"]["target"]["sys"]["id"] == "A"

    quote = out["content"][1]["content"]
    assert [n["nodeType"] for n in quote] == ["paragraph", "embedded-asset-block"]
    assert quote[1]["data"]["target"]["sys"]["id"] == "B"


def test_input_document_is_not_mutated():
    doc = document([_image_paragraph("pic.jpg"), block("blockquote", [_image_paragraph("pic.jpg")])])
    before = copy.deepcopy(doc)
    embed_assets_in_rich_text(doc, [_asset("pic.jpg", "A1")])
    assert doc == before


def test_embedding_twice_gives_same_result():
    doc = document([paragraph([text("x")]), _image_paragraph("pic.jpg"), _image_paragraph("other.jpg")])
    assets = [_asset("pic.jpg", "A1")]
    once = embed_assets_in_rich_text(doc, assets)
    twice = embed_assets_in_rich_text(once, assets)
    assert twice == once


def test_none_and_document_without_content_are_returned_as_is():
    assets = [_asset("pic.jpg", "A1")]
    assert embed_assets_in_rich_text(None, assets) is None
    bare = {"nodeType": "document", "data": {}}
    assert embed_assets_in_rich_text(bare, assets) is bare


def test_only_first_placeholder_of_a_paragraph_counts():
    para = paragraph([text("[CONTENTFUL_IMAGE:one.jpg] and [CONTENTFUL_IMAGE:two.jpg]")])
    assert find_placeholder(para) == "one.jpg"

    out = embed_assets_in_rich_text(document([para]), [_asset("one.jpg", "1"), _asset("two.jpg", "2")])
    assert len(out["content"]) == 1
    assert out["content"][0]["data"]["target"]["sys"]["id"] == "1"


def test_placeholders_outside_paragraphs_are_ignored():
    heading = block("heading-2", [text(image_placeholder("pic.jpg"))])
    assert find_placeholder(heading) is None
    doc = document([heading])
    assert embed_assets_in_rich_text(doc, [_asset("pic.jpg", "A1")]) == doc


def test_first_asset_wins_on_duplicate_file_names():
    doc = document([_image_paragraph("pic.jpg")])
    out = embed_assets_in_rich_text(doc, [_asset("pic.jpg", "first"), _asset("pic.jpg", "second")])
    assert out["content"][0]["data"]["target"]["sys"]["id"] == "first"
