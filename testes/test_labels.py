import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from wp_contentful.utils.labels import normalize_label


def test_html_entities_and_whitespace():
    assert normalize_label("  Tips &amp; Tricks ") == "Tips & Tricks"
    assert normalize_label("It&#8217;s   here") == "It’s here"


def test_casing_is_preserved():
    assert normalize_label("WordPress SEO") == "WordPress SEO"


def test_empty_values():
    assert normalize_label("") == ""
    assert normalize_label(None) == ""
