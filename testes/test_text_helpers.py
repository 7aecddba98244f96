import os
import sys
import re

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from wp_migrator.parsers.text import (
    get_image_urls_from_content,
    normalize_date,
    sanitize_text_field,
    sanitize_title,
)


def test_sanitize_text_field_strips_tags_and_entities():
    assert sanitize_text_field("  <b>Tom</b> &amp;\n Jerry  ") == "Tom & Jerry"
    assert sanitize_text_field(None) == ""


def test_sanitize_title_builds_ascii_slug():
    assert sanitize_title("Gestão & Organização") == "gestao-organizacao"
    assert sanitize_title("What's New in 2024?") == "whats-new-in-2024"
    assert sanitize_title("") == ""


def test_sanitize_title_percent_encodes_other_scripts():
    assert sanitize_title("日本語") == "%e6%97%a5%e6%9c%ac%e8%aa%9e"
    slug = sanitize_title("Привет мир")
    assert slug.startswith("%d0%bf")
    assert slug.count("-") == 1
    assert sanitize_title("Café 日本") == "cafe-%e6%97%a5%e6%9c%ac"


def test_sanitize_title_trims_without_splitting_characters():
    slug = sanitize_title("日" * 100)
    assert len(slug) == 198
    assert slug.endswith("%e6%97%a5")


def test_sanitize_title_of_punctuation_is_empty():
    assert sanitize_title("!!! ???") == ""


def test_normalize_date_formats_known_dates():
    assert normalize_date("March 5, 2021") == "2021-03-05 00:00:00"
    assert normalize_date("2023-01-02T10:11:12") == "2023-01-02 10:11:12"


def test_normalize_date_falls_back_to_now_for_garbage():
    value = normalize_date("not a date")
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", value)


def test_image_urls_are_found_in_document_order():
    content = '<p><img class="x" src="http://a/1.png"></p><img src=\'http://a/2.jpg\' alt="">'
    assert get_image_urls_from_content(content) == ["http://a/1.png", "http://a/2.jpg"]
    assert get_image_urls_from_content("") == []
