import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
import requests

from wp_migrator.migrators import media
from wp_migrator.migrators.media import rewrite_embedded_images, strip_query, upload_image, url_basename
from wp_migrator.migrators.terms import assign_terms, ensure_terms
from wp_migrator.utils.errors import ImageUploadError


def test_ensure_terms_is_idempotent(store):
    first = ensure_terms(store, ["News", "Press & Media", "news"], "category")
    assert len(first) == 2
    created = len(store.terms)
    second = ensure_terms(store, ["News", "Press & Media"], "category")
    assert second == first
    assert len(store.terms) == created


def test_ensure_terms_accepts_slug_to_name_mapping(store):
    ids = ensure_terms(store, {"tech-news": "Tech News"}, "post_tag")
    assert store.terms[ids[0]] == {"name": "Tech News", "slug": "tech-news", "taxonomy": "post_tag"}


def test_ensure_terms_keeps_taxonomies_apart(store):
    a = ensure_terms(store, ["Docs"], "category")
    b = ensure_terms(store, ["Docs"], "resource_categories")
    assert a != b


def test_assign_terms_is_additive(store):
    store.post_terms[(1, "category")] = [7]
    assert assign_terms(store, "post", 1, [8, 7], "category") == [7, 8]
    assert store.post_terms[(1, "category")] == [7, 8]


def test_strip_query_and_basename():
    assert strip_query("https://a.example/x/Photo.JPG?ver=3#top") == "https://a.example/x/Photo.JPG"
    assert url_basename("https://a.example/x/my%20file.png") == "my file.png"


def test_upload_image_dedups_by_lower_cased_basename(store, no_downloads):
    store.attachments[5] = {"file": "2020/01/photo.jpg", "url": "https://target.example/wp-content/uploads/2020/01/photo.jpg"}
    record = upload_image(store, "https://src.example/img/PHOTO.jpg?x=1")
    assert record.id == 5
    assert record.url.endswith("2020/01/photo.jpg")
    assert no_downloads == []


def test_upload_image_downloads_and_uploads_new_files(store, no_downloads):
    record = upload_image(store, "https://src.example/img/new.png?x=1")
    assert no_downloads == ["https://src.example/img/new.png"]
    assert store.attachments[record.id]["file"] == "new.png"


def test_download_failure_raises_image_upload_error(monkeypatch):
    def boom(url, timeout=None):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(media.requests, "get", boom)
    with pytest.raises(ImageUploadError):
        media.download_image("https://src.example/a.png")


def test_rewrite_uploads_each_distinct_url_once(store, no_downloads):
    markup = (
        '<img src="https://src.example/a.png"><p>again</p>'
        '<img alt="" src="https://src.example/a.png"><img src="https://src.example/b.png">'
    )
    out = rewrite_embedded_images(store, markup)
    assert no_downloads == ["https://src.example/a.png", "https://src.example/b.png"]
    assert out.count("https://target.example/wp-content/uploads/a.png") == 2
    assert "https://target.example/wp-content/uploads/b.png" in out
    assert "src.example" not in out
