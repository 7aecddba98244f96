import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
pytest.importorskip("bs4")

from wp_migrator.migrators.upsert import insert_or_update_post, normalize_raw_item, upsert, write_post
from wp_migrator.models import NormalizedPost, RawItem, TermReference
from wp_migrator.utils.errors import ImageUploadError


def test_upsert_twice_returns_same_id_without_duplicates(store):
    post = NormalizedPost(title="Hello World", content="<p>x</p>", date="2021-01-01 00:00:00")
    first_id, first_created = upsert(store, post)
    second_id, second_created = upsert(store, post)
    assert first_id == second_id
    assert (first_created, second_created) == (True, False)
    assert len(store.posts) == 1
    assert store.posts[first_id]["slug"] == "hello-world"
    assert store.posts[first_id]["date"] == "2021-01-01T00:00:00"


def test_upsert_overwrites_fields_in_place(store):
    post_id, _ = upsert(store, NormalizedPost(title="Same", content="old", status="draft"), statuses=("publish", "draft"))
    upsert(store, NormalizedPost(title="Same", content="new", status="publish"), statuses=("publish", "draft"))
    assert store.posts[post_id]["content"] == "new"
    assert store.posts[post_id]["status"] == "publish"


def test_normalize_raw_item_sanitizes_and_converts():
    raw = RawItem(title=" <b>My &amp; Post</b> ", content="<h2>H</h2><div>x</div>", date="May 1, 2020", categories=["News"])
    post = normalize_raw_item(raw, post_type="resources", taxonomy="resource_categories")
    assert post.title == "My & Post"
    assert post.slug == "my-post"
    assert post.content == '<!-- wp:heading {"level":2} --><h2>H</h2><!-- /wp:heading -->'
    assert post.date == "2020-05-01 00:00:00"
    assert post.terms == (TermReference(name="News", slug="news", taxonomy="resource_categories"),)


def test_insert_or_update_post_full_pipeline(store, no_downloads):
    raw = RawItem(
        title="Pictures",
        content='<p>Look</p><img src="https://src.example/img/photo.jpg?ver=2" alt="p">',
        image="https://src.example/img/cover.png",
        date="2022-02-02 10:00:00",
        categories=["Docs", "Guides"],
    )
    post_id, created = insert_or_update_post(store, raw)
    assert created is True

    content = store.posts[post_id]["content"]
    assert "https://target.example/wp-content/uploads/photo.jpg" in content
    assert "src.example/img/photo.jpg" not in content
    assert store.posts[post_id]["featured_media"]
    assert len(store.post_terms[(post_id, "category")]) == 2
    assert sorted(no_downloads) == ["https://src.example/img/cover.png", "https://src.example/img/photo.jpg"]

    # second run reuses attachments, terms and the post itself
    uploads = store.uploads
    again_id, created_again = insert_or_update_post(store, raw)
    assert again_id == post_id
    assert created_again is False
    assert store.uploads == uploads
    assert len(store.terms) == 2


def test_write_post_keeps_existing_term_assignments(store):
    post_id, _ = write_post(store, NormalizedPost(title="T", terms=[TermReference(name="A")]))
    write_post(store, NormalizedPost(title="T", terms=[TermReference(name="B")]))
    names = sorted(store.terms[t]["name"] for t in store.post_terms[(post_id, "category")])
    assert names == ["A", "B"]


def test_image_failure_propagates_from_writer(store, monkeypatch):
    from wp_migrator.migrators import media

    def failing(url, *, timeout=None):
        raise ImageUploadError(f"Unable to download the image: {url}")

    monkeypatch.setattr(media, "download_image", failing)
    post = NormalizedPost(title="Broken", content='<img src="https://src.example/missing.png">')
    with pytest.raises(ImageUploadError):
        write_post(store, post)
    assert store.posts == {}


def test_upsert_non_latin_title_is_idempotent(store):
    post = NormalizedPost(title="日本語のタイトル", content="<p>x</p>")
    assert post.slug.startswith("%e6%97%a5")
    first_id, _ = upsert(store, post)
    second_id, created = upsert(store, post)
    assert first_id == second_id
    assert created is False
    assert len(store.posts) == 1


def test_title_without_slug_characters_is_rejected():
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        NormalizedPost(title="!!! ???")
    with pytest.raises(ValueError):
        normalize_raw_item(RawItem(title="???"))


def test_unsluggable_item_is_reported_not_written(store):
    from wp_migrator.commands.base import BaseCommand

    command = BaseCommand({"migration": {"dry_run": False, "log_file": "migration.log"}}, store=store)
    result = command.write_item(lambda: insert_or_update_post(store, RawItem(title="???")), {"title": "???"})
    assert result is None
    assert store.posts == {}
    with open(os.path.join("reports", "migration", "errors.jsonl"), encoding="utf-8") as f:
        assert '"POST_WRITE"' in f.read()


def test_fake_store_never_matches_an_empty_slug(store):
    store.posts[1] = {"type": "post", "slug": "", "status": "publish"}
    assert store.find_post_by_slug("", "post") is None
