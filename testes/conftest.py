import os
import sys
from typing import Any, Dict, List, Optional

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code: int = 200, text: str = "", json_data: Any = None, headers: Optional[Dict[str, str]] = None):
        self.status_code = status_code
        self.text = text
        self._json = json_data
        self.headers = headers or {}
        self.content = text.encode() if text else b""

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            import requests

            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeStore:
    """In-memory content store with the same methods as the REST stores."""

    def __init__(self, post_types=("post", "page", "resources")):
        self.base_url = "https://target.example"
        self.timeout = 5
        self.post_types = set(post_types)
        self.posts: Dict[int, Dict[str, Any]] = {}
        self.meta: Dict[int, Dict[str, Any]] = {}
        self.meta_calls: List[Dict[str, Any]] = []
        self.attachments: Dict[int, Dict[str, str]] = {}
        self.terms: Dict[int, Dict[str, str]] = {}
        self.post_terms: Dict[tuple, List[int]] = {}
        self.products: Dict[int, Dict[str, Any]] = {}
        self.variations: Dict[int, List[Dict[str, Any]]] = {}
        self.attributes: Dict[int, str] = {}
        self.revisions: Dict[int, List[Dict[str, Any]]] = {}
        self.comments: Dict[int, str] = {}
        self.uploads = 0
        self._next_id = 100

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    # posts
    def post_type_exists(self, post_type):
        return post_type in self.post_types

    def find_post_by_slug(self, slug, post_type="post", statuses=("publish",)):
        if not slug:
            return None
        for pid, post in self.posts.items():
            if post["type"] == post_type and post.get("slug") == slug and post.get("status") in statuses:
                return pid
        return None

    def create_post(self, post_type, data):
        pid = self._new_id()
        self.posts[pid] = {"type": post_type, **data}
        if data.get("meta"):
            self.meta.setdefault(pid, {}).update(data["meta"])
        return pid

    def update_post(self, post_type, post_id, data):
        self.posts[post_id].update(data)
        if data.get("meta"):
            self.meta.setdefault(post_id, {}).update(data["meta"])
        return post_id

    def update_post_meta(self, post_type, post_id, meta):
        self.meta_calls.append(dict(meta))
        self.meta.setdefault(post_id, {}).update(meta)

    def set_featured_media(self, post_type, post_id, attachment_id):
        self.posts[post_id]["featured_media"] = attachment_id

    def iter_posts(self, post_type, *, status="any", per_page=100):
        for pid, post in list(self.posts.items()):
            if post["type"] == post_type:
                yield {"id": pid, "slug": post.get("slug")}

    # media
    def find_attachment_by_name(self, file_name):
        for aid, att in self.attachments.items():
            if file_name.lower() in att["file"].lower():
                return aid
        return None

    def upload_media(self, file_name, content, mime_type):
        self.uploads += 1
        aid = self._new_id()
        self.attachments[aid] = {"file": file_name, "url": f"{self.base_url}/wp-content/uploads/{file_name}"}
        return aid

    def get_attachment_url(self, attachment_id):
        return self.attachments[attachment_id]["url"]

    # terms
    def find_term_by_slug(self, slug, taxonomy):
        for tid, term in self.terms.items():
            if term["slug"] == slug and term["taxonomy"] == taxonomy:
                return tid
        return None

    def create_term(self, name, taxonomy, slug=None):
        tid = self._new_id()
        self.terms[tid] = {"name": name, "slug": slug or name.lower(), "taxonomy": taxonomy}
        return tid

    def get_post_terms(self, post_type, post_id, taxonomy):
        return list(self.post_terms.get((post_id, taxonomy), []))

    def set_post_terms(self, post_type, post_id, term_ids, taxonomy):
        self.post_terms[(post_id, taxonomy)] = list(term_ids)

    # revisions and comments
    def list_revisions(self, post_type, post_id):
        return list(self.revisions.get(post_id, []))

    def delete_revision(self, post_type, post_id, revision_id):
        self.revisions[post_id] = [r for r in self.revisions.get(post_id, []) if r["id"] != revision_id]

    def list_comments(self, *, status, before, per_page, page):
        ids = sorted(cid for cid, s in self.comments.items() if s == status)
        start = (page - 1) * per_page
        return ids[start:start + per_page]

    def delete_comment(self, comment_id):
        self.comments.pop(comment_id, None)

    def current_user(self):
        return {"id": 1, "name": "admin"}

    # products
    def find_product_by_slug(self, slug):
        for pid, product in self.products.items():
            if product.get("slug") == slug:
                return pid
        return None

    def get_product(self, product_id):
        return {"id": product_id, **self.products[product_id]}

    def create_product(self, payload):
        pid = self._new_id()
        self.products[pid] = dict(payload)
        return pid

    def update_product(self, product_id, payload):
        self.products[product_id].update(payload)
        return product_id

    def list_variations(self, product_id):
        return list(self.variations.get(product_id, []))

    def batch_variations(self, product_id, create, update):
        existing = self.variations.setdefault(product_id, [])
        for body in update:
            for variation in existing:
                if variation["id"] == body["id"]:
                    variation.update(body)
        for body in create:
            existing.append({"id": self._new_id(), **body})
        return {"create": create, "update": update}

    def list_attributes(self):
        return [{"id": aid, "name": name} for aid, name in self.attributes.items()]

    def save_attribute(self, name, attribute_id=None):
        if attribute_id:
            self.attributes[attribute_id] = name
            return attribute_id
        aid = self._new_id()
        self.attributes[aid] = name
        return aid


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    """Run every test in a temporary directory so reports and logs stay out of the tree."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def no_downloads(monkeypatch):
    """Replace image downloads with a fixed payload and record the URLs requested."""
    from wp_migrator.migrators import media

    requested: List[str] = []

    def fake_download(url, *, timeout=None):
        requested.append(url)
        return b"\x89PNG"

    monkeypatch.setattr(media, "download_image", fake_download)
    return requested
