"""
WordPress REST API helpers for the migration commands.

This module implements the low-level interactions with a WordPress site
through ``/wp-json/wp/v2``.  :class:`WordPressStore` exposes the handful of
primitives the pipeline relies on: post lookup by slug, post create and
update, post meta, media lookup and upload, taxonomy term lookup, creation
and assignment, revision and comment deletion.  A simple rate limiter keeps
the request rate below ``rpm`` per minute, and a retry wrapper handles
transient errors when ``max_attempts`` is greater than one.

Authentication uses an application password sent as HTTP Basic auth.

Usage example::

    from wp_migrator.migrators.wordpress_client import WordPressStore

    cfg = {"base_url": "https://example.com", "username": "admin",
           "application_password": "abcd efgh ijkl mnop"}
    store = WordPressStore(cfg)
    post_id = store.find_post_by_slug("hello-world", "post")
"""

from __future__ import annotations

import base64
import time
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

import requests

from wp_migrator.utils.errors import MetaWriteError

###############################################################################
# Rate limiting and retry utilities
###############################################################################

class RateLimiter:
    """
    Simple time-based rate limiter.  Ensures that no more than ``rpm``
    requests are dispatched per minute.
    """

    def __init__(self, rpm: int = 200) -> None:
        self.rpm = max(1, rpm)
        self.interval = 60.0 / float(self.rpm)
        self._last = 0.0

    def wait(self, time_fn: Callable[[], float] = time.time, sleep_fn: Callable[[float], None] = time.sleep) -> None:
        now = time_fn()
        dt = now - self._last
        if dt < self.interval:
            sleep_fn(self.interval - dt)
        self._last = time_fn()


def wp_headers(cfg: Dict[str, Any]) -> Dict[str, str]:
    """
    Construct the Basic auth header for WordPress REST requests.

    :param cfg: A site configuration with ``username`` and
                ``application_password``.
    :return: A dictionary of headers, empty for anonymous access.
    """
    user = cfg.get("username") or ""
    password = (cfg.get("application_password") or "").replace(" ", "")
    if not user or not password:
        return {}
    token = base64.b64encode(f"{user}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


def with_retries(fn: Callable[[], requests.Response], *, max_attempts: int = 1, base_delay: float = 0.7) -> requests.Response:
    """
    Execute a function returning a ``requests.Response``, retrying on
    transient HTTP errors.  Retries are attempted on status codes 429
    (too many requests) and 5xx server errors with exponential backoff.
    With the default ``max_attempts`` of 1 every call is made exactly once.

    :param fn: A zero-argument callable that performs the HTTP request.
    :param max_attempts: Maximum number of attempts before giving up.
    :param base_delay: Base delay in seconds for exponential backoff.
    :return: The successful ``requests.Response``.
    :raises requests.HTTPError: if all attempts fail.
    """
    attempt = 0
    while True:
        try:
            resp = fn()
            resp.raise_for_status()
            return resp
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else 0
            if status not in (429, 500, 502, 503, 504) or attempt >= max_attempts - 1:
                raise
            retry_after = e.response.headers.get("Retry-After")
            wait = float(retry_after) if retry_after else base_delay * (2 ** attempt)
            time.sleep(wait)
            attempt += 1
        except requests.RequestException:
            if attempt >= max_attempts - 1:
                raise
            time.sleep(base_delay * (2 ** attempt))
            attempt += 1


###############################################################################
# Store
###############################################################################

class WordPressStore:
    """
    Content store backed by the WordPress REST API of one site.

    Post types and taxonomies are addressed by their registered names
    (``post``, ``page``, ``category``, ``resource_categories``); their REST
    bases are resolved once through ``/types`` and ``/taxonomies`` and
    cached.
    """

    api_prefix = "wp-json/wp/v2"

    def __init__(self, cfg: Dict[str, Any]) -> None:
        self.cfg = cfg
        self.base_url = (cfg.get("base_url") or "").rstrip("/")
        self.max_attempts = int(cfg.get("max_attempts") or 1)
        self.timeout = cfg.get("timeout")
        self._limiter = RateLimiter(int(cfg.get("rpm") or 180))
        self._type_bases: Dict[str, Optional[str]] = {}
        self._taxonomy_bases: Dict[str, Optional[str]] = {}

    # -- transport ---------------------------------------------------------

    def url(self, endpoint: str, prefix: Optional[str] = None) -> str:
        return f"{self.base_url}/{prefix or self.api_prefix}/{endpoint.lstrip('/')}"

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        data: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        prefix: Optional[str] = None,
    ) -> requests.Response:
        self._limiter.wait()
        all_headers = {**wp_headers(self.cfg), **(headers or {})}

        def do_request() -> requests.Response:
            return requests.request(
                method,
                self.url(endpoint, prefix),
                params=params,
                json=json,
                data=data,
                headers=all_headers,
                timeout=self.timeout,
            )

        return with_retries(do_request, max_attempts=self.max_attempts)

    def get_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", endpoint, params=params).json()

    # -- post types and taxonomies ----------------------------------------

    def rest_base_for_type(self, post_type: str) -> Optional[str]:
        if post_type not in self._type_bases:
            try:
                info = self.get_json(f"types/{post_type}")
                self._type_bases[post_type] = info.get("rest_base") or post_type
            except requests.HTTPError as e:
                if e.response is not None and e.response.status_code == 404:
                    self._type_bases[post_type] = None
                else:
                    raise
        return self._type_bases[post_type]

    def post_type_exists(self, post_type: str) -> bool:
        return self.rest_base_for_type(post_type) is not None

    def _type_base(self, post_type: str) -> str:
        base = self.rest_base_for_type(post_type)
        if base is None:
            raise ValueError(f"Unknown post type: {post_type}")
        return base

    def rest_base_for_taxonomy(self, taxonomy: str) -> str:
        if taxonomy not in self._taxonomy_bases:
            info = self.get_json(f"taxonomies/{taxonomy}")
            self._taxonomy_bases[taxonomy] = info.get("rest_base") or taxonomy
        return self._taxonomy_bases[taxonomy] or taxonomy

    # -- posts -------------------------------------------------------------

    def find_post_by_slug(self, slug: str, post_type: str = "post", statuses: Iterable[str] = ("publish",)) -> Optional[int]:
        if not slug:
            return None
        posts = self.get_json(
            self._type_base(post_type),
            params={"slug": slug, "status": ",".join(statuses), "per_page": 1, "_fields": "id"},
        )
        return int(posts[0]["id"]) if posts else None

    def get_post(self, post_type: str, post_id: int) -> Dict[str, Any]:
        return self.get_json(f"{self._type_base(post_type)}/{post_id}", params={"context": "edit"})

    def create_post(self, post_type: str, data: Dict[str, Any]) -> int:
        body = self.request("POST", self._type_base(post_type), json=data).json()
        self._check_meta(data, body)
        return int(body["id"])

    def update_post(self, post_type: str, post_id: int, data: Dict[str, Any]) -> int:
        body = self.request("POST", f"{self._type_base(post_type)}/{post_id}", json=data).json()
        self._check_meta(data, body)
        return int(body["id"])

    @staticmethod
    def _check_meta(data: Dict[str, Any], body: Dict[str, Any]) -> None:
        """
        Raise :class:`MetaWriteError` when meta keys sent in ``data`` are
        missing from the saved post.

        WordPress silently drops keys that are not registered with
        ``register_post_meta(..., show_in_rest=True)``; protected keys such as
        ``_yoast_wpseo_title`` also need an ``auth_callback``.
        """
        sent = data.get("meta") or {}
        if not sent:
            return
        stored = body.get("meta")
        if not isinstance(stored, dict):
            stored = {}
        missing = sorted(k for k in sent if k not in stored)
        if missing:
            raise MetaWriteError(
                f"Post {body.get('id')} did not store the meta keys {', '.join(missing)}; "
                "register them on the target site with show_in_rest."
            )

    def update_post_meta(self, post_type: str, post_id: int, meta: Dict[str, Any]) -> None:
        if meta:
            self.update_post(post_type, post_id, {"meta": meta})

    def set_featured_media(self, post_type: str, post_id: int, attachment_id: int) -> None:
        self.update_post(post_type, post_id, {"featured_media": attachment_id})

    def iter_posts(self, post_type: str, *, status: str = "any", per_page: int = 100) -> Iterator[Dict[str, Any]]:
        page = 1
        while True:
            resp = self.request(
                "GET",
                self._type_base(post_type),
                params={"status": status, "per_page": per_page, "page": page, "_fields": "id,slug"},
            )
            posts = resp.json()
            yield from posts
            total_pages = int(resp.headers.get("X-WP-TotalPages") or 1)
            if page >= total_pages or not posts:
                return
            page += 1

    # -- media -------------------------------------------------------------

    def find_attachment_by_name(self, file_name: str) -> Optional[int]:
        """
        Return the first attachment whose stored file contains ``file_name``
        (case-insensitive substring match), or ``None``.
        """
        needle = file_name.lower()
        if not needle:
            return None
        stem = needle.rsplit(".", 1)[0]
        items = self.get_json(
            "media",
            params={"search": stem, "per_page": 100, "_fields": "id,source_url,media_details"},
        )
        for item in items:
            stored = ((item.get("media_details") or {}).get("file") or item.get("source_url") or "").lower()
            if needle in stored:
                return int(item["id"])
        return None

    def upload_media(self, file_name: str, content: bytes, mime_type: str) -> int:
        resp = self.request(
            "POST",
            "media",
            data=content,
            headers={
                "Content-Disposition": f'attachment; filename="{file_name}"',
                "Content-Type": mime_type,
            },
        )
        return int(resp.json()["id"])

    def get_attachment_url(self, attachment_id: int) -> str:
        return self.get_json(f"media/{attachment_id}", params={"_fields": "source_url"}).get("source_url", "")

    # -- taxonomy terms ----------------------------------------------------

    def find_term_by_slug(self, slug: str, taxonomy: str) -> Optional[int]:
        terms = self.get_json(self.rest_base_for_taxonomy(taxonomy), params={"slug": slug, "_fields": "id"})
        return int(terms[0]["id"]) if terms else None

    def create_term(self, name: str, taxonomy: str, slug: Optional[str] = None) -> Optional[int]:
        payload: Dict[str, Any] = {"name": name}
        if slug:
            payload["slug"] = slug
        try:
            resp = self.request("POST", self.rest_base_for_taxonomy(taxonomy), json=payload)
        except requests.HTTPError as e:
            # WordPress answers 400 term_exists with the existing id
            body = e.response.json() if e.response is not None and e.response.content else {}
            existing = (body.get("data") or {}).get("term_id")
            if body.get("code") == "term_exists" and existing:
                return int(existing)
            raise
        return int(resp.json()["id"])

    def get_post_terms(self, post_type: str, post_id: int, taxonomy: str) -> List[int]:
        field = self.rest_base_for_taxonomy(taxonomy)
        post = self.get_json(f"{self._type_base(post_type)}/{post_id}", params={"_fields": field})
        return [int(t) for t in post.get(field) or []]

    def set_post_terms(self, post_type: str, post_id: int, term_ids: List[int], taxonomy: str) -> None:
        self.update_post(post_type, post_id, {self.rest_base_for_taxonomy(taxonomy): term_ids})

    # -- revisions and comments --------------------------------------------

    def list_revisions(self, post_type: str, post_id: int, *, per_page: int = 100) -> List[Dict[str, Any]]:
        """Every revision of the post, all pages."""
        endpoint = f"{self._type_base(post_type)}/{post_id}/revisions"
        revisions: List[Dict[str, Any]] = []
        page = 1
        while True:
            resp = self.request(
                "GET", endpoint, params={"per_page": per_page, "page": page, "_fields": "id,modified_gmt"}
            )
            batch = resp.json()
            revisions.extend(batch)
            total_pages = int(resp.headers.get("X-WP-TotalPages") or 1)
            if page >= total_pages or not batch:
                return revisions
            page += 1

    def delete_revision(self, post_type: str, post_id: int, revision_id: int) -> None:
        self.request("DELETE", f"{self._type_base(post_type)}/{post_id}/revisions/{revision_id}", params={"force": "true"})

    def list_comments(self, *, status: str, before: str, per_page: int, page: int) -> List[int]:
        comments = self.get_json(
            "comments",
            params={"status": status, "before": before, "per_page": per_page, "page": page, "_fields": "id"},
        )
        return [int(c["id"]) for c in comments]

    def delete_comment(self, comment_id: int) -> None:
        self.request("DELETE", f"comments/{comment_id}", params={"force": "true"})

    def current_user(self) -> Dict[str, Any]:
        return self.get_json("users/me")


def iter_old_revisions(store: WordPressStore, post_type: str, before: str) -> Iterator[Tuple[int, int]]:
    """Yield ``(post_id, revision_id)`` for revisions modified before ``before`` (``YYYY-MM-DD``)."""
    for post in store.iter_posts(post_type):
        for revision in store.list_revisions(post_type, int(post["id"])):
            if (revision.get("modified_gmt") or "")[:10] < before:
                yield int(post["id"]), int(revision["id"])
