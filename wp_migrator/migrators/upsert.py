"""
Idempotent post writes.

A post is matched by slug within its post type.  When a match exists the
record is updated in place (title, content, status and date are
overwritten unconditionally); otherwise a new record is created.  Featured
image and taxonomy terms are attached afterwards on a best-effort basis.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Tuple

from wp_migrator.models import NormalizedPost, RawItem
from wp_migrator.parsers.block_converter import convert_to_blocks
from wp_migrator.parsers.text import normalize_date, sanitize_text_field
from wp_migrator.utils.taxonomy import to_term_references

from .media import rewrite_embedded_images, upload_image
from .terms import assign_terms, ensure_terms


def find_existing_by_slug(
    store: Any, slug: str, post_type: str = "post", statuses: Iterable[str] = ("publish",)
) -> Optional[int]:
    """Return the ID of the first post of ``post_type`` with ``slug``, or ``None``."""
    return store.find_post_by_slug(slug, post_type, tuple(statuses))


def upsert(store: Any, post: NormalizedPost, statuses: Iterable[str] = ("publish",)) -> Tuple[int, bool]:
    """
    Create or update ``post``.

    :return: ``(post_id, created)`` where ``created`` is ``True`` for an insert.
    """
    if not post.slug:
        raise ValueError(f"Post '{post.title}' has no slug")
    payload = post.to_wp_payload()
    if post.meta:
        payload["meta"] = dict(post.meta)
    existing_id = find_existing_by_slug(store, post.slug or "", post.post_type, statuses)
    if existing_id:
        return store.update_post(post.post_type, existing_id, payload), False
    return store.create_post(post.post_type, payload), True


def normalize_raw_item(raw: RawItem, *, post_type: str = "post", taxonomy: str = "category") -> NormalizedPost:
    """Sanitize a scraped record into a :class:`NormalizedPost`."""
    return NormalizedPost(
        post_type=post_type,
        title=sanitize_text_field(raw.title),
        content=convert_to_blocks(raw.content),
        date=normalize_date(raw.date),
        status="publish",
        terms=to_term_references(raw.categories, taxonomy),
        featured_image=raw.image or None,
    )


def write_post(store: Any, post: NormalizedPost, statuses: Iterable[str] = ("publish",)) -> Tuple[int, bool]:
    """
    Full write pipeline for one post: embedded images, upsert, featured
    image, then terms.

    Embedded images are uploaded before the post is written so that the
    stored content already points at the local copies.
    """
    content = rewrite_embedded_images(store, post.content) if post.content else post.content
    if content != post.content:
        post = post.model_copy(update={"content": content})

    post_id, created = upsert(store, post, statuses)

    if post.featured_image:
        attachment = upload_image(store, post.featured_image)
        store.set_featured_media(post.post_type, post_id, attachment.id)

    for taxonomy, refs in post.terms_by_taxonomy().items():
        term_ids = ensure_terms(store, refs, taxonomy)
        assign_terms(store, post.post_type, post_id, term_ids, taxonomy)

    return post_id, created


def insert_or_update_post(
    store: Any, raw: RawItem, *, post_type: str = "post", taxonomy: str = "category"
) -> Tuple[int, bool]:
    """Normalize a scraped record and write it."""
    return write_post(store, normalize_raw_item(raw, post_type=post_type, taxonomy=taxonomy))
