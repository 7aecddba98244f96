"""
WordPress and WooCommerce writers.

This subpackage provides the REST-backed content stores and the write
pipeline built on top of them: idempotent post upserts by slug, media
upload with basename deduplication, embedded image rewriting, taxonomy
term creation and assignment, and product upserts.  Rate limiting and
optional retries live in the store transport.
"""

from .media import rewrite_embedded_images, upload_image
from .terms import assign_terms, ensure_terms
from .upsert import find_existing_by_slug, insert_or_update_post, upsert, write_post

__all__ = [
    "rewrite_embedded_images",
    "upload_image",
    "assign_terms",
    "ensure_terms",
    "find_existing_by_slug",
    "insert_or_update_post",
    "upsert",
    "write_post",
]
