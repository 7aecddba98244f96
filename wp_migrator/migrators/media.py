"""
Media library helpers.

Images referenced by scraped content are copied into the target site's
media library.  An attachment is reused when one whose stored file name
contains the lower-cased basename of the source URL already exists, so the
same picture is uploaded only once per site.  That key is deliberately
loose: two different images sharing a basename resolve to the same
attachment.
"""

from __future__ import annotations

import mimetypes
import posixpath
from typing import Any, Dict, Optional
from urllib.parse import unquote, urlparse

import requests

from wp_migrator.models import AttachmentRecord
from wp_migrator.parsers.text import get_image_urls_from_content
from wp_migrator.utils.errors import ImageUploadError


def strip_query(url: str) -> str:
    """Drop query string and fragment, keeping scheme, host and path."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return url
    return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"


def url_basename(url: str) -> str:
    return unquote(posixpath.basename(urlparse(url).path))


def download_image(url: str, *, timeout: Optional[float] = None) -> bytes:
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise ImageUploadError(f"Unable to download the image: {url}") from e
    return resp.content


def upload_image(store: Any, image_url: str) -> AttachmentRecord:
    """
    Ensure ``image_url`` exists in the media library and return its record.

    :raises ImageUploadError: when the image cannot be downloaded or stored.
    """
    source_url = strip_query(image_url)
    file_name = url_basename(source_url)
    if not file_name:
        raise ImageUploadError(f"Unable to derive a file name from: {image_url}")

    existing_id = store.find_attachment_by_name(file_name.lower())
    if existing_id:
        return AttachmentRecord(
            id=existing_id,
            source_url=source_url,
            url=store.get_attachment_url(existing_id),
            file_name=file_name,
        )

    content = download_image(source_url, timeout=getattr(store, "timeout", None))
    mime_type = mimetypes.guess_type(file_name)[0] or "application/octet-stream"
    try:
        attachment_id = store.upload_media(file_name, content, mime_type)
    except requests.RequestException as e:
        raise ImageUploadError(f"Unable to upload the image: {source_url}") from e
    if not attachment_id:
        raise ImageUploadError(f"Something went wrong on inserting the image: {source_url}")

    return AttachmentRecord(
        id=attachment_id,
        source_url=source_url,
        url=store.get_attachment_url(attachment_id),
        file_name=file_name,
    )


def rewrite_embedded_images(store: Any, markup: str) -> str:
    """
    Upload every image referenced in ``markup`` and point the markup at the
    stored copies.

    Each distinct ``src`` is uploaded once; every literal occurrence of the
    old URL anywhere in the markup is then replaced with the new one.
    """
    uploaded: Dict[str, str] = {}
    for image_url in get_image_urls_from_content(markup):
        if image_url in uploaded:
            continue
        record = upload_image(store, image_url)
        uploaded[image_url] = record.url

    for old_url, new_url in uploaded.items():
        if new_url:
            markup = markup.replace(old_url, new_url)
    return markup
