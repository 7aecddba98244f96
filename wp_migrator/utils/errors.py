"""
Structured logging helpers for migration errors and successes.

The :mod:`wp_migrator.utils.errors` module centralizes the writing of log
entries for both failed and successful operations during a command run.
Each entry is appended to a JSON Lines file under ``reports/migration`` so
that the information can be reviewed or parsed after a run.

It also defines the exception hierarchy shared by the commands.  Any
:class:`MigrationError` that escapes a command is fatal and terminates the
CLI with a non-zero status; everything else is reported per item.

The ``ERRORS`` dictionary maps error or event codes to human readable
messages.  Codes not present in the dictionary fall back to the code itself.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional


class MigrationError(Exception):
    """Base class for fatal command errors."""


class CommandError(MigrationError):
    """Invalid or missing command-line input."""


class FetchError(MigrationError):
    """A mandatory page could not be fetched."""


class ImageUploadError(Exception):
    """An image could not be downloaded or stored in the media library."""


class MetaWriteError(Exception):
    """The target site did not store some of the post meta keys sent to it."""


# Mapping of event codes used throughout the commands to descriptive messages.
ERRORS: Dict[str, str] = {
    "MEDIA_UPLOAD": "Failed to upload media to WordPress",
    "WP_NETWORK": "Network error communicating with WordPress",
    "POST_WRITE": "Failed to insert or update post",
    "PRODUCT_WRITE": "Failed to insert or update product",
    "META_WRITE": "Failed to update post meta",
    "DELETE": "Failed to delete item",
    "POST_CREATED": "Post inserted successfully",
    "POST_UPDATED": "Post updated successfully",
    "PRODUCT_CREATED": "Product inserted successfully",
    "PRODUCT_UPDATED": "Product updated successfully",
    "DELETED": "Item deleted successfully",
}

_REPORT_DIR = os.path.join("reports", "migration")
_ERROR_LOG = os.path.join(_REPORT_DIR, "errors.jsonl")
_OK_LOG = os.path.join(_REPORT_DIR, "success.jsonl")


def _write_jsonl(path: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline to ``path``."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
        f.write("\n")


def report_error(code: str, item: Dict[str, Any], exc: Optional[Exception] = None) -> None:
    """Log an error event for ``item``.

    Parameters
    ----------
    code:
        A key identifying the type of error.  If ``code`` is present in
        :data:`ERRORS` its value will be used as the message.
    item:
        The record associated with the error.  Only the ``slug`` and
        ``title`` keys are referenced if present.
    exc:
        Optional exception instance that triggered the error.  The string
        representation of the exception will be included in the log entry.
    """
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {
        "code": code,
        "message": message,
        "slug": item.get("slug"),
        "title": item.get("title"),
    }
    if exc is not None:
        entry["error"] = str(exc)
    print(f"[ERROR] {message} - {item.get('slug') or item.get('title') or ''}")
    _write_jsonl(_ERROR_LOG, entry)


def report_ok(code: str, item: Dict[str, Any], extra: Optional[Dict[str, Any]] = None) -> None:
    """Log a successful event for ``item``.

    Parameters
    ----------
    code:
        A key identifying the type of event.
    item:
        The record associated with the event.
    extra:
        Optional dictionary of additional fields to merge into the log entry.
    """
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {
        "code": code,
        "message": message,
        "slug": item.get("slug"),
        "title": item.get("title"),
    }
    if extra:
        entry.update(extra)
    _write_jsonl(_OK_LOG, entry)
