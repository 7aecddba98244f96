from __future__ import annotations

from html import unescape
import re
import unicodedata
from typing import List, Optional
from urllib.parse import quote

import pandas as pd

POST_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Matches the src attribute of every <img> tag, single or double quoted.
IMG_SRC_RE = re.compile(r"""<img [^>]*src=["']([^"']+)["'][^>]*>""", re.IGNORECASE)

_TAG_RE = re.compile(r"<[^>]*>")


def _strip_accents(text: str) -> str:
    """Fold accented Latin letters to ASCII; other scripts are left intact."""
    out = []
    for c in text:
        decomposed = unicodedata.normalize("NFD", c)
        if decomposed[0].isascii():
            out.append("".join(d for d in decomposed if unicodedata.category(d) != "Mn"))
        else:
            out.append(c)
    return "".join(out)


def sanitize_text_field(value: Optional[str]) -> str:
    """Strip tags, unescape entities and collapse whitespace to single spaces."""
    if not value:
        return ""
    text = _TAG_RE.sub("", value)
    text = unescape(text)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def sanitize_title(value: Optional[str]) -> str:
    """
    Derive a URL-safe slug from a title.

    Accents on Latin letters are folded to ASCII.  Letters and digits of other
    scripts are kept as lower-case percent-encoded UTF-8 octets, the form
    WordPress stores in ``post_name``.  Everything else becomes a single dash.
    The result is trimmed to 200 characters without splitting a character.
    """
    text = sanitize_text_field(value).lower()
    text = _strip_accents(text)
    out = []
    prev_dash = False
    for ch in text:
        if ch.isascii() and ch.isalnum():
            out.append(ch)
            prev_dash = False
        elif ch.isalnum():
            out.append(quote(ch, safe="").lower())
            prev_dash = False
        elif ch in "'’":
            # apostrophes are dropped rather than turned into dashes
            continue
        else:
            if not prev_dash:
                out.append("-")
            prev_dash = True
    while out and out[0] == "-":
        out.pop(0)
    slug = ""
    for token in out:
        # a percent-encoded character is never split
        if len(slug) + len(token) > 200:
            break
        slug += token
    return slug.rstrip("-")


def normalize_date(value: Optional[str]) -> str:
    """
    Parse a free-form date string into ``YYYY-MM-DD HH:MM:SS``.

    Empty or unparseable values resolve to the current local time, which is
    what WordPress assigns to a post inserted without a date.
    """
    text = sanitize_text_field(value)
    if text:
        parsed = pd.to_datetime(text, errors="coerce")
        if not pd.isna(parsed):
            return parsed.strftime(POST_DATE_FORMAT)
    return pd.Timestamp.now().strftime(POST_DATE_FORMAT)


def get_image_urls_from_content(content: str) -> List[str]:
    """Return the ``src`` of every ``<img>`` tag in ``content``, in document order."""
    return IMG_SRC_RE.findall(content or "")
