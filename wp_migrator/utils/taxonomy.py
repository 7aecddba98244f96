from __future__ import annotations

from html import unescape
import re
from typing import Dict, Iterable, List, Union

from wp_migrator.models import TermReference
from wp_migrator.parsers.text import sanitize_title


def normalize_label(value: str) -> str:
    """Unescape HTML entities and collapse inner whitespace.

    Preserves original casing but trims leading/trailing spaces
    and converts sequences of whitespace to a single space.
    """
    if not value:
        return ""
    text = unescape(value).strip()
    text = re.sub(r"\s+", " ", text)
    return text


def parse_terms_field(field: str) -> List[str]:
    """
    Parse a comma separated option value such as ``--categories=a,b,c``.

    - Splits on ','
    - Trims spaces, drops empty entries
    - Deduplicates case-insensitively while preserving first-seen casing
    """
    if not field:
        return []
    seen_lower = set()
    result: List[str] = []
    for p in field.split(","):
        label = normalize_label(p)
        key = label.lower()
        if label and key not in seen_lower:
            seen_lower.add(key)
            result.append(label)
    return result


def to_term_references(
    names: Union[Iterable[Union[str, TermReference]], Dict[str, str]],
    taxonomy: str,
) -> List[TermReference]:
    """
    Build term references for ``taxonomy``.

    ``names`` is either a list of labels (slugs are derived from them) or a
    ``{slug: name}`` mapping as returned by a source site.
    """
    if isinstance(names, dict):
        pairs = [(slug, name) for slug, name in names.items()]
    else:
        pairs = []
        for item in names:
            if isinstance(item, TermReference):
                pairs.append((item.slug or "", item.name))
            else:
                pairs.append(("", item))

    refs: List[TermReference] = []
    seen = set()
    for slug, name in pairs:
        label = normalize_label(name)
        if not label or not (slug or sanitize_title(label)):
            continue
        ref = TermReference(name=label, slug=slug or None, taxonomy=taxonomy)
        if ref.slug and ref.slug not in seen:
            seen.add(ref.slug)
            refs.append(ref)
    return refs
