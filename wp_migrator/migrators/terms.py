from __future__ import annotations

from typing import Any, Dict, Iterable, List, Union

from wp_migrator.models import TermReference
from wp_migrator.utils.taxonomy import to_term_references


def ensure_terms(
    store: Any,
    names: Union[Iterable[Union[str, TermReference]], Dict[str, str]],
    taxonomy: str,
) -> List[int]:
    """
    Ensure that the given term names exist in ``taxonomy`` and return their IDs.

    Each term is looked up by slug and reused when present; missing terms
    are created.  The returned list keeps input order and has no duplicates.

    :param store: Content store exposing ``find_term_by_slug`` and ``create_term``.
    :param names: Labels, :class:`TermReference` objects or a ``{slug: name}`` mapping.
    :param taxonomy: Taxonomy name, e.g. ``category`` or ``product_cat``.
    """
    ids: List[int] = []
    for ref in to_term_references(names, taxonomy):
        term_id = store.find_term_by_slug(ref.slug, taxonomy)
        if not term_id:
            term_id = store.create_term(ref.name, taxonomy, ref.slug)
        if term_id and term_id not in ids:
            ids.append(term_id)
    return ids


def assign_terms(store: Any, post_type: str, post_id: int, term_ids: List[int], taxonomy: str) -> List[int]:
    """Add ``term_ids`` to the post's terms in ``taxonomy``; existing assignments are kept."""
    if not term_ids:
        return []
    current = store.get_post_terms(post_type, post_id, taxonomy)
    merged = list(current) + [t for t in term_ids if t not in current]
    if merged != list(current):
        store.set_post_terms(post_type, post_id, merged, taxonomy)
    return merged
