"""
Readers for a source WordPress site's REST API.

Posts are read page by page from ``/wp/v2/posts`` with ``_embed`` so that
terms and the featured image arrive with the post.  When the source site
exposes the ``md_extended`` field (categories and tags as ``{slug: name}``
maps, raw post meta and the featured image URL) it takes precedence over
the embedded data.

Products are read from ``/wc/v3/products`` and turned into immutable
:class:`~wp_migrator.models.Product` values whose references to other
products are slugs instead of source-site IDs.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

import requests

from wp_migrator.models import (
    NormalizedPost,
    Product,
    ProductAttribute,
    ProductVariation,
    TermReference,
    parse_product,
)
from wp_migrator.parsers.text import normalize_date, sanitize_text_field

###############################################################################
# Posts
###############################################################################

def count_source_posts(source: Any, post_type: str = "post") -> int:
    """Total number of published posts reported by the ``X-WP-Total`` header."""
    resp = source.request("GET", source.rest_base_for_type(post_type) or post_type, params={"per_page": 1, "_fields": "id"})
    return int(resp.headers.get("X-WP-Total") or 0)


def iter_source_posts(source: Any, post_type: str = "post", *, per_page: int = 60) -> Iterator[Dict[str, Any]]:
    """
    Yield raw REST records page by page.

    Paging continues while a page comes back full; WordPress answers
    ``400 rest_post_invalid_page_number`` past the last page, which also
    ends the walk.
    """
    endpoint = source.rest_base_for_type(post_type) or post_type
    page = 1
    while True:
        try:
            resp = source.request("GET", endpoint, params={"page": page, "per_page": per_page, "_embed": 1})
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 400:
                return
            raise
        posts = resp.json() or []
        yield from posts
        if len(posts) < per_page:
            return
        page += 1


def _rendered(value: Any) -> str:
    if isinstance(value, dict):
        return value.get("rendered") or value.get("raw") or ""
    return value or ""


def _embedded_terms(record: Dict[str, Any], taxonomy: str) -> Dict[str, str]:
    terms: Dict[str, str] = {}
    for group in (record.get("_embedded") or {}).get("wp:term") or []:
        for term in group or []:
            if term.get("taxonomy") == taxonomy and term.get("slug"):
                terms[term["slug"]] = term.get("name") or term["slug"]
    return terms


def source_terms(record: Dict[str, Any], taxonomy: str) -> Dict[str, str]:
    """``{slug: name}`` of the record's terms in ``taxonomy`` (``category`` or ``post_tag``)."""
    extended = record.get("md_extended") or {}
    key = "categories" if taxonomy == "category" else "tags"
    if isinstance(extended.get(key), dict) and extended[key]:
        return dict(extended[key])
    return _embedded_terms(record, taxonomy)


def source_featured_image(record: Dict[str, Any]) -> Optional[str]:
    extended = record.get("md_extended") or {}
    if extended.get("featured_image"):
        return extended["featured_image"]
    media = (record.get("_embedded") or {}).get("wp:featuredmedia") or []
    if media and isinstance(media[0], dict):
        return media[0].get("source_url") or None
    return None


def source_meta(record: Dict[str, Any]) -> Dict[str, Any]:
    extended = record.get("md_extended") or {}
    meta = extended.get("post_meta")
    if not isinstance(meta, dict):
        meta = record.get("meta")
    return dict(meta) if isinstance(meta, dict) else {}


def post_from_source(record: Dict[str, Any], *, post_type: str = "post") -> NormalizedPost:
    """Build the post to write on the target from a source REST record."""
    terms: List[TermReference] = []
    for taxonomy in ("category", "post_tag"):
        for slug, name in source_terms(record, taxonomy).items():
            if name:
                terms.append(TermReference(name=name, slug=slug, taxonomy=taxonomy))
    return NormalizedPost(
        post_type=post_type,
        title=sanitize_text_field(_rendered(record.get("title"))),
        content=_rendered(record.get("content")),
        date=normalize_date(record.get("date")),
        status=record.get("status") or "publish",
        slug=record.get("slug") or None,
        terms=terms,
        featured_image=source_featured_image(record),
        meta=source_meta(record),
    )


###############################################################################
# Products
###############################################################################

def _term_refs(items: List[Dict[str, Any]], taxonomy: str) -> List[TermReference]:
    return [
        TermReference(name=t["name"], slug=t.get("slug") or None, taxonomy=taxonomy)
        for t in items or []
        if t.get("name")
    ]


def _slugs_for_ids(source: Any, ids: List[int]) -> List[str]:
    slugs = []
    for product_id in ids or []:
        slug = source.get_product(int(product_id)).get("slug")
        if slug:
            slugs.append(slug)
    return slugs


def _variation_from_source(data: Dict[str, Any]) -> ProductVariation:
    dims = data.get("dimensions") or {}
    return ProductVariation(
        sku=data.get("sku") or "",
        regular_price=data.get("regular_price") or "",
        sale_price=data.get("sale_price") or "",
        status=data.get("status") or "publish",
        stock_status=data.get("stock_status") or "instock",
        manage_stock=bool(data.get("manage_stock")),
        stock_quantity=data.get("stock_quantity"),
        weight=data.get("weight") or "",
        length=dims.get("length") or "",
        width=dims.get("width") or "",
        height=dims.get("height") or "",
        tax_status=data.get("tax_status") or "taxable",
        downloadable=bool(data.get("downloadable")),
        attributes={a["name"]: a.get("option", "") for a in data.get("attributes") or []},
    )


def product_from_source(source: Any, data: Dict[str, Any]) -> Product:
    """Build the product variant for a WooCommerce REST product record."""
    dims = data.get("dimensions") or {}
    images = [img.get("src") for img in data.get("images") or [] if img.get("src")]
    record: Dict[str, Any] = {
        "type": data.get("type") or "simple",
        "name": data.get("name") or "",
        "slug": data.get("slug") or "",
        "status": data.get("status") or "publish",
        "description": data.get("description") or "",
        "short_description": data.get("short_description") or "",
        "sku": data.get("sku") or "",
        "regular_price": data.get("regular_price") or "",
        "sale_price": data.get("sale_price") or "",
        "date_on_sale_from": data.get("date_on_sale_from"),
        "date_on_sale_to": data.get("date_on_sale_to"),
        "stock_status": data.get("stock_status") or "instock",
        "manage_stock": bool(data.get("manage_stock")),
        "stock_quantity": data.get("stock_quantity"),
        "backorders": data.get("backorders") or "no",
        "sold_individually": bool(data.get("sold_individually")),
        "weight": data.get("weight") or "",
        "length": dims.get("length") or "",
        "width": dims.get("width") or "",
        "height": dims.get("height") or "",
        "tax_status": data.get("tax_status") or "taxable",
        "tax_class": data.get("tax_class") or "",
        "reviews_allowed": bool(data.get("reviews_allowed", True)),
        "purchase_note": data.get("purchase_note") or "",
        "menu_order": int(data.get("menu_order") or 0),
        "upsell_slugs": _slugs_for_ids(source, data.get("upsell_ids")),
        "cross_sell_slugs": _slugs_for_ids(source, data.get("cross_sell_ids")),
        "categories": _term_refs(data.get("categories"), "product_cat"),
        "tags": _term_refs(data.get("tags"), "product_tag"),
        "image_url": images[0] if images else None,
        "gallery_urls": images[1:],
    }
    if record["type"] == "variable":
        record["attributes"] = [
            ProductAttribute(
                name=a["name"],
                options=tuple(a.get("options") or ()),
                position=int(a.get("position") or 0),
                visible=bool(a.get("visible", True)),
                variation=bool(a.get("variation")),
            )
            for a in data.get("attributes") or []
        ]
        record["variations"] = [
            _variation_from_source(v) for v in source.list_variations(int(data["id"]))
        ]
    elif record["type"] == "external":
        record["product_url"] = data.get("external_url") or ""
        record["button_text"] = data.get("button_text") or ""
    elif record["type"] == "grouped":
        record["children"] = _slugs_for_ids(source, data.get("grouped_products"))
    return parse_product(record)


def iter_source_products(source: Any, category_slugs: Optional[List[str]] = None) -> Iterator[Dict[str, Any]]:
    """
    Published products of the source site, optionally limited to the
    ``product_cat`` slugs given.  Unknown slugs are ignored; when none of
    them resolves nothing is yielded.
    """
    category_ids: List[int] = []
    if category_slugs:
        for slug in category_slugs:
            term_id = source.find_term_by_slug(slug, "product_cat")
            if term_id:
                category_ids.append(term_id)
        if not category_ids:
            return
    yield from source.iter_products(category_ids=category_ids or None)
