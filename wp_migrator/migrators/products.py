"""
WooCommerce product writes.

:func:`upsert_product` resolves everything site-specific on the target
(terms, images, related products, global attributes) for an immutable
:class:`~wp_migrator.models.Product` value, builds one payload and issues a
single create or update; variable products then write their variations in
one batch call.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from wp_migrator.models import (
    ExternalProduct,
    GroupedProduct,
    Product,
    ProductAttribute,
    ProductVariation,
    SimpleProduct,
    VariableProduct,
)

from .media import upload_image
from .terms import ensure_terms


def _ids_for_slugs(target: Any, slugs: Tuple[str, ...]) -> List[int]:
    ids = []
    for slug in slugs:
        product_id = target.find_product_by_slug(slug)
        if product_id:
            ids.append(product_id)
    return ids


def _ensure_attributes(target: Any, attributes: Tuple[ProductAttribute, ...]) -> List[Dict[str, Any]]:
    """Create or refresh the global attributes and return the product attribute payload."""
    existing = {a.get("name", "").lower(): int(a["id"]) for a in target.list_attributes()}
    payload = []
    for attribute in attributes:
        attribute_id = target.save_attribute(attribute.name, existing.get(attribute.name.lower()))
        payload.append(
            {
                "id": attribute_id,
                "name": attribute.name,
                "options": list(attribute.options),
                "position": attribute.position,
                "visible": attribute.visible,
                "variation": attribute.variation,
            }
        )
    return payload


def _images_payload(target: Any, product: Product) -> List[Dict[str, Any]]:
    urls = ([product.image_url] if product.image_url else []) + list(product.gallery_urls)
    return [{"id": upload_image(target, url).id} for url in urls]


def build_payload(target: Any, product: Product) -> Dict[str, Any]:
    """Complete WooCommerce payload for ``product`` with target-site IDs."""
    payload = product.catalog_payload()
    payload["categories"] = [{"id": i} for i in ensure_terms(target, product.categories, "product_cat")]
    payload["tags"] = [{"id": i} for i in ensure_terms(target, product.tags, "product_tag")]
    payload["images"] = _images_payload(target, product)
    payload["upsell_ids"] = _ids_for_slugs(target, product.upsell_slugs)
    payload["cross_sell_ids"] = _ids_for_slugs(target, product.cross_sell_slugs)

    match product:
        case SimpleProduct():
            pass
        case VariableProduct(attributes=attributes):
            payload["attributes"] = _ensure_attributes(target, attributes)
        case ExternalProduct(product_url=url, button_text=text):
            payload["external_url"] = url
            payload["button_text"] = text
        case GroupedProduct(children=children):
            payload["grouped_products"] = _ids_for_slugs(target, children)
        case _:
            raise TypeError(f"Unsupported product type: {type(product).__name__}")
    return payload


def _variation_key(attributes: List[Dict[str, Any]]) -> Tuple[Tuple[str, str], ...]:
    return tuple(sorted((a.get("name", "").lower(), a.get("option", "")) for a in attributes or []))


def sync_variations(target: Any, product_id: int, variations: Tuple[ProductVariation, ...]) -> Dict[str, Any]:
    """Create or update variations in one batch; existing ones match by SKU, else by attributes."""
    existing = target.list_variations(product_id)
    by_sku = {v["sku"]: int(v["id"]) for v in existing if v.get("sku")}
    by_attrs = {_variation_key(v.get("attributes")): int(v["id"]) for v in existing}

    create: List[Dict[str, Any]] = []
    update: List[Dict[str, Any]] = []
    for variation in variations:
        body = variation.to_wc_payload()
        match_id = by_sku.get(variation.sku) if variation.sku else None
        if match_id is None:
            match_id = by_attrs.get(_variation_key(body["attributes"]))
        if match_id:
            update.append({"id": match_id, **body})
        else:
            create.append(body)
    if not create and not update:
        return {}
    return target.batch_variations(product_id, create, update)


def upsert_product(target: Any, product: Product) -> Tuple[int, bool]:
    """
    Create or update ``product`` on ``target`` matched by slug.

    :return: ``(product_id, created)``
    """
    payload = build_payload(target, product)
    existing_id: Optional[int] = target.find_product_by_slug(product.slug)
    if existing_id:
        product_id, created = target.update_product(existing_id, payload), False
    else:
        product_id, created = target.create_product(payload), True

    if isinstance(product, VariableProduct) and product.variations:
        sync_variations(target, product_id, product.variations)
    return product_id, created
