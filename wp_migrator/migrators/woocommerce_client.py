"""
WooCommerce REST API helpers (``/wp-json/wc/v3``).

:class:`WooCommerceStore` extends :class:`WordPressStore` with the catalog
endpoints used by the product migration: products, variations, global
attributes and the ``product_cat``/``product_tag`` taxonomies.  Media and
everything else still go through ``/wp-json/wp/v2``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from .wordpress_client import WordPressStore

WC_PREFIX = "wp-json/wc/v3"

_TAXONOMY_ENDPOINTS = {
    "product_cat": "products/categories",
    "product_tag": "products/tags",
}


class WooCommerceStore(WordPressStore):

    def wc_get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", endpoint, params=params, prefix=WC_PREFIX).json()

    def wc_write(self, method: str, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.request(method, endpoint, json=payload, prefix=WC_PREFIX).json()

    # -- products ----------------------------------------------------------

    def iter_products(self, *, status: str = "publish", category_ids: Optional[List[int]] = None, per_page: int = 100) -> Iterator[Dict[str, Any]]:
        params: Dict[str, Any] = {"status": status, "per_page": per_page}
        if category_ids:
            params["category"] = ",".join(str(i) for i in category_ids)
        page = 1
        while True:
            params["page"] = page
            resp = self.request("GET", "products", params=params, prefix=WC_PREFIX)
            products = resp.json()
            yield from products
            total_pages = int(resp.headers.get("X-WP-TotalPages") or 1)
            if page >= total_pages or not products:
                return
            page += 1

    def get_product(self, product_id: int) -> Dict[str, Any]:
        return self.wc_get(f"products/{product_id}")

    def find_product_by_slug(self, slug: str) -> Optional[int]:
        if not slug:
            return None
        products = self.wc_get("products", params={"slug": slug, "per_page": 1})
        return int(products[0]["id"]) if products else None

    def create_product(self, payload: Dict[str, Any]) -> int:
        return int(self.wc_write("POST", "products", payload)["id"])

    def update_product(self, product_id: int, payload: Dict[str, Any]) -> int:
        return int(self.wc_write("PUT", f"products/{product_id}", payload)["id"])

    def list_variations(self, product_id: int) -> List[Dict[str, Any]]:
        variations: List[Dict[str, Any]] = []
        page = 1
        while True:
            resp = self.request(
                "GET", f"products/{product_id}/variations", params={"per_page": 100, "page": page}, prefix=WC_PREFIX
            )
            batch = resp.json()
            variations.extend(batch)
            total_pages = int(resp.headers.get("X-WP-TotalPages") or 1)
            if page >= total_pages or not batch:
                return variations
            page += 1

    def batch_variations(self, product_id: int, create: List[Dict[str, Any]], update: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self.wc_write("POST", f"products/{product_id}/variations/batch", {"create": create, "update": update})

    # -- global attributes -------------------------------------------------

    def list_attributes(self) -> List[Dict[str, Any]]:
        return self.wc_get("products/attributes")

    def save_attribute(self, name: str, attribute_id: Optional[int] = None) -> int:
        payload = {"name": name, "type": "select", "order_by": "menu_order", "has_archives": False}
        if attribute_id:
            return int(self.wc_write("PUT", f"products/attributes/{attribute_id}", payload)["id"])
        return int(self.wc_write("POST", "products/attributes", payload)["id"])

    # -- catalog taxonomies ------------------------------------------------

    def find_term_by_slug(self, slug: str, taxonomy: str) -> Optional[int]:
        endpoint = _TAXONOMY_ENDPOINTS.get(taxonomy)
        if endpoint is None:
            return super().find_term_by_slug(slug, taxonomy)
        terms = self.wc_get(endpoint, params={"slug": slug})
        return int(terms[0]["id"]) if terms else None

    def create_term(self, name: str, taxonomy: str, slug: Optional[str] = None) -> Optional[int]:
        endpoint = _TAXONOMY_ENDPOINTS.get(taxonomy)
        if endpoint is None:
            return super().create_term(name, taxonomy, slug)
        payload: Dict[str, Any] = {"name": name}
        if slug:
            payload["slug"] = slug
        return int(self.wc_write("POST", endpoint, payload)["id"])
