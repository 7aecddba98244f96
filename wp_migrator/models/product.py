"""
WooCommerce catalog records.

A product is one of four closed variants discriminated by ``type``.  Only
:class:`VariableProduct` carries attributes and variations, only
:class:`ExternalProduct` carries a product URL and button text, and only
:class:`GroupedProduct` carries child product slugs.  Records reference
other catalog entries (upsells, cross-sells, grouped children) by slug so
they can be resolved on whichever site they are written to.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from wp_migrator.models.post import TermReference


class ProductAttribute(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    options: tuple[str, ...] = ()
    position: int = 0
    visible: bool = True
    variation: bool = False


class ProductVariation(BaseModel):
    model_config = ConfigDict(frozen=True)

    sku: str = ""
    regular_price: str = ""
    sale_price: str = ""
    status: str = "publish"
    stock_status: str = "instock"
    manage_stock: bool = False
    stock_quantity: Optional[int] = None
    weight: str = ""
    length: str = ""
    width: str = ""
    height: str = ""
    tax_status: str = "taxable"
    downloadable: bool = False
    # attribute name -> selected option
    attributes: dict[str, str] = Field(default_factory=dict)

    def to_wc_payload(self) -> dict[str, Any]:
        return {
            "sku": self.sku,
            "regular_price": self.regular_price,
            "sale_price": self.sale_price,
            "status": self.status,
            "stock_status": self.stock_status,
            "manage_stock": self.manage_stock,
            "stock_quantity": self.stock_quantity,
            "weight": self.weight,
            "dimensions": {"length": self.length, "width": self.width, "height": self.height},
            "tax_status": self.tax_status,
            "downloadable": self.downloadable,
            "attributes": [{"name": k, "option": v} for k, v in self.attributes.items()],
        }


class ProductBase(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    slug: str
    status: str = "publish"
    description: str = ""
    short_description: str = ""
    sku: str = ""
    regular_price: str = ""
    sale_price: str = ""
    date_on_sale_from: Optional[str] = None
    date_on_sale_to: Optional[str] = None
    stock_status: str = "instock"
    manage_stock: bool = False
    stock_quantity: Optional[int] = None
    backorders: str = "no"
    sold_individually: bool = False
    weight: str = ""
    length: str = ""
    width: str = ""
    height: str = ""
    tax_status: str = "taxable"
    tax_class: str = ""
    reviews_allowed: bool = True
    purchase_note: str = ""
    menu_order: int = 0
    upsell_slugs: tuple[str, ...] = ()
    cross_sell_slugs: tuple[str, ...] = ()
    categories: tuple[TermReference, ...] = ()
    tags: tuple[TermReference, ...] = ()
    image_url: Optional[str] = None
    gallery_urls: tuple[str, ...] = ()

    @field_validator("categories", "tags", mode="before")
    @classmethod
    def _dedup_terms(cls, v):
        if not v:
            return ()
        seen = set()
        deduped = []
        for item in v:
            term = item if isinstance(item, TermReference) else TermReference.model_validate(item)
            if term.slug not in seen:
                seen.add(term.slug)
                deduped.append(term)
        return tuple(deduped)

    def catalog_payload(self) -> dict[str, Any]:
        """Fields shared by every product kind, in WooCommerce REST shape."""
        return {
            "name": self.name,
            "slug": self.slug,
            "type": self.type,  # type: ignore[attr-defined]
            "status": self.status,
            "description": self.description,
            "short_description": self.short_description,
            "sku": self.sku,
            "regular_price": self.regular_price,
            "sale_price": self.sale_price,
            "date_on_sale_from": self.date_on_sale_from,
            "date_on_sale_to": self.date_on_sale_to,
            "stock_status": self.stock_status,
            "manage_stock": self.manage_stock,
            "stock_quantity": self.stock_quantity,
            "backorders": self.backorders,
            "sold_individually": self.sold_individually,
            "weight": self.weight,
            "dimensions": {"length": self.length, "width": self.width, "height": self.height},
            "tax_status": self.tax_status,
            "tax_class": self.tax_class,
            "reviews_allowed": self.reviews_allowed,
            "purchase_note": self.purchase_note,
            "menu_order": self.menu_order,
        }


class SimpleProduct(ProductBase):
    type: Literal["simple"] = "simple"


class VariableProduct(ProductBase):
    type: Literal["variable"] = "variable"
    attributes: tuple[ProductAttribute, ...] = ()
    variations: tuple[ProductVariation, ...] = ()


class ExternalProduct(ProductBase):
    type: Literal["external"] = "external"
    product_url: str = ""
    button_text: str = ""


class GroupedProduct(ProductBase):
    type: Literal["grouped"] = "grouped"
    children: tuple[str, ...] = ()


Product = Annotated[
    Union[SimpleProduct, VariableProduct, ExternalProduct, GroupedProduct],
    Field(discriminator="type"),
]

_PRODUCT_ADAPTER: TypeAdapter[Product] = TypeAdapter(Product)


def parse_product(data: dict[str, Any]) -> Product:
    """Validate a plain mapping into the matching product variant."""
    return _PRODUCT_ADAPTER.validate_python(data)
