from .post import AttachmentRecord, NormalizedPost, RawItem, TermReference
from .product import (
    ExternalProduct,
    GroupedProduct,
    Product,
    ProductAttribute,
    ProductVariation,
    SimpleProduct,
    VariableProduct,
    parse_product,
)

__all__ = [
    "AttachmentRecord",
    "NormalizedPost",
    "RawItem",
    "TermReference",
    "ExternalProduct",
    "GroupedProduct",
    "Product",
    "ProductAttribute",
    "ProductVariation",
    "SimpleProduct",
    "VariableProduct",
    "parse_product",
]
