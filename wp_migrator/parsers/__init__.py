"""
Parsers and converters used by the migration pipeline.

Exposes ``convert_to_blocks`` from :mod:`wp_migrator.parsers.block_converter`
and the text helpers from :mod:`wp_migrator.parsers.text`.
"""

from .block_converter import convert_to_blocks
from .text import (
    get_image_urls_from_content,
    normalize_date,
    sanitize_text_field,
    sanitize_title,
)

__all__ = [
    "convert_to_blocks",
    "get_image_urls_from_content",
    "normalize_date",
    "sanitize_text_field",
    "sanitize_title",
]
