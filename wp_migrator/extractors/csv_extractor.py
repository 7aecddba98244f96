"""
Reader for Yoast SEO exports.

The export is a semicolon separated file with a header row followed by
seven columns per row: title, an unused column, slug, meta description,
SEO title, focus keyword and post status.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

YOAST_COLUMNS = ["title", "placeholder", "slug", "metadesc", "seo_title", "focuskw", "status"]

# Yoast meta key -> column
YOAST_META_KEYS = {
    "_yoast_wpseo_title": "seo_title",
    "_yoast_wpseo_metadesc": "metadesc",
    "_yoast_wpseo_focuskw": "focuskw",
}


@dataclass
class YoastRow:
    title: str
    slug: str
    status: str
    meta: Dict[str, str] = field(default_factory=dict)

    def non_empty_meta(self) -> Dict[str, str]:
        return {k: v for k, v in self.meta.items() if v}


def _esc(value: str) -> str:
    return html.escape(str(value).strip(), quote=True)


def read_yoast_csv(file_path: str) -> List[YoastRow]:
    """
    Load every data row of a Yoast export.

    Short rows are padded with empty strings; extra columns are ignored.
    Every value is HTML-escaped.
    """
    try:
        df = pd.read_csv(
            file_path,
            sep=";",
            header=None,
            skiprows=1,
            dtype=str,
            keep_default_na=False,
            engine="python",
        )
    except pd.errors.EmptyDataError:
        return []
    df = df.reindex(columns=range(len(YOAST_COLUMNS))).fillna("")
    df.columns = YOAST_COLUMNS

    rows: List[YoastRow] = []
    for record in df.to_dict(orient="records"):
        values = {col: _esc(record.get(col) or "") for col in YOAST_COLUMNS}
        rows.append(
            YoastRow(
                title=values["title"],
                slug=values["slug"],
                status=values["status"],
                meta={key: values[col] for key, col in YOAST_META_KEYS.items()},
            )
        )
    return rows
