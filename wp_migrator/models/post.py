from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wp_migrator.parsers.text import sanitize_title


class RawItem(BaseModel):
    """One scraped element, before any normalization."""

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    content: str = ""
    image: Optional[str] = None
    date: str = ""
    categories: list[str] = Field(default_factory=list)
    url: Optional[str] = None

    @field_validator("title", "content", "date", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any):
        return "" if v is None else v


class TermReference(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    taxonomy: str = "category"
    slug: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("slug", mode="before")
    @classmethod
    def _ensure_slug(cls, v: Optional[str], info):  # type: ignore[override]
        if v is not None and v.strip():
            return v
        name = info.data.get("name")
        if isinstance(name, str) and name.strip():
            slug = sanitize_title(name)
            if not slug:
                raise ValueError(f"No slug can be derived from the term name {name!r}")
            return slug
        return v


class AttachmentRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    source_url: str
    url: str = ""
    file_name: str = ""


class NormalizedPost(BaseModel):
    """
    A post ready to be written.  Built once from a :class:`RawItem` (or a
    source REST record) and never mutated afterwards; the writer derives
    every payload from it.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    post_type: str = "post"
    title: str = Field(..., min_length=1)
    content: str = ""
    date: Optional[str] = None
    status: str = "publish"
    slug: Optional[str] = Field(default=None, validate_default=True)
    terms: tuple[TermReference, ...] = ()
    featured_image: Optional[str] = None
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("slug", mode="before")
    @classmethod
    def _ensure_slug(cls, v: Optional[str], info):  # type: ignore[override]
        if v is not None and v.strip():
            return v
        title = info.data.get("title")
        if isinstance(title, str) and title.strip():
            slug = sanitize_title(title)
            if not slug:
                raise ValueError(f"No slug can be derived from the title {title!r}")
            return slug
        return v

    @field_validator("terms", mode="before")
    @classmethod
    def _dedup_terms(cls, v):
        if not v:
            return ()
        seen = set()
        deduped = []
        for item in v:
            term = item if isinstance(item, TermReference) else TermReference.model_validate(item)
            key = (term.slug, term.taxonomy)
            if key not in seen:
                seen.add(key)
                deduped.append(term)
        return tuple(deduped)

    def terms_by_taxonomy(self) -> dict[str, list[TermReference]]:
        grouped: dict[str, list[TermReference]] = {}
        for term in self.terms:
            grouped.setdefault(term.taxonomy, []).append(term)
        return grouped

    def to_wp_payload(self) -> dict[str, Any]:
        """Fields overwritten on every create or update."""
        body: dict[str, Any] = {
            "title": self.title,
            "content": self.content,
            "status": self.status,
            "slug": self.slug,
        }
        if self.date:
            body["date"] = self.date.replace(" ", "T")
        return body
