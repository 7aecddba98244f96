"""
Scrapers for external WordPress front-ends.

Pages are fetched with :mod:`requests` and parsed with BeautifulSoup.
Elements are located with class-substring selectors (``[class*="..."]``),
which match against the full ``class`` attribute string the same way
``contains(@class, ...)`` does.  Any element that cannot be found yields an
empty field instead of an error; only a failed fetch of a mandatory page
raises :class:`~wp_migrator.utils.errors.FetchError`.

Listing pages of the resources section are served by the site's
``admin-ajax.php`` endpoint, which answers with JSON whose
``ajax_response`` key holds an HTML fragment.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup, Tag

from wp_migrator.models import RawItem
from wp_migrator.utils.errors import FetchError

PAGE_SIZE = 10
DEFAULT_MAX_PAGES = 100
DEFAULT_TIMEOUT = 30

EXCLUDED_MENU_ITEMS = ("Featured", "More Resources")

_BG_URL_RE = re.compile(r"url\((.*?)\)")


@dataclass(frozen=True)
class ArticleSelectors:
    """CSS selectors describing one article page layout."""

    image: str
    image_attr: str
    title: str
    date_published: str
    date_updated: Optional[str]
    categories: str
    content: str


# Blog archive layout of the external-posts source.
ARCHIVE_ARTICLE = ArticleSelectors(
    image='div[class*="page-header-bg-image-wrap"] div[class*="page-header-bg-image"]',
    image_attr="style",
    title='div[class*="featured-media-under-header__content"] h1[class*="entry-title"]',
    date_published='span[class*="meta-date date published"]',
    date_updated='span[class*="meta-date date updated"]',
    categories='span[class*="meta-category"] > a',
    content='div[class*="wpb_text_column wpb_content_element"] div[class*="wpb_wrapper"]',
)

# Press-release layout of the resources section.
PRESS_RELEASE_ARTICLE = ArticleSelectors(
    image='article[class*="anitian-post-article"] img[class*="attachment-post-thumbnail"]',
    image_attr="src",
    title='header[class*="entry-header"] h1[class*="entry-title"]',
    date_published='time[class*="entry-date"]',
    date_updated=None,
    categories='span[class*="meta-category"] > a',
    content='div[class*="post-entry-content"]',
)


###############################################################################
# HTTP
###############################################################################

def fetch_html(url: str, *, timeout: float = DEFAULT_TIMEOUT) -> str:
    """
    GET ``url`` and return the body.

    :raises FetchError: on network errors or a non-2xx status.
    """
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch {url}: {e}") from e
    return resp.text


def ajax_url(site_url: str, override: Optional[str] = None) -> str:
    """``<origin>/wp-admin/admin-ajax.php`` for ``site_url`` unless ``override`` is set."""
    if override:
        return override
    parsed = urlparse(site_url)
    return f"{parsed.scheme}://{parsed.netloc}/wp-admin/admin-ajax.php"


def _ajax_get(url: str, params: Dict[str, Any], timeout: float) -> Optional[requests.Response]:
    """GET against the AJAX endpoint; ``None`` when the page is unavailable."""
    try:
        resp = requests.get(url, params=params, timeout=timeout)
    except requests.RequestException:
        return None
    if resp.status_code != 200:
        return None
    return resp


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def _text(el: Optional[Tag]) -> str:
    return el.get_text().strip() if el is not None else ""


###############################################################################
# Menus and archives
###############################################################################

def parse_category_links(html: str) -> Dict[str, str]:
    """Direct ``li > a`` entries of ``ul#menu-resources-menu``, minus the excluded ones."""
    links: Dict[str, str] = {}
    for menu in _soup(html).select("ul#menu-resources-menu"):
        for li in menu.find_all("li", recursive=False):
            for a in li.find_all("a", recursive=False):
                links[a.get_text()] = a.get("href", "")
    for name in EXCLUDED_MENU_ITEMS:
        links.pop(name, None)
    return links


def list_category_links(site_url: str, *, timeout: float = DEFAULT_TIMEOUT) -> Dict[str, str]:
    """Fetch the resources page and return its category menu as ``{name: url}``."""
    return parse_category_links(fetch_html(site_url, timeout=timeout))


def archive_page_url(site_url: str, page: int) -> str:
    if page <= 1:
        return site_url
    return f"{site_url.rstrip('/')}/page/{page}"


def list_archive_post_urls(site_url: str, *, timeout: float = DEFAULT_TIMEOUT) -> Dict[str, str]:
    """``{post_url: title}`` for every article linked from a blog archive page."""
    soup = _soup(fetch_html(site_url, timeout=timeout))
    posts: Dict[str, str] = {}
    for a in soup.select('div[class*="archive-article-title"] > a'):
        href = a.get("href")
        if href:
            posts[urljoin(site_url, href)] = a.get_text().strip()
    return posts


###############################################################################
# Article pages
###############################################################################

def _image_from(el: Optional[Tag], attr: str) -> str:
    if el is None:
        return ""
    value = el.get(attr) or ""
    if attr == "style":
        match = _BG_URL_RE.search(value)
        return match.group(1).strip("'\" ") if match else ""
    return value


def parse_article(html: str, selectors: ArticleSelectors, url: Optional[str] = None) -> RawItem:
    """Build a :class:`RawItem` from an article page; missing elements give empty fields."""
    soup = _soup(html)

    date = _text(soup.select_one(selectors.date_published))
    if not date and selectors.date_updated:
        date = _text(soup.select_one(selectors.date_updated))

    content_el = soup.select_one(selectors.content)
    content = "".join(str(child) for child in content_el.contents) if content_el is not None else ""

    return RawItem(
        title=_text(soup.select_one(selectors.title)),
        content=content,
        image=_image_from(soup.select_one(selectors.image), selectors.image_attr),
        date=date,
        categories=[a.get_text().strip() for a in soup.select(selectors.categories) if a.get_text().strip()],
        url=url,
    )


def extract_article(url: str, selectors: ArticleSelectors = ARCHIVE_ARTICLE, *, timeout: float = DEFAULT_TIMEOUT) -> RawItem:
    """Fetch and parse one article page."""
    return parse_article(fetch_html(url, timeout=timeout), selectors, url=url)


###############################################################################
# AJAX listings
###############################################################################

def parse_listing_items(html: str, class_name: str) -> List[RawItem]:
    """Items of an AJAX listing fragment: ``div`` elements whose class is exactly ``class_name``."""
    items: List[RawItem] = []
    for div in _soup(html).find_all("div"):
        if " ".join(div.get("class") or []) != class_name:
            continue
        a = div.find("a")
        h3 = div.find("h3")
        if a is None or h3 is None:
            continue
        img = div.find("img")
        items.append(
            RawItem(
                url=a.get("href", ""),
                title=h3.get_text().strip(),
                image=img.get("src", "") if img is not None else "",
            )
        )
    return items


def list_page_items(
    page: int,
    category: str,
    action: str,
    class_name: str,
    *,
    ajax_endpoint: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> List[RawItem]:
    """
    One page of the AJAX listing for ``category``.

    A non-200 answer or an unparseable body yields an empty list.  For the
    ``press-release`` category the linked article pages are fetched and
    parsed instead of using the listing cards.
    """
    params = {
        "action": action,
        "pageNumber": page,
        "selected_categories": category,
        "show_title": "true",
        "show_pub_date": "false",
        "show_desc": "true",
        "show_tag": "true",
        "post_per_page": PAGE_SIZE,
        "data_append": "false",
    }
    resp = _ajax_get(ajax_endpoint, params, timeout)
    if resp is None:
        return []
    try:
        body = resp.json()
    except ValueError:
        return []
    if not isinstance(body, dict):
        return []
    html = body.get("ajax_response") or ""
    if not isinstance(html, str):
        return []

    items = parse_listing_items(html, class_name)
    if category == "press-release":
        return [extract_article(item.url, PRESS_RELEASE_ARTICLE, timeout=timeout) for item in items if item.url]
    return items


def _page_key(items: List[RawItem]) -> List[tuple]:
    return [(item.url, item.title) for item in items]


def list_all_page_items(
    category: str,
    action: str,
    class_name: str,
    *,
    ajax_endpoint: str,
    max_pages: int = DEFAULT_MAX_PAGES,
    timeout: float = DEFAULT_TIMEOUT,
) -> List[RawItem]:
    """
    Walk the AJAX listing from page 1.

    Stops on an empty page, a page shorter than :data:`PAGE_SIZE`, a page
    identical to the previous one, or after ``max_pages`` pages.
    """
    collected: List[RawItem] = []
    previous: Optional[List[tuple]] = None
    for page in range(1, max(1, max_pages) + 1):
        items = list_page_items(page, category, action, class_name, ajax_endpoint=ajax_endpoint, timeout=timeout)
        if not items:
            break
        key = _page_key(items)
        if key == previous:
            break
        collected.extend(items)
        if len(items) < PAGE_SIZE:
            break
        previous = key
    return collected


###############################################################################
# Awards
###############################################################################

def extract_awards(html: str) -> List[RawItem]:
    """Awards grouped by year; the year label becomes the item's category."""
    items: List[RawItem] = []
    for group in _soup(html).select('[class*="awards-listing__awards-list-item"]'):
        year = _text(group.select_one('[class*="awards-listing__year"]'))
        for post in group.find_all("div", class_="awards-listing__post"):
            if " ".join(post.get("class") or []) != "awards-listing__post":
                continue
            img = post.find("img")
            items.append(
                RawItem(
                    title=_text(post.select_one('div[class*="awards-listing__post-title"]')),
                    image=img.get("src", "") if img is not None else "",
                    categories=[year] if year else [],
                )
            )
    return items


def list_award_items(
    url: str,
    *,
    ajax_endpoint: str,
    action: str = "ant_award_listing_filter_callback",
    timeout: float = DEFAULT_TIMEOUT,
) -> List[RawItem]:
    """Awards on the category page followed by the first AJAX page of more awards."""
    try:
        html = fetch_html(url, timeout=timeout)
    except FetchError:
        return []
    awards = extract_awards(html)

    resp = _ajax_get(ajax_endpoint, {"action": action, "page": 1}, timeout)
    if resp is not None:
        awards.extend(extract_awards(resp.text))
    return awards
