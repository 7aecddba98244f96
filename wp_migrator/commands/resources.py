"""
``anitian-resources migrate``: copy the resources section of an external site.

The category pages are read from the resources menu.  Documents, Case
Studies and On-Demand Webinars share one AJAX listing layout; Press & News
uses the posts listing and is read from the article pages; Awards come
from the awards page.  Every item is written into ``--post-type`` with its
category in ``resource_categories``.
"""

from __future__ import annotations

import argparse
from typing import List
from urllib.parse import urlparse

from wp_migrator.extractors.html_extractor import (
    ajax_url,
    list_all_page_items,
    list_award_items,
    list_category_links,
)
from wp_migrator.migrators.upsert import insert_or_update_post
from wp_migrator.models import RawItem
from wp_migrator.parsers.text import sanitize_title
from wp_migrator.utils.errors import CommandError

from .base import BaseCommand

# listing category slug -> menu label
SAME_LAYOUT_ITEMS = {
    "documents": "Documents",
    "case-study": "Case Studies",
    "on-demand-webinar": "On-Demand Webinars",
}

PRESS_NEWS = "Press & News"
AWARDS = "Awards"


class ResourcesMigrate(BaseCommand):
    command_name = "anitian-resources"
    post_type = "resources"
    taxonomy = "resource_categories"

    @classmethod
    def add_arguments(cls, subcommand: str, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--site-url", required=True, help="Resources page URL of the source site")
        parser.add_argument("--post-type", default=cls.post_type, help="Target post type (default: resources)")

    def items_for_category(self, name: str, url: str, endpoint: str) -> List[RawItem]:
        """Scraped items of one menu category; unknown categories yield nothing."""
        max_pages = int((self.config.get("migration") or {}).get("max_pages") or 100)
        timeout = (self.config.get("wordpress") or {}).get("timeout") or 30
        slugs = {label: slug for slug, label in SAME_LAYOUT_ITEMS.items()}

        if name in slugs:
            return list_all_page_items(
                slugs[name], "resources_listing_filter", "res-list-filter__item",
                ajax_endpoint=endpoint, max_pages=max_pages, timeout=timeout,
            )
        if name == PRESS_NEWS:
            return list_all_page_items(
                "press-release", "posts_listing_filter_v2", "post-list-filter__item",
                ajax_endpoint=endpoint, max_pages=max_pages, timeout=timeout,
            )
        if name == AWARDS:
            return list_award_items(url, ajax_endpoint=endpoint, timeout=timeout)
        return []

    def migrate(self, args: argparse.Namespace) -> int:
        self.parse_global_arguments(args)

        site_url = (args.site_url or "").rstrip("/")
        parsed = urlparse(site_url)
        if not parsed.scheme or not parsed.netloc:
            raise CommandError("You need to provide a valid site URL.")

        post_type = args.post_type or self.post_type
        if not self.store.post_type_exists(post_type):
            raise CommandError(f"The post type '{post_type}' does not exist.")

        self.notify_on_start()
        self.pre_flight()

        endpoint = ajax_url(site_url, (self.config.get("resources") or {}).get("ajax_url"))
        categories = list_category_links(site_url)

        count = 0
        for cat_name, cat_url in categories.items():
            self.log_message("---------------------------------")
            self.log_message(f"Migrating {cat_name} Posts...")
            self.log_message("---------------------------------")

            for raw in self.items_for_category(cat_name, cat_url, endpoint):
                count += 1
                raw = raw.model_copy(update={"categories": [cat_name] + [c for c in raw.categories if c != cat_name]})
                if not self.is_dry_run():
                    item = {"title": raw.title, "slug": sanitize_title(raw.title), "url": raw.url}
                    self.write_item(
                        lambda: insert_or_update_post(self.store, raw, post_type=post_type, taxonomy=self.taxonomy),
                        item,
                    )
                self.log_message(f"{count}) {raw.title}")
                self.update_iteration()

        if self.is_dry_run():
            self.notify_on_done(f"Dry run ended - Total {count} resources will be migrated.")
        else:
            self.notify_on_done(f"Total {count} resources migrated.")
        return 0
