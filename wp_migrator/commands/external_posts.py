"""
``migrate external-posts``: copy the articles of an external blog archive.

Archive pages ``--page-from`` .. ``--page-to`` are read in order
(``<site-url>/page/N`` after the first), every linked article is scraped
and written as a ``post`` with its labels in ``category``.
"""

from __future__ import annotations

import argparse
from urllib.parse import urlparse

from wp_migrator.extractors.html_extractor import (
    ARCHIVE_ARTICLE,
    archive_page_url,
    extract_article,
    list_archive_post_urls,
)
from wp_migrator.migrators.upsert import insert_or_update_post
from wp_migrator.parsers.text import sanitize_title
from wp_migrator.utils.errors import CommandError

from .base import BaseCommand


class ExternalPostsMigrate(BaseCommand):
    command_name = "migrate"
    post_type = "post"
    taxonomy = "category"

    @classmethod
    def add_arguments(cls, subcommand: str, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--site-url", required=True, help="Blog archive URL of the source site")
        parser.add_argument("--page-from", type=int, default=1, help="First archive page (default 1)")
        parser.add_argument("--page-to", type=int, required=True, help="Last archive page")

    def external_posts(self, args: argparse.Namespace) -> int:
        self.parse_global_arguments(args)

        page_from = args.page_from or 1
        page_to = args.page_to
        if not page_to:
            raise CommandError("You need to provide a --page-to value.")
        site_url = (args.site_url or "").rstrip("/")
        parsed = urlparse(site_url)
        if not parsed.scheme or not parsed.netloc:
            raise CommandError("You need to provide a valid site URL.")

        self.notify_on_start()
        self.pre_flight()
        timeout = (self.config.get("wordpress") or {}).get("timeout") or 30

        count = 0
        for page in range(page_from, page_to + 1):
            post_urls = list_archive_post_urls(archive_page_url(site_url, page), timeout=timeout)
            for post_url, post_title in post_urls.items():
                count += 1
                if self.is_dry_run():
                    self.log_message(f"{count}) {post_title} - Post will be migrated.")
                    continue
                raw = extract_article(post_url, ARCHIVE_ARTICLE, timeout=timeout)
                item = {"title": raw.title or post_title, "slug": sanitize_title(raw.title), "url": post_url}
                result = self.write_item(
                    lambda: insert_or_update_post(self.store, raw, post_type=self.post_type, taxonomy=self.taxonomy),
                    item,
                )
                if result:
                    self.log_message(f"{count}) {post_title} - Post migrated successfully.")

            self.log_message(f"Exported posts from page {page}.")
            if page < page_to:
                self.pause()

        if self.is_dry_run():
            self.notify_on_done(f"Dry run ended - Total {count} posts will be migrated.")
        else:
            self.notify_on_done(f"Total {count} posts migrated.")
        return 0
