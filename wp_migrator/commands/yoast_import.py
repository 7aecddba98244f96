"""
``yoast-posts import``: create or update posts from a Yoast SEO CSV export
and set their SEO title, meta description and focus keyword.
"""

from __future__ import annotations

import argparse
import os
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from wp_migrator.extractors.csv_extractor import YoastRow, read_yoast_csv
from wp_migrator.migrators.upsert import find_existing_by_slug
from wp_migrator.utils.errors import CommandError

from .base import BaseCommand

LOG_TYPES = ("text", "table")
PAUSE_EVERY = 50
MATCH_STATUSES = ("publish", "draft")


class YoastPostsImport(BaseCommand):
    command_name = "yoast-posts"
    post_type = "page"

    @classmethod
    def add_arguments(cls, subcommand: str, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--post-type", default=cls.post_type, help="Post type to write (default: page)")
        parser.add_argument("--file", required=True, help="Semicolon separated Yoast CSV export")
        parser.add_argument("--format-type", default="text", help="Progress output: text or table")

    def write_row(self, row: YoastRow, post_type: str, existing_id: Optional[int]) -> Tuple[int, bool]:
        data = {"title": row.title, "slug": row.slug, "status": row.status}
        if existing_id:
            post_id, created = self.store.update_post(post_type, existing_id, data), False
        else:
            post_id, created = self.store.create_post(post_type, data), True
        meta = row.non_empty_meta()
        if meta:
            self.store.update_post_meta(post_type, post_id, meta)
        return post_id, created

    def import_(self, args: argparse.Namespace) -> int:
        self.parse_global_arguments(args)
        self.notify_on_start()

        post_type = args.post_type or self.post_type
        log_type = args.format_type
        if log_type not in LOG_TYPES:
            raise CommandError("Invalid/Blank log format type.")
        if not args.file:
            raise CommandError("You need to provide a CSV file path.")
        if not os.path.exists(args.file):
            raise CommandError("The file does not exist.")

        self.log_message(f"We found the file {args.file}. Now importing Yoast data...")
        self.pre_flight()

        rows = read_yoast_csv(args.file)
        total_rows = len(rows)
        inserted = updated = failed = 0
        table: List[Dict[str, Any]] = []

        for row_count, row in enumerate(rows, start=1):
            if row_count > 1 and (row_count - 1) % PAUSE_EVERY == 0:
                self.pause()
            existing_id = find_existing_by_slug(self.store, row.slug, post_type, MATCH_STATUSES)
            post_id = existing_id
            if not self.is_dry_run():
                item = {"title": row.title, "slug": row.slug}
                result = self.write_item(lambda: self.write_row(row, post_type, existing_id), item)
                if result is None:
                    failed += 1
                    self.log_message(f'{row_count}) Post with slug "{row.slug}" could not be written.', level="ERROR")
                    continue
                post_id = result[0]

            if existing_id:
                updated += 1
                if log_type == "text":
                    verb = "Post will be updated" if self.is_dry_run() else "Updated post"
                    self.log_message(f'{row_count}) Post with slug "{row.slug}" found. {verb} with ID: {existing_id}')
                table.append({"No.": row_count, "Post ID": post_id, "Posts Inserted": "", "Posts Updated": row.slug})
            else:
                inserted += 1
                if log_type == "text":
                    if self.is_dry_run():
                        self.log_message(f'{row_count}) Post with slug "{row.slug}" not found. New Post will insert.')
                    else:
                        self.log_message(f'{row_count}) Post with slug "{row.slug}" not found. Inserted post with ID: {post_id}')
                table.append({"No.": row_count, "Post ID": post_id or "", "Posts Inserted": row.slug, "Posts Updated": ""})

        if log_type == "table" and table:
            print(pd.DataFrame(table, columns=["No.", "Post ID", "Posts Inserted", "Posts Updated"]).to_string(index=False))

        if self.is_dry_run():
            self.notify_on_done(
                f"{inserted} post will be inserted and {updated} posts will be updated out of {total_rows} posts"
            )
        else:
            self.notify_on_done(
                f"{inserted} post inserted, {updated} posts updated and {failed} failed out of {total_rows} posts"
            )
        return 0
