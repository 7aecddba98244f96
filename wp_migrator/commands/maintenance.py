"""
Maintenance commands: ``revisions remove`` and ``comments remove``.
"""

from __future__ import annotations

import argparse
from typing import Any, Dict

import pandas as pd
import requests

from wp_migrator.migrators.wordpress_client import iter_old_revisions
from wp_migrator.utils.errors import CommandError, report_error, report_ok

from .base import BaseCommand


def cutoff_date(**offset: int) -> str:
    """``YYYY-MM-DD`` (UTC) of today minus ``offset`` (``years=1``, ``months=6``...)."""
    return (pd.Timestamp.now(tz="UTC") - pd.DateOffset(**offset)).strftime("%Y-%m-%d")


class RemoveRevisions(BaseCommand):
    command_name = "revisions"

    @classmethod
    def add_arguments(cls, subcommand: str, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--year-old", type=int, default=1, help="Remove revisions older than this many years (default 1)")
        parser.add_argument("--post-type", default="post,page", help="Comma separated post types (default: post,page)")

    def remove(self, args: argparse.Namespace) -> int:
        self.parse_global_arguments(args)
        self.notify_on_start()

        years = args.year_old or 1
        if years < 1:
            raise CommandError("--year-old must be a positive number.")
        before = cutoff_date(years=years)
        post_types = [p.strip() for p in (args.post_type or "").split(",") if p.strip()]
        self.pre_flight()

        count = 0
        for post_type in post_types:
            for post_id, revision_id in iter_old_revisions(self.store, post_type, before):
                count += 1
                item: Dict[str, Any] = {"slug": f"{post_type}/{post_id}/revisions/{revision_id}"}
                if self.is_dry_run():
                    self.log_message(f"{count}) Revision will be removed: {revision_id}")
                else:
                    try:
                        self.store.delete_revision(post_type, post_id, revision_id)
                    except requests.RequestException as e:
                        report_error("DELETE", item, e)
                    else:
                        report_ok("DELETED", item)
                        self.record(item["slug"], revision_id, "deleted")
                        self.log_message(f"{count}) Revision removed: {revision_id}")
                self.update_iteration()

        if self.is_dry_run():
            self.log_message(f"Total {count} Revisions will be removed.", level="SUCCESS")
        else:
            self.log_message(f"Total {count} Revisions removed successfully!!!", level="SUCCESS")
        self.notify_on_done()
        return 0


class RemoveComments(BaseCommand):
    command_name = "comments"
    status = "hold"

    @classmethod
    def add_arguments(cls, subcommand: str, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--month-old", type=int, default=6, help="Remove held comments older than this many months (default 6)")

    def remove(self, args: argparse.Namespace) -> int:
        self.parse_global_arguments(args)
        self.notify_on_start()

        months = args.month_old or 6
        if months < 1:
            raise CommandError("--month-old must be a positive number.")
        before = f"{cutoff_date(months=months)}T00:00:00"
        self.pre_flight()

        count = 0
        page = 1
        while True:
            comment_ids = self.store.list_comments(status=self.status, before=before, per_page=self.batch_size, page=page)
            deleted = 0
            for comment_id in comment_ids:
                count += 1
                item = {"slug": f"comments/{comment_id}"}
                if self.is_dry_run():
                    self.log_message(f"{count}) Comment will be removed of ID: {comment_id}")
                else:
                    try:
                        self.store.delete_comment(comment_id)
                    except requests.RequestException as e:
                        report_error("DELETE", item, e)
                    else:
                        deleted += 1
                        report_ok("DELETED", item)
                        self.record(item["slug"], comment_id, "deleted")
                        self.log_message(f"{count}) Comment removed of ID: {comment_id}")
                self.update_iteration()

            if len(comment_ids) < self.batch_size:
                break
            # deleted comments shift the remaining ones onto the same page
            if self.is_dry_run() or deleted == 0:
                page += 1

        if self.is_dry_run():
            self.log_message(f"Total {count} Comments will be removed.", level="SUCCESS")
        else:
            self.log_message(f"Total {count} Comments removed successfully!!!", level="SUCCESS")
        self.notify_on_done()
        return 0
