"""
``migrate posts``: copy posts between two sites of the ``sites`` registry.
"""

from __future__ import annotations

import argparse

from wp_migrator.extractors.rest_extractor import count_source_posts, iter_source_posts, post_from_source
from wp_migrator.migrators.upsert import write_post
from wp_migrator.utils.errors import CommandError, report_error

from .base import BaseCommand


class PostMigration(BaseCommand):
    command_name = "migrate"
    post_type = "post"

    @classmethod
    def add_arguments(cls, subcommand: str, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--from-site", required=True, help="Source site name from the 'sites' registry")
        parser.add_argument("--to-site", required=True, help="Target site name from the 'sites' registry")
        parser.add_argument("--number-posts", type=int, default=-1, help="Stop after this many posts (default: all)")

    def posts(self, args: argparse.Namespace) -> int:
        self.parse_global_arguments(args)
        self.notify_on_start()

        if not args.from_site:
            raise CommandError("Missing argument: <from-site> is required.")
        if not args.to_site:
            raise CommandError("Missing argument: <to-site> is required.")
        number_posts = args.number_posts if args.number_posts and args.number_posts > 0 else -1

        source = self.store_for_site(args.from_site)
        target = self.store_for_site(args.to_site)
        self.pre_flight(target)

        total_posts = count_source_posts(source, self.post_type)
        if total_posts == 0:
            self.log_message("There is no post to migrate.")

        count = 0
        for record in iter_source_posts(source, self.post_type, per_page=self.batch_size):
            count += 1
            try:
                post = post_from_source(record, post_type=self.post_type)
            except ValueError as e:
                report_error("POST_WRITE", {"slug": record.get("slug"), "title": record.get("link")}, e)
                continue
            if self.is_dry_run():
                self.log_message(f"{count}) Post Title: {post.title}")
            else:
                item = {"title": post.title, "slug": post.slug, "url": record.get("link")}
                result = self.write_item(lambda: write_post(target, post), item)
                if result:
                    self.log_message(f"{count}) Post Migrated: {post.title} => New ID: {result[0]}")
            if count == number_posts:
                break
            self.update_iteration()

        if self.is_dry_run():
            self.notify_on_done(f"Dry run ended - Total {count} out of {total_posts} posts will be migrated.")
        else:
            self.notify_on_done(f"Total {count} out of {total_posts} posts migrated.")
        return 0
