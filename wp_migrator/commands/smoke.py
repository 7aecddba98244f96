"""
``test``: smoke checks for a working installation.
"""

from __future__ import annotations

import argparse

from wp_migrator.migrators.upsert import find_existing_by_slug
from wp_migrator.utils.errors import CommandError

from .base import BaseCommand


class SmokeTest(BaseCommand):
    command_name = "test"

    @classmethod
    def add_arguments(cls, subcommand: str, parser: argparse.ArgumentParser) -> None:
        if subcommand == "post-exist":
            parser.add_argument("--slug", required=True, help="Slug of the post to look up")

    def update_test(self, args: argparse.Namespace) -> int:
        self.log_message("Test Started!")
        self.log_message("Test Completed!!!", level="SUCCESS")
        return 0

    def post_exist(self, args: argparse.Namespace) -> int:
        self.parse_global_arguments(args)
        self.notify_on_start()

        post_id = find_existing_by_slug(self.store, args.slug, "post", ("publish",))
        if not post_id:
            raise CommandError("Post does not exist!")
        self.log_message(f"Post with slug {args.slug} exists!", level="SUCCESS")
        self.notify_on_done()
        return 0
