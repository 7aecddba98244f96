"""
Command-line entry point.

Commands are registered explicitly in :func:`build_registry` as
``(command, subcommand, handler)`` entries, where ``handler`` is a
:class:`~wp_migrator.commands.base.BaseCommand` subclass exposing one
method per subcommand.  Usage::

    wp-migrator migrate external-posts --site-url https://example.com/blog --page-to 3 --dry-run=false
    wp-migrator yoast-posts import --file export.csv --format-type table
"""

from __future__ import annotations

import argparse
import keyword
from typing import List, NamedTuple, Optional, Sequence, Type

from wp_migrator.commands.base import BaseCommand
from wp_migrator.commands.external_posts import ExternalPostsMigrate
from wp_migrator.commands.maintenance import RemoveComments, RemoveRevisions
from wp_migrator.commands.post_migration import PostMigration
from wp_migrator.commands.resources import ResourcesMigrate
from wp_migrator.commands.smoke import SmokeTest
from wp_migrator.commands.woo_products import WooProductsMigrate
from wp_migrator.commands.yoast_import import YoastPostsImport
from wp_migrator.config import CONFIG_FILE, load_config
from wp_migrator.utils.errors import MigrationError


class Registration(NamedTuple):
    command: str
    subcommand: str
    handler: Type[BaseCommand]


def build_registry() -> List[Registration]:
    return [
        Registration("migrate", "external-posts", ExternalPostsMigrate),
        Registration("migrate", "posts", PostMigration),
        Registration("anitian-resources", "migrate", ResourcesMigrate),
        Registration("woo-products", "migrate", WooProductsMigrate),
        Registration("yoast-posts", "import", YoastPostsImport),
        Registration("revisions", "remove", RemoveRevisions),
        Registration("comments", "remove", RemoveComments),
        Registration("test", "update-test", SmokeTest),
        Registration("test", "post-exist", SmokeTest),
    ]


def handler_method_name(subcommand: str) -> str:
    """``external-posts`` -> ``external_posts``; keywords get a trailing underscore."""
    name = subcommand.replace("-", "_")
    return f"{name}_" if keyword.iskeyword(name) else name


def _global_options() -> argparse.ArgumentParser:
    base = argparse.ArgumentParser(add_help=False)
    base.add_argument("--config", default=CONFIG_FILE, help="Path to the JSON configuration file")
    base.add_argument(
        "--dry-run",
        nargs="?",
        const="",
        default=None,
        help="Dry run unless set to something other than yes/true/1 (default: dry run)",
    )
    base.add_argument("--batch-size", type=int, default=None, help="Items per page for paged commands (default 60)")
    return base


def build_parser(registry: Optional[Sequence[Registration]] = None) -> argparse.ArgumentParser:
    registry = build_registry() if registry is None else registry
    global_options = _global_options()

    parser = argparse.ArgumentParser(prog="wp-migrator", description="WordPress migration and maintenance commands")
    commands = parser.add_subparsers(dest="command", metavar="command")
    commands.required = True

    groups = {}
    for entry in registry:
        if entry.command not in groups:
            command_parser = commands.add_parser(entry.command)
            groups[entry.command] = command_parser.add_subparsers(dest="subcommand", metavar="subcommand")
            groups[entry.command].required = True
        sub = groups[entry.command].add_parser(entry.subcommand, parents=[global_options])
        entry.handler.add_arguments(entry.subcommand, sub)
        sub.set_defaults(handler=entry.handler)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    command = args.handler(config)
    method = getattr(command, handler_method_name(args.subcommand))
    try:
        return method(args) or 0
    except MigrationError as e:
        command.log_message(str(e), level="ERROR")
        return 1
    finally:
        command.close()
