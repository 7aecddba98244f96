"""
``woo-products migrate``: copy published WooCommerce products between sites.
"""

from __future__ import annotations

import argparse

from wp_migrator.extractors.rest_extractor import iter_source_products, product_from_source
from wp_migrator.migrators.products import upsert_product
from wp_migrator.utils.errors import CommandError, report_error
from wp_migrator.utils.taxonomy import parse_terms_field

from .base import BaseCommand

PAUSE_EVERY = 10


class WooProductsMigrate(BaseCommand):
    command_name = "woo-products"

    @classmethod
    def add_arguments(cls, subcommand: str, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--from-site", required=True, help="Source site name from the 'sites' registry")
        parser.add_argument("--to-site", required=True, help="Target site name from the 'sites' registry")
        parser.add_argument("--categories", default="", help="Comma separated product category slugs")
        parser.add_argument("--number-products", type=int, default=-1, help="Stop after this many products (default: all)")

    def migrate(self, args: argparse.Namespace) -> int:
        self.parse_global_arguments(args)
        self.notify_on_start()

        if not args.from_site:
            raise CommandError("Missing argument: <from-site> is required.")
        if not args.to_site:
            raise CommandError("Missing argument: <to-site> is required.")
        number_products = args.number_products if args.number_products and args.number_products > 0 else -1
        categories = parse_terms_field(args.categories or "")

        source = self.store_for_site(args.from_site, woocommerce=True)
        target = self.store_for_site(args.to_site, woocommerce=True)
        self.pre_flight(target)

        count = 0
        for data in iter_source_products(source, categories):
            count += 1
            item = {"title": data.get("name"), "slug": data.get("slug"), "url": data.get("permalink")}
            if self.is_dry_run():
                existing_id = target.find_product_by_slug(data.get("slug") or "")
                if existing_id:
                    self.log_message(f"{count}) Product ID {existing_id} will be Updated.")
                else:
                    self.log_message(f"{count}) Product ID {data.get('id')} will be Inserted.")
            else:
                try:
                    product = product_from_source(source, data)
                except ValueError as e:
                    report_error("PRODUCT_WRITE", item, e)
                    product = None
                if product is not None:
                    result = self.write_item(lambda: upsert_product(target, product), item, kind="PRODUCT")
                    if result and result[1]:
                        self.log_message(f"{count}) Product ID {data.get('id')} Inserted. New ID: {result[0]}")
                    elif result:
                        self.log_message(f"{count}) Product ID {result[0]} Updated.")

            if count % PAUSE_EVERY == 0:
                self.pause()
            if number_products > 0 and count >= number_products:
                break

        self.notify_on_done(f"{count} products migrated.")
        return 0
