"""
Shared state and helpers for the batch commands.

Every command runs as a dry run unless ``--dry-run`` is given a falsy value
(anything other than ``''``, ``yes``, ``true`` or ``1``).  Long loops call
:meth:`BaseCommand.update_iteration` once per item; after ``max_iterations``
items the command sleeps for ``sleep`` seconds to go easy on the remote
sites.
"""

from __future__ import annotations

import argparse
import os
import time
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import urlparse

import requests

from wp_migrator.config import get_site
from wp_migrator.migrators.woocommerce_client import WooCommerceStore
from wp_migrator.migrators.wordpress_client import WordPressStore
from wp_migrator.utils.errors import ImageUploadError, MetaWriteError, report_error, report_ok
from wp_migrator.utils.ledger import MigrationLedger
from wp_migrator.utils.pre_flight_checks import run_wordpress_pre_flight_checks

TRUTHY_VALUES = ("", "yes", "true", "1")


def is_truthy(value: Optional[str]) -> bool:
    return str(value).strip().lower() in TRUTHY_VALUES


class BaseCommand:
    """
    Base class of the command handlers.

    Subclasses implement one method per subcommand, named after the
    subcommand with dashes replaced by underscores, taking the parsed
    :class:`argparse.Namespace`.  :meth:`add_arguments` declares the
    subcommand's own options.
    """

    command_name = ""

    def __init__(
        self,
        config: Dict[str, Any],
        *,
        store: Optional[Any] = None,
        ledger: Optional[MigrationLedger] = None,
        site_stores: Optional[Dict[str, Any]] = None,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        migration = config.get("migration") or {}
        self.config = config
        self.dry_run = bool(migration.get("dry_run", True))
        self.batch_size = int(migration.get("batch_size") or 60)
        self.max_iterations = int(migration.get("max_iterations") or 0)
        self.sleep = int(migration.get("sleep") or 0)
        self.log_file = migration.get("log_file") or "reports/migration/migration.log"
        self.current_iteration = 0
        self.start_time = 0.0
        self.sleep_fn = sleep_fn
        self._store = store
        self._ledger = ledger
        self._site_stores: Dict[str, Any] = dict(site_stores or {})

    @classmethod
    def add_arguments(cls, subcommand: str, parser: argparse.ArgumentParser) -> None:
        """Register the options of ``subcommand`` on ``parser``."""

    ###########################################################################
    # Global state
    ###########################################################################

    def is_dry_run(self) -> bool:
        return self.dry_run is True

    def parse_global_arguments(self, args: argparse.Namespace) -> None:
        batch_size = getattr(args, "batch_size", None)
        if batch_size:
            self.batch_size = int(batch_size)
        dry_run = getattr(args, "dry_run", None)
        if dry_run is not None:
            self.dry_run = is_truthy(dry_run)

    def log_message(self, message: str, level: str = "INFO") -> None:
        print(f"[{level}] {message}")
        os.makedirs(os.path.dirname(self.log_file) or ".", exist_ok=True)
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(f"{level}: {message}\n")

    def notify_on_start(self) -> None:
        self.start_time = time.time()
        base_url = getattr(self._store, "base_url", None) or (self.config.get("wordpress") or {}).get("base_url") or ""
        message = f"Command has started running on {urlparse(base_url).hostname or 'the target site'}"
        if self.is_dry_run():
            message = f"{message} - Dry Run Started."
        self.log_message(message)

    def notify_on_done(self, msg: str = "") -> None:
        if not msg:
            msg = "Command run completed!"
        if self.is_dry_run():
            msg = f"{msg} - Dry Run Completed."
        else:
            msg = f"{msg} - Time taken: {int(time.time() - self.start_time)} seconds"
        self.log_message(msg, level="SUCCESS")

    def pause(self, seconds: Optional[int] = None) -> None:
        seconds = self.sleep if seconds is None else seconds
        self.log_message(f"Sleep for {seconds} seconds...")
        self.sleep_fn(seconds)

    def update_iteration(self) -> None:
        self.current_iteration += 1
        if self.sleep < 1 or self.max_iterations < 1 or self.current_iteration < self.max_iterations:
            return
        self.current_iteration = 0
        self.pause()

    ###########################################################################
    # Collaborators
    ###########################################################################

    @property
    def store(self) -> Any:
        """Store for the target site of the ``wordpress`` section."""
        if self._store is None:
            self._store = WordPressStore(self.config.get("wordpress") or {})
        return self._store

    def store_for_site(self, name: str, *, woocommerce: bool = False) -> Any:
        """Store for a site of the ``sites`` registry."""
        if name not in self._site_stores:
            cls = WooCommerceStore if woocommerce else WordPressStore
            self._site_stores[name] = cls(get_site(self.config, name))
        return self._site_stores[name]

    @property
    def ledger(self) -> MigrationLedger:
        if self._ledger is None:
            path = (self.config.get("migration") or {}).get("ledger_path")
            self._ledger = MigrationLedger(path)
        return self._ledger

    def record(self, slug: str, object_id: Optional[int], action: str, source: str = "") -> None:
        if not self.is_dry_run():
            self.ledger.record(self.command_name, source, slug, object_id, action)

    def pre_flight(self, store: Any = None) -> None:
        """Check credentials of ``store`` (the target store by default) before writing."""
        if not self.is_dry_run():
            run_wordpress_pre_flight_checks(store if store is not None else self.store)

    ###########################################################################
    # Per-item writes
    ###########################################################################

    def write_item(
        self,
        write: Callable[[], Tuple[int, bool]],
        item: Dict[str, Any],
        *,
        kind: str = "POST",
    ) -> Optional[Tuple[int, bool]]:
        """
        Run one create-or-update and report its outcome.

        Image, meta, network and validation failures are reported for ``item``
        so that the batch can go on; ``None`` is returned in that case.
        """
        try:
            object_id, created = write()
        except ImageUploadError as e:
            report_error("MEDIA_UPLOAD", item, e)
            return None
        except MetaWriteError as e:
            report_error("META_WRITE", item, e)
            return None
        except (requests.RequestException, ValueError) as e:
            report_error(f"{kind}_WRITE", item, e)
            return None
        report_ok(f"{kind}_CREATED" if created else f"{kind}_UPDATED", item, {"id": object_id})
        self.record(item.get("slug") or "", object_id, "created" if created else "updated", source=item.get("url") or "")
        return object_id, created

    def close(self) -> None:
        if self._ledger is not None:
            self._ledger.close()
