"""
Configuration loading.

Settings come from a JSON file (``config/migration_config.json`` unless
``--config`` says otherwise) and are completed with defaults so that the
commands can index every section without ``KeyError``.  Credentials for the
target site may also be supplied through ``WP_BASE_URL``, ``WP_USERNAME`` and
``WP_APP_PASSWORD``.

Multi-site commands address sites by name through the ``sites`` registry::

    "sites": {
        "main": {"base_url": "https://example.com", "username": "admin",
                 "application_password": "xxxx xxxx xxxx xxxx"}
    }
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

from wp_migrator.utils.errors import CommandError

CONFIG_FILE = "config/migration_config.json"


def load_config(config_file: Optional[str] = CONFIG_FILE, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    if config_file and os.path.exists(config_file):
        with open(config_file, "r", encoding="utf-8") as f:
            config = json.load(f)
    elif config is None:
        config = {}

    config.setdefault("wordpress", {})
    config["wordpress"].setdefault("base_url", os.getenv("WP_BASE_URL", ""))
    config["wordpress"].setdefault("username", os.getenv("WP_USERNAME", ""))
    config["wordpress"].setdefault("application_password", os.getenv("WP_APP_PASSWORD", ""))
    config["wordpress"].setdefault("max_attempts", 1)
    config["wordpress"].setdefault("timeout", 30)
    config["wordpress"].setdefault("rpm", 180)

    config.setdefault("sites", {})

    config.setdefault("migration", {})
    config["migration"].setdefault("dry_run", True)
    config["migration"].setdefault("batch_size", 60)
    config["migration"].setdefault("max_iterations", 20)
    config["migration"].setdefault("sleep", 2)
    config["migration"].setdefault("max_pages", 100)
    config["migration"].setdefault("log_file", "reports/migration/migration.log")
    config["migration"].setdefault("ledger_path", "data/migration.duckdb")

    config.setdefault("resources", {})
    config["resources"].setdefault("ajax_url", "")

    return config


def get_site(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """
    Store settings for the site registered as ``name``.

    The transport settings of the ``wordpress`` section (``max_attempts``,
    ``timeout``, ``rpm``) apply unless the site overrides them.

    :raises CommandError: if ``name`` is not in the ``sites`` registry.
    """
    site = (config.get("sites") or {}).get(name)
    if not site:
        raise CommandError(f"Unknown site '{name}'. Add it under 'sites' in the configuration file.")
    if not site.get("base_url"):
        raise CommandError(f"Site '{name}' has no base_url.")
    wp = config.get("wordpress") or {}
    merged = {key: wp.get(key) for key in ("max_attempts", "timeout", "rpm")}
    merged.update(site)
    return merged
