"""
Top-level package for the WordPress migration and maintenance commands.

This package bundles everything needed to scrape posts from external
sites, convert their HTML to block markup, upload media to the WordPress
media library, create or update posts, products and terms, and prune old
revisions and comments.  Modules are split into subpackages:

* :mod:`wp_migrator.extractors` – HTML/AJAX scraping, REST and CSV readers
* :mod:`wp_migrator.parsers` – HTML to block markup and text sanitizers
* :mod:`wp_migrator.migrators` – WordPress/WooCommerce REST interactions
* :mod:`wp_migrator.commands` – the batch drivers behind each CLI command
* :mod:`wp_migrator.models` – value records passed between the layers
* :mod:`wp_migrator.utils` – reporting, ledger and pre-flight checks

Each layer has no direct knowledge of configuration or execution
strategy; orchestration is handled by the command classes.
"""

__version__ = "0.3.0"
