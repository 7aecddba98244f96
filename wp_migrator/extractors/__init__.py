"""
Extractors for migration sources.

This subpackage turns the different sources the commands read from into
records the writers understand: scraped HTML pages and ``admin-ajax.php``
listings (:mod:`.html_extractor`), a source site's REST API
(:mod:`.rest_extractor`) and Yoast SEO CSV exports (:mod:`.csv_extractor`).
"""
