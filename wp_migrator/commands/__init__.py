"""
Batch drivers behind the CLI commands.

Each module holds one :class:`~wp_migrator.commands.base.BaseCommand`
subclass; :func:`wp_migrator.cli.build_registry` maps command and
subcommand names onto them.
"""
