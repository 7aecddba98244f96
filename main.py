"""
Entry point for the WordPress migration commands.
"""

import sys

from wp_migrator.cli import main

if __name__ == "__main__":
    sys.exit(main())
