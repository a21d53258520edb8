"""
Package entry point.

Allows running the application via:

    python -m doccatalog

This simply forwards execution to doccatalog.cli.main().
"""

from doccatalog.cli import main

if __name__ == "__main__":
    main()
