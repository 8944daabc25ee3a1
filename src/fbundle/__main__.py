"""Entry point for ``python -m fbundle``."""

from fbundle.cli import main

main()
