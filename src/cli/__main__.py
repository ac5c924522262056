# =============================================================================
# src/cli/__main__.py: Package Entry Point
# =============================================================================
#
# Enables ``python -m src.cli <command>``; delegates to the provider admin
# CLI in providers.py.
# =============================================================================

"""Allow ``python -m src.cli`` execution."""

import sys

from src.cli.providers import main

sys.exit(main())
