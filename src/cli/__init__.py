"""Command-line tools for modelResolver.

- **providers** -- list, show, save, re-key and delete providers, and
  resolve a provider/model selection, all against the configured
  provider database.  Run as ``python -m src.cli <command>``.
"""
