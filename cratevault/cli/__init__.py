"""cratevault CLI — Typer-based command-line interface.

Provides the ``cratevault`` command with subcommands for resolving vault
paths, listing the crates found in a vault, and populating a vault from a
registry index.

All output uses Rich for formatted terminal display.
"""
