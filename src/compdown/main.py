"""Subcommand dispatcher for compdown.

Usage:
    compdown validate  scene.yaml [--timeline]
    compdown prune     generated.json --output scene.yaml
"""

import argparse
import sys


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="compdown",
        description="Declarative motion-graphics documents: validation and cleanup.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands. Each delegates to its own module's main().
    subparsers.add_parser("validate", help="Validate a YAML/JSON document")
    subparsers.add_parser("prune", help="Strip defaults from a generated document")

    # Parse only the subcommand name, pass the rest to the subcommand's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command is None:
        parser.print_help()
        sys.exit(1)

    if parsed.command == "validate":
        from .validate_cli import main as validate_main
        validate_main(remaining)
    elif parsed.command == "prune":
        from .prune_cli import main as prune_main
        prune_main(remaining)


if __name__ == "__main__":
    main()
