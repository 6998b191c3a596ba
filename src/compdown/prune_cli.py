"""CLI for cleaning up a generated document.

Reads the full structure a reverse read produced (YAML or JSON), strips
default and empty values, and writes minimal YAML.

Usage:
    compdown prune generated.json --output scene.yaml

    # Print to stdout and check the result still validates
    compdown prune generated.json --check
"""

import argparse
import sys
from pathlib import Path

import yaml

from .cleanup import dump_document, prune
from .validation import validate_text


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Strip default and empty values from a generated document.",
    )
    parser.add_argument(
        "generated",
        help="Path to the generated YAML or JSON document",
    )
    parser.add_argument(
        "--output", default=None,
        help="Output YAML path (default: stdout)",
    )
    parser.add_argument(
        "--check", action="store_true",
        help="Validate the pruned document before writing it",
    )
    parsed = parser.parse_args(args)

    if not Path(parsed.generated).exists():
        parser.error(f"document not found: {parsed.generated}")

    try:
        with open(parsed.generated, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError) as exc:
        parser.error(f"cannot read document {parsed.generated}: {exc}")
    except yaml.YAMLError as exc:
        parser.error(f"cannot parse document {parsed.generated}: {exc}")
    if raw is None:
        parser.error(f"document is empty: {parsed.generated}")

    try:
        text = dump_document(prune(raw))
    except ValueError as exc:
        parser.error(f"{exc}: {parsed.generated}")

    if parsed.check:
        result = validate_text(text)
        if not result.success:
            print(f"Pruned document invalid: {len(result.errors)} error(s)", file=sys.stderr)
            for error in result.errors:
                print(f"  {error}", file=sys.stderr)
            sys.exit(1)

    if parsed.output is None:
        sys.stdout.write(text)
        return

    Path(parsed.output).parent.mkdir(parents=True, exist_ok=True)
    Path(parsed.output).write_text(text, encoding="utf-8")
    print(f"Done: {parsed.output}")


if __name__ == "__main__":
    main()
