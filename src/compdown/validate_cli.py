"""CLI for document validation.

Validates the document, then runs the materialization plan so dangling
file references are reported before anything reaches the host.

Usage:
    compdown validate scene.yaml

    # Top-level layers with destination: _timeline
    compdown validate overlay.yaml --timeline
"""

import argparse
import sys

from .materialize import MaterializeError, plan_materialization
from .validation import load_document


def _print_summary(document) -> None:
    for i, comp in enumerate(document.comps or []):
        n_layers = len(comp.layers or [])
        print(
            f"  {i}: {comp.name}: {comp.width}x{comp.height}, "
            f"{comp.framerate:g}fps, {comp.duration:g}s, {n_layers} layers"
        )


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Validate a compdown document.",
    )
    parser.add_argument(
        "document",
        help="Path to YAML or JSON document",
    )
    parser.add_argument(
        "--timeline", action="store_true",
        help="Assume a composition is open for 'destination: _timeline' layers",
    )
    parsed = parser.parse_args(args)

    try:
        result = load_document(parsed.document)
    except FileNotFoundError:
        parser.error(f"document not found: {parsed.document}")
    except (OSError, UnicodeDecodeError) as exc:
        parser.error(f"cannot read document {parsed.document}: {exc}")

    if not result.success:
        print(f"Document invalid: {len(result.errors)} error(s)")
        for error in result.errors:
            print(f"  {error}")
        sys.exit(1)

    document = result.document
    try:
        plan = plan_materialization(document, active_timeline=parsed.timeline)
    except MaterializeError as exc:
        print(f"Document valid, but cannot be materialized: {exc}")
        sys.exit(1)

    created = plan["created"]
    print(
        f"Document valid: {created['folders']} folders, {created['files']} files, "
        f"{created['compositions']} compositions, {created['layers']} layers"
    )
    _print_summary(document)


if __name__ == "__main__":
    main()
