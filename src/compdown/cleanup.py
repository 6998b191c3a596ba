"""Cleanup of generated documents.

A reverse read of a host composition reports every property, including
values that only restate a default. prune() strips those so the YAML a
user sees is minimal, and re-importing it is stable.

Pruning rules, applied bottom-up (children first):
  - null values are dropped.
  - Lists and mappings that end up empty are dropped.
  - ``label`` keys are always dropped (label colors are generation noise).
  - Composition defaults (width/height/duration/framerate/pixelAspect)
    are dropped from mappings that have a ``name``, when the value is
    within 0.001 of the default.
"""

import copy

import yaml

from .schema import COMPOSITION_DEFAULTS


DEFAULT_TOLERANCE = 0.001

_DROPPED = object()


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _should_drop(key, value, parent: dict) -> bool:
    """Decide whether an already-pruned property is left out."""
    if value is None or key == "label":
        return True
    if key in COMPOSITION_DEFAULTS and "name" in parent and _is_number(value):
        return abs(value - COMPOSITION_DEFAULTS[key]) < DEFAULT_TOLERANCE
    return False


def _prune(value, ancestors: frozenset = frozenset()):
    """Prune one node. Returns _DROPPED when nothing is left of it."""
    if isinstance(value, (list, dict)):
        if id(value) in ancestors:
            raise ValueError("Generated document contains a reference cycle")
        ancestors = ancestors | {id(value)}

    if isinstance(value, list):
        items = [_prune(item, ancestors) for item in value]
        items = [item for item in items if item is not _DROPPED]
        return items if items else _DROPPED

    if isinstance(value, dict):
        result = {}
        for key, raw in value.items():
            pruned = _prune(raw, ancestors)
            if pruned is _DROPPED or _should_drop(key, pruned, value):
                continue
            result[key] = pruned
        return result if result else _DROPPED

    return value


def prune(generated):
    """Return a minimal copy of a generated document.

    The input is never modified. If pruning would leave nothing usable
    (the result is not a mapping), the input is returned unchanged.

    Raises:
        ValueError: The tree refers back to itself (a YAML alias cycle).
    """
    pruned = _prune(copy.deepcopy(generated))
    if not isinstance(pruned, dict):
        return generated
    return pruned


def dump_document(tree) -> str:
    """Serialize a document tree as block-style YAML, keys in document order."""
    return yaml.safe_dump(
        tree, sort_keys=False, default_flow_style=False, allow_unicode=True,
    )
