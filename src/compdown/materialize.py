"""Materialization plan: the reference-resolution phase after validation.

The schema only checks shape. Whether a layer's ``file`` names a real
file id or composition, and whether top-level layers have somewhere to
go, is decided here. The order is the one a host materializer creates
objects in: folders, files, compositions, composition layers, then
top-level layers into the open timeline.

Folder and parent references are resolved leniently. A name that matches
nothing means "no parent", not an error.
"""

from .schema import TIMELINE_DESTINATION, Document, Layer


class MaterializeError(ValueError):
    """A valid document that cannot be materialized."""


class UnresolvedReferenceError(MaterializeError):
    """A layer's ``file`` matches no file id and no composition name."""


class DestinationError(MaterializeError):
    """Top-level layers without ``destination: _timeline``."""


class NoActiveTimelineError(MaterializeError):
    """``destination: _timeline`` with no composition open in the host."""


def _unresolved(layers: list[Layer], file_ids: set, comp_names: set, where: str) -> list:
    """Describe every layer in ``layers`` whose file reference is dangling."""
    missing = []
    for layer in layers:
        if layer.file is None:
            continue
        ref = str(layer.file)
        if ref not in file_ids and ref not in comp_names:
            missing.append(f"{where}, layer '{layer.name}': file or comp '{ref}' not found")
    return missing


def _raise_unresolved(missing: list) -> None:
    if missing:
        msg = f"Unresolved {len(missing)} reference(s):\n"
        for item in missing:
            msg += f"  - {item}\n"
        raise UnresolvedReferenceError(msg)


def plan_materialization(document: Document, active_timeline: bool = False) -> dict:
    """Resolve references and count what a host materializer would create.

    Args:
        document: A validated Document.
        active_timeline: Whether the host has a composition open for
            ``destination: _timeline`` layers.

    Returns:
        {"created": {"folders": n, "files": n, "compositions": n, "layers": n}}

    Raises:
        UnresolvedReferenceError: Lists every dangling layer ``file``.
        DestinationError: Top-level layers without the timeline destination.
        NoActiveTimelineError: Timeline destination but nothing open.
    """
    folders = document.folders or []
    files = document.files or []
    comps = document.comps or []

    # File ids are compared as strings, so 1 and "1" refer to the same file.
    file_ids = {str(f.id) for f in files}
    comp_names = {c.name for c in comps}

    created = {
        "folders": len(folders),
        "files": len(files),
        "compositions": len(comps),
        "layers": 0,
    }

    missing = []
    for comp in comps:
        layers = comp.layers or []
        missing += _unresolved(layers, file_ids, comp_names, f"comp '{comp.name}'")
        created["layers"] += len(layers)
    _raise_unresolved(missing)

    top_level = document.layers or []
    if top_level:
        if document.destination != TIMELINE_DESTINATION:
            raise DestinationError(
                f"Top-level layers require destination: {TIMELINE_DESTINATION}"
            )
        if not active_timeline:
            raise NoActiveTimelineError(
                f"destination: {TIMELINE_DESTINATION} requires an active "
                f"composition timeline"
            )
        _raise_unresolved(_unresolved(top_level, file_ids, comp_names, "timeline"))
        created["layers"] += len(top_level)

    return {"created": created}
