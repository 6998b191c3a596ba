"""Document validation: text -> parsed tree -> schema -> Document or errors.

Processing pipeline:
  1. Parse the text with yaml.safe_load (JSON is accepted as YAML).
  2. Reject empty documents.
  3. Rewrite ``type: null`` on named objects to the string "null".
  4. Validate against the pydantic schema, collecting every violation.
  5. Map each violation's path to a line of the original text, through
     the PyYAML node graph where the path reaches it.

Problems found in the document are returned as ValidationError lists,
never raised. Callers get either a Document or a non-empty error list.
"""

import copy
from dataclasses import dataclass, replace
from pathlib import Path

import yaml
from pydantic import ValidationError as SchemaError

from .linemap import compose, line_for
from .schema import UNION_TAGS, Document


# ── Result types ──────────────────────────────────────────────────


@dataclass(frozen=True)
class ValidationError:
    """One problem in a document, with a best-effort source line."""

    line: int | None
    message: str
    path: tuple = ()

    @property
    def display_path(self) -> str:
        return ".".join(str(segment) for segment in self.path)

    def __str__(self) -> str:
        text = self.message
        if self.line is not None:
            text = f"Line {self.line}: {text}"
        if self.path:
            text = f"{text} ({self.display_path})"
        return text


@dataclass(frozen=True)
class ValidationResult:
    document: Document | None = None
    errors: tuple[ValidationError, ...] = ()

    @property
    def success(self) -> bool:
        return self.document is not None and not self.errors


# ── Null-literal handling ─────────────────────────────────────────


def restore_null_types(raw):
    """Return a copy of ``raw`` where ``type: null`` on named objects is
    the string "null".

    YAML reads a bare ``null`` as None, which would make a null layer look
    like a layer without a type. Aliases can make the tree cyclic, so each
    node is visited once.
    """
    tree = copy.deepcopy(raw)
    _restore_null_types(tree, set())
    return tree


def _restore_null_types(node, seen: set) -> None:
    if not isinstance(node, (dict, list)) or id(node) in seen:
        return
    seen.add(id(node))
    if isinstance(node, dict):
        if "name" in node and "type" in node and node["type"] is None:
            node["type"] = "null"
        children = node.values()
    else:
        children = node
    for child in children:
        _restore_null_types(child, seen)


# ── Schema validation ─────────────────────────────────────────────


def _error_path(error: dict) -> tuple:
    path = tuple(seg for seg in error["loc"] if seg not in UNION_TAGS)
    anchor = (error.get("ctx") or {}).get("anchor")
    if anchor:
        path += (anchor,)
    return path


def validate_document(raw) -> ValidationResult:
    """Validate an already-parsed tree. Errors carry paths but no lines."""
    try:
        document = Document.model_validate(restore_null_types(raw))
    except SchemaError as exc:
        errors = tuple(
            ValidationError(line=None, message=err["msg"], path=_error_path(err))
            for err in exc.errors(include_url=False)
        )
        return ValidationResult(errors=errors)
    return ValidationResult(document=document)


# ── Text validation ───────────────────────────────────────────────


def _parse_error(exc: yaml.YAMLError) -> ValidationError:
    mark = getattr(exc, "problem_mark", None)
    message = getattr(exc, "problem", None) or str(exc)
    line = mark.line + 1 if mark is not None else None
    return ValidationError(line=line, message=message)


def validate_text(text: str) -> ValidationResult:
    """Parse and validate a YAML/JSON document.

    Returns:
        ValidationResult with the validated Document on success, or every
        error found (parse error, empty document, or schema violations
        with line numbers) on failure.

    Raises:
        TypeError: ``text`` is not a string.
    """
    if not isinstance(text, str):
        raise TypeError(f"Expected document text as str, got {type(text).__name__}")

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        return ValidationResult(errors=(_parse_error(exc),))

    if raw is None:
        return ValidationResult(
            errors=(ValidationError(line=1, message="Document is empty"),),
        )

    result = validate_document(raw)
    if result.success:
        return result

    root = compose(text)
    errors = tuple(
        replace(err, line=line_for(text, err.path, root)) for err in result.errors
    )
    return ValidationResult(errors=errors)


def load_document(document_path: str | Path) -> ValidationResult:
    """Read a document file and validate it.

    Raises:
        FileNotFoundError: Missing document file.
    """
    with open(document_path, encoding="utf-8") as f:
        text = f.read()
    return validate_text(text)
