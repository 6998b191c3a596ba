"""Map a structural error path back to a line in the source text.

Two strategies:

  - node_line() follows the path through the PyYAML node graph
    (yaml.compose) and reports the start mark of the deepest node the
    path reaches. This is exact for keys that exist. For a missing key it
    reports the object the key is missing from.
  - locate() is the text heuristic, used when no node graph is available
    or the path does not enter it. The last key name in the path is
    searched for line by line. When that key sits directly inside a list
    item, the list index picks which occurrence to report, counted over
    the whole text. A key repeated earlier in the document can therefore
    shift the result.
"""

import re
from collections.abc import Sequence

import yaml


def _anchor(path: Sequence) -> tuple[str | None, int | None]:
    """Return (key, occurrence index) from the end of an error path."""
    for i in range(len(path) - 1, -1, -1):
        segment = path[i]
        if isinstance(segment, str):
            occurrence = None
            if i > 0:
                before = path[i - 1]
                if isinstance(before, int) and not isinstance(before, bool):
                    occurrence = before
            return segment, occurrence
    return None, None


def key_pattern(key: str) -> re.Pattern:
    """Match ``key:`` at the start of a line.

    Allows indentation, YAML block-sequence dashes (``- key:``) and a
    quoted key (``"key":`` in JSON-style input).
    """
    return re.compile(rf"^\s*(?:-\s+)*[\"']?{re.escape(key)}[\"']?\s*:")


def locate(text: str, path: Sequence) -> int | None:
    """Return the 1-based line for ``path`` in ``text``, or None."""
    key, occurrence = _anchor(path)
    if key is None:
        return None

    pattern = key_pattern(key)
    seen = 0
    for lineno, line in enumerate(text.split("\n"), start=1):
        if not pattern.match(line):
            continue
        if occurrence is None or seen == occurrence:
            return lineno
        seen += 1
    return None


def _child(node: yaml.Node, segment) -> tuple[yaml.Node, yaml.Node] | None:
    """Return (node carrying the line, node to descend into) for one step."""
    if isinstance(node, yaml.MappingNode) and isinstance(segment, str):
        for key_node, value_node in node.value:
            if isinstance(key_node, yaml.ScalarNode) and key_node.value == segment:
                return key_node, value_node
        return None
    if (
        isinstance(node, yaml.SequenceNode)
        and isinstance(segment, int)
        and not isinstance(segment, bool)
        and 0 <= segment < len(node.value)
    ):
        item = node.value[segment]
        return item, item
    return None


def node_line(root: yaml.Node | None, path: Sequence) -> int | None:
    """Return the 1-based line of the deepest node ``path`` reaches, or None
    if the path does not get past the root."""
    node = root
    line = None
    for segment in path:
        if node is None:
            break
        step = _child(node, segment)
        if step is None:
            break
        marked, node = step
        line = marked.start_mark.line + 1
    return line


def compose(text: str) -> yaml.Node | None:
    """Node graph of ``text``, or None if it does not parse as one document."""
    try:
        return yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.YAMLError:
        return None


def line_for(text: str, path: Sequence, root: yaml.Node | None = None) -> int | None:
    """Exact line from the node graph, falling back to the text heuristic."""
    line = node_line(root, path)
    if line is None:
        line = locate(text, path)
    return line
