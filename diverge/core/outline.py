"""
Structure outline extraction for jump-to-symbol navigation.

Recovers a forest of named symbols from raw text using one of three
line-oriented grammars:
- Indentation (YAML): keys nested by leading whitespace
- Brace depth (JSON/JSONC): quoted keys nested by {/[ depth
- Declarations (everything else): a flat list of declared names

Parsing never fails; text that does not match yields fewer nodes.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from diverge.core.models import OutlineItem, OutlineNode


INDENTED_KEY = re.compile(r'^(\s*)(\w[\w.*-]*)\s*:')
QUOTED_KEY = re.compile(r'^\s*"(\w[\w.*-]*)"\s*:')
DECLARATION = re.compile(
    r'^\s*(?:export\s+)?(?:async\s+)?'
    r'(?:function|class|interface|type|enum|const|def|fn|pub\s+fn|func)\s+(\w+)'
)

OPENERS = frozenset('{[')
CLOSERS = frozenset('}]')


def parse_structure(content: str, language: str) -> list[OutlineNode]:
    """
    Build the outline forest for `content`.

    Args:
        content: Full text to scan
        language: Language tag, see `diverge.core.languages`

    Returns:
        Top-level nodes in line order
    """
    if language == 'yaml':
        return _parse_indented(content)
    if language in ('json', 'jsonc'):
        return _parse_braced(content)
    return _parse_declarations(content)


def _parse_indented(content: str) -> list[OutlineNode]:
    roots: list[OutlineNode] = []
    stack: list[tuple[OutlineNode, int]] = []

    for number, line in enumerate(content.split('\n'), start=1):
        match = INDENTED_KEY.match(line)
        if not match:
            continue

        indent = len(match.group(1))
        node = OutlineNode(key=match.group(2), line=number)

        while stack and stack[-1][1] >= indent:
            stack.pop()

        if stack:
            stack[-1][0].children.append(node)
        else:
            roots.append(node)
        stack.append((node, indent))

    return roots


def _parse_braced(content: str) -> list[OutlineNode]:
    roots: list[OutlineNode] = []
    stack: list[tuple[OutlineNode, int]] = []
    depth = 0

    for number, line in enumerate(content.split('\n'), start=1):
        # A key is attributed the depth its line starts at
        level = depth
        depth += sum(1 for ch in line if ch in OPENERS)

        match = QUOTED_KEY.match(line)
        if match:
            node = OutlineNode(key=match.group(1), line=number)

            while stack and stack[-1][1] >= level:
                stack.pop()

            if not stack:
                roots.append(node)
                attached = True
            elif stack[-1][1] + 1 == level:
                stack[-1][0].children.append(node)
                attached = True
            else:
                # Inside an unkeyed element (e.g. an object in an array)
                attached = False

            if attached and any(ch in OPENERS for ch in line):
                stack.append((node, level))

        depth -= sum(1 for ch in line if ch in CLOSERS)

    return roots


def _parse_declarations(content: str) -> list[OutlineNode]:
    nodes = []
    for number, line in enumerate(content.split('\n'), start=1):
        match = DECLARATION.match(line)
        if match:
            nodes.append(OutlineNode(key=match.group(1), line=number))
    return nodes


# =============================================================================
# Flattening and Search
# =============================================================================

def flatten_outline(nodes: Sequence[OutlineNode], depth: int = 0) -> list[OutlineItem]:
    """Linearize a forest in depth-first pre-order, recording depths."""
    items: list[OutlineItem] = []
    for node in nodes:
        items.append(OutlineItem(node=node, depth=depth))
        items.extend(flatten_outline(node.children, depth + 1))
    return items


def filter_outline(items: Sequence[OutlineItem], query: str) -> list[OutlineItem]:
    """Keep items whose key contains `query`, ignoring case."""
    if not query:
        return list(items)
    needle = query.lower()
    return [item for item in items if needle in item.node.key.lower()]


class OutlineNavigator:
    """
    Keyboard-driven selection over a filtered outline.

    Moving past either end wraps around. Changing the query resets the
    selection to the first match.
    """

    def __init__(self, nodes: Sequence[OutlineNode], query: str = ""):
        self._all_items = flatten_outline(nodes)
        self._query = ""
        self._items: list[OutlineItem] = []
        self._selected_index = 0
        self.query = query

    @property
    def query(self) -> str:
        return self._query

    @query.setter
    def query(self, value: str) -> None:
        self._query = value
        self._items = filter_outline(self._all_items, value)
        self._selected_index = 0

    @property
    def items(self) -> list[OutlineItem]:
        return list(self._items)

    @property
    def selected_index(self) -> int:
        return self._selected_index

    @property
    def selected(self) -> Optional[OutlineItem]:
        if not self._items:
            return None
        return self._items[self._selected_index]

    def select(self, index: int) -> None:
        if 0 <= index < len(self._items):
            self._selected_index = index

    def move_down(self) -> None:
        if self._items:
            self._selected_index = (self._selected_index + 1) % len(self._items)

    def move_up(self) -> None:
        if self._items:
            self._selected_index = (self._selected_index - 1) % len(self._items)

    def accept(self) -> Optional[int]:
        """Return the line to jump to, or None if nothing matches."""
        item = self.selected
        return item.line if item else None
