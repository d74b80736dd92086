"""Invariant checks consumed by every tree mutation.

Pure predicates over the tree model; none of them mutate anything.
"""

from __future__ import annotations
from typing import Iterable, Optional, Union

from .labels import base_category, is_empty_token
from .state import Forest, Node


def can_be_move_target(node: Optional[Node], tag_categories=()) -> bool:
    """Nodes that may receive children: phrasal, not a 'tag' category."""
    if node is None or node.is_terminal:
        return False
    return base_category(node.label) not in tag_categories


def would_orphan_root_sibling(node: Node) -> bool:
    """True if `node` is its parent's only child."""
    return node.parent is not None and len(node.parent.children) == 1


def token_sequence(scope: Union[Node, Iterable[Node]]) -> list[str]:
    """Non-empty token text, left to right, under `scope`."""
    roots = [scope] if isinstance(scope, Node) else list(scope)
    return [t.token for root in roots for t in root.terminals()
            if not is_empty_token(t.token)]


def is_descendant_of(a: Node, b: Node) -> bool:
    """True if `a` is strictly below `b`."""
    node = a.parent
    while node is not None:
        if node is b:
            return True
        node = node.parent
    return False


def path_of(node: Node, forest: Forest) -> list[int]:
    path = []
    while node.parent is not None:
        path.append(node.index_in_parent())
        node = node.parent
    path.append(forest.index_in_forest(node))
    return path[::-1]


def precedes(a: Node, b: Node, forest: Forest) -> bool:
    """Document order: `a` opens before `b` (ancestors precede descendants)."""
    return path_of(a, forest) < path_of(b, forest)


def are_sisters(a: Node, b: Node, forest: Forest) -> bool:
    if a is b:
        return False
    if a.parent is None and b.parent is None:
        return a in forest.trees and b in forest.trees
    return a.parent is b.parent


def sister_run(first: Node, last: Node, forest: Forest) -> Optional[list[Node]]:
    """The contiguous sisters from `first` to `last` in document order."""
    if first is last:
        return [first]
    if not are_sisters(first, last, forest):
        return None
    sisters = first.parent.children if first.parent is not None else forest.trees
    i, j = sisters.index(first), sisters.index(last)
    if i > j:
        i, j = j, i
    return sisters[i:j + 1]


def audit_forest(forest: Forest) -> list[str]:
    """Connectivity, non-degeneracy, id uniqueness and metadata placement problems."""
    problems = []
    seen: dict[int, Node] = {}
    for root in forest.trees:
        if root.parent is not None:
            problems.append(f"root {root.id} has a parent")
        for node in root.iter_nodes():
            if node.id in seen:
                problems.append(f"id {node.id} used twice")
            seen[node.id] = node
            if node.is_phrasal and not node.children:
                problems.append(f"phrasal node {node.id} has no children")
            if node.is_terminal and node.children:
                problems.append(f"terminal {node.id} has children")
            if node.metadata is not None and node is not root:
                problems.append(f"non-root node {node.id} has metadata")
            for child in node.children:
                if child.parent is not node:
                    problems.append(f"node {child.id} has a stale parent pointer")
    return problems
