"""Coindexation: numeric links between two nodes of one root tree.

An index lives on the node label (``NP-SBJ-1``), except on trace leaves
(``*T*``, ``*ICH*``...) where it is attached to the token (``*T*-1``).
Each linked node carries a type: ``-`` for a gap link, ``=`` for an
equivalence link.
"""

import logging
from typing import Optional

from ..labels import parse_index, parse_index_type, with_index
from ..state import Node

log = logging.getLogger(__name__)

# Type pair of (primary, secondary) -> next pair; None removes the index.
TYPE_CYCLE = {
    ('-', '-'): ('=', '-'),
    ('=', '-'): ('-', '='),
    ('-', '='): ('=', '='),
    ('=', '='): None,
}


def should_index_leaf(node: Node, settings) -> bool:
    """Trace leaves take their index on the token, not the label."""
    return node.is_terminal and node.token.startswith(tuple(settings.trace_prefixes))


def _index_text(node, settings):
    return node.token if should_index_leaf(node, settings) else node.label


def get_index(node: Node, settings) -> Optional[int]:
    return parse_index(_index_text(node, settings))


def get_index_type(node: Node, settings) -> Optional[str]:
    return parse_index_type(_index_text(node, settings))


def set_index(node: Node, settings, index: Optional[int], index_type: str = '-'):
    """Set, replace or (index=None) remove a node's coindex."""
    if should_index_leaf(node, settings):
        node.token = with_index(node.token, index, index_type)
    else:
        node.label = with_index(node.label, index, index_type)


def max_index(root: Node, settings) -> int:
    """Highest coindex used in a subtree, 0 if none."""
    return max((get_index(n, settings) or 0 for n in root.iter_nodes()), default=0)


def add_to_indices(tree: Node, offset: int, settings):
    """Shift every coindex in `tree` up by `offset`."""
    if offset <= 0:
        return
    for node in tree.iter_nodes():
        idx = get_index(node, settings)
        if idx is not None:
            set_index(node, settings, idx + offset, get_index_type(node, settings))


def coindex(state, primary: Optional[Node], secondary: Optional[Node] = None) -> bool:
    """Coindex a pair of nodes, or cycle the link types of an indexed pair.

    With only `primary`, removes its index. Returns False if nothing changed.
    """
    settings = state.settings
    if primary is None:
        return False

    if secondary is None:
        if get_index(primary, settings) is None:
            return False
        state.undo.touch(primary)
        set_index(primary, settings, None)
        state.notify('coindex')
        return True

    forest = state.forest
    root = forest.root_of(primary)
    if primary is secondary or forest.root_of(secondary) is not root:
        return False

    p_idx, s_idx = get_index(primary, settings), get_index(secondary, settings)
    p_type, s_type = get_index_type(primary, settings), get_index_type(secondary, settings)

    if p_idx is not None and s_idx is not None:
        if p_idx != s_idx:
            return False
        state.undo.touch(primary)
        types = TYPE_CYCLE.get((p_type, s_type))
        if types is None:
            set_index(primary, settings, None)
            set_index(secondary, settings, None)
        else:
            set_index(primary, settings, p_idx, types[0])
            set_index(secondary, settings, p_idx, types[1])
    elif p_idx is not None:
        state.undo.touch(primary)
        set_index(secondary, settings, p_idx, p_type)
    elif s_idx is not None:
        state.undo.touch(primary)
        set_index(primary, settings, s_idx, s_type)
    else:
        index = max_index(root, settings) + 1
        state.undo.touch(primary)
        set_index(primary, settings, index, '-')
        set_index(secondary, settings, index, '-')

    log.debug("Coindexed %d and %d", primary.id, secondary.id)
    state.notify('coindex')
    return True
