"""Node deletion."""

import logging

from ..checks import can_be_move_target, would_orphan_root_sibling
from ..labels import is_empty_token
from ..state import Node
from .metadata import absorb_metadata

log = logging.getLogger(__name__)


def prune(state, node: Node) -> bool:
    """Delete an empty leaf, or dissolve a phrase into its parent.

    A phrase's children take its place, so the text never changes. Leaves
    with real text can't be deleted. Returns True if the tree changed.
    """
    if node is None:
        return False
    forest, undo = state.forest, state.undo

    if node.is_terminal:
        if not is_empty_token(node.token) or would_orphan_root_sibling(node):
            return False
        if node.parent is None:
            undo.register_removed_root(node)
        else:
            undo.touch(node)
        forest.remove(node)
        state.selection.clear()
        log.debug("Deleted empty leaf %d", node.id)
        state.notify('prune')
        return True

    if not can_be_move_target(node, state.settings.tag_categories):
        return False
    if node.parent is None:
        undo.begin_transaction()
        undo.register_removed_root(node)
        children = forest.splice(node)
        absorb_metadata(children[0], [node])
        for child in children:
            undo.register_created_root(child)
        undo.commit_transaction()
    else:
        undo.touch(node)
        children = forest.splice(node)

    state.selection.set(children[0])
    log.debug("Dissolved %s (%d) into %d children", node.label, node.id, len(children))
    state.notify('prune')
    return True
