"""Node movement: reattach a node (or a run of sisters) under a new parent.

A move must never change the text of the sentence. Moves go either up to
an ancestor (only from the left or right edge of the intervening
constituents) or down into an adjacent constituent; anything else is
rejected, or rolled back when the token text comes out different.
"""

import logging
from typing import Optional

from ..checks import (can_be_move_target, is_descendant_of, precedes,
                      sister_run, token_sequence, would_orphan_root_sibling)
from ..state import Node
from .coindex import add_to_indices, max_index
from .metadata import absorb_metadata

log = logging.getLogger(__name__)


def move_node(state, moved: Optional[Node], target: Optional[Node]) -> bool:
    """Move `moved` under `target` (None = the root level).

    Clears the selection whatever the outcome. Returns True if the tree changed.
    """
    ok = _move(state, moved, target)
    state.selection.clear()
    state.notify('move')
    return ok


def move_range(state, first: Node, last: Node, target: Optional[Node]) -> bool:
    """Move the sisters from `first` to `last` (inclusive) as a unit.

    The run is wrapped in a temporary phrase, moved, and unwrapped again.
    """
    forest, undo = state.forest, state.undo
    run = sister_run(first, last, forest)
    ok = False
    if run is None:
        pass
    elif len(run) == 1:
        ok = _move(state, run[0], target)
    elif target is None or not any(target is n or is_descendant_of(target, n)
                                   for n in run):
        ok = _move_run(state, run, target)
    state.selection.clear()
    state.notify('move')
    return ok


def _move_run(state, run, target) -> bool:
    forest, undo = state.forest, state.undo
    root_level = run[0].parent is None
    parent = run[0].parent
    container = forest.trees if root_level else parent.children
    pos = container.index(run[0])

    undo.begin_transaction()
    if root_level:
        for tree in run:
            undo.register_removed_root(tree)
    else:
        undo.touch(run[0])
    for node in run:
        forest.remove(node)
    wrapper = forest.create_phrasal(state.settings.default_phrase_label, run)
    forest.reparent(wrapper, parent, pos)
    if root_level:
        undo.register_created_root(wrapper)

    ok = _move(state, wrapper, target)

    # a rolled-back move leaves a fresh copy of the wrapper in place
    live = forest.find(wrapper.id)
    if live.parent is None:
        undo.register_removed_root(live)
        for child in forest.splice(live):
            undo.register_created_root(child)
    else:
        if root_level and ok:
            # the run joined another tree
            absorb_metadata(forest.root_of(live), run)
        forest.splice(live)

    if ok:
        undo.commit_transaction()
    else:
        undo.abort_transaction()
    return ok


def _move(state, moved, target) -> bool:
    if moved is None:
        return False
    if target is not None:
        if not can_be_move_target(target, state.settings.tag_categories):
            return False
        if target is moved or is_descendant_of(target, moved):
            return False
    if would_orphan_root_sibling(moved):
        return False
    if target is None or is_descendant_of(moved, target):
        return _move_up(state, moved, target)
    return _move_into(state, moved, target)


def _move_up(state, moved, target) -> bool:
    """Move to an ancestor, keeping the node at the same edge."""
    forest, undo = state.forest, state.undo
    if moved.parent is None or moved.parent is target:
        return False

    # ancestors strictly between moved's parent (inclusive) and target's child
    chain = []
    top = moved.parent
    while top.parent is not target:
        chain.append(top)
        top = top.parent

    sisters = moved.parent.children
    if sisters[0] is moved:
        if any(n.parent.children[0] is not n for n in chain):
            return False
        offset = 0
    elif sisters[-1] is moved:
        if any(n.parent.children[-1] is not n for n in chain):
            return False
        offset = 1
    else:
        return False

    scope = [forest.root_of(moved)]
    before = token_sequence(forest.trees if target is None else scope)
    checkpoint = forest.checkpoint(scope)
    undo.begin_transaction()
    undo.touch(moved)
    if target is None:
        forest.reparent(moved, None, forest.index_in_forest(top) + offset)
        undo.register_created_root(moved)
    else:
        forest.reparent(moved, target, top.index_in_parent() + offset)
    after = token_sequence(forest.trees if target is None else scope)
    return _finish(state, checkpoint, before, after, moved, target)


def _move_into(state, moved, target) -> bool:
    """Move under a node elsewhere in document order (possibly another tree)."""
    forest, undo, settings = state.forest, state.undo, state.settings
    moved_root, target_root = forest.root_of(moved), forest.root_of(target)
    token_merge = moved.parent is None
    same_root = moved_root is target_root
    scope = [moved_root] if same_root else [moved_root, target_root]

    def text():
        return token_sequence(scope if same_root else forest.trees)

    before = text()
    target_first = precedes(target, moved, forest)
    checkpoint = forest.checkpoint(scope)
    undo.begin_transaction()
    if token_merge:
        # the donor tree joins the receiving tree; its indices move above
        # the receiver's
        undo.register_removed_root(moved)
        undo.touch(target)
        add_to_indices(moved, max_index(target_root, settings), settings)
        absorb_metadata(target_root, [moved])
    else:
        undo.touch(moved)
        undo.touch(target)
    if target_first:
        forest.reparent(moved, target, len(target.children))
    else:
        forest.reparent(moved, target, 0)
    return _finish(state, checkpoint, before, text(), moved, target)


def _finish(state, checkpoint, before, after, moved, target) -> bool:
    if after != before:
        state.forest.rollback(checkpoint)
        state.undo.abort_transaction()
        log.warning("Moving node %d under %s changed the token order; rolled back",
                    moved.id, target.id if target is not None else 'root level')
        return False
    state.undo.commit_transaction()
    log.debug("Moved node %d under %s", moved.id,
              target.id if target is not None else 'root level')
    return True
