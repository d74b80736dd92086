"""Undo/redo system for the tree editor.

Records per-action deltas instead of whole-document snapshots. Mutations
call `touch(node)` before changing a root tree, which stores that tree's
baseline once per undo step; root trees added or removed at the top level
are registered separately so they can be re-deleted or reinserted as a
unit. `close_barrier()` turns the pending delta into one undo step.

Undo and redo share one algorithm, `invert_and_apply`: applying a delta
returns the delta that reverses it.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .state import Forest, Node, NodeSnapshot, clone_subtree, materialize

log = logging.getLogger(__name__)


@dataclass
class RemovedRoot:
    snapshot: NodeSnapshot
    preceding_id: Optional[int]


@dataclass
class UndoDelta:
    touched: dict = field(default_factory=dict)     # root id -> NodeSnapshot
    created: list = field(default_factory=list)     # root ids
    removed: list = field(default_factory=list)     # RemovedRoot records

    def is_empty(self) -> bool:
        return not (self.touched or self.created or self.removed)

    def copy(self) -> 'UndoDelta':
        # snapshots are immutable, so copying the containers is enough
        return UndoDelta(dict(self.touched), list(self.created), list(self.removed))


class UndoEngine:
    """Manages the pending delta, transactions and undo/redo history."""

    def __init__(self, forest: Forest, max_size: int = 100):
        self.forest = forest
        self.max_size = max_size
        self.undo_stack: list[UndoDelta] = []
        self.redo_stack: list[UndoDelta] = []
        self.current = UndoDelta()
        self._transactions: list[UndoDelta] = []

    def can_undo(self) -> bool:
        return len(self.undo_stack) > 0

    def can_redo(self) -> bool:
        return len(self.redo_stack) > 0

    def reset(self):
        """Forget pending changes and all history (new editing session)."""
        self.current = UndoDelta()
        self._transactions = []
        self.undo_stack = []
        self.redo_stack = []

    # ---- Recording ----

    def touch(self, node: Node):
        """Store the baseline of `node`'s root tree, once per undo step."""
        root = self.forest.root_of(node)
        if root.id in self.current.touched or root.id in self.current.created:
            return
        self.current.touched[root.id] = clone_subtree(root)

    def register_created_root(self, tree: Node):
        for record in self.current.removed:
            if record.snapshot.id == tree.id:
                # removed and back at the root level within one step: the
                # removal baseline becomes an ordinary touch
                self.current.removed.remove(record)
                self.current.touched[tree.id] = record.snapshot
                return
        self.current.created.append(tree.id)

    def register_removed_root(self, tree: Node):
        """Record a root tree about to leave the root level.

        Must be called while `tree` is still at its root position.
        """
        if tree.id in self.current.created:
            # created and removed within one step: nothing to undo
            self.current.created.remove(tree.id)
            return
        baseline = self.current.touched.pop(tree.id, None)
        prev = self.forest.preceding_root(tree)
        self.current.removed.append(RemovedRoot(
            snapshot=baseline if baseline is not None else clone_subtree(tree),
            preceding_id=prev.id if prev is not None else None,
        ))

    # ---- Transactions ----

    def begin_transaction(self):
        self._transactions.append(self.current.copy())

    def commit_transaction(self):
        self._transactions.pop()

    def abort_transaction(self):
        """Drop records made since the matching begin.

        Tree mutations are not reverted here; callers restore the tree
        themselves before aborting.
        """
        self.current = self._transactions.pop()

    @property
    def in_transaction(self) -> bool:
        return bool(self._transactions)

    def close_barrier(self) -> bool:
        """End one top-level action. Returns True if an undo step was pushed."""
        if self._transactions:
            log.warning("Closing undo barrier with %d open transaction(s)",
                        len(self._transactions))
            self._transactions = []
        if self.current.is_empty():
            return False
        self.undo_stack.append(self.current)
        self.redo_stack.clear()
        if self.max_size and len(self.undo_stack) > self.max_size:
            self.undo_stack.pop(0)
        self.current = UndoDelta()
        return True

    # ---- Undo / redo ----

    def invert_and_apply(self, delta: UndoDelta) -> UndoDelta:
        """Apply `delta` to the forest and return its inverse."""
        forest = self.forest
        inverse = UndoDelta()

        for nid, snap in delta.touched.items():
            current = forest.find_root(nid)
            if current is None:
                log.warning("Undo target tree %d is missing; skipped", nid)
                continue
            inverse.touched[nid] = clone_subtree(current)
            forest.restore_from_snapshot(nid, snap)

        # Reinsert removed trees before deleting created ones, so insertion
        # points are still present.
        for record in delta.removed:
            forest.insert_root_after(materialize(record.snapshot), record.preceding_id)
            inverse.created.append(record.snapshot.id)

        # Record positions left to right before deleting anything, so each
        # record's preceding tree is back in place when it is reinserted.
        doomed = []
        for nid in delta.created:
            current = forest.find_root(nid)
            if current is None:
                log.warning("Created tree %d is missing; skipped", nid)
                continue
            doomed.append(current)
        doomed.sort(key=forest.index_in_forest)
        for current in doomed:
            prev = forest.preceding_root(current)
            inverse.removed.append(RemovedRoot(
                snapshot=clone_subtree(current),
                preceding_id=prev.id if prev is not None else None,
            ))
        for current in doomed:
            forest.remove(current)

        return inverse

    def undo(self) -> bool:
        self.close_barrier()
        if not self.can_undo():
            return False
        self.redo_stack.append(self.invert_and_apply(self.undo_stack.pop()))
        log.debug("Undo applied (%d left)", len(self.undo_stack))
        return True

    def redo(self) -> bool:
        if not self.current.is_empty():
            # a pending forward edit invalidates the redo history
            self.close_barrier()
        if not self.can_redo():
            return False
        self.undo_stack.append(self.invert_and_apply(self.redo_stack.pop()))
        log.debug("Redo applied (%d left)", len(self.redo_stack))
        return True
