"""Central state model for the tree editor.

Replaces the annotated-HTML document of the browser editor with Python
objects: a Forest of root trees made of Nodes, the current Selection, and a
SessionState that ties them to the undo engine and settings. Supports the
observer pattern for UI updates.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional

from .core.settings import Settings
from .labels import LabelOracle


class NodeKind(Enum):
    PHRASAL = 'phrasal'
    TERMINAL = 'terminal'


@dataclass(eq=False)
class Node:
    """A constituent. Phrasal nodes own children; Terminals own a token."""
    id: int
    label: str
    kind: NodeKind
    children: list = field(default_factory=list)
    token: str = ''
    lemma: Optional[str] = None
    metadata: Optional[dict] = None   # root trees only
    parent: Optional['Node'] = field(default=None, repr=False)

    @property
    def is_terminal(self) -> bool:
        return self.kind is NodeKind.TERMINAL

    @property
    def is_phrasal(self) -> bool:
        return self.kind is NodeKind.PHRASAL

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def index_in_parent(self) -> int:
        return self.parent.children.index(self)

    def iter_nodes(self) -> Iterator['Node']:
        """Pre-order walk of this subtree, self included."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def terminals(self) -> list['Node']:
        return [n for n in self.iter_nodes() if n.is_terminal]


@dataclass(frozen=True)
class NodeSnapshot:
    """Deep immutable copy of a subtree; equality is structural."""
    id: int
    label: str
    kind: NodeKind
    token: str = ''
    lemma: Optional[str] = None
    metadata: Optional[tuple] = None
    children: tuple = ()


def clone_subtree(node: Node) -> NodeSnapshot:
    return NodeSnapshot(
        id=node.id, label=node.label, kind=node.kind,
        token=node.token, lemma=node.lemma,
        metadata=tuple(sorted(node.metadata.items())) if node.metadata is not None else None,
        children=tuple(clone_subtree(c) for c in node.children),
    )


def materialize(snap: NodeSnapshot, parent: Optional[Node] = None) -> Node:
    """Build a live subtree from a snapshot, keeping its ids."""
    node = Node(id=snap.id, label=snap.label, kind=snap.kind,
                token=snap.token, lemma=snap.lemma,
                metadata=dict(snap.metadata) if snap.metadata is not None else None,
                parent=parent)
    node.children = [materialize(c, node) for c in snap.children]
    return node


class Forest:
    """Ordered root trees open for editing, plus the session id counter."""

    def __init__(self):
        self.trees: list[Node] = []
        self._next_id: int = 1

    def new_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    def note_id(self, nid: int):
        """Keep the counter above an id assigned elsewhere (e.g. by a parser)."""
        self._next_id = max(self._next_id, nid + 1)

    # Creation
    def create_phrasal(self, label: str, children: list[Node]) -> Node:
        """New Phrasal node adopting `children`, which must be detached."""
        if not children:
            raise ValueError("a phrasal node needs at least one child")
        node = Node(id=self.new_id(), label=label, kind=NodeKind.PHRASAL)
        for child in children:
            child.parent = node
        node.children = list(children)
        return node

    def create_terminal(self, label: str, token: str, lemma: Optional[str] = None) -> Node:
        return Node(id=self.new_id(), label=label, kind=NodeKind.TERMINAL,
                    token=token, lemma=lemma)

    # Structure
    def remove(self, node: Node) -> Node:
        """Detach `node` from its parent, or from the root level."""
        if node.parent is not None:
            node.parent.children.remove(node)
            node.parent = None
        elif node in self.trees:
            self.trees.remove(node)
        return node

    def reparent(self, node: Node, new_parent: Optional[Node], position: int):
        """Move `node` under `new_parent` (None = root level) at `position`.

        `position` is counted after `node` has been detached.
        """
        self.remove(node)
        if new_parent is None:
            self.trees.insert(position, node)
        else:
            new_parent.children.insert(position, node)
            node.parent = new_parent

    def insert_root(self, node: Node, position: int):
        node.parent = None
        self.trees.insert(position, node)

    def insert_root_after(self, node: Node, preceding_id: Optional[int]):
        """Insert after the root with `preceding_id`, or at the head if None."""
        if preceding_id is None:
            self.insert_root(node, 0)
            return
        prev = self.find_root(preceding_id)
        pos = self.trees.index(prev) + 1 if prev is not None else len(self.trees)
        self.insert_root(node, pos)

    def splice(self, node: Node) -> list[Node]:
        """Replace `node` by its children in its parent (or root level)."""
        children = list(node.children)
        if node.parent is not None:
            container, pos = node.parent.children, node.index_in_parent()
            new_parent = node.parent
        else:
            container, pos = self.trees, self.trees.index(node)
            new_parent = None
        container[pos:pos + 1] = children
        for child in children:
            child.parent = new_parent
        node.children = []
        node.parent = None
        return children

    # Snapshots
    def clone_subtree(self, node: Node) -> NodeSnapshot:
        return clone_subtree(node)

    def restore_from_snapshot(self, nid: int, snap: NodeSnapshot) -> Optional[Node]:
        """Swap the root tree `nid` for a live copy of `snap`."""
        old = self.find_root(nid)
        if old is None:
            return None
        node = materialize(snap)
        self.trees[self.trees.index(old)] = node
        return node

    def checkpoint(self, roots) -> tuple:
        """Save point over `roots` and the root order, for `rollback`."""
        return ([t.id for t in self.trees],
                {r.id: clone_subtree(r) for r in roots})

    def rollback(self, checkpoint: tuple):
        """Put the checkpointed roots back; other roots keep their objects."""
        order, snaps = checkpoint
        live = {t.id: t for t in self.trees}
        self.trees = [materialize(snaps[nid]) if nid in snaps else live[nid]
                      for nid in order]

    # Queries
    def root_of(self, node: Node) -> Node:
        while node.parent is not None:
            node = node.parent
        return node

    def index_in_forest(self, root: Node) -> int:
        return self.trees.index(root)

    def preceding_root(self, root: Node) -> Optional[Node]:
        i = self.trees.index(root)
        return self.trees[i - 1] if i > 0 else None

    def find_root(self, nid: int) -> Optional[Node]:
        return next((t for t in self.trees if t.id == nid), None)

    def find(self, nid: int) -> Optional[Node]:
        for tree in self.trees:
            for node in tree.iter_nodes():
                if node.id == nid:
                    return node
        return None

    def iter_nodes(self) -> Iterator[Node]:
        for tree in self.trees:
            yield from tree.iter_nodes()


@dataclass
class Selection:
    """Up to two selected nodes; `secondary` implies `primary`."""
    primary: Optional[Node] = None
    secondary: Optional[Node] = None

    @property
    def nodes(self) -> list[Node]:
        return [n for n in (self.primary, self.secondary) if n is not None]

    @property
    def is_single(self) -> bool:
        return self.primary is not None and self.secondary is None

    def clear(self):
        self.primary = self.secondary = None

    def set(self, primary: Optional[Node], secondary: Optional[Node] = None):
        if primary is None:
            secondary = None
        self.primary, self.secondary = primary, secondary

    def select(self, node: Node, from_mouse: bool = True):
        """Click/keyboard selection rules of the editor.

        Re-selecting the primary deselects it and promotes the secondary.
        With a primary set, a mouse selection toggles the secondary and a
        keyboard selection replaces the primary.
        """
        if node is self.primary:
            self.primary, self.secondary = self.secondary, None
        elif self.primary is None:
            self.primary = node
        elif from_mouse:
            self.secondary = None if node is self.secondary else node
        else:
            self.primary, self.secondary = node, None

    def select_sibling(self, forest: Forest, offset: int) -> bool:
        """Move the primary to its next (offset>0) or previous sister."""
        node = self.primary
        if node is None:
            return False
        sisters = node.parent.children if node.parent is not None else forest.trees
        i = sisters.index(node) + offset
        if not 0 <= i < len(sisters):
            return False
        self.set(sisters[i])
        return True


class SessionState:
    """Everything one editing session owns: forest, selection, undo, settings."""

    def __init__(self, settings: Optional[Settings] = None):
        from .undo import UndoEngine  # avoid circular import

        self.settings = settings or Settings()
        self.oracle = LabelOracle.from_settings(self.settings)
        self.forest = Forest()
        self.selection = Selection()
        self.undo = UndoEngine(self.forest, max_size=self.settings.undo_max_size)
        self._listeners: list[Callable] = []
        self._path: Optional[str] = None

    def reset(self, trees: Optional[list[Node]] = None):
        """Start a fresh editing session over `trees` (already id'd by this forest)."""
        self.forest.trees = []
        for tree in trees or []:
            self.forest.insert_root(tree, len(self.forest.trees))
        self.selection.clear()
        self.undo.reset()
        self.notify('reset')

    def end_action(self):
        """Close the undo barrier for one top-level user action."""
        self.undo.close_barrier()
        self.notify('action')

    def on_change(self, callback: Callable):
        self._listeners.append(callback)

    def notify(self, source=None):
        for cb in self._listeners:
            cb(source)
