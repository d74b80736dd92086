"""Node creation: wrapping sisters in a new phrase, adding leaves, splitting words."""

import logging
from typing import Optional

from ..checks import sister_run, token_sequence
from ..errors import InputError
from ..labels import dash_tags, strip_index
from ..state import Node
from .coindex import coindex
from .metadata import absorb_metadata

log = logging.getLogger(__name__)


def wrap_in_phrase(state, first: Node, last: Optional[Node] = None,
                   label: Optional[str] = None) -> Optional[Node]:
    """Wrap `first` (or the sisters `first`..`last`) in a new phrasal node.

    Returns the new node, or None if the selection can't be wrapped.
    """
    if first is None:
        return None
    forest, undo = state.forest, state.undo
    label = label or state.settings.default_phrase_label
    if not state.oracle.is_legal_phrasal_label(label):
        return None
    run = sister_run(first, last if last is not None else first, forest)
    if run is None:
        return None

    root_level = run[0].parent is None
    parent = run[0].parent
    scope = forest.trees if root_level else [forest.root_of(run[0])]
    before = token_sequence(scope)
    checkpoint = forest.checkpoint(run if root_level else scope)

    undo.begin_transaction()
    if root_level:
        for tree in run:
            undo.register_removed_root(tree)
    else:
        undo.touch(run[0])
    container = forest.trees if root_level else parent.children
    pos = container.index(run[0])
    for node in run:
        forest.remove(node)
    wrapper = forest.create_phrasal(label, run)
    forest.reparent(wrapper, parent, pos)

    if token_sequence(forest.trees if root_level else scope) != before:
        forest.rollback(checkpoint)
        undo.abort_transaction()
        state.selection.clear()
        log.warning("Wrapping nodes in %s changed the token order; rolled back", label)
        state.notify('wrap')
        return None

    if root_level:
        absorb_metadata(wrapper, run)
        undo.register_created_root(wrapper)
    undo.commit_transaction()
    state.selection.set(wrapper)
    log.debug("Wrapped %d node(s) in %s (%d)", len(run), label, wrapper.id)
    state.notify('wrap')
    return wrapper


def _trace_for(antecedent: Node):
    """(token, label) of a trace pointing at `antecedent`."""
    label = strip_index(antecedent.label)
    if label.startswith('W'):
        return '*T*', label[1:]
    if 'CL' in dash_tags(label):
        label = label.replace('-CL', '', 1)
        if label.startswith('PRO'):
            label = 'NP'
        return '*CL*', label
    return '*ICH*', label


def make_leaf(state, target: Node, before: bool, label: Optional[str] = None,
              token: Optional[str] = None, antecedent: Optional[Node] = None) -> Optional[Node]:
    """Create a terminal next to `target`.

    A token of the form ``word-lemma`` also sets the lemma. Given an
    `antecedent` in the same tree, the new leaf is a trace of it (``*T*``
    for wh-phrases, ``*CL*`` for clitics, ``*ICH*`` otherwise) and the two
    are coindexed.
    """
    if target is None:
        return None
    settings, forest, undo = state.settings, state.forest, state.undo
    label = label or settings.default_leaf_label
    token = token or settings.default_leaf_token
    lemma = None
    word, _, tail = token.rpartition('-')
    if word and tail and not tail.isdigit():
        token, lemma = word, tail

    if antecedent is not None:
        if target.parent is None or forest.root_of(antecedent) is not forest.root_of(target):
            return None
        token, label = _trace_for(antecedent)
        lemma = None

    leaf = forest.create_terminal(label, token, lemma)
    undo.begin_transaction()
    if target.parent is None:
        forest.insert_root(leaf, forest.index_in_forest(target) + (0 if before else 1))
        undo.register_created_root(leaf)
    else:
        undo.touch(target)
        forest.reparent(leaf, target.parent, target.index_in_parent() + (0 if before else 1))
    if antecedent is not None:
        coindex(state, leaf, antecedent)
    undo.commit_transaction()

    state.selection.set(leaf)
    log.debug("Created leaf %s %s (%d)", label, token, leaf.id)
    state.notify('make_leaf')
    return leaf


def split_token(state, node: Node, split_text: str) -> Optional[list]:
    """Split a word in two where the split marker appears in `split_text`.

    Both halves keep the marker (``foo@`` ``@bar``) so the split can be
    recognised later. A ``A+B`` label is divided between the halves; an
    existing lemma is copied onto the second half.

    Raises InputError if `split_text` isn't the word with exactly one marker
    strictly inside it.
    """
    if node is None or not node.is_terminal:
        return None
    marker = state.settings.split_marker
    pieces = split_text.split(marker)
    if ''.join(pieces) != node.token:
        raise InputError("The two new words don't match the original.")
    if len(pieces) != 2:
        raise InputError("You can only split in one place at a time.")
    if not pieces[0] or not pieces[1]:
        raise InputError("Both new words need some text.")

    labels = node.label.split('+')
    if len(labels) == 2:
        first_label, second_label = labels
    else:
        first_label, second_label = node.label, 'X'
    oracle = state.oracle
    if not (oracle.is_legal_terminal_label(first_label)
            and oracle.is_legal_terminal_label(second_label)):
        return None

    forest, undo = state.forest, state.undo
    undo.touch(node)
    node.label = first_label
    node.token = pieces[0] + marker
    second = forest.create_terminal(second_label, marker + pieces[1], node.lemma)
    if node.parent is None:
        forest.insert_root(second, forest.index_in_forest(node) + 1)
        undo.register_created_root(second)
    else:
        forest.reparent(second, node.parent, node.index_in_parent() + 1)

    state.selection.set(node)
    log.debug("Split %d into %r and %r", node.id, node.token, second.token)
    state.notify('split')
    return [node, second]
