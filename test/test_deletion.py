"""Tests for prune."""

from treedraw.ops.deletion import prune
from treedraw.ops.history import redo, undo


def test_prune_empty_leaf(session, find, text):
    state = session('( (IP (NP-SBJ *con*) (VB left)))')
    state.selection.set(find(state, token='*con*'))
    assert prune(state, find(state, token='*con*'))
    assert text(state) == '( (IP (VB left)))\n'
    assert state.selection.primary is None


def test_prune_refuses_leaf_with_text(session, find, text):
    state = session('( (IP (NP-SBJ *con*) (VB left)))')
    before = text(state)
    assert not prune(state, find(state, token='left'))
    assert text(state) == before


def test_prune_refuses_sole_empty_child(session, find):
    state = session('( (IP (NP (N *pro*)) (VB x)))')
    assert not prune(state, find(state, token='*pro*'))


def test_prune_dissolves_phrase(session, find, text):
    state = session('( (IP (NP-SBJ (D the) (N cat)) (VB sat)))')
    assert prune(state, find(state, label='NP-SBJ'))
    assert text(state) == '( (IP (D the) (N cat) (VB sat)))\n'
    assert state.selection.primary is find(state, token='the')


def test_prune_root_phrase_promotes_children(session, text, snapshot):
    state = session('( (IP (NP (N x)) (VB y)))\n\n( (PUNC .))')
    before = snapshot(state)
    assert prune(state, state.forest.trees[0])
    state.end_action()
    assert text(state) == '( (NP (N x)))\n\n( (VB y))\n\n( (PUNC .))\n'

    undo(state)
    assert snapshot(state) == before
    redo(state)
    assert [t.label for t in state.forest.trees] == ['NP', 'VB', 'PUNC']


def test_prune_empty_root_leaf(session, snapshot):
    state = session('( (IP (N x) (VB y)))\n\n( (CODE {COM:note}))')
    before = snapshot(state)
    assert prune(state, state.forest.trees[1])
    state.end_action()
    assert len(state.forest.trees) == 1
    undo(state)
    assert snapshot(state) == before


def test_prune_refuses_tag_category(session, find):
    state = session('( (IP (META (N x)) (VB y)))', tag_categories=['META'])
    assert not prune(state, find(state, label='META'))


def test_prune_is_undoable(session, find, snapshot):
    state = session('( (IP (NP-SBJ (D the) (N cat)) (NP *con*) (VB sat)))')
    before = snapshot(state)
    prune(state, find(state, label='NP-SBJ'))
    state.end_action()
    prune(state, find(state, token='*con*'))
    state.end_action()
    undo(state)
    undo(state)
    assert snapshot(state) == before


def test_prune_root_phrase_hands_metadata_to_first_child(session, text, snapshot):
    state = session('( (IP (N a) (V b))\n  (METADATA (ID s.1)))\n')
    before = snapshot(state)
    assert prune(state, state.forest.trees[0])
    state.end_action()
    assert text(state) == '( (N a)\n  (METADATA (ID s.1)))\n\n( (V b))\n'

    undo(state)
    assert snapshot(state) == before
    redo(state)
    assert state.forest.trees[0].metadata == {'ID': 's.1'}
