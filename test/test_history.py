"""Tests for session-level undo/redo and file load/save."""

import pytest

from treedraw.ops import metadata
from treedraw.ops.history import NO_REDO, NO_UNDO, redo, undo
from treedraw.ops.label_edit import relabel
from treedraw.ops.movement import move_node
from treedraw.ops.tree_io import load_trees, save_trees

SENT = '( (IP (NP-SBJ (D The) (N cat)) (VBD sat))\n  (METADATA (ID cat.1)))\n'


def test_nothing_to_undo_or_redo(session):
    state = session(SENT)
    assert undo(state) == NO_UNDO
    assert redo(state) == NO_REDO


def test_nothing_to_undo_keeps_selection(session, find):
    state = session(SENT)
    leaf = find(state, label='VBD')
    state.selection.set(leaf)
    assert undo(state) == NO_UNDO
    assert redo(state) == NO_REDO
    assert state.selection.primary is leaf


def test_undo_redo_clear_selection(session, find):
    state = session(SENT)
    relabel(state, find(state, label='VBD'), 'VBP')
    state.end_action()
    state.selection.set(find(state, label='VBP'))
    assert undo(state) is None
    assert state.selection.primary is None
    state.selection.set(find(state, label='VBD'))
    assert redo(state) is None
    assert state.selection.primary is None


def test_undo_redo_restores_exact_state(session, find, snapshot):
    state = session(SENT)
    move_node(state, find(state, label='VBD'), find(state, label='NP-SBJ'))
    state.end_action()
    after = snapshot(state)
    undo(state)
    redo(state)
    assert snapshot(state) == after


def test_pending_changes_are_closed_before_undo(session, find):
    state = session(SENT)
    relabel(state, find(state, label='VBD'), 'VBP')
    # no end_action: undo closes the step itself
    assert undo(state) is None
    assert find(state, token='sat').label == 'VBD'


def test_metadata_edits_are_undoable(session, text):
    state = session(SENT)
    root = state.forest.trees[0]
    assert metadata.set_metadata(state, root, 'AUTHOR', 'me')
    state.end_action()
    assert metadata.rename_metadata_key(state, root, 'AUTHOR', 'EDITOR')
    state.end_action()
    assert state.forest.trees[0].metadata == {'ID': 'cat.1', 'EDITOR': 'me'}
    assert metadata.delete_metadata(state, state.forest.trees[0], 'EDITOR')
    state.end_action()
    undo(state)
    undo(state)
    assert state.forest.trees[0].metadata == {'ID': 'cat.1', 'AUTHOR': 'me'}
    undo(state)
    assert text(state) == SENT


def test_metadata_only_on_roots(session, find):
    state = session(SENT)
    assert not metadata.set_metadata(state, find(state, label='VBD'), 'ID', 'x')


def test_save_and_load(session, tmp_path, text):
    state = session(SENT)
    path = tmp_path / 'out.psd'
    save_trees(state, str(path))
    assert path.read_text(encoding='utf-8') == SENT

    other = session('')
    trees = load_trees(other, str(path))
    assert len(trees) == 1
    assert text(other) == SENT
    assert other._path == str(path)
    assert not other.undo.can_undo()


def test_load_rejects_non_utf8_file(session, tmp_path, text):
    path = tmp_path / 'latin1.psd'
    path.write_bytes('( (IP (N café) (VB x)))\n'.encode('latin-1'))
    state = session(SENT)
    with pytest.raises(UnicodeDecodeError):
        load_trees(state, str(path))
    assert text(state) == SENT
    assert state._path is None
