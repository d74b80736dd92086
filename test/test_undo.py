"""Tests for the per-step undo engine."""

from treedraw.state import clone_subtree


def test_touch_keeps_first_baseline(session, find):
    state = session('( (IP (N x) (VB y)))')
    ip = state.forest.trees[0]
    baseline = clone_subtree(ip)
    state.undo.touch(find(state, label='N'))
    find(state, label='N').label = 'NP'
    state.undo.touch(find(state, label='VB'))
    assert state.undo.current.touched == {ip.id: baseline}


def test_empty_barrier_pushes_nothing(session):
    state = session('( (N x))')
    assert not state.undo.close_barrier()
    assert not state.undo.can_undo()


def test_undo_redo_touched_tree(session, find, snapshot):
    state = session('( (IP (N x) (VB y)))')
    before = snapshot(state)
    n = find(state, label='N')
    state.undo.touch(n)
    n.label = 'NP'
    state.end_action()
    after = snapshot(state)

    assert state.undo.undo()
    assert snapshot(state) == before
    assert state.undo.redo()
    assert snapshot(state) == after


def test_removed_root_comes_back_in_place(session, snapshot):
    state = session('( (N a))\n\n( (N b))\n\n( (N c))')
    before = snapshot(state)
    b = state.forest.trees[1]
    state.undo.register_removed_root(b)
    state.forest.remove(b)
    state.end_action()
    assert [t.token for t in state.forest.trees] == ['a', 'c']

    state.undo.undo()
    assert snapshot(state) == before
    state.undo.redo()
    assert [t.token for t in state.forest.trees] == ['a', 'c']


def test_created_roots_are_deleted_and_reinserted_in_order(session, snapshot):
    state = session('( (N a))')
    forest = state.forest
    for token in ('b', 'c'):
        leaf = forest.create_terminal('N', token)
        forest.insert_root(leaf, len(forest.trees))
        state.undo.register_created_root(leaf)
    state.end_action()
    after = snapshot(state)

    state.undo.undo()
    assert [t.token for t in forest.trees] == ['a']
    state.undo.redo()
    assert snapshot(state) == after


def test_created_then_removed_leaves_no_record(session):
    state = session('( (N a))')
    leaf = state.forest.create_terminal('N', 'b')
    state.forest.insert_root(leaf, 1)
    state.undo.register_created_root(leaf)
    state.undo.register_removed_root(leaf)
    state.forest.remove(leaf)
    assert state.undo.current.is_empty()


def test_touched_then_removed_uses_baseline(session, snapshot):
    state = session('( (N a))\n\n( (N b))')
    before = snapshot(state)
    b = state.forest.trees[1]
    state.undo.touch(b)
    b.token = 'changed'
    state.undo.register_removed_root(b)
    state.forest.remove(b)
    state.end_action()
    assert state.undo.undo_stack[-1].touched == {}

    state.undo.undo()
    assert snapshot(state) == before


def test_abort_transaction_restores_delta(session, find):
    state = session('( (N a))\n\n( (N b))')
    a, b = state.forest.trees
    state.undo.touch(a)
    state.undo.begin_transaction()
    state.undo.touch(b)
    state.undo.register_removed_root(a)
    state.undo.abort_transaction()
    assert list(state.undo.current.touched) == [a.id]
    assert state.undo.current.removed == []
    assert not state.undo.in_transaction


def test_nested_transactions(session):
    state = session('( (N a))\n\n( (N b))')
    a, b = state.forest.trees
    state.undo.begin_transaction()
    state.undo.touch(a)
    state.undo.begin_transaction()
    state.undo.touch(b)
    state.undo.abort_transaction()
    state.undo.commit_transaction()
    assert list(state.undo.current.touched) == [a.id]


def test_barrier_with_open_transaction_still_pushes(session):
    state = session('( (N a))')
    state.undo.begin_transaction()
    state.undo.touch(state.forest.trees[0])
    assert state.undo.close_barrier()
    assert not state.undo.in_transaction


def test_new_edit_clears_redo(session, find):
    state = session('( (IP (N x) (VB y)))')
    n = find(state, label='N')
    state.undo.touch(n)
    n.label = 'NP'
    state.end_action()
    state.undo.undo()
    assert state.undo.can_redo()

    vb = find(state, label='VB')
    state.undo.touch(vb)
    vb.label = 'VBD'
    state.end_action()
    assert not state.undo.can_redo()


def test_undo_and_redo_do_not_clear_each_other(session, find):
    state = session('( (IP (N x) (VB y)))')
    for label in ('NP', 'NPR'):
        n = find(state, token='x')
        state.undo.touch(n)
        n.label = label
        state.end_action()
    state.undo.undo()
    state.undo.undo()
    assert state.undo.redo()
    assert state.undo.can_undo() and state.undo.can_redo()
    assert find(state, token='x').label == 'NP'


def test_history_is_capped(session, find):
    state = session('( (IP (N x) (VB y)))', undo_max_size=3)
    for i in range(5):
        n = find(state, token='x')
        state.undo.touch(n)
        n.label = f'N{i}'
        state.end_action()
    assert len(state.undo.undo_stack) == 3


def test_empty_stacks(session):
    state = session('( (N a))')
    assert not state.undo.undo()
    assert not state.undo.redo()


def test_undo_deletes_created_root_not_its_restored_copy(session, snapshot):
    # a restored root holds a node with the created root's id; deletion
    # must only look at the root level
    state = session('( (IP (NP (N a)) (VB b)))')
    before = snapshot(state)
    ip = state.forest.trees[0]
    np = ip.children[0]
    state.undo.touch(np)
    state.forest.reparent(np, None, 0)
    state.undo.register_created_root(np)
    state.end_action()

    state.undo.undo()
    assert snapshot(state) == before
