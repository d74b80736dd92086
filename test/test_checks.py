"""Tests for the invariant predicates."""

from treedraw.checks import (are_sisters, audit_forest, can_be_move_target,
                             is_descendant_of, precedes, sister_run, token_sequence,
                             would_orphan_root_sibling)

TREE = '( (IP (NP-SBJ (D The) (N cat)) (VBD sat) (NP (N *con*)) (PUNC .)))'


def test_can_be_move_target(session, find):
    state = session(TREE)
    assert can_be_move_target(find(state, label='NP-SBJ'))
    assert not can_be_move_target(find(state, label='D'))
    assert not can_be_move_target(None)
    assert not can_be_move_target(find(state, label='NP-SBJ'), ['NP'])


def test_would_orphan_root_sibling(session, find):
    state = session(TREE)
    assert would_orphan_root_sibling(find(state, token='*con*'))
    assert not would_orphan_root_sibling(find(state, token='cat'))
    assert not would_orphan_root_sibling(find(state, label='IP'))


def test_token_sequence_skips_empty_tokens(session, find):
    state = session(TREE)
    assert token_sequence(find(state, label='IP')) == ['The', 'cat', 'sat', '.']
    assert token_sequence(state.forest.trees) == ['The', 'cat', 'sat', '.']


def test_is_descendant_of_is_strict(session, find):
    state = session(TREE)
    ip, cat = find(state, label='IP'), find(state, token='cat')
    assert is_descendant_of(cat, ip)
    assert not is_descendant_of(ip, cat)
    assert not is_descendant_of(ip, ip)


def test_precedes_document_order(session, find):
    state = session(TREE + '\n( (CODE {COM:x}))')
    ip, subj = find(state, label='IP'), find(state, label='NP-SBJ')
    sat, code = find(state, token='sat'), find(state, label='CODE')
    assert precedes(ip, subj, state.forest)
    assert precedes(subj, sat, state.forest)
    assert precedes(sat, code, state.forest)
    assert not precedes(sat, subj, state.forest)


def test_sisters_and_runs(session, find):
    state = session(TREE)
    subj, sat, dot = find(state, label='NP-SBJ'), find(state, token='sat'), find(state, token='.')
    assert are_sisters(subj, dot, state.forest)
    assert not are_sisters(subj, find(state, token='cat'), state.forest)
    run = sister_run(dot, subj, state.forest)
    assert [n.label for n in run] == ['NP-SBJ', 'VBD', 'NP', 'PUNC']
    assert sister_run(sat, sat, state.forest) == [sat]
    assert sister_run(subj, find(state, token='cat'), state.forest) is None


def test_root_trees_are_sisters(session):
    state = session('( (N a))\n\n( (N b))')
    a, b = state.forest.trees
    assert are_sisters(a, b, state.forest)


def test_audit_forest_clean_and_broken(session, find):
    state = session(TREE)
    assert audit_forest(state.forest) == []
    np = find(state, label='NP')
    np.children[0].parent = None
    np.children.clear()
    problems = audit_forest(state.forest)
    assert any('no children' in p for p in problems)


def test_audit_forest_flags_metadata_below_the_root(session, find):
    state = session(TREE)
    find(state, label='NP-SBJ').metadata = {'ID': 'x.1'}
    assert any('has metadata' in p for p in audit_forest(state.forest))
