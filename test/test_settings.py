"""Tests for user settings persistence."""

import json

from treedraw.core.settings import DEFAULTS, Settings


def test_missing_file_keeps_defaults(tmp_path):
    s = Settings(tmp_path / 'nope.json')
    assert s.to_dict() == DEFAULTS


def test_load_overrides(tmp_path):
    path = tmp_path / 'settings.json'
    path.write_text(json.dumps({
        'tag_categories': ['CODE'],
        'split_marker': '|',
        'undo_max_size': 5,
        'dash_lemmas': True,
    }))
    s = Settings(path)
    assert s.tag_categories == ['CODE']
    assert s.split_marker == '|'
    assert s.undo_max_size == 5
    assert s.dash_lemmas is True
    assert s.leaf_extensions == DEFAULTS['leaf_extensions']


def test_malformed_file_keeps_defaults(tmp_path, caplog):
    path = tmp_path / 'settings.json'
    path.write_text('{not json')
    s = Settings(path)
    assert s.to_dict() == DEFAULTS
    assert 'Ignoring unreadable settings file' in caplog.text


def test_save_and_reload(tmp_path):
    path = tmp_path / 'sub' / 'settings.json'
    s = Settings(path)
    s.comment_types = ['COM']
    s.undo_max_size = 7
    s.save()
    again = Settings(path)
    assert again.comment_types == ['COM']
    assert again.undo_max_size == 7


def test_session_uses_settings(session, find):
    state = session('( (IP (N foobar) (VB x)))', split_marker='|', undo_max_size=2)
    assert state.undo.max_size == 2
    from treedraw.ops.creation import split_token
    first, second = split_token(state, find(state, token='foobar'), 'foo|bar')
    assert (first.token, second.token) == ('foo|', '|bar')
