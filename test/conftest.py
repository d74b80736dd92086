"""Shared fixtures: editing sessions built from labeled-bracket text."""

import pytest

from treedraw.core.brackets import parse_labeled_brackets, to_labeled_brackets
from treedraw.core.settings import Settings
from treedraw.state import SessionState, clone_subtree


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the user's config file."""
    return Settings(tmp_path / 'settings.json')


@pytest.fixture
def session(settings):
    """Factory: session(text, **settings_overrides) -> SessionState."""
    def _make(text='', **overrides):
        for key, value in overrides.items():
            setattr(settings, key, value)
        state = SessionState(settings)
        state.reset(parse_labeled_brackets(text, state.forest, settings.dash_lemmas))
        return state
    return _make


@pytest.fixture
def find():
    """find(state, label=None, token=None) -> first matching node in document order."""
    def _find(state, label=None, token=None):
        for node in state.forest.iter_nodes():
            if label is not None and node.label != label:
                continue
            if token is not None and node.token != token:
                continue
            return node
        raise LookupError(f"no node with label={label!r} token={token!r}")
    return _find


@pytest.fixture
def text():
    """text(state) -> the forest as labeled brackets."""
    return lambda state: to_labeled_brackets(state.forest.trees)


@pytest.fixture
def snapshot():
    """snapshot(state) -> structural value of the whole forest, ids included."""
    return lambda state: tuple(clone_subtree(t) for t in state.forest.trees)
