"""Load and save the forest as labeled-bracket text files."""

import logging

from ..core.brackets import parse_labeled_brackets, to_labeled_brackets

log = logging.getLogger(__name__)


def save_trees(state, path: str):
    """Write every root tree to `path`. Raises on I/O error."""
    with open(path, 'w', encoding='utf-8') as f:
        f.write(to_labeled_brackets(state.forest.trees))
    state._path = path
    log.info("Saved %d tree(s) to %s", len(state.forest.trees), path)


def load_trees(state, path: str):
    """Replace the session with the trees in `path`.

    Starts a fresh editing session (empty selection and undo history).
    Raises whatever file I/O or BracketSyntaxError raises on bad input;
    the current session is untouched in that case.
    """
    with open(path, encoding='utf-8') as f:
        text = f.read()
    trees = parse_labeled_brackets(text, state.forest, state.settings.dash_lemmas)
    state.reset(trees)
    state._path = path
    log.info("Loaded %d tree(s) from %s", len(trees), path)
    return trees
