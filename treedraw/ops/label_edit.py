"""Label, lemma and leaf text editing.

All of these change strings on one node only; the tree shape never changes.
"""

import logging
import re
from typing import Optional, Sequence, Union

from ..errors import InputError
from ..labels import (base_category, has_dash_tag, is_empty_token, next_label,
                      split_label, join_label, toggle_extension, zero_tags)
from ..state import Node

log = logging.getLogger(__name__)

ILLEGAL_LABEL_CHARS = re.compile(r'[\s()]')
ILLEGAL_COMMENT_CHARS = re.compile(r'[_\n:{}()]')


def _is_word_level_conj(node: Node) -> bool:
    """A phrase of bare leaves containing a CONJ (``either or`` etc.)."""
    return (node.is_phrasal
            and all(c.is_terminal for c in node.children)
            and any(base_category(c.label) == 'CONJ' for c in node.children))


def is_legal_label(state, node: Node, label: str) -> bool:
    oracle = state.oracle
    if node.is_terminal:
        return oracle.is_legal_terminal_label(label)
    if oracle.is_legal_phrasal_label(label):
        return True
    return _is_word_level_conj(node) and oracle.is_legal_terminal_label(label)


def _apply_label(state, node: Node, label: str, source: str) -> bool:
    if label == node.label or not is_legal_label(state, node, label):
        return False
    state.undo.touch(node)
    log.debug("Relabelled %d: %s -> %s", node.id, node.label, label)
    node.label = label
    state.notify(source)
    return True


def relabel(state, node: Node, new_label: str) -> bool:
    """Give `node` a new label. Returns False if unchanged or illegal.

    Raises InputError for an empty label or one with spaces or parentheses.
    """
    if node is None:
        return False
    new_label = new_label.strip()
    if not new_label:
        raise InputError("Labels cannot be empty.")
    if ILLEGAL_LABEL_CHARS.search(new_label):
        raise InputError("Labels cannot contain spaces or parentheses.")
    return _apply_label(state, node, new_label, 'relabel')


def legal_dash_tags(state, node: Node) -> list:
    """Ordered dash tags allowed on `node`, by node kind."""
    settings = state.settings
    if node.is_terminal:
        return settings.leaf_extensions
    if base_category(node.label) in settings.clause_categories:
        return settings.clause_extensions
    return settings.extensions


def toggle_dash_tag(state, node: Node, tag: str,
                    legal_tags: Optional[Sequence[str]] = None) -> bool:
    """Add `tag` in its canonical position, or remove it if present."""
    if node is None:
        return False
    if legal_tags is None:
        legal_tags = legal_dash_tags(state, node)
    if tag not in legal_tags:
        return False
    return _apply_label(state, node, toggle_extension(node.label, tag, legal_tags),
                        'dash_tag')


def set_label(state, node: Node, labels: Union[Sequence[str], dict]) -> bool:
    """Cycle the label through `labels`, keeping any coindex."""
    if node is None or not labels:
        return False
    return _apply_label(state, node, next_label(node.label, labels), 'relabel')


def zero_dash_tags(state, node: Node) -> bool:
    if node is None:
        return False
    return _apply_label(state, node, zero_tags(node.label), 'relabel')


def fix_error(state, node: Node) -> bool:
    """Clear the FLAG dash tag left by a validator."""
    if node is None or not has_dash_tag(node.label, 'FLAG'):
        return False
    base, tags, itype, idx = split_label(node.label)
    tags.remove('FLAG')
    return _apply_label(state, node, join_label(base, tags, itype, idx), 'relabel')


# ---- Lemmas and leaf text ----

def add_lemma(state, node: Node, lemma: str) -> bool:
    """Attach a lemma to a leaf that has none."""
    if node is None or not node.is_terminal or node.lemma is not None or not lemma:
        return False
    state.undo.touch(node)
    node.lemma = lemma
    state.notify('lemma')
    return True


def edit_lemma(state, node: Node, lemma: str) -> bool:
    """Change an existing lemma. Raises InputError for an empty lemma."""
    if node is None or not node.is_terminal or node.lemma is None:
        return False
    lemma = lemma.strip()
    if not lemma:
        raise InputError("Lemmas cannot be empty.")
    if lemma == node.lemma:
        return False
    state.undo.touch(node)
    node.lemma = lemma
    state.notify('lemma')
    return True


def edit_leaf(state, node: Node, label: str, token: Optional[str] = None,
              lemma: Optional[str] = None) -> bool:
    """Edit a leaf's label, and its text if the leaf is an empty category.

    `lemma` None leaves the lemma alone; an empty string removes it.
    """
    if node is None or not node.is_terminal:
        return False
    label = label.strip()
    if not label or ILLEGAL_LABEL_CHARS.search(label):
        raise InputError("Labels cannot be empty or contain spaces or parentheses.")
    new_token = node.token
    if token is not None and token != node.token:
        if not is_empty_token(node.token):
            return False
        new_token = token.strip()
    new_lemma = node.lemma if lemma is None else (lemma.strip() or None)
    if not new_token and not new_lemma:
        raise InputError("Cannot create an empty leaf.")
    if ILLEGAL_LABEL_CHARS.search(new_token):
        raise InputError("Words cannot contain spaces or parentheses.")
    if not state.oracle.is_legal_terminal_label(label):
        return False
    if (label, new_token, new_lemma) == (node.label, node.token, node.lemma):
        return False

    state.undo.touch(node)
    node.label, node.token, node.lemma = label, new_token, new_lemma
    log.debug("Edited leaf %d: %s %s", node.id, label, new_token)
    state.notify('edit_leaf')
    return True


# ---- Comments ----

def is_comment(state, node: Node) -> bool:
    if node is None or not node.is_terminal or node.label != 'CODE':
        return False
    return any(node.token.startswith('{' + t + ':') for t in state.settings.comment_types)


def parse_comment(node: Node):
    """(type, text) of a ``{TYPE:text_with_underscores}`` comment leaf."""
    kind, _, text = node.token.strip().strip('{}').partition(':')
    return kind, text.replace('_', ' ')


def edit_comment(state, node: Node, text: str, comment_type: str) -> bool:
    """Rewrite a comment leaf. Raises InputError for illegal text or type."""
    if not is_comment(state, node):
        return False
    text = text.strip()
    if ILLEGAL_COMMENT_CHARS.search(text):
        raise InputError("Illegal characters in comment: illegal characters "
                         "are _, :, {}, (), and newline")
    if comment_type not in state.settings.comment_types:
        raise InputError(f"Unknown comment type: {comment_type}")
    token = '{%s:%s}' % (comment_type, text.replace(' ', '_'))
    if token == node.token:
        return False
    state.undo.touch(node)
    node.token = token
    state.notify('comment')
    return True
