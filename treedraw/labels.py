"""Label grammar for phrase-structure nodes.

A label is a base category, zero or more ordered dash tags and an optional
coindex suffix::

    NP-SBJ-RSP=2
    ^^ ^^^^^^^ ^^
    base  tags  index (type '=' , number 2)

Pure string functions; nothing here touches the tree.
"""

from __future__ import annotations

import re
from typing import Callable, Optional, Sequence, Union

INDEX_RE = re.compile(r'([-=])([0-9]+)$')

EMPTY_PREFIXES = ('*', '{')


def parse_index(label: str) -> Optional[int]:
    """Coindex number at the end of a label or token, or None."""
    m = INDEX_RE.search(label)
    return int(m.group(2)) if m else None


def parse_index_type(label: str) -> Optional[str]:
    """'-' (gap link) or '=' (equivalence link), or None if unindexed."""
    m = INDEX_RE.search(label)
    return m.group(1) if m else None


def strip_index(label: str) -> str:
    return INDEX_RE.sub('', label)


def split_label(label: str):
    """Split into (base, tags, index_type, index).

    A base written between dashes (``-NONE-``, ``-LRB-``) is kept whole.
    """
    m = INDEX_RE.search(label)
    itype, idx = (m.group(1), int(m.group(2))) if m else (None, None)
    stripped = strip_index(label)
    if stripped.startswith('-'):
        end = stripped.find('-', 1)
        if end == -1:
            return stripped, [], itype, idx
        base, rest = stripped[:end + 1], stripped[end + 1:]
        return base, [t for t in rest.split('-') if t], itype, idx
    parts = stripped.split('-')
    return parts[0], [t for t in parts[1:] if t], itype, idx


def join_label(base: str, tags: Sequence[str], index_type: Optional[str] = None,
               index: Optional[int] = None) -> str:
    label = '-'.join([base, *tags])
    if index is not None:
        label += f'{index_type or "-"}{index}'
    return label


def base_category(label: str) -> str:
    return split_label(label)[0]


def dash_tags(label: str) -> list[str]:
    return split_label(label)[1]


def has_dash_tag(label: str, tag: str) -> bool:
    return tag in dash_tags(label)


def with_index(label: str, index: Optional[int], index_type: str = '-') -> str:
    """Replace (or drop, with index=None) the coindex suffix."""
    stripped = strip_index(label)
    if index is None:
        return stripped
    return f'{stripped}{index_type}{index}'


def toggle_extension(label: str, extension: str, extension_list: Sequence[str]) -> str:
    """Remove `extension` if present, else insert it in canonical order.

    The canonical order is the order of `extension_list`; tags not in the
    list keep their relative position and the coindex stays at the end.
    """
    base, tags, itype, idx = split_label(label)
    if extension in tags:
        tags.remove(extension)
    else:
        pos = extension_list.index(extension)
        insert_at = len(tags)
        for i, tag in enumerate(tags):
            if tag in extension_list and extension_list.index(tag) > pos:
                insert_at = i
                break
        tags.insert(insert_at, extension)
    return join_label(base, tags, itype, idx)


def zero_tags(label: str) -> str:
    base, _tags, itype, idx = split_label(label)
    return join_label(base, [], itype, idx)


def next_label(label: str, labels: Union[Sequence[str], dict]) -> str:
    """Next label in a cycle, keeping the coindex suffix.

    `labels` is a list, or a dict from base category to list; an unknown
    base falls back to the dict's first list. A label not in the list maps
    to the list's first entry.
    """
    stripped = strip_index(label)
    suffix = label[len(stripped):]
    if isinstance(labels, dict):
        labels = labels.get(base_category(label)) or next(iter(labels.values()))
    labels = list(labels)
    if stripped in labels:
        i = labels.index(stripped)
        return labels[(i + 1) % len(labels)] + suffix
    return labels[0] + suffix


def is_empty_token(token: str) -> bool:
    """True for traces, empty categories and comments (no real text)."""
    if not token:
        return True
    return token.startswith(EMPTY_PREFIXES) or token.split('-')[0] == '0'


def bases_and_dashes(bases: Sequence[str], dashes: Sequence[str]) -> Callable[[str], bool]:
    """Build a legality test: base in `bases`, every dash tag in `dashes`."""
    bases, dashes = set(bases), set(dashes)

    def _test(label: str) -> bool:
        base, tags, _itype, _idx = split_label(label)
        return base in bases and all(t in dashes for t in tags)
    return _test


class LabelOracle:
    """Optional label legality predicates; absent predicates allow anything."""

    def __init__(self, leaf_test: Optional[Callable[[str], bool]] = None,
                 phrase_test: Optional[Callable[[str], bool]] = None):
        self.leaf_test = leaf_test
        self.phrase_test = phrase_test

    @classmethod
    def from_settings(cls, settings) -> 'LabelOracle':
        leaf = phrase = None
        if settings.valid_leaf_bases:
            leaf = bases_and_dashes(settings.valid_leaf_bases,
                                    settings.valid_leaf_dashes)
        if settings.valid_phrase_bases:
            phrase = bases_and_dashes(settings.valid_phrase_bases,
                                      settings.valid_phrase_dashes)
        return cls(leaf, phrase)

    def is_legal_terminal_label(self, label: str) -> bool:
        return self.leaf_test is None or self.leaf_test(label)

    def is_legal_phrasal_label(self, label: str) -> bool:
        return self.phrase_test is None or self.phrase_test(label)
