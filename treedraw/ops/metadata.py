"""Root-tree metadata edits (ID and other key/value pairs)."""

import re

from ..errors import InputError
from ..state import Node

ILLEGAL_KEY_CHARS = re.compile(r'[\s()]')
ILLEGAL_VALUE_CHARS = re.compile(r'[()\n]')


def _check(key: str, value: str = ''):
    if not key or ILLEGAL_KEY_CHARS.search(key):
        raise InputError("Metadata keys cannot be empty or contain spaces or parentheses.")
    if ILLEGAL_VALUE_CHARS.search(value):
        raise InputError("Metadata values cannot contain parentheses or newlines.")


def set_metadata(state, root: Node, key: str, value: str) -> bool:
    """Add or change one metadata entry on a root tree."""
    if root is None or root.parent is not None:
        return False
    key, value = key.strip(), value.strip()
    _check(key, value)
    if root.metadata is not None and root.metadata.get(key) == value:
        return False
    state.undo.touch(root)
    if root.metadata is None:
        root.metadata = {}
    root.metadata[key] = value
    state.notify('metadata')
    return True


def rename_metadata_key(state, root: Node, old_key: str, new_key: str) -> bool:
    if root is None or root.parent is not None or not root.metadata:
        return False
    new_key = new_key.strip()
    _check(new_key)
    if old_key not in root.metadata or new_key == old_key or new_key in root.metadata:
        return False
    state.undo.touch(root)
    root.metadata = {new_key if k == old_key else k: v for k, v in root.metadata.items()}
    state.notify('metadata')
    return True


def delete_metadata(state, root: Node, key: str) -> bool:
    if root is None or root.parent is not None or not root.metadata:
        return False
    if key not in root.metadata:
        return False
    state.undo.touch(root)
    del root.metadata[key]
    if not root.metadata:
        root.metadata = None
    state.notify('metadata')
    return True


def absorb_metadata(receiver: Node, donors) -> None:
    """Fold the metadata of `donors` into `receiver` and strip it from them.

    Used when root trees stop being roots. Keys already on `receiver` (or
    on an earlier donor) win.
    """
    for donor in donors:
        if donor is receiver:
            continue
        if donor.metadata:
            merged = dict(receiver.metadata or {})
            for key, value in donor.metadata.items():
                merged.setdefault(key, value)
            receiver.metadata = merged
        donor.metadata = None
