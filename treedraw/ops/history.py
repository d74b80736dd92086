"""Session-level undo/redo: apply one step and reset the selection."""

from typing import Optional

NO_UNDO = "No further undo information"
NO_REDO = "No further redo information"


def undo(state) -> Optional[str]:
    """Undo the last action. Returns a message if there was nothing to undo."""
    if not state.undo.undo():
        return NO_UNDO
    state.selection.clear()
    state.notify('undo')
    return None


def redo(state) -> Optional[str]:
    """Redo the last undone action. Returns a message if there was none."""
    if not state.undo.redo():
        return NO_REDO
    state.selection.clear()
    state.notify('redo')
    return None
