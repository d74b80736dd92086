"""Operations modules: tree editing logic kept out of the window class.

Each module contains functions that take the SessionState plus explicit
node arguments. They check their guards first, record changes with the undo
engine, mutate the forest, and update the selection. A falsy return means
the operation was illegal and nothing changed. The caller closes the undo
barrier with `state.end_action()` once per user action.
"""
