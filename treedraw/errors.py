"""Exceptions surfaced to the interactive layer."""


class InputError(ValueError):
    """User-supplied text was malformed; nothing was changed.

    The message is the reason shown to the user.
    """
