# src/Core/exceptions.py

"""
Session exceptions raised by the session repository.

Both failure kinds share the NoSessionException base so device-facing
routes can reject with a single handler while still telling the two apart.
"""


class NoSessionException(Exception):
    """The supplied session cannot be used."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class SessionNotFound(NoSessionException):
    """No session row with the given id."""


class SessionInvalid(NoSessionException):
    """Session exists but the hash does not match or it has expired."""
