from __future__ import annotations

from dataclasses import dataclass

from .conditions import Condition, condition_for_code
from .errors import EntryError, SessionError

MISSING_FIELDS_MESSAGE = "Please enter both a username and a code."


@dataclass(frozen=True)
class SessionIdentity:
    username: str
    condition: Condition


def register(username: str, code: str) -> SessionIdentity:
    """
    Validate the entry form and return the participant's identity.

    Raises EntryError carrying the inline form message; nothing else changes.
    """
    name = (username or "").strip()
    entry_code = (code or "").strip()
    if not name or not entry_code:
        raise EntryError(MISSING_FIELDS_MESSAGE)

    return SessionIdentity(username=name, condition=condition_for_code(entry_code))


class SessionScope:
    """
    Owns one browsing session's identity.

    Identity is established once via `begin` and stays fixed until `end`.
    Reading `identity` outside that window raises SessionError.
    """

    def __init__(self) -> None:
        self._identity: SessionIdentity | None = None
        self._ended = False

    def __enter__(self) -> "SessionScope":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.end()

    @property
    def active(self) -> bool:
        return self._identity is not None and not self._ended

    @property
    def identity(self) -> SessionIdentity:
        if self._ended:
            raise SessionError("Session has ended")
        if self._identity is None:
            raise SessionError("Session identity used before registration")
        return self._identity

    def begin(self, username: str, code: str) -> SessionIdentity:
        if self._ended:
            raise SessionError("Session has ended")
        if self._identity is not None:
            raise SessionError("Session identity is already established")

        identity = register(username, code)
        self._identity = identity
        return identity

    def try_begin(self, username: str, code: str) -> str | None:
        """Return the inline error message, or None once the session has started."""
        try:
            self.begin(username, code)
        except EntryError as e:
            return str(e)
        return None

    def end(self) -> None:
        self._ended = True
