"""
View & Access Gate

Switches a browser session between the public site and the admin panel.

The passcode is a convenience for hiding the admin view, not an
authorization boundary: the secret ships with the deployment and is
compared in plaintext. Whether writes are allowed is decided only by the
document store's own access rules.
"""

from __future__ import annotations

import logging
from enum import Enum


logger = logging.getLogger(__name__)


class ViewState(Enum):
    LOADING = 'loading'
    PUBLIC = 'public'
    ADMIN = 'admin'


class ViewEvent(Enum):
    PASSCODE_ACCEPTED = 'passcode_accepted'
    EXIT_ADMIN = 'exit_admin'


# LOADING has no outgoing events; it ends when the site gets an identity
_TRANSITIONS = {
    ViewState.PUBLIC: {
        ViewEvent.PASSCODE_ACCEPTED: ViewState.ADMIN,
    },
    ViewState.ADMIN: {
        ViewEvent.EXIT_ADMIN: ViewState.PUBLIC,
    },
}


def next_state(state: ViewState, event: ViewEvent) -> ViewState:
    target = _TRANSITIONS.get(state, {}).get(event)
    if target is None:
        logger.warning("Invalid view transition: %s --%s-->", state, event)
        return state
    return target


# Session keys
VIEW_KEY = 'view'
SHOW_LOGIN_KEY = 'show_login'
PASSCODE_KEY = 'passcode'


class ViewGate:
    """Per-session UI state: selected view, login dialog, passcode buffer.

    ``session`` is any mutable mapping; in requests it is Flask's session.
    Only PUBLIC/ADMIN are stored. LOADING is derived from the site having
    no identity yet.
    """

    def __init__(self, session, passcode: str, loading: bool = False):
        self.session = session
        self.passcode = passcode
        self.loading = loading

    @property
    def state(self) -> ViewState:
        if self.loading:
            return ViewState.LOADING
        stored = self.session.get(VIEW_KEY, ViewState.PUBLIC.value)
        try:
            return ViewState(stored)
        except ValueError:
            return ViewState.PUBLIC

    @property
    def is_admin(self) -> bool:
        return self.state is ViewState.ADMIN

    @property
    def show_login(self) -> bool:
        return bool(self.session.get(SHOW_LOGIN_KEY, False))

    @property
    def passcode_buffer(self) -> str:
        return self.session.get(PASSCODE_KEY, '')

    def open_login(self) -> None:
        self.session[SHOW_LOGIN_KEY] = True

    def close_login(self) -> None:
        self.session[SHOW_LOGIN_KEY] = False

    def submit_passcode(self, entered: str) -> bool:
        """Enter the admin view on an exact passcode match.

        On a mismatch the state is unchanged and the typed text stays in
        the buffer.
        """
        entered = entered or ''
        self.session[PASSCODE_KEY] = entered
        if self.state is not ViewState.PUBLIC:
            return self.state is ViewState.ADMIN
        if entered != self.passcode:
            return False

        self._apply(ViewEvent.PASSCODE_ACCEPTED)
        self.session[SHOW_LOGIN_KEY] = False
        self.session[PASSCODE_KEY] = ''
        return True

    def exit_admin(self) -> None:
        self._apply(ViewEvent.EXIT_ADMIN)

    def _apply(self, event: ViewEvent) -> None:
        current = self.state
        target = next_state(current, event)
        if target is not current:
            self.session[VIEW_KEY] = target.value
