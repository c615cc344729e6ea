"""
Identity Bootstrap

Establishes a session with the auth service on startup and relays every
auth-state change to the site.
"""

import logging

logger = logging.getLogger(__name__)


class IdentityBootstrap:
    """Sign in with the deployment token when one is supplied, else anonymously.

    Failures are logged and leave the identity unset. There is no retry,
    so everything gated on an identity simply never starts.
    """

    def __init__(self, auth, initial_token=None, on_change=None):
        self.auth = auth
        self.initial_token = initial_token
        self.on_change = on_change
        self.identity = None
        self._unsubscribe = None

    def start(self):
        if self._unsubscribe is None:
            self._unsubscribe = self.auth.on_auth_state_changed(self._handle)

        try:
            if self.initial_token:
                self.auth.sign_in_with_custom_token(self.initial_token)
            else:
                self.auth.sign_in_anonymously()
        except Exception as e:
            logger.error('Authentication failed: %s', e)

    def stop(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _handle(self, identity):
        self.identity = identity
        if identity is not None:
            logger.info('Signed in as %s (anonymous=%s)', identity.uid, identity.is_anonymous)
        else:
            logger.info('Signed out')
        if self.on_change is not None:
            self.on_change(identity)
