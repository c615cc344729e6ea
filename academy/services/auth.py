"""
Auth Service Adapters

IdentityToolkitAuth talks to the managed auth service over its REST API;
LocalAuth mints in-process identities for the local backend.
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta

import requests

from academy.services.errors import AuthError
from academy.services.ports import Identity

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = 'https://identitytoolkit.googleapis.com/v1'
SECURE_TOKEN_URL = 'https://securetoken.googleapis.com/v1/token'


class AuthStateNotifier:
    """Keeps the current identity and notifies listeners on every change."""

    def __init__(self):
        self._identity = None
        self._listeners = []

    @property
    def current_identity(self):
        return self._identity

    def on_auth_state_changed(self, callback):
        """Register ``callback``; it fires at once if already signed in."""
        self._listeners.append(callback)
        if self._identity is not None:
            callback(self._identity)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def sign_out(self):
        self._set_identity(None)

    def _set_identity(self, identity):
        self._identity = identity
        for listener in list(self._listeners):
            listener(identity)
        return identity


class IdentityToolkitAuth(AuthStateNotifier):
    """Anonymous and custom-token sign-in via the Identity Toolkit REST API.

    The ID token lives about an hour. ``fresh_token`` trades the refresh
    token for a new one once the current token is inside ``REFRESH_MARGIN``
    of its expiry.
    """

    REFRESH_MARGIN = timedelta(minutes=5)

    def __init__(self, api_key, timeout=6):
        super().__init__()
        self.api_key = api_key
        self.timeout = timeout
        self._refresh_token = None
        self._expires_at = None

    def sign_in_anonymously(self):
        data = self._post(f'{IDENTITY_TOOLKIT_URL}/accounts:signUp', json={'returnSecureToken': True})
        return self._signed_in(data, is_anonymous=True)

    def sign_in_with_custom_token(self, token):
        data = self._post(f'{IDENTITY_TOOLKIT_URL}/accounts:signInWithCustomToken', json={
            'token': token,
            'returnSecureToken': True,
        })
        return self._signed_in(data, is_anonymous=False)

    def sign_out(self):
        self._refresh_token = None
        self._expires_at = None
        super().sign_out()

    def fresh_token(self):
        """Return ``(id_token, expires_at)``, refreshing the token if it is about to expire.

        Returns ``(None, None)`` when nobody is signed in.
        """
        identity = self._identity
        if identity is None:
            return None, None
        if self._expires_at is not None and self._refresh_token \
                and datetime.utcnow() + self.REFRESH_MARGIN >= self._expires_at:
            data = self._post(SECURE_TOKEN_URL, data={
                'grant_type': 'refresh_token',
                'refresh_token': self._refresh_token,
            })
            self._refresh_token = data.get('refresh_token', self._refresh_token)
            self._expires_at = _expiry(data.get('expires_in'))
            # Same session, new token; listeners only hear about identity changes
            self._identity = replace(identity, id_token=data.get('id_token'))
            logger.debug('ID token refreshed for %s', identity.uid)
        return self._identity.id_token, self._expires_at

    def _signed_in(self, data, is_anonymous):
        self._refresh_token = data.get('refreshToken')
        self._expires_at = _expiry(data.get('expiresIn'))
        return self._set_identity(Identity(
            uid=data.get('localId', ''),
            is_anonymous=is_anonymous,
            id_token=data.get('idToken'),
        ))

    def _post(self, url, **body):
        try:
            resp = requests.post(url, params={'key': self.api_key}, timeout=self.timeout, **body)
        except requests.exceptions.Timeout:
            raise AuthError('Auth request timed out')
        except requests.exceptions.RequestException as e:
            raise AuthError(f'Auth request failed: {e}')

        if resp.status_code != 200:
            try:
                error = resp.json().get('error', {})
                message = error.get('message') if isinstance(error, dict) else error
            except ValueError:
                message = None
            raise AuthError(message or f'Auth service error {resp.status_code}')

        return resp.json()


def _expiry(expires_in):
    try:
        return datetime.utcnow() + timedelta(seconds=int(expires_in))
    except (TypeError, ValueError):
        return None


class LocalAuth(AuthStateNotifier):
    """In-process auth for the local document store."""

    def sign_in_anonymously(self):
        return self._set_identity(Identity(uid=uuid.uuid4().hex, is_anonymous=True))

    def sign_in_with_custom_token(self, token):
        if not token:
            raise AuthError('Custom token is empty')
        return self._set_identity(Identity(uid=f'token-{uuid.uuid5(uuid.NAMESPACE_OID, token).hex}',
                                           is_anonymous=False, id_token=token))
