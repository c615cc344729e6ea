"""
Firestore Document Store

The managed realtime store, accessed with the signed-in identity's ID
token so the store's own security rules decide what is allowed.
"""

import logging
from functools import wraps

from google.api_core import exceptions as gexc
from google.auth import credentials
from google.auth.exceptions import GoogleAuthError, RefreshError
from google.cloud import firestore

from academy.services.errors import AuthError, DocumentExists, DocumentNotFound, StoreError
from academy.services.ports import CollectionSnapshot, DocumentSnapshot

logger = logging.getLogger(__name__)


class IdentityTokenCredentials(credentials.Credentials):
    """Bearer credentials backed by the auth service's ID token.

    ``token_source`` returns ``(id_token, expires_at)``. The client library
    calls ``refresh`` whenever the token is close to ``expires_at``.
    """

    def __init__(self, token_source):
        super().__init__()
        self._token_source = token_source

    def refresh(self, request):
        try:
            token, expiry = self._token_source()
        except AuthError as e:
            raise RefreshError(f'Could not refresh identity token: {e}') from e
        if not token:
            raise RefreshError('No identity token available for the document store')
        self.token = token
        self.expiry = expiry
        logger.debug('Document store credentials refreshed')


class _FirestoreWatch:
    def __init__(self, watch):
        self._watch = watch
        self.active = True

    def unsubscribe(self):
        if self.active:
            self.active = False
            self._watch.unsubscribe()


def _wrap_errors(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except gexc.Conflict as e:
            raise DocumentExists(e.message) from e
        except gexc.NotFound as e:
            raise DocumentNotFound(e.message) from e
        except (gexc.GoogleAPIError, GoogleAuthError) as e:
            raise StoreError(str(e)) from e
    return wrapper


class FirestoreStore:
    """DocumentStore backed by Cloud Firestore.

    Args:
        project_id: Firestore project (``projectId`` from the connection JSON)
        token_source: Callable returning ``(id_token, expires_at)`` for the
            signed-in identity
    """

    def __init__(self, project_id, token_source):
        self.project_id = project_id
        self.token_source = token_source
        self._client = None

    def client(self):
        if self._client is None:
            creds = IdentityTokenCredentials(self.token_source)
            try:
                creds.refresh(None)
            except RefreshError as e:
                raise StoreError(str(e)) from e
            self._client = firestore.Client(project=self.project_id, credentials=creds)
        return self._client

    def watch_document(self, path, on_snapshot, on_error=None):
        ref = self.client().document(path)

        def callback(docs, changes, read_time):
            doc = docs[0] if docs else None
            if doc is not None and doc.exists:
                on_snapshot(DocumentSnapshot(id=doc.id, path=path, data=doc.to_dict()))
            else:
                on_snapshot(DocumentSnapshot(id=ref.id, path=path, data=None))

        return self._watch(ref, callback)

    def watch_collection(self, path, on_snapshot, on_error=None):
        ref = self.client().collection(path)

        def callback(docs, changes, read_time):
            on_snapshot(CollectionSnapshot(path=path, documents=[
                DocumentSnapshot(id=d.id, path=f'{path}/{d.id}', data=d.to_dict() or {})
                for d in docs
            ]))

        return self._watch(ref, callback)

    @_wrap_errors
    def _watch(self, ref, callback):
        # Callbacks run on the client's background thread. The SDK has no error
        # callback, so on_error is never called once the watch is open
        return _FirestoreWatch(ref.on_snapshot(callback))

    @_wrap_errors
    def add_document(self, collection_path, data):
        _, ref = self.client().collection(collection_path).add(dict(data))
        return ref.id

    @_wrap_errors
    def create_document(self, path, data):
        self.client().document(path).create(dict(data))

    @_wrap_errors
    def update_document(self, path, data):
        self.client().document(path).update(dict(data))
