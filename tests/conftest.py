import pytest

from academy import create_app
from academy.config import TestConfig
from academy.services.auth import AuthStateNotifier
from academy.services.errors import AuthError, DocumentExists, DocumentNotFound, StoreError
from academy.services.ports import CollectionSnapshot, DocumentSnapshot, Identity


class FakeAuth(AuthStateNotifier):
    """Auth service double; records sign-in calls and can be told to fail."""

    def __init__(self, fail=False):
        super().__init__()
        self.fail = fail
        self.calls = []

    def sign_in_anonymously(self):
        self.calls.append(('anonymous', None))
        if self.fail:
            raise AuthError('auth/network-request-failed')
        return self._set_identity(Identity(uid='anon-1'))

    def sign_in_with_custom_token(self, token):
        self.calls.append(('token', token))
        if self.fail:
            raise AuthError('auth/invalid-custom-token')
        return self._set_identity(Identity(uid='token-user', is_anonymous=False, id_token=token))


class _FakeSubscription:
    def __init__(self, store, entry):
        self.store = store
        self.entry = entry

    def unsubscribe(self):
        self.store.unsubscribed.append(self.entry['path'])
        self.entry['active'] = False


class FakeStore:
    """In-memory document store.

    Every callback ever registered is kept, so tests can push "late"
    events to listeners that already unsubscribed via ``push_*``.
    """

    def __init__(self, docs=None):
        self.docs = dict(docs or {})
        self.writes = []
        self.entries = []
        self.unsubscribed = []
        self.fail_writes = None
        self.fail_watch = {}
        self._next_id = 0

    # subscriptions
    def watch_document(self, path, on_snapshot, on_error=None):
        self._check_watch(path)
        entry = {'kind': 'document', 'path': path, 'cb': on_snapshot, 'err': on_error, 'active': True}
        self.entries.append(entry)
        on_snapshot(self._doc(path))
        return _FakeSubscription(self, entry)

    def watch_collection(self, path, on_snapshot, on_error=None):
        self._check_watch(path)
        entry = {'kind': 'collection', 'path': path, 'cb': on_snapshot, 'err': on_error, 'active': True}
        self.entries.append(entry)
        on_snapshot(self._collection(path))
        return _FakeSubscription(self, entry)

    @property
    def active_subscriptions(self):
        return [e for e in self.entries if e['active']]

    def push_document(self, path, data, include_inactive=True):
        snapshot = DocumentSnapshot(id=path.rsplit('/', 1)[-1], path=path, data=data)
        for e in self.entries:
            if e['kind'] == 'document' and e['path'] == path and (e['active'] or include_inactive):
                e['cb'](snapshot)

    def push_collection(self, path, docs, include_inactive=True):
        snapshot = CollectionSnapshot(path=path, documents=[
            DocumentSnapshot(id=doc_id, path=f'{path}/{doc_id}', data=data) for doc_id, data in docs.items()
        ])
        for e in self.entries:
            if e['kind'] == 'collection' and e['path'] == path and (e['active'] or include_inactive):
                e['cb'](snapshot)

    def push_error(self, path, error):
        for e in self.entries:
            if e['path'] == path and e['err'] is not None:
                e['err'](error)

    # writes
    def add_document(self, collection_path, data):
        self._check_fail()
        self._next_id += 1
        doc_id = f'doc{self._next_id}'
        self.docs[f'{collection_path}/{doc_id}'] = dict(data)
        self.writes.append(('add', collection_path, dict(data)))
        self._notify(f'{collection_path}/{doc_id}')
        return doc_id

    def create_document(self, path, data):
        self._check_fail()
        if path in self.docs:
            raise DocumentExists(path)
        self.docs[path] = dict(data)
        self.writes.append(('create', path, dict(data)))
        self._notify(path)

    def update_document(self, path, data):
        self._check_fail()
        if path not in self.docs:
            raise DocumentNotFound(path)
        self.docs[path].update(data)
        self.writes.append(('update', path, dict(data)))
        self._notify(path)

    def _check_fail(self):
        if self.fail_writes:
            raise StoreError(self.fail_writes)

    def _check_watch(self, path):
        if path in self.fail_watch:
            raise StoreError(self.fail_watch[path])

    def _doc(self, path):
        data = self.docs.get(path)
        return DocumentSnapshot(id=path.rsplit('/', 1)[-1], path=path, data=dict(data) if data else None)

    def _collection(self, path):
        prefix = path + '/'
        docs = [DocumentSnapshot(id=p[len(prefix):], path=p, data=dict(d))
                for p, d in sorted(self.docs.items())
                if p.startswith(prefix) and '/' not in p[len(prefix):]]
        return CollectionSnapshot(path=path, documents=docs)

    def _notify(self, path):
        parent = path.rsplit('/', 1)[0]
        for e in list(self.entries):
            if not e['active']:
                continue
            if e['kind'] == 'document' and e['path'] == path:
                e['cb'](self._doc(path))
            elif e['kind'] == 'collection' and e['path'] == parent:
                e['cb'](self._collection(parent))


@pytest.fixture()
def app():
    app = create_app(TestConfig)
    yield app
    app.extensions['site'].shutdown()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def site(app):
    return app.extensions['site']


@pytest.fixture()
def admin_client(client):
    client.post('/login', data={'passcode': 'admin123'})
    return client


@pytest.fixture()
def fake_store():
    return FakeStore()


@pytest.fixture()
def fake_auth():
    return FakeAuth()
