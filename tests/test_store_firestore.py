from datetime import datetime, timedelta

import pytest
from google.api_core import exceptions as gexc
from google.auth.exceptions import RefreshError

from academy.services import DocumentExists, DocumentNotFound, StoreError
from academy.services.errors import AuthError
from academy.services.ports import DocumentStore
from academy.services.store_firestore import FirestoreStore, IdentityTokenCredentials

CONFIG = 'artifacts/app-1/public/data/siteConfig/main'
INQUIRIES = 'artifacts/app-1/public/data/inquiries'


class FakeDoc:
    def __init__(self, doc_id, data=None):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return self._data


class FakeWatch:
    def __init__(self):
        self.unsubscribed = False

    def unsubscribe(self):
        self.unsubscribed = True


class FakeRef:
    def __init__(self, client, path):
        self.client = client
        self.path = path
        self.id = path.rsplit('/', 1)[-1]

    def on_snapshot(self, callback):
        if self.client.fail:
            raise self.client.fail
        self.client.callbacks[self.path] = callback
        watch = FakeWatch()
        self.client.watches.append(watch)
        return watch

    def _write(self, op, data):
        if self.client.fail:
            raise self.client.fail
        self.client.writes.append((op, self.path, data))

    def create(self, data):
        self._write('create', data)

    def update(self, data):
        self._write('update', data)

    def add(self, data):
        self._write('add', data)
        return datetime.utcnow(), FakeRef(self.client, f'{self.path}/new-id')


class FakeClient:
    instances = []

    def __init__(self, project=None, credentials=None):
        self.project = project
        self.credentials = credentials
        self.fail = None
        self.callbacks = {}
        self.watches = []
        self.writes = []
        FakeClient.instances.append(self)

    def document(self, path):
        return FakeRef(self, path)

    def collection(self, path):
        return FakeRef(self, path)


@pytest.fixture
def fake_client(monkeypatch):
    FakeClient.instances = []
    monkeypatch.setattr('academy.services.store_firestore.firestore.Client', FakeClient)
    return FakeClient


@pytest.fixture
def store(fake_client):
    expires = datetime.utcnow() + timedelta(hours=1)
    return FirestoreStore('proj-1', lambda: ('id-token', expires))


def test_firestore_store_satisfies_port(store):
    assert isinstance(store, DocumentStore)


def test_client_uses_identity_token(store, fake_client):
    client = store.client()
    assert client.project == 'proj-1'
    assert isinstance(client.credentials, IdentityTokenCredentials)
    assert client.credentials.token == 'id-token'
    assert client.credentials.valid

    # the client is built once
    assert store.client() is client
    assert len(fake_client.instances) == 1


def test_missing_token_raises_store_error(fake_client):
    store = FirestoreStore('proj-1', lambda: (None, None))
    with pytest.raises(StoreError, match='No identity token'):
        store.watch_document(CONFIG, lambda snap: None)
    assert fake_client.instances == []


def test_auth_failure_while_building_client_raises_store_error(fake_client):
    def token_source():
        raise AuthError('TOKEN_EXPIRED')

    with pytest.raises(StoreError, match='TOKEN_EXPIRED'):
        FirestoreStore('proj-1', token_source).client()


def test_credentials_refresh_pulls_new_token():
    tokens = iter(['tok-1', 'tok-2'])
    expires = datetime.utcnow() + timedelta(hours=1)
    creds = IdentityTokenCredentials(lambda: (next(tokens), expires))

    creds.refresh(None)
    assert creds.token == 'tok-1'
    assert creds.expiry == expires
    creds.refresh(None)
    assert creds.token == 'tok-2'


def test_credentials_refresh_errors():
    with pytest.raises(RefreshError):
        IdentityTokenCredentials(lambda: (None, None)).refresh(None)

    def failing():
        raise AuthError('TOKEN_EXPIRED')

    with pytest.raises(RefreshError, match='TOKEN_EXPIRED'):
        IdentityTokenCredentials(failing).refresh(None)


def test_watch_document_absent_record(store):
    seen = []
    store.watch_document(CONFIG, seen.append)
    store.client().callbacks[CONFIG]([], [], None)

    assert len(seen) == 1
    assert seen[0].id == 'main'
    assert seen[0].path == CONFIG
    assert seen[0].data is None
    assert not seen[0].exists


def test_watch_document_deleted_record_reports_absent(store):
    seen = []
    store.watch_document(CONFIG, seen.append)
    store.client().callbacks[CONFIG]([FakeDoc('main')], [], None)
    assert seen[0].data is None


def test_watch_document_present_record(store):
    seen = []
    store.watch_document(CONFIG, seen.append)
    store.client().callbacks[CONFIG]([FakeDoc('main', {'phone': '1'})], [], None)
    assert seen[0].exists
    assert seen[0].data == {'phone': '1'}


def test_watch_collection_translates_documents(store):
    seen = []
    store.watch_collection(INQUIRIES, seen.append)
    store.client().callbacks[INQUIRIES]([
        FakeDoc('a', {'name': 'Asha'}),
        FakeDoc('b', {}),
    ], [], None)

    snap = seen[0]
    assert snap.path == INQUIRIES
    assert [d.id for d in snap.documents] == ['a', 'b']
    assert snap.documents[0].path == f'{INQUIRIES}/a'
    assert snap.documents[0].data == {'name': 'Asha'}
    assert snap.documents[1].data == {}


def test_unsubscribe_stops_watch_once(store):
    sub = store.watch_collection(INQUIRIES, lambda snap: None)
    watch = store.client().watches[0]
    sub.unsubscribe()
    sub.unsubscribe()
    assert watch.unsubscribed


def test_watch_open_failure_raises_store_error(store):
    store.client().fail = gexc.PermissionDenied('Missing or insufficient permissions.')
    errors = []
    with pytest.raises(StoreError, match='insufficient permissions'):
        store.watch_document(CONFIG, lambda snap: None, errors.append)
    # the caller decides how to report it
    assert errors == []


def test_add_document_returns_new_id(store):
    doc_id = store.add_document(INQUIRIES, {'name': 'Asha'})
    assert doc_id == 'new-id'
    assert store.client().writes == [('add', INQUIRIES, {'name': 'Asha'})]


def test_create_conflict_maps_to_document_exists(store):
    store.client().fail = gexc.Conflict('Document already exists')
    with pytest.raises(DocumentExists, match='Document already exists'):
        store.create_document(CONFIG, {'phone': '1'})


def test_update_not_found_maps_to_document_not_found(store):
    store.client().fail = gexc.NotFound('No document to update')
    with pytest.raises(DocumentNotFound, match='No document to update'):
        store.update_document(CONFIG, {'phone': '1'})


def test_other_backend_errors_map_to_store_error(store):
    store.client().fail = gexc.ServiceUnavailable('backend down')
    with pytest.raises(StoreError) as excinfo:
        store.add_document(INQUIRIES, {'name': 'Asha'})
    assert not isinstance(excinfo.value, (DocumentExists, DocumentNotFound))
    assert 'backend down' in str(excinfo.value)
