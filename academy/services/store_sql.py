"""
Local Document Store

Document store on the application's SQLAlchemy database. Live
subscriptions are served from an in-process listener registry: a watcher
gets the current snapshot when it subscribes and a fresh one after every
committed write to its document or collection.
"""

import logging
import threading
import uuid

from academy.extensions import db
from academy.models.document import Document
from academy.services.errors import DocumentExists, DocumentNotFound, StoreError
from academy.services.ports import CollectionSnapshot, DocumentSnapshot

logger = logging.getLogger(__name__)


def split_path(path):
    """Split 'a/b/c/d' into ('a/b/c', 'd')."""
    parts = [p for p in path.strip('/').split('/') if p]
    if len(parts) < 2 or len(parts) % 2:
        raise StoreError(f'Not a document path: {path!r}')
    return '/'.join(parts[:-1]), parts[-1]


class _Watch:
    """Subscription handle returned by watch_document/watch_collection."""

    def __init__(self, store, path, kind, on_snapshot, on_error):
        self.store = store
        self.path = path
        self.kind = kind
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.active = True

    def unsubscribe(self):
        self.active = False
        self.store._remove_watch(self)


class SqlDocumentStore:
    """DocumentStore backed by Flask-SQLAlchemy."""

    def __init__(self, app=None):
        self.app = None
        self._watches = []
        self._lock = threading.RLock()
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.app = app

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_document(self, path):
        collection, doc_id = split_path(path)
        with self.app.app_context():
            row = db.session.get(Document, f'{collection}/{doc_id}')
            return DocumentSnapshot(id=doc_id, path=path, data=dict(row.data) if row else None)

    def get_collection(self, path):
        collection = path.strip('/')
        with self.app.app_context():
            rows = Document.query.filter_by(collection=collection).order_by(Document.path).all()
            docs = [DocumentSnapshot(id=r.doc_id, path=r.path, data=dict(r.data)) for r in rows]
        return CollectionSnapshot(path=collection, documents=docs)

    # ------------------------------------------------------------------
    # Live subscriptions
    # ------------------------------------------------------------------

    def watch_document(self, path, on_snapshot, on_error=None):
        return self._add_watch(path.strip('/'), 'document', on_snapshot, on_error)

    def watch_collection(self, path, on_snapshot, on_error=None):
        return self._add_watch(path.strip('/'), 'collection', on_snapshot, on_error)

    def _add_watch(self, path, kind, on_snapshot, on_error):
        watch = _Watch(self, path, kind, on_snapshot, on_error)
        with self._lock:
            self._watches.append(watch)
        self._deliver(watch)
        return watch

    def _remove_watch(self, watch):
        with self._lock:
            if watch in self._watches:
                self._watches.remove(watch)

    def _deliver(self, watch):
        if not watch.active:
            return
        try:
            if watch.kind == 'document':
                snapshot = self.get_document(watch.path)
            else:
                snapshot = self.get_collection(watch.path)
        except Exception as e:
            logger.error('Snapshot read failed for %s: %s', watch.path, e)
            if watch.on_error is not None:
                watch.on_error(e)
            return

        try:
            watch.on_snapshot(snapshot)
        except Exception:
            logger.exception('Snapshot listener for %s raised', watch.path)

    def _notify(self, path):
        collection, _ = split_path(path)
        with self._lock:
            targets = [w for w in self._watches
                       if (w.kind == 'document' and w.path == path)
                       or (w.kind == 'collection' and w.path == collection)]
        for watch in targets:
            self._deliver(watch)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_document(self, collection_path, data):
        collection = collection_path.strip('/')
        doc_id = uuid.uuid4().hex[:20]
        path = f'{collection}/{doc_id}'
        self._commit(lambda: db.session.add(
            Document(path=path, collection=collection, doc_id=doc_id, data=dict(data))
        ))
        self._notify(path)
        return doc_id

    def create_document(self, path, data):
        collection, doc_id = split_path(path)
        path = f'{collection}/{doc_id}'

        def write():
            if db.session.get(Document, path) is not None:
                raise DocumentExists(f'Document already exists: {path}')
            db.session.add(Document(path=path, collection=collection, doc_id=doc_id, data=dict(data)))

        self._commit(write)
        self._notify(path)

    def update_document(self, path, data):
        collection, doc_id = split_path(path)
        path = f'{collection}/{doc_id}'

        def write():
            row = db.session.get(Document, path)
            if row is None:
                raise DocumentNotFound(f'No document to update: {path}')
            merged = dict(row.data)
            merged.update(data)
            row.data = merged

        self._commit(write)
        self._notify(path)

    def _commit(self, write):
        with self.app.app_context():
            try:
                write()
                db.session.commit()
            except StoreError:
                db.session.rollback()
                raise
            except Exception as e:
                db.session.rollback()
                raise StoreError(str(e)) from e
