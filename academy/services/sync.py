"""
Config & Inquiry Sync

Keeps the site config and the inquiry list in memory, mirrored from two
live subscriptions under the deployment's namespace.
"""

import logging
from functools import partial

from academy.models.inquiry import Inquiry
from academy.models.site_config import SiteConfig
from academy.services.errors import DocumentExists
from academy.services.ports import DocumentStore

logger = logging.getLogger(__name__)


def config_path(app_id):
    return f'artifacts/{app_id}/public/data/siteConfig/main'


def inquiries_path(app_id):
    return f'artifacts/{app_id}/public/data/inquiries'


class _Cycle:
    """One start/stop cycle; events for an inactive cycle are dropped."""

    def __init__(self):
        self.active = True
        self.subscriptions = []


class SiteSync:
    """Mirror of the config record and inquiry collection.

    The config record heals itself: if it is absent when first seen, the
    in-memory default is written back with create-if-absent, at most once
    per SiteSync.
    """

    def __init__(self, store: DocumentStore, app_id: str):
        self.store = store
        self.app_id = app_id
        self.site_config = SiteConfig()
        self.inquiries = []
        self._cycle = None
        self._seeded = False

    @property
    def config_path(self):
        return config_path(self.app_id)

    @property
    def inquiries_path(self):
        return inquiries_path(self.app_id)

    @property
    def running(self):
        return self._cycle is not None

    def start(self):
        if self._cycle is not None:
            return
        cycle = _Cycle()
        self._cycle = cycle
        logger.info('Opening subscriptions under artifacts/%s', self.app_id)

        self._open(cycle, self.store.watch_document, self.config_path,
                   self._on_config, 'Config fetch error')
        self._open(cycle, self.store.watch_collection, self.inquiries_path,
                   self._on_inquiries, 'Inquiry fetch error')

    def _open(self, cycle, watch, path, handler, label):
        # Each subscription opens on its own; a failure leaves the other running
        try:
            cycle.subscriptions.append(watch(
                path,
                partial(handler, cycle),
                partial(self._on_error, cycle, label),
            ))
        except Exception as e:
            self._on_error(cycle, label, e)

    def stop(self):
        cycle, self._cycle = self._cycle, None
        if cycle is None:
            return
        cycle.active = False
        for sub in cycle.subscriptions:
            sub.unsubscribe()
        logger.info('Subscriptions under artifacts/%s released', self.app_id)

    def _on_config(self, cycle, snapshot):
        if not cycle.active:
            return
        if snapshot.exists:
            self.site_config = SiteConfig.from_dict(snapshot.data)
            return

        if self._seeded:
            return
        self._seeded = True
        try:
            self.store.create_document(self.config_path, self.site_config.to_dict())
            logger.info('Created default site config at %s', self.config_path)
        except DocumentExists:
            logger.debug('Site config already exists at %s', self.config_path)
        except Exception as e:
            self._seeded = False
            logger.error('Could not create default site config: %s', e)

    def _on_inquiries(self, cycle, snapshot):
        if not cycle.active:
            return
        self.inquiries = [Inquiry.from_document(doc.id, doc.data or {}) for doc in snapshot.documents]

    def _on_error(self, cycle, label, error):
        if cycle.active:
            logger.error('%s: %s', label, error)
