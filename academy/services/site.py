"""
Site Application

Wires identity bootstrap to config/inquiry sync and exposes the two
write operations the web layer needs.
"""

import logging
from typing import Optional

from academy.models.inquiry import build_inquiry, sort_recent
from academy.services.identity import IdentityBootstrap
from academy.services.ports import AuthService, DocumentStore
from academy.services.sync import SiteSync

logger = logging.getLogger(__name__)


class IdentityUnavailable(RuntimeError):
    """A write was attempted before an identity was established."""


class SiteApplication:
    """Process-wide site state.

    Args:
        auth: AuthService implementation
        store: DocumentStore implementation
        app_id: Deployment identifier scoping all store paths
        initial_auth_token: Optional pre-provisioned auth token
    """

    def __init__(self, auth: AuthService, store: DocumentStore, app_id: str,
                 initial_auth_token: Optional[str] = None):
        self.auth = auth
        self.store = store
        self.app_id = app_id
        self.sync = SiteSync(store, app_id)
        self.bootstrap = IdentityBootstrap(auth, initial_auth_token, on_change=self._on_identity)

    @property
    def identity(self):
        return self.bootstrap.identity

    @property
    def loading(self):
        return self.identity is None

    @property
    def site_config(self):
        return self.sync.site_config

    @property
    def inquiries(self):
        return self.sync.inquiries

    def recent_inquiries(self):
        return sort_recent(self.sync.inquiries)

    def start(self):
        self.bootstrap.start()

    def shutdown(self):
        self.bootstrap.stop()
        self.sync.stop()

    def _on_identity(self, identity):
        if identity is not None:
            self.sync.start()
        else:
            self.sync.stop()

    def submit_inquiry(self, name, program, phone):
        """Validate and store a new enrollment inquiry.

        Raises:
            InquiryValidationError: missing/invalid form fields
            IdentityUnavailable: no session with the auth service yet
            StoreError: the store rejected the write
        """
        inquiry = build_inquiry(name, program, phone)
        if self.identity is None:
            raise IdentityUnavailable('Not connected to the site backend')
        doc_id = self.store.add_document(self.sync.inquiries_path, inquiry.to_dict())
        logger.info('Inquiry %s stored for %s', doc_id, inquiry.program)
        return inquiry

    def update_site_config(self, changes):
        """Partially update the config record; untouched fields keep their stored values."""
        if self.identity is None:
            raise IdentityUnavailable('Not connected to the site backend')
        changes = {k: v.strip() if isinstance(v, str) else v for k, v in changes.items()}
        self.store.update_document(self.sync.config_path, changes)
        logger.info('Site config updated: %s', ', '.join(sorted(changes)))
        return changes
