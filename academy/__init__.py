"""
The Impulse Academy - Application Factory

This module provides the Flask application factory pattern for creating
and configuring the application instance.
"""

import atexit
import json
import logging
import os
from typing import Optional

from flask import Flask
from academy.extensions import db
from academy.config import Config
from academy.services.ports import AuthService, DocumentStore

logger = logging.getLogger(__name__)


def create_app(config_class=Config, auth: Optional[AuthService] = None,
               store: Optional[DocumentStore] = None):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use (default: Config)
        auth: AuthService to use instead of the configured backend
        store: DocumentStore to use instead of the configured backend

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)

    # Register blueprints
    from academy.public import public_bp
    from academy.admin import admin_bp

    app.register_blueprint(public_bp)
    app.register_blueprint(admin_bp, url_prefix='/admin')

    # Template filter for inquiry dates
    @app.template_filter('inquiry_date')
    def inquiry_date_filter(inquiry):
        submitted = inquiry.submitted_at
        return submitted.strftime('%d/%m/%Y') if submitted else ''

    if app.config['SITE_BACKEND'] == 'sql':
        with app.app_context():
            if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///') \
                    and ':memory:' not in app.config['SQLALCHEMY_DATABASE_URI']:
                os.makedirs(app.instance_path, exist_ok=True)
            db.create_all()

    site = _build_site(app, auth, store)
    app.extensions['site'] = site

    if app.config.get('SITE_AUTOSTART', True):
        site.start()
        atexit.register(site.shutdown)

    return app


def _build_site(app, auth, store):
    """Build the SiteApplication from injected or configured backends."""
    from academy.services import SiteApplication

    if auth is None or store is None:
        backend = app.config['SITE_BACKEND']
        if backend == 'firestore':
            conn = _load_store_config(app.config['FIREBASE_CONFIG'])
            if auth is None:
                from academy.services import IdentityToolkitAuth
                auth = IdentityToolkitAuth(conn.get('apiKey', ''), timeout=app.config['AUTH_TIMEOUT'])
            if store is None:
                from academy.services.store_firestore import FirestoreStore
                token_source = getattr(auth, 'fresh_token', None)
                if token_source is None:
                    def token_source():
                        identity = auth.current_identity
                        return (identity.id_token if identity else None), None
                store = FirestoreStore(conn.get('projectId', ''), token_source)
        elif backend == 'sql':
            if auth is None:
                from academy.services import LocalAuth
                auth = LocalAuth()
            if store is None:
                from academy.services import SqlDocumentStore
                store = SqlDocumentStore(app)
        else:
            raise ValueError(f'Unknown SITE_BACKEND: {backend!r}')

    logger.info('Site backend ready for deployment %s', app.config['APP_ID'])
    return SiteApplication(auth, store, app.config['APP_ID'],
                           initial_auth_token=app.config.get('INITIAL_AUTH_TOKEN'))


def _load_store_config(raw):
    """Parse the store connection JSON blob."""
    if not raw:
        raise ValueError('FIREBASE_CONFIG is required for the firestore backend')
    try:
        conn = json.loads(raw)
    except ValueError as e:
        raise ValueError(f'FIREBASE_CONFIG is not valid JSON: {e}') from e
    if not isinstance(conn, dict):
        raise ValueError('FIREBASE_CONFIG must be a JSON object')
    return conn
