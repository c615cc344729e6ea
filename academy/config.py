"""
Configuration settings for The Impulse Academy site
"""
import os


class Config:
    """Flask application configuration"""
    
    # Flask secret key for sessions
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production-12345'
    
    # Local document store (used when no managed store is configured)
    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'academy.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    
    # Managed store connection parameters (JSON blob), deployment id and
    # an optional pre-provisioned auth token, injected at deploy time
    FIREBASE_CONFIG = os.environ.get('FIREBASE_CONFIG') or ''
    APP_ID = os.environ.get('APP_ID') or 'impulse-academy-default'
    INITIAL_AUTH_TOKEN = os.environ.get('INITIAL_AUTH_TOKEN') or None
    
    # 'firestore' or 'sql'
    SITE_BACKEND = os.environ.get('SITE_BACKEND') or ('firestore' if FIREBASE_CONFIG else 'sql')
    SITE_AUTOSTART = True
    
    # Auth service HTTP timeout (seconds)
    AUTH_TIMEOUT = 6
    
    # ---------------------------------------------------------------------
    # Admin passcode. This only toggles the admin view for a browser
    # session; write access is governed by the store's own rules.
    # ---------------------------------------------------------------------
    ADMIN_PASSCODE = os.environ.get('ADMIN_PASSCODE') or 'admin123'


class TestConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SITE_BACKEND = 'sql'
    FIREBASE_CONFIG = ''
    INITIAL_AUTH_TOKEN = None
    APP_ID = 'impulse-academy-test'
    ADMIN_PASSCODE = 'admin123'
