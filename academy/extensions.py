"""
Flask Extensions

The SQLAlchemy instance backs the local document store. The running
SiteApplication is kept on ``app.extensions['site']``.
"""

from flask import current_app
from flask_sqlalchemy import SQLAlchemy

# Database instance
db = SQLAlchemy()


def get_site():
    """Return the SiteApplication bound to the current Flask app."""
    return current_app.extensions['site']
