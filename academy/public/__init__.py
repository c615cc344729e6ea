"""
Public Blueprint

Marketing pages, the enrollment form and the admin login dialog.
"""

from flask import Blueprint

public_bp = Blueprint('public', __name__)

from academy.public import routes  # noqa: E402, F401
