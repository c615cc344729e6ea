"""
Admin Blueprint

Content editor and inquiry list, shown to sessions that entered the
admin passcode.
"""

from flask import Blueprint

admin_bp = Blueprint('admin', __name__)

from academy.admin import routes  # noqa: E402, F401
