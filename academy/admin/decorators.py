"""
Admin Decorator

The admin view is gated on the session's view state only.
"""

from functools import wraps
from flask import current_app, redirect, session, url_for

from academy.admin.gate import ViewGate
from academy.extensions import get_site


def current_gate():
    """ViewGate for the current request's session."""
    return ViewGate(session, current_app.config['ADMIN_PASSCODE'], loading=get_site().loading)


def admin_required(f):
    """Decorator to ensure the session is in the admin view.
    
    - Sessions still loading are sent to the loading page
    - Public sessions are sent to the public page with the login dialog open
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        gate = current_gate()
        if not gate.is_admin:
            if not gate.loading:
                gate.open_login()
            return redirect(url_for('public.index'))
        return f(*args, **kwargs)
    return wrapper
