"""
Admin Routes

Edit the public site content and review enrollment inquiries.
"""

import logging

from flask import render_template, request, redirect, url_for, flash
from academy.admin import admin_bp
from academy.admin.decorators import admin_required, current_gate
from academy.extensions import get_site
from academy.models import EDITABLE_FIELDS, editable_changes

logger = logging.getLogger(__name__)


@admin_bp.route('/')
@admin_required
def admin_dashboard():
    """Management dashboard: content editor and recent inquiries."""
    site = get_site()
    inquiries = site.recent_inquiries()
    return render_template('admin/dashboard.html',
                           site_config=site.site_config,
                           inquiries=inquiries,
                           total_inquiries=len(inquiries))


@admin_bp.route('/content', methods=['POST'])
@admin_required
def update_content():
    """Save the edited headline, director message and phone."""
    changes = editable_changes(request.form)
    if not changes:
        flash('Nothing to update. Fill in ' + ', '.join(EDITABLE_FIELDS) + '.', 'warning')
        return redirect(url_for('admin.admin_dashboard'))

    try:
        get_site().update_site_config(changes)
        flash('Website updated successfully!', 'success')
    except Exception as e:
        logger.error('Config update failed: %s', e)
        flash(f'Failed to update website: {e}', 'danger')

    return redirect(url_for('admin.admin_dashboard'))


@admin_bp.route('/exit', methods=['GET', 'POST'])
def exit_admin():
    """Leave the admin view and return to the public site."""
    gate = current_gate()
    if gate.is_admin:
        gate.exit_admin()
    return redirect(url_for('public.index'))
