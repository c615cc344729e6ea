"""
Public Routes

The marketing site, enrollment inquiries and the admin passcode dialog.
"""

import logging

from flask import render_template, request, redirect, url_for, flash, jsonify
from academy.public import public_bp
from academy.admin.decorators import current_gate
from academy.admin.gate import ViewState
from academy.extensions import get_site
from academy.models import InquiryValidationError, PROGRAM_CLASSES

logger = logging.getLogger(__name__)


@public_bp.route('/')
def index():
    """Loading page until the site has an identity, then the public site."""
    site = get_site()
    gate = current_gate()

    if gate.state is ViewState.LOADING:
        return render_template('loading.html')
    if gate.state is ViewState.ADMIN:
        return redirect(url_for('admin.admin_dashboard'))

    return render_template('public/index.html',
                           site_config=site.site_config,
                           programs=PROGRAM_CLASSES,
                           show_login=gate.show_login,
                           passcode=gate.passcode_buffer)


@public_bp.route('/inquiries', methods=['POST'])
def submit_inquiry():
    """Store an enrollment inquiry from the public form."""
    try:
        get_site().submit_inquiry(
            request.form.get('name', ''),
            request.form.get('class', ''),
            request.form.get('phone', ''),
        )
        flash('Inquiry submitted successfully!', 'success')
    except InquiryValidationError as e:
        flash(str(e), 'warning')
    except Exception as e:
        logger.error('Inquiry submission failed: %s', e)
        flash('Error submitting. Please try again.', 'danger')

    return redirect(url_for('public.index', _anchor='contact'))


@public_bp.route('/login', methods=['GET'])
def open_login():
    """Show the admin login dialog."""
    current_gate().open_login()
    return redirect(url_for('public.index'))


@public_bp.route('/login', methods=['POST'])
def admin_login():
    """Check the admin passcode."""
    gate = current_gate()
    if gate.state is ViewState.LOADING:
        return redirect(url_for('public.index'))

    if gate.submit_passcode(request.form.get('passcode', '')):
        return redirect(url_for('admin.admin_dashboard'))

    flash('Incorrect Passcode', 'danger')
    return redirect(url_for('public.index'))


@public_bp.route('/login/cancel', methods=['POST'])
def cancel_login():
    """Hide the admin login dialog."""
    current_gate().close_login()
    return redirect(url_for('public.index'))


@public_bp.route('/api/site')
def api_site():
    """Current site config as JSON."""
    site = get_site()
    return jsonify({
        'loading': site.loading,
        'config': site.site_config.to_dict(),
    })
