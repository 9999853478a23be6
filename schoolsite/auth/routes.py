"""
Auth Routes
"""

import logging

from flask import current_app, jsonify, redirect, request, session, url_for
from flask_login import login_user, logout_user
from sqlalchemy.exc import SQLAlchemyError

from schoolsite.auth import auth_bp
from schoolsite.errors import InvalidCredentials, SessionError
from schoolsite.extensions import db
from schoolsite.services.users import authenticate

logger = logging.getLogger(__name__)


def _login_redirect(error):
    return redirect(url_for('public.login_page', error=error))


def start_admin_session(user):
    """Rotate the session id, mark it authenticated and write it out now."""
    session.regenerate()
    session['authenticated'] = True
    session['username'] = user.username
    login_user(user)
    current_app.session_interface.persist(session._get_current_object())


@auth_bp.route('/login', methods=['POST'])
def login():
    """Authenticate an admin and redirect to the admin panel."""
    if request.form:
        data = request.form
    else:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''

    if not username or not password:
        return _login_redirect('Username and password are required.')

    try:
        user = authenticate(username, password)
    except InvalidCredentials as e:
        return _login_redirect(e.message)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception('Login DB error')
        return _login_redirect('Server error')

    try:
        start_admin_session(user)
    except SessionError:
        return _login_redirect('Session error')

    logger.info("User '%s' logged in successfully.", user.username)
    return redirect(url_for('public.admin_page'))


@auth_bp.route('/api/logout', methods=['POST'])
def logout():
    """Destroy the session; succeeds whether or not one exists."""
    if session.new and not session:
        return jsonify({'message': 'No active session to log out from.'})

    username = session.username
    logout_user()
    session.destroy()
    logger.info("User '%s' logged out.", username)
    return jsonify({'message': 'Logout successful'})


@auth_bp.route('/api/session', methods=['GET'])
def session_status():
    return jsonify({
        'authenticated': session.is_authenticated,
        'username': session.username,
    })
