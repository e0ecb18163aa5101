# payportal/utils/decorators.py
"""Authentication decorators"""
from functools import wraps
from flask import g, jsonify, session
from payportal.extensions import db
from payportal.models.user import User


def login_required(f):
    """
    Decorator to ensure user is authenticated before accessing route
    The session user is re-checked on every request and exposed as g.current_user
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'user_id' not in session:
            return jsonify({'message': 'Authentication required'}), 401

        # Verify user still exists and is active
        user = db.session.get(User, session['user_id'])
        if not user or not user.is_active:
            session.clear()
            return jsonify({'message': 'Session invalid. Please log in again.'}), 401

        g.current_user = user
        return f(*args, **kwargs)
    return decorated_function
