from functools import wraps

from flask import g, jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from akasia.extensions import db
from akasia.models.user import User


def _load_current_user():
    try:
        user_id = int(get_jwt_identity())
    except (TypeError, ValueError):
        return None

    user = db.session.get(User, user_id)
    if not user or not user.is_active or user.deleted_at is not None:
        return None
    return user


def auth_required(fn):
    """Require a valid JWT belonging to an active user; exposes it as ``g.current_user``."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        user = _load_current_user()
        if user is None:
            return jsonify({'error': 'Unauthorized'}), 401
        g.current_user = user
        return fn(*args, **kwargs)
    return wrapper


def admin_required(message='Tidak memiliki akses'):
    def decorator(fn):
        @wraps(fn)
        @auth_required
        def wrapper(*args, **kwargs):
            if not g.current_user.is_admin:
                return jsonify({'error': message}), 403
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def current_user():
    return g.current_user
