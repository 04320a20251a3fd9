"""Custom decorators for authorization."""
from functools import wraps
from flask import g
from flask_jwt_extended import get_jwt_identity
from attendance_otp import db
from attendance_otp.models.user import User
from attendance_otp.utils.helpers import error_response


def _load_current_user():
    user = db.session.get(User, get_jwt_identity())
    if user is not None and user.is_active:
        g.current_user = user
        return user
    return None


def login_required_user(f):
    """Decorator to load the active user behind the JWT."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _load_current_user():
            return error_response("User not found", 404)

        return f(*args, **kwargs)
    return decorated_function


def instructor_required(f):
    """Decorator to require instructor role or higher."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = _load_current_user()

        if not user:
            return error_response("User not found", 404)

        if not user.is_instructor():
            return error_response("Instructor access required", 403)

        return f(*args, **kwargs)
    return decorated_function


def student_required(f):
    """Decorator to require student role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = _load_current_user()

        if not user:
            return error_response("User not found", 404)

        if not user.is_student():
            return error_response("Student access required", 403)

        return f(*args, **kwargs)
    return decorated_function
