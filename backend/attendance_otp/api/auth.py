"""Authentication API endpoints."""
from flask import Blueprint, g, request
from flask_jwt_extended import jwt_required
from attendance_otp import limiter
from attendance_otp.services.auth_service import AuthService
from attendance_otp.utils.decorators import login_required_user
from attendance_otp.utils.helpers import success_response, error_response

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    """Login with university ID and password."""
    data = request.get_json(silent=True)

    if not data:
        return error_response("Request body must be JSON", 400)

    user_id = str(data.get("user_id", "")).strip()
    password = data.get("password", "")

    if not user_id or not password:
        return error_response("User ID and password are required", 400)

    result, error = AuthService.login(user_id, password)

    if error:
        return error_response(error, 401)

    return success_response(
        data=result,
        message="Login successful"
    )


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
@login_required_user
def me():
    """Current user profile."""
    return success_response(data=g.current_user.to_dict())
