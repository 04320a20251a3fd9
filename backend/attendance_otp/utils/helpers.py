"""Helper functions for the application."""
from flask import jsonify, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_limiter.util import get_remote_address
from typing import Any

IPV4_MAPPED_PREFIX = '::ffff:'


def handle_error(error, status_code: int):
    """Handle application errors with consistent format."""
    return jsonify({
        'error': True,
        'message': str(error),
        'status_code': status_code
    }), status_code


def success_response(data: Any = None, message: str = "Success", status_code: int = 200):
    """Return consistent success response."""
    response = {
        'error': False,
        'message': message
    }

    if data is not None:
        response['data'] = data

    return jsonify(response), status_code


def error_response(message: str, status_code: int = 400, **extra):
    """Return consistent error response."""
    response = {
        'error': True,
        'message': message,
        'status_code': status_code
    }
    response.update(extra)
    return jsonify(response), status_code


def client_address() -> str:
    """Remote address of the current request with IPv4-mapped prefixes removed."""
    address = request.remote_addr
    if address and address.startswith(IPV4_MAPPED_PREFIX):
        return address[len(IPV4_MAPPED_PREFIX):]
    return address


def rate_limit_key() -> str:
    """Limiter bucket for the caller: the token identity, else the remote address.

    Students on a shared campus network reach the API through one address, so
    authenticated limits are counted per user.
    """
    verify_jwt_in_request(optional=True)
    identity = get_jwt_identity()
    if identity:
        return f"user:{identity}"
    return get_remote_address()
