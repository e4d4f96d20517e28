"""
JWT authentication decorators for the REST API.

Protected handlers receive the resolved caller as an explicit ``auth``
keyword argument instead of reading it from a global.
"""
from dataclasses import dataclass
from functools import wraps
from datetime import datetime, timedelta, timezone

import jwt
from flask import request, current_app

from assetdesk.blueprints.api.helpers import api_error
from assetdesk.extensions import db
from assetdesk.models.user import User, UserRole


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller of one request."""
    user: User

    @property
    def user_id(self):
        return self.user.id

    @property
    def role(self):
        return self.user.role


def _jwt_secret():
    return current_app.config.get('JWT_SECRET_KEY') or current_app.config['SECRET_KEY']


def create_access_token(user_id, expires_minutes=None):
    """Create a JWT access token."""
    if expires_minutes is None:
        expires_minutes = current_app.config.get('JWT_ACCESS_TOKEN_MINUTES', 60)
    payload = {
        'sub': str(user_id),
        'type': 'access',
        'iat': datetime.now(timezone.utc),
        'exp': datetime.now(timezone.utc) + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, _jwt_secret(), algorithm='HS256')


def create_refresh_token(user_id, expires_days=None):
    """Create a JWT refresh token (longer-lived)."""
    if expires_days is None:
        expires_days = current_app.config.get('JWT_REFRESH_TOKEN_DAYS', 30)
    payload = {
        'sub': str(user_id),
        'type': 'refresh',
        'iat': datetime.now(timezone.utc),
        'exp': datetime.now(timezone.utc) + timedelta(days=expires_days),
    }
    return jwt.encode(payload, _jwt_secret(), algorithm='HS256')


def decode_token(token):
    """Decode and validate a JWT token. Returns payload or None."""
    try:
        return jwt.decode(token, _jwt_secret(), algorithms=['HS256'])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def load_token_user(payload):
    """Active user named by a decoded token, or None."""
    try:
        user_id = int(payload['sub'])
    except (KeyError, ValueError, TypeError):
        return None
    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


def get_current_api_user():
    """Extract user from Authorization header. Returns (user, error_response)."""
    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return None, api_error('missing_token', 'Authorization header with Bearer token required.', 401)

    payload = decode_token(auth_header[7:])
    if payload is None:
        return None, api_error('invalid_token', 'Token is invalid or expired.', 401)

    if payload.get('type') != 'access':
        return None, api_error('wrong_token_type', 'Access token required (not refresh token).', 401)

    user = load_token_user(payload)
    if user is None:
        return None, api_error('user_not_found', 'User not found or deactivated.', 401)

    return user, None


def requires_api_access(min_role=UserRole.USER):
    """Decorator: require a valid access token and a minimum role.

    Usage: @requires_api_access(UserRole.MANAGER)

    The wrapped view is called with ``auth=AuthContext(user)``.
    Insufficient roles are answered with 401 like missing credentials.
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            user, error = get_current_api_user()
            if error:
                return error

            if not user.has_access(min_role):
                return api_error('unauthorized', 'Insufficient permissions.', 401)

            kwargs['auth'] = AuthContext(user)
            return f(*args, **kwargs)
        return decorated
    return decorator


def jwt_required(f):
    """Decorator: require valid JWT access token (any role)."""
    return requires_api_access(UserRole.USER)(f)
