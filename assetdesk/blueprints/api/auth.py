"""
API Authentication endpoints: JWT login, refresh, and user info.
"""
from flask import request, current_app

from assetdesk.blueprints.api import api_bp
from assetdesk.blueprints.api.decorators import (
    create_access_token,
    create_refresh_token,
    decode_token,
    load_token_user,
    jwt_required,
)
from assetdesk.blueprints.api.helpers import api_error, api_success
from assetdesk.blueprints.api.schemas import UserSchema
from assetdesk.extensions import db, limiter
from assetdesk.models.user import User
from assetdesk.utils.audit import log_login


@api_bp.route('/auth/login', methods=['POST'])
@limiter.limit('10 per minute')
def api_login():
    """Authenticate user and return JWT tokens.

    Request body:
        {"email": "...", "password": "..."}

    Returns:
        {"data": {"accessToken": "...", "refreshToken": "...", "user": {...}}}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error('invalid_json', 'Request body must be a valid JSON object.', 400)

    email = str(data.get('email') or '').strip().lower()
    password = str(data.get('password') or '')

    if not email or not password:
        return api_error(
            'validation_error',
            'Email and password are required.',
            400,
            details={f: ['Missing data for required field.'] for f in ('email', 'password') if not data.get(f)},
        )

    user = User.query.filter_by(email=email).first()

    if user and user.is_locked:
        current_app.logger.warning('Login refused for locked account %s', user.id)
        return api_error(
            'account_locked',
            'Account temporarily locked due to too many failed attempts. Try again later.',
            429,
        )

    if user is None or not user.check_password(password):
        if user:
            user.record_failed_login(
                max_attempts=current_app.config['MAX_LOGIN_ATTEMPTS'],
                lockout_minutes=current_app.config['LOCKOUT_DURATION_MINUTES'],
            )
            db.session.commit()
            if user.is_locked:
                current_app.logger.warning(
                    'Account %s locked after %d failed logins', user.id, user.failed_login_attempts
                )
        log_login(None, success=False, email=email)
        return api_error('invalid_credentials', 'Invalid email or password.', 401)

    if not user.is_active:
        return api_error('account_inactive', 'Account is deactivated. Contact an administrator.', 401)

    user.reset_failed_logins()
    db.session.commit()
    log_login(user, success=True)

    expires_minutes = current_app.config['JWT_ACCESS_TOKEN_MINUTES']
    return api_success({
        'accessToken': create_access_token(user.id),
        'refreshToken': create_refresh_token(user.id),
        'tokenType': 'Bearer',
        'expiresIn': expires_minutes * 60,
        'user': UserSchema().dump(user),
    })


@api_bp.route('/auth/refresh', methods=['POST'])
@limiter.limit('20 per minute')
def api_refresh():
    """Exchange a refresh token for a new access token.

    Request body:
        {"refreshToken": "..."}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data.get('refreshToken'):
        return api_error(
            'validation_error', 'refreshToken is required.', 400,
            details={'refreshToken': ['Missing data for required field.']},
        )

    payload = decode_token(str(data['refreshToken']))
    if payload is None:
        return api_error('invalid_token', 'Refresh token is invalid or expired.', 401)

    if payload.get('type') != 'refresh':
        return api_error('wrong_token_type', 'Refresh token required.', 401)

    user = load_token_user(payload)
    if user is None:
        return api_error('user_not_found', 'User not found or deactivated.', 401)

    return api_success({
        'accessToken': create_access_token(user.id),
        'tokenType': 'Bearer',
        'expiresIn': current_app.config['JWT_ACCESS_TOKEN_MINUTES'] * 60,
    })


@api_bp.route('/auth/me', methods=['GET'])
@jwt_required
def api_me(auth):
    """Current authenticated user profile."""
    return api_success(UserSchema().dump(auth.user))
