"""
AssetDesk Application Factory.
Creates and configures the Flask application instance.
"""
import os
import json
import logging
import uuid
from datetime import datetime, timezone

import click
from flask import Flask, jsonify, request, g
from marshmallow import ValidationError

from assetdesk.config import config
from assetdesk.extensions import init_extensions, db


def _init_sentry(app):
    """Initialize Sentry error tracking for production."""
    dsn = app.config.get('SENTRY_DSN') or os.environ.get('SENTRY_DSN')
    if not dsn:
        app.logger.info('SENTRY_DSN not set, error tracking disabled.')
        return

    try:
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration
        from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

        sentry_sdk.init(
            dsn=dsn,
            integrations=[FlaskIntegration(), SqlalchemyIntegration()],
            traces_sample_rate=float(os.environ.get('SENTRY_TRACES_RATE', '0.1')),
            environment=os.environ.get('FLASK_ENV', 'production'),
            send_default_pii=False,
        )
        app.logger.info('Sentry error tracking initialized.')
    except ImportError:
        app.logger.warning('sentry-sdk not installed, error tracking disabled.')


def create_app(config_name=None):
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration to use (development, testing, production)

    Returns:
        Configured Flask application instance
    """
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)

    # Load configuration
    config_class = config[config_name]
    app.config.from_object(config_class)

    if config_name == 'production':
        _init_sentry(app)

    # Production validation happens here
    if hasattr(config_class, 'init_app'):
        config_class.init_app(app)

    init_extensions(app)

    # Enable response compression (gzip)
    from flask_compress import Compress
    Compress(app)

    register_blueprints(app)
    register_error_handlers(app)
    register_cli_commands(app)
    configure_logging(app)
    register_security_headers(app)

    # Create database tables (development only)
    if config_name == 'development':
        with app.app_context():
            db.create_all()

    return app


def register_blueprints(app):
    """Register all application blueprints."""
    # REST API v1: JWT auth, no CSRF needed
    from assetdesk.blueprints.api import api_bp

    app.register_blueprint(api_bp, url_prefix='/api/v1')


def _error(code, message, status, **extra):
    body = {'error': message, 'code': code}
    body.update(extra)
    return jsonify(body), status


def register_error_handlers(app):
    """Register JSON error handlers for common HTTP errors."""

    @app.errorhandler(400)
    def bad_request(error):
        return _error('bad_request', getattr(error, 'description', None) or 'Bad request.', 400)

    @app.errorhandler(ValidationError)
    def validation_error(error):
        return _error('validation_error', 'Validation failed', 400, details=error.messages)

    @app.errorhandler(401)
    def unauthorized(error):
        return _error('unauthorized', 'Authentication required.', 401)

    @app.errorhandler(403)
    def forbidden(error):
        return _error('forbidden', 'Access denied.', 403)

    @app.errorhandler(404)
    def not_found(error):
        return _error('not_found', 'Resource not found.', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return _error('method_not_allowed', 'Method not allowed.', 405)

    @app.errorhandler(413)
    def payload_too_large(error):
        return _error('payload_too_large', 'Request body too large.', 413)

    @app.errorhandler(429)
    def ratelimit_error(error):
        return _error('rate_limit_exceeded', 'Too many requests. Try again later.', 429)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        request_id = g.get('request_id', '-')
        app.logger.error('500 Internal Server Error: %s (request_id=%s)', type(error).__name__, request_id, exc_info=True)
        return _error('internal_error', 'Internal server error.', 500, requestId=request_id)


def register_cli_commands(app):
    """Register custom CLI commands."""

    @app.cli.command('init-db')
    def init_db():
        """Create all database tables."""
        db.create_all()
        click.echo('Database tables created.')

    @app.cli.command('seed-demo')
    def seed_demo():
        """Load demo users, inventory and one booked gig."""
        from assetdesk.seed import seed_demo_data

        created = seed_demo_data()
        if not created:
            click.echo('Demo data already present, nothing to do.')
            return
        for label, count in created.items():
            click.echo(f'Created {count} {label}')
        click.echo('Demo data loaded.')

    @app.cli.command('create-user')
    @click.option('--email', prompt=True, help='Login email')
    @click.option('--name', prompt=True, help='Display name')
    @click.option('--role', type=click.Choice(['admin', 'manager', 'user']), default='user', show_default=True)
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
    def create_user(email, name, role, password):
        """Create a user account."""
        from assetdesk.models.user import User, UserRole

        email = email.strip().lower()
        if User.query.filter_by(email=email).first():
            raise click.ClickException(f'User {email} already exists.')
        if len(password) < 8:
            raise click.ClickException('Password must be at least 8 characters.')

        user = User(email=email, name=name, role=UserRole(role))
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        click.echo(f'Created {role} {email} (id={user.id})')


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production (one object per line on stdout)."""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'module': record.module,
            'line': record.lineno,
        }
        try:
            log_entry['request_id'] = g.get('request_id', '-')
        except RuntimeError:
            pass  # Outside request context
        if record.exc_info and record.exc_info[0]:
            log_entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def configure_logging(app):
    """Configure application logging.

    Production: JSON to stdout.
    Development: plain text.
    """

    # Request ID middleware
    @app.before_request
    def assign_request_id():
        g.request_id = request.headers.get('X-Request-ID', str(uuid.uuid4())[:8])

    @app.after_request
    def echo_request_id(response):
        response.headers['X-Request-ID'] = g.get('request_id', '-')
        return response

    if app.testing:
        return

    @app.after_request
    def log_request(response):
        app.logger.info('%s %s %s', request.method, request.path, response.status_code)
        return response

    if not app.debug:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(JSONFormatter())
        stream_handler.setLevel(logging.INFO)

        # Clear existing handlers to avoid duplicates
        app.logger.handlers.clear()
        app.logger.addHandler(stream_handler)
        app.logger.setLevel(logging.INFO)

        app.logger.info('AssetDesk startup (JSON logging)')
    else:
        app.logger.setLevel(logging.DEBUG)
        app.logger.info('AssetDesk startup (development)')


def register_security_headers(app):
    """Register security headers for all responses."""

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response.headers['X-Permitted-Cross-Domain-Policies'] = 'none'

        # HSTS - Force HTTPS (1 year, include subdomains)
        if not app.debug:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        # JSON only: nothing to load, nothing to frame
        response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"
        return response
