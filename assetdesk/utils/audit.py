"""
Audit logging utility for tracking user actions.
The acting user is always passed explicitly by the caller.
"""
import enum
import logging
from datetime import datetime
from flask import request, has_request_context

from assetdesk.extensions import db

logger = logging.getLogger(__name__)


class AuditAction(enum.Enum):
    """Audited action types."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"


class AuditLog(db.Model):
    """Audit log for tracking user actions."""

    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    action = db.Column(db.String(50), nullable=False, index=True)
    entity_type = db.Column(db.String(50), index=True)  # Gig, Asset, Warehouse, User
    entity_id = db.Column(db.Integer)
    details = db.Column(db.JSON)
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(500))
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    user = db.relationship('User', backref=db.backref('audit_logs', lazy='dynamic', passive_deletes=True))

    def __repr__(self):
        return f'<AuditLog {self.action} {self.entity_type} by user {self.user_id}>'


def log_action(action, entity_type=None, entity_id=None, details=None, user=None):
    """
    Log an action to the audit trail.

    Args:
        action: AuditAction or its string value
        entity_type: Type of entity affected (Gig, Asset, ...)
        entity_id: ID of the entity affected
        details: Additional details as dict
        user: User performing the action (None for anonymous attempts)

    Returns:
        The persisted AuditLog, or None if writing it failed.
    """
    if isinstance(action, AuditAction):
        action = action.value

    try:
        audit_entry = AuditLog(
            user_id=user.id if user else None,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        )
        if has_request_context():
            audit_entry.ip_address = request.remote_addr
            if request.user_agent:
                audit_entry.user_agent = request.user_agent.string[:500]
        db.session.add(audit_entry)
        db.session.commit()
        return audit_entry
    except Exception:
        # Audit failures never break the request that triggered them
        db.session.rollback()
        logger.exception('Audit log write failed for %s %s', action, entity_type)
        return None


def log_login(user, success=True, email=None):
    """Log a login attempt."""
    action = AuditAction.LOGIN_SUCCESS if success else AuditAction.LOGIN_FAILED
    return log_action(
        action=action,
        entity_type='User',
        entity_id=user.id if user else None,
        details={'email': email or (user.email if user else None)},
        user=user if success else None
    )


def log_create(entity_type, entity_id, user, details=None):
    """Log entity creation."""
    return log_action(AuditAction.CREATE, entity_type, entity_id, details, user)


def log_delete(entity_type, entity_id, user, details=None):
    """Log entity deletion."""
    return log_action(AuditAction.DELETE, entity_type, entity_id, details, user)
