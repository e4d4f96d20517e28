"""
User model with role-based access control.
"""
from enum import Enum
from datetime import datetime, timedelta
from werkzeug.security import generate_password_hash, check_password_hash

from assetdesk.extensions import db


class UserRole(str, Enum):
    """
    Access roles for permission control.
    Determines what users can do in the application.
    """
    ADMIN = "admin"       # Full access, can manage users
    MANAGER = "manager"   # Can book gigs and manage inventory
    USER = "user"         # Read access, can be staffed on gigs


ROLE_LABELS = {
    UserRole.ADMIN: "Admin",
    UserRole.MANAGER: "Manager",
    UserRole.USER: "User",
}

# Permission hierarchy (lower index = higher access)
ROLE_HIERARCHY = [
    UserRole.ADMIN,
    UserRole.MANAGER,
    UserRole.USER,
]


class User(db.Model):
    """User model with authentication and role management."""

    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(
        db.Enum(UserRole),
        default=UserRole.USER,
        nullable=False,
        index=True
    )
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Account lockout
    failed_login_attempts = db.Column(db.Integer, default=0, nullable=False)
    locked_until = db.Column(db.DateTime, nullable=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login = db.Column(db.DateTime, nullable=True)

    # Relationships
    gig_assignments = db.relationship(
        'GigStaff',
        back_populates='user',
        cascade='all, delete-orphan',
        lazy='dynamic'
    )

    def __repr__(self):
        return f'<User {self.email}>'

    def set_password(self, password):
        """Hash and set user password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Verify password against hash."""
        return check_password_hash(self.password_hash, password)

    def has_access(self, required_role):
        """
        Check if user has at least the required role.
        Uses hierarchy: ADMIN > MANAGER > USER
        """
        if isinstance(required_role, str):
            required_role = UserRole(required_role.lower())
        return ROLE_HIERARCHY.index(self.role) <= ROLE_HIERARCHY.index(required_role)

    def is_admin(self):
        return self.role == UserRole.ADMIN

    @property
    def role_label(self):
        return ROLE_LABELS.get(self.role, str(self.role))

    @property
    def is_locked(self):
        """Check if account is currently locked."""
        if self.locked_until:
            return datetime.utcnow() < self.locked_until
        return False

    def record_failed_login(self, max_attempts=5, lockout_minutes=30):
        """Record a failed login attempt, locking the account at max_attempts."""
        self.failed_login_attempts = (self.failed_login_attempts or 0) + 1
        if self.failed_login_attempts >= max_attempts:
            self.locked_until = datetime.utcnow() + timedelta(minutes=lockout_minutes)

    def reset_failed_logins(self):
        """Reset failed login counter on successful login."""
        self.failed_login_attempts = 0
        self.locked_until = None
        self.last_login = datetime.utcnow()
