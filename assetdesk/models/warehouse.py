"""
Warehouse model.
"""
from datetime import datetime

from assetdesk.extensions import db


class Warehouse(db.Model):
    """Storage location owning a set of assets."""

    __tablename__ = 'warehouses'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    description = db.Column(db.Text)
    address1 = db.Column(db.String(255), nullable=False)
    address2 = db.Column(db.String(255))
    city = db.Column(db.String(100))
    state = db.Column(db.String(100))
    zip = db.Column(db.String(20))

    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    created_by = db.relationship('User', foreign_keys=[created_by_id])
    assets = db.relationship('Asset', back_populates='warehouse', lazy='dynamic')

    def __repr__(self):
        return f'<Warehouse {self.name}>'

    @property
    def asset_count(self):
        return self.assets.count()

    @property
    def full_address(self):
        """Return formatted full address."""
        parts = [self.address1, self.address2, self.city, self.state, self.zip]
        return ', '.join(filter(None, parts))
