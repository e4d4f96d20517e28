"""
Venue and Contact models.
"""
from datetime import datetime

from assetdesk.extensions import db


class Venue(db.Model):
    """Venue model for gig locations."""

    __tablename__ = 'venues'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    address1 = db.Column(db.String(255))
    address2 = db.Column(db.String(255))
    city = db.Column(db.String(100))
    state = db.Column(db.String(100))
    zip = db.Column(db.String(20))
    phone = db.Column(db.String(30))

    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    created_by = db.relationship('User', foreign_keys=[created_by_id])
    gigs = db.relationship('Gig', back_populates='venue')

    def __repr__(self):
        return f'<Venue {self.name}>'

    @property
    def full_address(self):
        """Return formatted full address."""
        parts = [self.address1, self.address2, self.city, self.state, self.zip]
        return ', '.join(filter(None, parts))


class Contact(db.Model):
    """Point of contact for a gig (promoter, venue manager, ...)."""

    __tablename__ = 'contacts'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    phone = db.Column(db.String(30))
    email = db.Column(db.String(120))
    notes = db.Column(db.Text)

    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    created_by = db.relationship('User', foreign_keys=[created_by_id])
    gigs = db.relationship('Gig', back_populates='contact')

    def __repr__(self):
        return f'<Contact {self.name}>'
