"""
Gig models: scheduled events with their staff and asset assignments.
All timestamps are stored as naive UTC.
"""
from datetime import datetime

from assetdesk.extensions import db


class Gig(db.Model):
    """A scheduled event occupying the half-open window [start_time, end_time)."""

    __tablename__ = 'gigs'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    start_time = db.Column(db.DateTime, nullable=False, index=True)
    end_time = db.Column(db.DateTime, nullable=False, index=True)
    venue_id = db.Column(db.Integer, db.ForeignKey('venues.id'), nullable=True)
    contact_id = db.Column(db.Integer, db.ForeignKey('contacts.id'), nullable=True)
    notes = db.Column(db.Text)

    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    venue = db.relationship('Venue', back_populates='gigs')
    contact = db.relationship('Contact', back_populates='gigs')
    created_by = db.relationship('User', foreign_keys=[created_by_id])
    staff = db.relationship(
        'GigStaff',
        back_populates='gig',
        cascade='all, delete-orphan',
        order_by='GigStaff.id'
    )
    assets = db.relationship(
        'GigAsset',
        back_populates='gig',
        cascade='all, delete-orphan',
        order_by='GigAsset.id'
    )

    __table_args__ = (
        db.Index('ix_gigs_window', 'start_time', 'end_time'),
    )

    def __repr__(self):
        return f'<Gig {self.name} {self.start_time}-{self.end_time}>'

    @property
    def staff_count(self):
        return len(self.staff)

    @property
    def asset_count(self):
        return len(self.assets)


class GigStaff(db.Model):
    """Staff assignment: a user working a gig."""

    __tablename__ = 'gig_staff'

    id = db.Column(db.Integer, primary_key=True)
    gig_id = db.Column(db.Integer, db.ForeignKey('gigs.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    assigned_at = db.Column(db.DateTime, default=datetime.utcnow)

    gig = db.relationship('Gig', back_populates='staff')
    user = db.relationship('User', back_populates='gig_assignments')

    __table_args__ = (
        db.UniqueConstraint('gig_id', 'user_id', name='uq_gig_staff_user'),
        db.Index('ix_gig_staff_user', 'user_id'),
    )

    def __repr__(self):
        return f'<GigStaff user={self.user_id} gig={self.gig_id}>'


class GigAsset(db.Model):
    """Asset assignment: an asset booked for a gig."""

    __tablename__ = 'gig_assets'

    id = db.Column(db.Integer, primary_key=True)
    gig_id = db.Column(db.Integer, db.ForeignKey('gigs.id', ondelete='CASCADE'), nullable=False)
    asset_id = db.Column(db.Integer, db.ForeignKey('assets.id'), nullable=False)
    assigned_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    assigned_at = db.Column(db.DateTime, default=datetime.utcnow)

    gig = db.relationship('Gig', back_populates='assets')
    asset = db.relationship('Asset', back_populates='gig_assignments')
    assigned_by = db.relationship('User', foreign_keys=[assigned_by_id])

    __table_args__ = (
        db.UniqueConstraint('gig_id', 'asset_id', name='uq_gig_assets_asset'),
        db.Index('ix_gig_assets_asset', 'asset_id'),
    )

    def __repr__(self):
        return f'<GigAsset asset={self.asset_id} gig={self.gig_id}>'
