"""
Asset and AssetConditionLog models.
Assets are physical equipment items tracked by tag, barcode and serial number.
"""
import enum
from datetime import datetime

from assetdesk.extensions import db


class AssetStatus(enum.Enum):
    """Availability status of an asset."""
    AVAILABLE = 'available'
    IN_USE = 'in-use'
    MAINTENANCE = 'maintenance'
    RETIRED = 'retired'


class AssetCondition(enum.Enum):
    """Physical condition rating."""
    EXCELLENT = 'excellent'
    GOOD = 'good'
    FAIR = 'fair'
    POOR = 'poor'


class Asset(db.Model):
    """A trackable physical item, owned by exactly one warehouse."""

    __tablename__ = 'assets'

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False)
    asset_tag = db.Column(db.String(50), unique=True, nullable=False, index=True)
    serial_number = db.Column(db.String(100))
    barcode = db.Column(db.String(100), index=True)

    # Purchase
    purchase_date = db.Column(db.Date)
    purchase_price = db.Column(db.Numeric(10, 2))
    vendor_id = db.Column(db.Integer, db.ForeignKey('vendors.id'), nullable=True)

    # State
    condition = db.Column(db.Enum(AssetCondition), default=AssetCondition.GOOD, nullable=False)
    status = db.Column(db.Enum(AssetStatus), default=AssetStatus.AVAILABLE, nullable=False, index=True)

    # Location
    warehouse_id = db.Column(db.Integer, db.ForeignKey('warehouses.id'), nullable=False, index=True)
    location = db.Column(db.String(100))  # Shelf / rack inside the warehouse
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    product = db.relationship('Product', back_populates='assets')
    vendor = db.relationship('Vendor', back_populates='assets')
    warehouse = db.relationship('Warehouse', back_populates='assets')
    gig_assignments = db.relationship(
        'GigAsset',
        back_populates='asset',
        cascade='all, delete-orphan'
    )
    condition_logs = db.relationship(
        'AssetConditionLog',
        back_populates='asset',
        cascade='all, delete-orphan',
        order_by='AssetConditionLog.recorded_at.desc()'
    )

    def __repr__(self):
        return f'<Asset {self.asset_tag}>'


class AssetConditionLog(db.Model):
    """History of condition changes recorded against an asset."""

    __tablename__ = 'asset_condition_logs'

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('assets.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    condition = db.Column(db.Enum(AssetCondition), nullable=False)
    notes = db.Column(db.Text)
    recorded_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    asset = db.relationship('Asset', back_populates='condition_logs')
    user = db.relationship('User')

    def __repr__(self):
        return f'<AssetConditionLog {self.asset_id} {self.condition.value}>'

    @property
    def description(self):
        """Activity feed line for this log entry."""
        who = self.user.name if self.user else 'Unknown'
        what = self.asset.product.name if self.asset and self.asset.product else 'asset'
        return f'{who} updated {what} condition to {self.condition.value}'
