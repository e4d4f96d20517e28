"""
SQLAlchemy models for AssetDesk.
All models are imported here for easy access.
"""
from assetdesk.models.user import User, UserRole, ROLE_LABELS, ROLE_HIERARCHY
from assetdesk.models.warehouse import Warehouse
from assetdesk.models.catalog import Vendor, Brand, ProductType, Product
from assetdesk.models.asset import Asset, AssetConditionLog, AssetStatus, AssetCondition
from assetdesk.models.venue import Venue, Contact
from assetdesk.models.gig import Gig, GigStaff, GigAsset
# AuditLog lives in assetdesk/utils/audit.py; imported so metadata knows the table
from assetdesk.utils.audit import AuditLog

__all__ = [
    # User & Auth
    'User',
    'UserRole',
    'ROLE_LABELS',
    'ROLE_HIERARCHY',
    # Inventory
    'Warehouse',
    'Vendor',
    'Brand',
    'ProductType',
    'Product',
    'Asset',
    'AssetConditionLog',
    'AssetStatus',
    'AssetCondition',
    # Directory
    'Venue',
    'Contact',
    # Scheduling
    'Gig',
    'GigStaff',
    'GigAsset',
    # Audit
    'AuditLog',
]
