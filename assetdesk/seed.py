"""
Demo data for development and manual testing.

Usage:
    flask seed-demo
"""
from datetime import datetime, date
from decimal import Decimal

from assetdesk.extensions import db
from assetdesk.models import (
    User, UserRole, Brand, ProductType, Vendor, Product, Warehouse,
    Asset, AssetCondition, AssetStatus, Venue, Contact, Gig, GigStaff, GigAsset,
)


# =============================================================================
# Demo Data
# =============================================================================

USERS_DATA = [
    {'email': 'admin@example.com', 'name': 'Admin User', 'role': UserRole.ADMIN, 'password': 'admin123'},
    {'email': 'manager@example.com', 'name': 'Manager User', 'role': UserRole.MANAGER, 'password': 'manager123'},
    {'email': 'user@example.com', 'name': 'Regular User', 'role': UserRole.USER, 'password': 'user123'},
]

BRANDS_DATA = [
    {'name': 'Shure', 'description': 'Professional audio equipment', 'website': 'https://www.shure.com'},
    {'name': 'QSC', 'description': 'Professional audio systems', 'website': 'https://www.qsc.com'},
]

PRODUCT_TYPES_DATA = [
    {'name': 'Microphone', 'description': 'Audio input devices'},
    {'name': 'Speaker', 'description': 'Audio output devices'},
]


def seed_demo_data():
    """
    Create the demo dataset in one transaction.

    Returns:
        Dict of created row counts, empty when the demo admin already exists.
    """
    if User.query.filter_by(email=USERS_DATA[0]['email']).first():
        return {}

    users = {}
    for data in USERS_DATA:
        user = User(email=data['email'], name=data['name'], role=data['role'])
        user.set_password(data['password'])
        db.session.add(user)
        users[data['role']] = user

    shure, qsc = [Brand(**data) for data in BRANDS_DATA]
    microphone, speaker = [ProductType(**data) for data in PRODUCT_TYPES_DATA]
    vendor = Vendor(
        name='Audio Solutions Inc',
        description='Professional audio equipment supplier',
        website='https://www.audiosolutions.com',
        contact_email='sales@audiosolutions.com',
        contact_phone='+1-555-0123',
    )

    sm58 = Product(
        name='SM58 Dynamic Microphone',
        brand=shure,
        type=microphone,
        description='Industry standard vocal microphone',
        model_number='SM58',
        default_price=Decimal('99.99'),
    )
    k12 = Product(
        name='K12.2 Active Speaker',
        brand=qsc,
        type=speaker,
        description='12-inch active loudspeaker',
        model_number='K12.2',
        default_price=Decimal('699.99'),
    )

    warehouse = Warehouse(
        name='Main Warehouse',
        description='Primary equipment storage facility',
        address1='123 Storage St',
        city='Equipment City',
        state='CA',
        zip='90210',
        created_by=users[UserRole.ADMIN],
    )

    mic = Asset(
        product=sm58,
        asset_tag='MIC001',
        serial_number='SM58-123456',
        purchase_date=date(2023, 1, 15),
        purchase_price=Decimal('99.99'),
        vendor=vendor,
        barcode='123456789012',
        warehouse=warehouse,
        location='Rack A1',
        condition=AssetCondition.EXCELLENT,
        status=AssetStatus.AVAILABLE,
    )
    spk = Asset(
        product=k12,
        asset_tag='SPK001',
        serial_number='K12-789012',
        purchase_date=date(2023, 2, 20),
        purchase_price=Decimal('699.99'),
        vendor=vendor,
        barcode='123456789013',
        warehouse=warehouse,
        location='Floor B2',
        condition=AssetCondition.GOOD,
        status=AssetStatus.AVAILABLE,
    )

    venue = Venue(
        name='Grand Concert Hall',
        address1='456 Music Ave',
        city='Concert City',
        state='CA',
        zip='90211',
        phone='+1-555-0456',
        created_by=users[UserRole.ADMIN],
    )
    contact = Contact(
        name='John Smith',
        phone='+1-555-0789',
        email='john.smith@example.com',
        notes='Venue manager',
        created_by=users[UserRole.ADMIN],
    )

    gig = Gig(
        name='Rock Concert 2024',
        start_time=datetime(2024, 3, 15, 19, 0),
        end_time=datetime(2024, 3, 15, 23, 0),
        venue=venue,
        contact=contact,
        notes='Main stage setup required',
        created_by=users[UserRole.ADMIN],
    )
    gig.staff = [GigStaff(user=users[UserRole.USER])]
    gig.assets = [GigAsset(asset=mic, assigned_by=users[UserRole.ADMIN])]

    db.session.add_all([shure, qsc, microphone, speaker, vendor, sm58, k12,
                        warehouse, mic, spk, venue, contact, gig])
    db.session.commit()

    return {
        'users': len(users),
        'brands': 2,
        'product types': 2,
        'vendors': 1,
        'products': 2,
        'warehouses': 1,
        'assets': 2,
        'venues': 1,
        'contacts': 1,
        'gigs': 1,
    }
