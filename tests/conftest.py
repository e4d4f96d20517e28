# =============================================================================
# AssetDesk - Pytest Fixtures Configuration
# =============================================================================

import pytest
from datetime import datetime
from decimal import Decimal

from assetdesk import create_app
from assetdesk.blueprints.api.decorators import create_access_token
from assetdesk.extensions import db
from assetdesk.models.user import User, UserRole
from assetdesk.models.warehouse import Warehouse
from assetdesk.models.catalog import Brand, ProductType, Product, Vendor
from assetdesk.models.asset import Asset, AssetCondition, AssetStatus
from assetdesk.models.venue import Venue, Contact
from assetdesk.models.gig import Gig, GigStaff, GigAsset


# Gig A of the booking scenarios: 2024-03-15 19:00 to 23:00 UTC
GIG_A_START = datetime(2024, 3, 15, 19, 0)
GIG_A_END = datetime(2024, 3, 15, 23, 0)


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture(scope='function')
def app():
    """Create and configure test application with SQLite in-memory database."""
    application = create_app('testing')

    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Test client for HTTP requests."""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    """CLI test runner."""
    return app.test_cli_runner()


def _refetch(model, obj):
    obj_id = obj.id
    db.session.expire_all()
    return db.session.get(model, obj_id)


# =============================================================================
# User Fixtures
# =============================================================================

def _make_user(email, name, role, password):
    user = User(email=email, name=name, role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return _refetch(User, user)


@pytest.fixture
def admin_user(app):
    """Create an admin user."""
    return _make_user('admin@test.com', 'Admin User', UserRole.ADMIN, 'AdminPass123!')


@pytest.fixture
def manager_user(app):
    """Create a manager user."""
    return _make_user('manager@test.com', 'Manager User', UserRole.MANAGER, 'ManagerPass123!')


@pytest.fixture
def regular_user(app):
    """Create a regular user (can be staffed, cannot book)."""
    return _make_user('user@test.com', 'Regular User', UserRole.USER, 'UserPass123!')


@pytest.fixture
def second_user(app):
    """Create another regular user."""
    return _make_user('crew@test.com', 'Casey Crew', UserRole.USER, 'CrewPass123!')


def auth_header(token):
    """Helper: build Authorization header."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_headers(admin_user):
    return auth_header(create_access_token(admin_user.id))


@pytest.fixture
def manager_headers(manager_user):
    return auth_header(create_access_token(manager_user.id))


@pytest.fixture
def user_headers(regular_user):
    return auth_header(create_access_token(regular_user.id))


# =============================================================================
# Inventory Fixtures
# =============================================================================

@pytest.fixture
def warehouse(app, admin_user):
    """Create the main warehouse."""
    wh = Warehouse(
        name='Main Warehouse',
        address1='123 Storage St',
        city='Equipment City',
        state='CA',
        zip='90210',
        created_by_id=admin_user.id,
    )
    db.session.add(wh)
    db.session.commit()
    return _refetch(Warehouse, wh)


@pytest.fixture
def vendor(app):
    v = Vendor(name='Audio Solutions Inc', contact_email='sales@audiosolutions.com')
    db.session.add(v)
    db.session.commit()
    return _refetch(Vendor, v)


@pytest.fixture
def microphone(app):
    """SM58 product with brand and type."""
    product = Product(
        name='SM58 Dynamic Microphone',
        brand=Brand(name='Shure'),
        type=ProductType(name='Microphone'),
        model_number='SM58',
        default_price=Decimal('99.99'),
    )
    db.session.add(product)
    db.session.commit()
    return _refetch(Product, product)


@pytest.fixture
def speaker(app):
    product = Product(
        name='K12.2 Active Speaker',
        brand=Brand(name='QSC'),
        type=ProductType(name='Speaker'),
        model_number='K12.2',
    )
    db.session.add(product)
    db.session.commit()
    return _refetch(Product, product)


@pytest.fixture
def mic_asset(app, warehouse, microphone, vendor):
    """Asset MIC001."""
    asset = Asset(
        product_id=microphone.id,
        asset_tag='MIC001',
        serial_number='SM58-123456',
        barcode='123456789012',
        vendor_id=vendor.id,
        warehouse_id=warehouse.id,
        location='Rack A1',
        condition=AssetCondition.EXCELLENT,
        status=AssetStatus.AVAILABLE,
    )
    db.session.add(asset)
    db.session.commit()
    return _refetch(Asset, asset)


@pytest.fixture
def speaker_asset(app, warehouse, speaker):
    """Asset SPK001."""
    asset = Asset(
        product_id=speaker.id,
        asset_tag='SPK001',
        barcode='123456789013',
        warehouse_id=warehouse.id,
        location='Floor B2',
        condition=AssetCondition.GOOD,
        status=AssetStatus.MAINTENANCE,
    )
    db.session.add(asset)
    db.session.commit()
    return _refetch(Asset, asset)


# =============================================================================
# Directory / Gig Fixtures
# =============================================================================

@pytest.fixture
def venue(app):
    v = Venue(name='Grand Concert Hall', address1='456 Music Ave', city='Concert City')
    db.session.add(v)
    db.session.commit()
    return _refetch(Venue, v)


@pytest.fixture
def contact(app):
    c = Contact(name='John Smith', email='john.smith@example.com')
    db.session.add(c)
    db.session.commit()
    return _refetch(Contact, c)


@pytest.fixture
def make_gig(app, admin_user):
    """Factory: insert a gig with staff and asset assignments directly."""
    def _make_gig(name, start, end, staff=(), assets=(), venue=None, contact=None):
        gig = Gig(
            name=name,
            start_time=start,
            end_time=end,
            venue_id=venue.id if venue else None,
            contact_id=contact.id if contact else None,
            created_by_id=admin_user.id,
        )
        gig.staff = [GigStaff(user_id=user.id) for user in staff]
        gig.assets = [GigAsset(asset_id=asset.id, assigned_by_id=admin_user.id) for asset in assets]
        db.session.add(gig)
        db.session.commit()
        return _refetch(Gig, gig)
    return _make_gig


@pytest.fixture
def gig_a(make_gig, regular_user, mic_asset, venue):
    """Gig A: 2024-03-15T19:00Z to 23:00Z with the regular user and MIC001."""
    return make_gig('Gig A', GIG_A_START, GIG_A_END,
                    staff=[regular_user], assets=[mic_asset], venue=venue)
