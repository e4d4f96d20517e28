"""
Marshmallow schemas for API serialization and request validation.
Converts SQLAlchemy models to JSON-safe dictionaries and validates payloads.
Wire keys are camelCase; attribute names stay snake_case.
"""
from marshmallow import Schema, fields, validate, validates_schema, post_load, ValidationError

from assetdesk.models.asset import Asset, AssetStatus, AssetCondition
from assetdesk.models.user import UserRole
from assetdesk.utils.timezone import to_utc_naive, isoformat_utc


def camelcase(name):
    """'start_time' -> 'startTime'."""
    head, *tail = name.split('_')
    return head + ''.join(part.title() for part in tail)


class UTCDateTime(fields.DateTime):
    """Naive UTC datetimes in the database, ISO-8601 with a Z suffix on the wire."""

    def _serialize(self, value, attr, obj, **kwargs):
        return isoformat_utc(value)


# ── Shared helpers ──────────────────────────────────────────

class BaseSchema(Schema):
    """Base schema: snake_case attributes exposed as camelCase keys."""

    def on_bind_field(self, field_name, field_obj):
        field_obj.data_key = camelcase(field_obj.data_key or field_name)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# ── User ────────────────────────────────────────────────────

class UserMinimalSchema(BaseSchema):
    """Minimal user representation (for nested references)."""
    id = fields.Int(dump_only=True)
    name = fields.Str()
    email = fields.Str()


class UserSchema(BaseSchema):
    """Full user representation."""
    id = fields.Int(dump_only=True)
    email = fields.Email()
    name = fields.Str()
    role = fields.Method('get_role')
    role_label = fields.Str(dump_only=True)
    is_active = fields.Bool()
    created_at = UTCDateTime(dump_only=True)
    last_login = UTCDateTime(dump_only=True)

    def get_role(self, obj):
        return obj.role.value if obj.role else None


class UserCreateSchema(BaseSchema):
    """Payload for creating a user account."""
    email = fields.Email(required=True)
    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    role = fields.Str(load_default=UserRole.USER.value, validate=validate.OneOf(_enum_values(UserRole)))
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=8))

    @post_load
    def normalize(self, data, **kwargs):
        data['email'] = data['email'].strip().lower()
        data['role'] = UserRole(data['role'])
        return data


# ── Catalog ─────────────────────────────────────────────────

class BrandSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    description = fields.Str(allow_none=True)
    website = fields.Str(allow_none=True)


class ProductTypeSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    description = fields.Str(allow_none=True)


class ProductSchema(BaseSchema):
    """Product with its brand and type."""
    id = fields.Int(dump_only=True)
    name = fields.Str(required=True, validate=validate.Length(min=1, max=150))
    brand_id = fields.Int(strict=True, allow_none=True, load_default=None)
    type_id = fields.Int(strict=True, allow_none=True, load_default=None)
    description = fields.Str(allow_none=True)
    model_number = fields.Str(allow_none=True)
    default_price = fields.Float(allow_none=True)
    brand = fields.Nested(BrandSchema, dump_only=True)
    type = fields.Nested(ProductTypeSchema, dump_only=True)


class VendorSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    description = fields.Str(allow_none=True)
    website = fields.Str(allow_none=True)
    contact_email = fields.Email(allow_none=True)
    contact_phone = fields.Str(allow_none=True)
    created_at = UTCDateTime(dump_only=True)


class VendorMinimalSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    name = fields.Str()


# ── Warehouse ───────────────────────────────────────────────

class WarehouseMinimalSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    name = fields.Str()


class WarehouseSchema(BaseSchema):
    """Warehouse with asset count."""
    id = fields.Int(dump_only=True)
    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    description = fields.Str(allow_none=True)
    address1 = fields.Str(required=True, validate=validate.Length(min=1, max=255))
    address2 = fields.Str(allow_none=True)
    city = fields.Str(allow_none=True)
    state = fields.Str(allow_none=True)
    zip = fields.Str(allow_none=True)
    asset_count = fields.Int(dump_only=True)
    created_at = UTCDateTime(dump_only=True)


# ── Asset ───────────────────────────────────────────────────

class AssetSchema(BaseSchema):
    """Asset representation with product, warehouse and vendor."""
    id = fields.Int(dump_only=True)
    asset_tag = fields.Str()
    serial_number = fields.Str()
    barcode = fields.Str()
    purchase_date = fields.Date()
    purchase_price = fields.Float()
    condition = fields.Method('get_condition')
    status = fields.Method('get_status')
    location = fields.Str()
    notes = fields.Str()
    product = fields.Nested(ProductSchema, dump_only=True)
    warehouse = fields.Nested(WarehouseMinimalSchema, dump_only=True)
    vendor = fields.Nested(VendorMinimalSchema, dump_only=True)
    created_at = UTCDateTime(dump_only=True)

    def get_condition(self, obj):
        return obj.condition.value if obj.condition else None

    def get_status(self, obj):
        return obj.status.value if obj.status else None


class AssetDetailSchema(AssetSchema):
    """Asset with its booking history, most recent gig first."""
    gig_assignments = fields.Method('get_gig_assignments')

    def get_gig_assignments(self, obj):
        assignments = sorted(obj.gig_assignments, key=lambda a: a.gig.start_time, reverse=True)
        return [
            {
                'id': a.id,
                'gig': {
                    'id': a.gig.id,
                    'name': a.gig.name,
                    'startTime': isoformat_utc(a.gig.start_time),
                    'endTime': isoformat_utc(a.gig.end_time),
                },
                'assignedAt': isoformat_utc(a.assigned_at),
            }
            for a in assignments
        ]


class AssetMinimalSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    asset_tag = fields.Str()
    barcode = fields.Str()
    status = fields.Method('get_status')
    product_name = fields.Method('get_product_name')

    def get_status(self, obj):
        return obj.status.value if obj.status else None

    def get_product_name(self, obj):
        return obj.product.name if obj.product else None


class AssetCreateSchema(BaseSchema):
    """Payload for registering a new asset."""
    asset_tag = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    product_id = fields.Int(strict=True, required=True)
    warehouse_id = fields.Int(strict=True, required=True)
    vendor_id = fields.Int(strict=True, allow_none=True, load_default=None)
    serial_number = fields.Str(allow_none=True)
    purchase_date = fields.Date(allow_none=True)
    purchase_price = fields.Float(allow_none=True, validate=validate.Range(min=0))
    barcode = fields.Str(allow_none=True)
    notes = fields.Str(allow_none=True)
    location = fields.Str(allow_none=True)
    condition = fields.Str(
        load_default=AssetCondition.GOOD.value,
        validate=validate.OneOf(_enum_values(AssetCondition))
    )
    status = fields.Str(
        load_default=AssetStatus.AVAILABLE.value,
        validate=validate.OneOf(_enum_values(AssetStatus))
    )

    @post_load
    def to_enums(self, data, **kwargs):
        data['condition'] = AssetCondition(data['condition'])
        data['status'] = AssetStatus(data['status'])
        return data


class ConditionUpdateSchema(BaseSchema):
    """Payload for recording an asset condition check."""
    condition = fields.Str(required=True, validate=validate.OneOf(_enum_values(AssetCondition)))
    notes = fields.Str(allow_none=True, load_default=None)

    @post_load
    def to_enum(self, data, **kwargs):
        data['condition'] = AssetCondition(data['condition'])
        return data


class WarehouseDetailSchema(WarehouseSchema):
    """Warehouse with its assets."""
    assets = fields.Method('get_assets')

    def get_assets(self, obj):
        assets = obj.assets.order_by(Asset.asset_tag).all()
        return AssetSchema(many=True, exclude=('warehouse',)).dump(assets)


# ── Venue / Contact ─────────────────────────────────────────

class VenueSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    address1 = fields.Str(allow_none=True)
    address2 = fields.Str(allow_none=True)
    city = fields.Str(allow_none=True)
    state = fields.Str(allow_none=True)
    zip = fields.Str(allow_none=True)
    phone = fields.Str(allow_none=True)
    created_at = UTCDateTime(dump_only=True)


class VenueMinimalSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    name = fields.Str()


class ContactSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    phone = fields.Str(allow_none=True)
    email = fields.Email(allow_none=True)
    notes = fields.Str(allow_none=True)
    created_at = UTCDateTime(dump_only=True)


class ContactMinimalSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    name = fields.Str()


# ── Gig ─────────────────────────────────────────────────────

class GigStaffSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    user = fields.Nested(UserMinimalSchema, dump_only=True)
    assigned_at = UTCDateTime(dump_only=True)


class GigAssetSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    asset = fields.Nested(AssetMinimalSchema, dump_only=True)
    assigned_by = fields.Nested(UserMinimalSchema, dump_only=True)
    assigned_at = UTCDateTime(dump_only=True)


class GigSummarySchema(BaseSchema):
    """Gig list entry: venue and contact names plus assignment counts."""
    id = fields.Int(dump_only=True)
    name = fields.Str()
    start_time = UTCDateTime()
    end_time = UTCDateTime()
    notes = fields.Str()
    venue = fields.Nested(VenueMinimalSchema, dump_only=True)
    contact = fields.Nested(ContactMinimalSchema, dump_only=True)
    staff_count = fields.Int(dump_only=True)
    asset_count = fields.Int(dump_only=True)
    created_at = UTCDateTime(dump_only=True)


class GigSchema(GigSummarySchema):
    """Full gig with resolved venue, contact, staff and assets."""
    venue = fields.Nested(VenueSchema, dump_only=True)
    contact = fields.Nested(ContactSchema, dump_only=True)
    created_by = fields.Nested(UserMinimalSchema, dump_only=True)
    staff = fields.Nested(GigStaffSchema, many=True, dump_only=True)
    assets = fields.Nested(GigAssetSchema, many=True, dump_only=True)


class GigCreateSchema(BaseSchema):
    """
    Booking request.

    Timestamps must carry an offset ('2024-03-15T19:00:00Z'); they are
    normalized to naive UTC on load.
    """
    name = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    start_time = fields.AwareDateTime(required=True)
    end_time = fields.AwareDateTime(required=True)
    venue_id = fields.Int(strict=True, allow_none=True, load_default=None)
    contact_id = fields.Int(strict=True, allow_none=True, load_default=None)
    notes = fields.Str(allow_none=True, load_default=None)
    staff_ids = fields.List(fields.Int(strict=True), load_default=list)
    asset_ids = fields.List(fields.Int(strict=True), load_default=list)

    @validates_schema
    def validate_window(self, data, **kwargs):
        start, end = data.get('start_time'), data.get('end_time')
        if start and end and end <= start:
            raise ValidationError('endTime must be after startTime.', 'endTime')

    @post_load
    def to_utc(self, data, **kwargs):
        for attr, key in (('start_time', 'startTime'), ('end_time', 'endTime')):
            try:
                data[attr] = to_utc_naive(data[attr])
            except OverflowError:
                raise ValidationError('Timestamp out of range.', key)
        return data
