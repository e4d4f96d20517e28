"""
API v1 Routes: assets, warehouses, vendors, brands, product types and products.
"""
from datetime import datetime

from flask import request, jsonify, current_app
from sqlalchemy import desc
from sqlalchemy.orm import joinedload

from assetdesk.blueprints.api import api_bp
from assetdesk.blueprints.api.decorators import jwt_required, requires_api_access
from assetdesk.blueprints.api.helpers import paginate_query, api_error, api_success, load_json
from assetdesk.blueprints.api.schemas import (
    AssetSchema, AssetDetailSchema, AssetCreateSchema, ConditionUpdateSchema,
    WarehouseSchema, WarehouseDetailSchema,
    VendorSchema, BrandSchema, ProductTypeSchema, ProductSchema,
)
from assetdesk.extensions import db
from assetdesk.models.asset import Asset, AssetConditionLog, AssetStatus
from assetdesk.models.catalog import Vendor, Brand, ProductType, Product
from assetdesk.models.gig import Gig, GigAsset
from assetdesk.models.user import UserRole
from assetdesk.models.warehouse import Warehouse
from assetdesk.utils.audit import log_create, log_delete, log_action, AuditAction


def _asset_query():
    return Asset.query.options(
        joinedload(Asset.product).joinedload(Product.brand),
        joinedload(Asset.product).joinedload(Product.type),
        joinedload(Asset.warehouse),
        joinedload(Asset.vendor),
    )


# ── Assets ──────────────────────────────────────────────────

@api_bp.route('/assets', methods=['GET'])
@jwt_required
def api_list_assets(auth):
    """List assets, newest first.

    Query params:
        status (str): available, in-use, maintenance, retired
        barcode (str): Exact barcode match
        warehouseId (int): Filter by warehouse
        page, perPage: Pagination
    """
    query = _asset_query()

    status = request.args.get('status')
    if status:
        try:
            query = query.filter(Asset.status == AssetStatus(status))
        except ValueError:
            return api_error('invalid_filter', f'Invalid status: {status}', 400)

    barcode = request.args.get('barcode')
    if barcode:
        query = query.filter(Asset.barcode == barcode)

    warehouse_id = request.args.get('warehouseId', type=int)
    if warehouse_id:
        query = query.filter(Asset.warehouse_id == warehouse_id)

    query = query.order_by(desc(Asset.created_at), desc(Asset.id))

    return jsonify(paginate_query(query, AssetSchema())), 200


@api_bp.route('/assets', methods=['POST'])
@requires_api_access(UserRole.MANAGER)
def api_create_asset(auth):
    """Register a new asset in a warehouse."""
    data, error = load_json(AssetCreateSchema())
    if error:
        return error

    if Asset.query.filter_by(asset_tag=data['asset_tag']).first():
        return api_error(
            'duplicate', f'Asset tag {data["asset_tag"]} is already in use.', 400,
            details={'assetTag': ['Asset tag already exists.']},
        )
    if db.session.get(Product, data['product_id']) is None:
        return api_error('validation_error', 'Unknown product.', 400, details={'productId': ['Product not found.']})
    if db.session.get(Warehouse, data['warehouse_id']) is None:
        return api_error('validation_error', 'Unknown warehouse.', 400, details={'warehouseId': ['Warehouse not found.']})
    if data['vendor_id'] is not None and db.session.get(Vendor, data['vendor_id']) is None:
        return api_error('validation_error', 'Unknown vendor.', 400, details={'vendorId': ['Vendor not found.']})

    asset = Asset(**data)
    db.session.add(asset)
    db.session.commit()

    current_app.logger.info('Asset %s (%s) created by user %s', asset.id, asset.asset_tag, auth.user_id)
    log_create('Asset', asset.id, auth.user, details={'assetTag': asset.asset_tag})

    asset = _asset_query().filter(Asset.id == asset.id).one()
    return api_success(AssetSchema().dump(asset), 201)


@api_bp.route('/assets/<int:asset_id>', methods=['GET'])
@jwt_required
def api_get_asset(asset_id, auth):
    """Asset with its gig assignment history."""
    asset = _asset_query().filter(Asset.id == asset_id).first()
    if asset is None:
        return api_error('not_found', 'Asset not found.', 404)
    return api_success(AssetDetailSchema().dump(asset))


@api_bp.route('/assets/<int:asset_id>/condition', methods=['POST'])
@jwt_required
def api_record_condition(asset_id, auth):
    """Record a condition check and update the asset's condition."""
    asset = db.session.get(Asset, asset_id)
    if asset is None:
        return api_error('not_found', 'Asset not found.', 404)

    data, error = load_json(ConditionUpdateSchema())
    if error:
        return error

    entry = AssetConditionLog(
        asset=asset,
        user_id=auth.user_id,
        condition=data['condition'],
        notes=data['notes'],
    )
    asset.condition = data['condition']
    db.session.add(entry)
    db.session.commit()

    log_action(AuditAction.UPDATE, 'Asset', asset.id, {'condition': data['condition'].value}, auth.user)

    return api_success({
        'id': entry.id,
        'assetId': asset.id,
        'condition': entry.condition.value,
        'notes': entry.notes,
        'description': entry.description,
    }, 201)


@api_bp.route('/assets/<int:asset_id>', methods=['DELETE'])
@requires_api_access(UserRole.MANAGER)
def api_delete_asset(asset_id, auth):
    """Delete an asset that is not booked on a current or future gig."""
    asset = db.session.get(Asset, asset_id)
    if asset is None:
        return api_error('not_found', 'Asset not found.', 404)

    booked = db.session.query(Gig.id).join(
        GigAsset, GigAsset.gig_id == Gig.id
    ).filter(
        GigAsset.asset_id == asset.id,
        Gig.end_time >= datetime.utcnow(),
    ).first()
    if booked:
        return api_error(
            'delete_blocked', 'Asset is assigned to a current or upcoming gig and cannot be deleted.', 400
        )

    asset_tag = asset.asset_tag
    db.session.delete(asset)
    db.session.commit()

    current_app.logger.info('Asset %s (%s) deleted by user %s', asset_id, asset_tag, auth.user_id)
    log_delete('Asset', asset_id, auth.user, details={'assetTag': asset_tag})

    return api_success({'id': asset_id, 'deleted': True})


# ── Warehouses ──────────────────────────────────────────────

@api_bp.route('/warehouses', methods=['GET'])
@jwt_required
def api_list_warehouses(auth):
    """Warehouses ordered by name, with asset counts."""
    warehouses = Warehouse.query.order_by(Warehouse.name).all()
    return api_success(WarehouseSchema(many=True).dump(warehouses))


@api_bp.route('/warehouses', methods=['POST'])
@requires_api_access(UserRole.MANAGER)
def api_create_warehouse(auth):
    data, error = load_json(WarehouseSchema())
    if error:
        return error

    if Warehouse.query.filter_by(name=data['name']).first():
        return api_error(
            'duplicate', 'A warehouse with this name already exists.', 400,
            details={'name': ['Warehouse name already exists.']},
        )

    warehouse = Warehouse(created_by_id=auth.user_id, **data)
    db.session.add(warehouse)
    db.session.commit()

    log_create('Warehouse', warehouse.id, auth.user, details={'name': warehouse.name})
    return api_success(WarehouseSchema().dump(warehouse), 201)


@api_bp.route('/warehouses/<int:warehouse_id>', methods=['GET'])
@jwt_required
def api_get_warehouse(warehouse_id, auth):
    warehouse = db.session.get(Warehouse, warehouse_id)
    if warehouse is None:
        return api_error('not_found', 'Warehouse not found.', 404)
    return api_success(WarehouseDetailSchema().dump(warehouse))


@api_bp.route('/warehouses/<int:warehouse_id>', methods=['DELETE'])
@requires_api_access(UserRole.MANAGER)
def api_delete_warehouse(warehouse_id, auth):
    """Delete an empty warehouse."""
    warehouse = db.session.get(Warehouse, warehouse_id)
    if warehouse is None:
        return api_error('not_found', 'Warehouse not found.', 404)

    if warehouse.asset_count:
        return api_error(
            'delete_blocked', 'Warehouse still holds assets. Move or delete them first.', 400
        )

    name = warehouse.name
    db.session.delete(warehouse)
    db.session.commit()

    current_app.logger.info('Warehouse %s (%s) deleted by user %s', warehouse_id, name, auth.user_id)
    log_delete('Warehouse', warehouse_id, auth.user, details={'name': name})

    return api_success({'id': warehouse_id, 'deleted': True})


# ── Vendors ─────────────────────────────────────────────────

@api_bp.route('/vendors', methods=['GET'])
@jwt_required
def api_list_vendors(auth):
    vendors = Vendor.query.order_by(Vendor.name).all()
    return api_success(VendorSchema(many=True).dump(vendors))


@api_bp.route('/vendors', methods=['POST'])
@requires_api_access(UserRole.MANAGER)
def api_create_vendor(auth):
    data, error = load_json(VendorSchema())
    if error:
        return error

    vendor = Vendor(**data)
    db.session.add(vendor)
    db.session.commit()

    log_create('Vendor', vendor.id, auth.user, details={'name': vendor.name})
    return api_success(VendorSchema().dump(vendor), 201)


# ── Brands / Product types ──────────────────────────────────

@api_bp.route('/brands', methods=['GET'])
@jwt_required
def api_list_brands(auth):
    brands = Brand.query.order_by(Brand.name).all()
    return api_success(BrandSchema(many=True).dump(brands))


@api_bp.route('/brands', methods=['POST'])
@requires_api_access(UserRole.MANAGER)
def api_create_brand(auth):
    data, error = load_json(BrandSchema())
    if error:
        return error

    if Brand.query.filter_by(name=data['name']).first():
        return api_error('duplicate', 'A brand with this name already exists.', 400,
                         details={'name': ['Brand name already exists.']})

    brand = Brand(**data)
    db.session.add(brand)
    db.session.commit()
    return api_success(BrandSchema().dump(brand), 201)


@api_bp.route('/product-types', methods=['GET'])
@jwt_required
def api_list_product_types(auth):
    types = ProductType.query.order_by(ProductType.name).all()
    return api_success(ProductTypeSchema(many=True).dump(types))


@api_bp.route('/product-types', methods=['POST'])
@requires_api_access(UserRole.MANAGER)
def api_create_product_type(auth):
    data, error = load_json(ProductTypeSchema())
    if error:
        return error

    if ProductType.query.filter_by(name=data['name']).first():
        return api_error('duplicate', 'A product type with this name already exists.', 400,
                         details={'name': ['Product type name already exists.']})

    product_type = ProductType(**data)
    db.session.add(product_type)
    db.session.commit()
    return api_success(ProductTypeSchema().dump(product_type), 201)


# ── Products ────────────────────────────────────────────────

@api_bp.route('/products', methods=['GET'])
@jwt_required
def api_list_products(auth):
    products = Product.query.options(
        joinedload(Product.brand),
        joinedload(Product.type),
    ).order_by(Product.name).all()
    return api_success(ProductSchema(many=True).dump(products))


@api_bp.route('/products', methods=['POST'])
@requires_api_access(UserRole.MANAGER)
def api_create_product(auth):
    data, error = load_json(ProductSchema())
    if error:
        return error

    if data['brand_id'] is not None and db.session.get(Brand, data['brand_id']) is None:
        return api_error('validation_error', 'Unknown brand.', 400, details={'brandId': ['Brand not found.']})
    if data['type_id'] is not None and db.session.get(ProductType, data['type_id']) is None:
        return api_error('validation_error', 'Unknown product type.', 400, details={'typeId': ['Product type not found.']})

    product = Product(**data)
    db.session.add(product)
    db.session.commit()

    log_create('Product', product.id, auth.user, details={'name': product.name})
    return api_success(ProductSchema().dump(product), 201)
