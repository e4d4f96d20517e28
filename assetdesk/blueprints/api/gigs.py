"""
API v1 Routes: gig booking and gig listing.
"""
from flask import jsonify
from sqlalchemy import desc
from sqlalchemy.orm import joinedload, selectinload

from assetdesk.blueprints.api import api_bp
from assetdesk.blueprints.api.decorators import jwt_required, requires_api_access
from assetdesk.blueprints.api.helpers import paginate_query, api_error, api_success, load_json
from assetdesk.blueprints.api.schemas import GigSchema, GigSummarySchema, GigCreateSchema
from assetdesk.extensions import db
from assetdesk.models.asset import Asset
from assetdesk.models.gig import Gig, GigStaff, GigAsset
from assetdesk.models.user import UserRole
from assetdesk.services.booking_service import BookingService, BookingValidationError
from assetdesk.utils.audit import log_create


def _gig_detail_query():
    return Gig.query.options(
        joinedload(Gig.venue),
        joinedload(Gig.contact),
        joinedload(Gig.created_by),
        selectinload(Gig.staff).joinedload(GigStaff.user),
        selectinload(Gig.assets).joinedload(GigAsset.asset).joinedload(Asset.product),
        selectinload(Gig.assets).joinedload(GigAsset.assigned_by),
    )


@api_bp.route('/gigs', methods=['GET'])
@jwt_required
def api_list_gigs(auth):
    """List gigs, latest start first.

    Query params:
        page, perPage: Pagination
    """
    query = Gig.query.options(
        joinedload(Gig.venue),
        joinedload(Gig.contact),
        selectinload(Gig.staff),
        selectinload(Gig.assets),
    ).order_by(desc(Gig.start_time), desc(Gig.id))

    return jsonify(paginate_query(query, GigSummarySchema())), 200


@api_bp.route('/gigs/<int:gig_id>', methods=['GET'])
@jwt_required
def api_get_gig(gig_id, auth):
    """Gig with venue, contact, staff and assets."""
    gig = _gig_detail_query().filter(Gig.id == gig_id).first()
    if gig is None:
        return api_error('not_found', 'Gig not found.', 404)
    return api_success(GigSchema().dump(gig))


@api_bp.route('/gigs', methods=['POST'])
@requires_api_access(UserRole.MANAGER)
def api_create_gig(auth):
    """Book a gig with staff and asset assignments.

    Request body:
        {"name": "...", "startTime": "2024-03-15T19:00:00Z", "endTime": "...",
         "venueId": 1, "contactId": null, "notes": "...",
         "staffIds": [..], "assetIds": [..]}

    Returns:
        201 {"data": gig} or 400 when a staff member or asset is double-booked
    """
    data, error = load_json(GigCreateSchema())
    if error:
        return error

    try:
        gig, result = BookingService.create_gig(
            name=data['name'],
            start_time=data['start_time'],
            end_time=data['end_time'],
            created_by=auth.user,
            venue_id=data['venue_id'],
            contact_id=data['contact_id'],
            notes=data['notes'],
            staff_ids=data['staff_ids'],
            asset_ids=data['asset_ids'],
        )
    except BookingValidationError as e:
        details = {e.field: [e.message]} if e.field else None
        return api_error('validation_error', e.message, 400, details=details)

    if not result.is_clear:
        conflict = result.conflict
        return api_error('scheduling_conflict', conflict.message, 400, conflict=conflict.to_dict())

    log_create('Gig', gig.id, auth.user, details={
        'name': gig.name,
        'staffIds': list(dict.fromkeys(data['staff_ids'])),
        'assetIds': list(dict.fromkeys(data['asset_ids'])),
    })

    db.session.expire_all()
    gig = _gig_detail_query().filter(Gig.id == gig.id).one()
    return api_success(GigSchema().dump(gig), 201)
