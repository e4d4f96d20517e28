"""
API v1 Routes: users, venues and contacts.
"""
from flask import current_app

from assetdesk.blueprints.api import api_bp
from assetdesk.blueprints.api.decorators import jwt_required, requires_api_access
from assetdesk.blueprints.api.helpers import api_error, api_success, load_json
from assetdesk.blueprints.api.schemas import UserSchema, UserCreateSchema, VenueSchema, ContactSchema
from assetdesk.extensions import db
from assetdesk.models.user import User, UserRole
from assetdesk.models.venue import Venue, Contact
from assetdesk.utils.audit import log_create


# ── Users ───────────────────────────────────────────────────

@api_bp.route('/users', methods=['GET'])
@jwt_required
def api_list_users(auth):
    """All users ordered by name (staff pickers need the full list)."""
    users = User.query.order_by(User.name, User.id).all()
    return api_success(UserSchema(many=True).dump(users))


@api_bp.route('/users', methods=['POST'])
@requires_api_access(UserRole.ADMIN)
def api_create_user(auth):
    data, error = load_json(UserCreateSchema())
    if error:
        return error

    if User.query.filter_by(email=data['email']).first():
        return api_error(
            'duplicate', 'A user with this email already exists.', 400,
            details={'email': ['Email already registered.']},
        )

    user = User(email=data['email'], name=data['name'], role=data['role'])
    user.set_password(data['password'])
    db.session.add(user)
    db.session.commit()

    current_app.logger.info('User %s created with role %s by admin %s', user.id, user.role.value, auth.user_id)
    log_create('User', user.id, auth.user, details={'email': user.email, 'role': user.role.value})

    return api_success(UserSchema().dump(user), 201)


# ── Venues ──────────────────────────────────────────────────

@api_bp.route('/venues', methods=['GET'])
@jwt_required
def api_list_venues(auth):
    venues = Venue.query.order_by(Venue.name).all()
    return api_success(VenueSchema(many=True).dump(venues))


@api_bp.route('/venues', methods=['POST'])
@requires_api_access(UserRole.MANAGER)
def api_create_venue(auth):
    data, error = load_json(VenueSchema())
    if error:
        return error

    venue = Venue(created_by_id=auth.user_id, **data)
    db.session.add(venue)
    db.session.commit()

    log_create('Venue', venue.id, auth.user, details={'name': venue.name})
    return api_success(VenueSchema().dump(venue), 201)


# ── Contacts ────────────────────────────────────────────────

@api_bp.route('/contacts', methods=['GET'])
@jwt_required
def api_list_contacts(auth):
    contacts = Contact.query.order_by(Contact.name).all()
    return api_success(ContactSchema(many=True).dump(contacts))


@api_bp.route('/contacts', methods=['POST'])
@requires_api_access(UserRole.MANAGER)
def api_create_contact(auth):
    data, error = load_json(ContactSchema())
    if error:
        return error

    contact = Contact(created_by_id=auth.user_id, **data)
    db.session.add(contact)
    db.session.commit()

    log_create('Contact', contact.id, auth.user, details={'name': contact.name})
    return api_success(ContactSchema().dump(contact), 201)
