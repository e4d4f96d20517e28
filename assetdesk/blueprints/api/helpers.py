"""
API helper functions: pagination, error formatting, response builders.
"""
from flask import request, jsonify, current_app
from marshmallow import ValidationError


def paginate_query(query, schema, default_per_page=None, max_per_page=100):
    """Apply offset-based pagination to a SQLAlchemy query.

    Query params:
        page (int): Page number (1-indexed, default 1)
        perPage (int): Items per page (default ITEMS_PER_PAGE, max 100)

    Returns:
        JSON-ready dict with data, meta, and links.
    """
    if default_per_page is None:
        default_per_page = current_app.config.get('ITEMS_PER_PAGE', 20)

    page = request.args.get('page', 1, type=int)
    per_page = request.args.get('perPage', default_per_page, type=int)

    # Clamp values
    page = max(1, page)
    per_page = max(1, min(per_page, max_per_page))

    pagination = query.paginate(page=page, per_page=per_page, error_out=False)

    total_pages = pagination.pages if pagination.pages else 1

    base_url = request.base_url
    links = {
        'self': f'{base_url}?page={page}&perPage={per_page}',
    }
    if pagination.has_next:
        links['next'] = f'{base_url}?page={page + 1}&perPage={per_page}'
    if pagination.has_prev:
        links['prev'] = f'{base_url}?page={page - 1}&perPage={per_page}'
    links['first'] = f'{base_url}?page=1&perPage={per_page}'
    links['last'] = f'{base_url}?page={total_pages}&perPage={per_page}'

    return {
        'data': schema.dump(pagination.items, many=True),
        'meta': {
            'total': pagination.total,
            'page': page,
            'perPage': per_page,
            'totalPages': total_pages,
        },
        'links': links,
    }


def api_error(code, message, status=400, details=None, **extra):
    """Build a standard API error response.

    Body: {"error": message, "code": code[, "details": ...][, extra...]}
    """
    error_body = {
        'error': message,
        'code': code,
    }
    if details:
        error_body['details'] = details
    error_body.update(extra)
    return jsonify(error_body), status


def api_success(data, status=200):
    """Build a standard API success response."""
    return jsonify({'data': data}), status


def load_json(schema):
    """Validate the JSON request body against a marshmallow schema.

    Returns:
        (data, error_response). Exactly one of them is None.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return None, api_error('invalid_json', 'Request body must be a valid JSON object.', 400)

    try:
        return schema.load(payload), None
    except ValidationError as err:
        return None, api_error('validation_error', 'Validation failed', 400, details=err.messages)
