"""
API v1 Routes: dashboard counters and management reports.
"""
from flask import current_app

from assetdesk.blueprints.api import api_bp
from assetdesk.blueprints.api.decorators import jwt_required, requires_api_access
from assetdesk.blueprints.api.helpers import api_success
from assetdesk.blueprints.api.schemas import GigSummarySchema
from assetdesk.extensions import cache
from assetdesk.models.user import UserRole
from assetdesk.services.report_service import ReportService


@api_bp.route('/dashboard', methods=['GET'])
@jwt_required
def api_dashboard(auth):
    """Dashboard counters, upcoming gigs and recent activity.

    totalUsers is only filled in for admins.
    """
    stats = ReportService.dashboard(include_users=auth.user.is_admin())
    stats['upcomingGigs'] = GigSummarySchema(many=True).dump(stats['upcomingGigs'])
    return api_success(stats)


@api_bp.route('/reports', methods=['GET'])
@requires_api_access(UserRole.MANAGER)
def api_reports(auth):
    """Management report, cached per role."""
    cache_key = f'reports:{auth.role.value}'
    report = cache.get(cache_key)
    if report is None:
        report = ReportService.build_report(include_users=auth.user.is_admin())
        cache.set(cache_key, report, timeout=current_app.config['REPORT_CACHE_TIMEOUT'])
    return api_success(report)
