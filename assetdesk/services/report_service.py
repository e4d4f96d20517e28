"""
Report service for dashboard counters and management reports.
All queries are read-only aggregates over the inventory and schedule.
"""
from datetime import datetime, timedelta
from typing import List, Dict, Any, Optional

from sqlalchemy import func, desc
from sqlalchemy.orm import joinedload, selectinload

from assetdesk.extensions import db
from assetdesk.models.asset import Asset, AssetConditionLog, AssetStatus
from assetdesk.models.catalog import Product
from assetdesk.models.gig import Gig, GigAsset, GigStaff
from assetdesk.models.user import User
from assetdesk.utils.timezone import isoformat_utc, month_label

REPORT_WINDOW = timedelta(days=183)  # ~ six months


class ReportService:
    """Service for dashboard statistics and reports."""

    @staticmethod
    def active_gigs_count(now: datetime) -> int:
        """Gigs running at `now` (inclusive bounds)."""
        return Gig.query.filter(Gig.start_time <= now, Gig.end_time >= now).count()

    @staticmethod
    def recent_activity(limit: int = 10) -> List[Dict[str, Any]]:
        """Latest asset condition changes as activity feed entries."""
        logs = AssetConditionLog.query.options(
            joinedload(AssetConditionLog.asset).joinedload(Asset.product),
            joinedload(AssetConditionLog.user),
        ).order_by(
            desc(AssetConditionLog.recorded_at), desc(AssetConditionLog.id)
        ).limit(limit).all()

        return [
            {
                'type': 'asset',
                'description': log.description,
                'timestamp': isoformat_utc(log.recorded_at),
            }
            for log in logs
        ]

    @staticmethod
    def dashboard(include_users: bool, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Dashboard counters.

        Args:
            include_users: Whether to count users (admins only)
            now: Reference instant (naive UTC), defaults to utcnow

        Returns:
            Dict with counters, upcoming Gig objects and recent activity
        """
        now = now or datetime.utcnow()

        upcoming = Gig.query.options(
            joinedload(Gig.venue),
            selectinload(Gig.staff),
            selectinload(Gig.assets),
        ).filter(Gig.start_time > now).order_by(Gig.start_time, Gig.id).limit(5).all()

        return {
            'totalAssets': Asset.query.count(),
            'availableAssets': Asset.query.filter(Asset.status == AssetStatus.AVAILABLE).count(),
            'activeGigs': ReportService.active_gigs_count(now),
            'totalUsers': User.query.count() if include_users else 0,
            'upcomingGigs': upcoming,
            'recentActivity': ReportService.recent_activity(),
        }

    @staticmethod
    def assets_by_status() -> Dict[str, int]:
        rows = db.session.query(Asset.status, func.count(Asset.id)).group_by(Asset.status).all()
        return {(status.value if status else 'unknown'): count for status, count in rows}

    @staticmethod
    def assets_by_condition() -> Dict[str, int]:
        rows = db.session.query(Asset.condition, func.count(Asset.id)).group_by(Asset.condition).all()
        return {(condition.value if condition else 'unknown'): count for condition, count in rows}

    @staticmethod
    def gigs_by_month(now: datetime) -> List[Dict[str, Any]]:
        """Gig counts per calendar month for gigs starting in the last six months."""
        since = now - REPORT_WINDOW
        starts = db.session.query(Gig.start_time).filter(
            Gig.start_time >= since
        ).order_by(Gig.start_time).all()

        months = {}
        for (start_time,) in starts:
            key = (start_time.year, start_time.month)
            if key not in months:
                months[key] = {'month': month_label(start_time), 'count': 0}
            months[key]['count'] += 1
        return list(months.values())

    @staticmethod
    def top_assets(limit: int = 10) -> List[Dict[str, Any]]:
        """Most frequently booked assets."""
        usage = func.count(GigAsset.id).label('usage')
        rows = db.session.query(
            Asset.id, Asset.asset_tag, Product.name, usage
        ).join(
            GigAsset, GigAsset.asset_id == Asset.id
        ).join(
            Product, Asset.product_id == Product.id
        ).group_by(
            Asset.id, Asset.asset_tag, Product.name
        ).order_by(desc(usage), Asset.id).limit(limit).all()

        return [
            {'assetId': asset_id, 'assetTag': tag, 'name': name or 'Unknown Asset', 'usageCount': count}
            for asset_id, tag, name, count in rows
        ]

    @staticmethod
    def user_activity(limit: int = 10) -> List[Dict[str, Any]]:
        """Most recently active users with the number of gigs they are staffed on."""
        gig_count = func.count(GigStaff.id).label('gig_count')
        rows = db.session.query(
            User.id, User.name, User.last_login, gig_count
        ).outerjoin(
            GigStaff, GigStaff.user_id == User.id
        ).group_by(
            User.id, User.name, User.last_login
        ).order_by(User.last_login.desc().nulls_last(), User.id).limit(limit).all()

        return [
            {'name': name, 'lastLogin': isoformat_utc(last_login) or '', 'gigCount': count}
            for _, name, last_login, count in rows
        ]

    @staticmethod
    def build_report(include_users: bool, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Full management report.

        Args:
            include_users: Add user counts and user activity (admins only)
            now: Reference instant (naive UTC), defaults to utcnow

        Returns:
            JSON-ready dict
        """
        now = now or datetime.utcnow()

        overview = {
            'totalAssets': Asset.query.count(),
            'availableAssets': Asset.query.filter(Asset.status == AssetStatus.AVAILABLE).count(),
            'assetsInUse': Asset.query.filter(Asset.status == AssetStatus.IN_USE).count(),
            'totalGigs': Gig.query.count(),
            'activeGigs': ReportService.active_gigs_count(now),
            'totalUsers': User.query.count() if include_users else 0,
        }

        return {
            'overview': overview,
            'assetsByCondition': ReportService.assets_by_condition(),
            'assetsByStatus': ReportService.assets_by_status(),
            'gigsByMonth': ReportService.gigs_by_month(now),
            'topAssets': ReportService.top_assets(),
            'userActivity': ReportService.user_activity() if include_users else [],
            'recentActivity': ReportService.recent_activity(),
        }
