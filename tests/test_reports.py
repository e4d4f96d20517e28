"""
Tests for dashboard statistics and management reports.
"""
from datetime import datetime
from unittest import mock

from assetdesk.extensions import db, cache
from assetdesk.models.asset import AssetCondition, AssetConditionLog
from assetdesk.services.report_service import ReportService


class TestReportService:

    def test_dashboard_counters(self, gig_a, mic_asset, speaker_asset, make_gig):
        make_gig('Next Week', datetime(2024, 3, 22, 19), datetime(2024, 3, 22, 23))
        now = datetime(2024, 3, 15, 20, 0)

        stats = ReportService.dashboard(include_users=True, now=now)

        assert stats['totalAssets'] == 2
        assert stats['availableAssets'] == 1
        assert stats['activeGigs'] == 1
        assert stats['totalUsers'] == 2  # admin (gig creator) and the staffed user
        assert [g.name for g in stats['upcomingGigs']] == ['Next Week']

    def test_dashboard_hides_user_count(self, regular_user):
        stats = ReportService.dashboard(include_users=False, now=datetime(2024, 1, 1))
        assert stats['totalUsers'] == 0

    def test_active_gig_bounds_are_inclusive(self, gig_a):
        assert ReportService.active_gigs_count(datetime(2024, 3, 15, 19, 0)) == 1
        assert ReportService.active_gigs_count(datetime(2024, 3, 15, 23, 0)) == 1
        assert ReportService.active_gigs_count(datetime(2024, 3, 15, 23, 1)) == 0

    def test_recent_activity(self, regular_user, mic_asset):
        db.session.add(AssetConditionLog(
            asset_id=mic_asset.id, user_id=regular_user.id, condition=AssetCondition.POOR,
            recorded_at=datetime(2024, 3, 10, 12, 0),
        ))
        db.session.commit()

        activity = ReportService.recent_activity()

        assert activity == [{
            'type': 'asset',
            'description': 'Regular User updated SM58 Dynamic Microphone condition to poor',
            'timestamp': '2024-03-10T12:00:00Z',
        }]

    def test_assets_by_status_and_condition(self, mic_asset, speaker_asset):
        assert ReportService.assets_by_status() == {'available': 1, 'maintenance': 1}
        assert ReportService.assets_by_condition() == {'excellent': 1, 'good': 1}

    def test_gigs_by_month(self, gig_a, make_gig):
        make_gig('March Two', datetime(2024, 3, 28, 19), datetime(2024, 3, 28, 23))
        make_gig('January', datetime(2024, 1, 5, 19), datetime(2024, 1, 5, 23))
        make_gig('Too Old', datetime(2023, 6, 1, 19), datetime(2023, 6, 1, 23))

        months = ReportService.gigs_by_month(now=datetime(2024, 4, 10))

        assert months == [
            {'month': 'January 2024', 'count': 1},
            {'month': 'March 2024', 'count': 2},
        ]

    def test_top_assets(self, gig_a, make_gig, mic_asset, speaker_asset):
        make_gig('Second', datetime(2024, 3, 20, 19), datetime(2024, 3, 20, 23),
                 assets=[mic_asset, speaker_asset])

        top = ReportService.top_assets()

        assert [(a['assetTag'], a['usageCount']) for a in top] == [('MIC001', 2), ('SPK001', 1)]
        assert top[0]['name'] == 'SM58 Dynamic Microphone'

    def test_user_activity(self, gig_a, regular_user, manager_user):
        regular_user.last_login = datetime(2024, 3, 1, 9, 0)
        db.session.commit()

        activity = ReportService.user_activity()

        assert activity[0] == {'name': 'Regular User', 'lastLogin': '2024-03-01T09:00:00Z', 'gigCount': 1}
        never = next(a for a in activity if a['name'] == 'Manager User')
        assert never['lastLogin'] == ''
        assert never['gigCount'] == 0


class TestDashboardEndpoint:

    def test_dashboard_for_user(self, client, user_headers, mic_asset):
        resp = client.get('/api/v1/dashboard', headers=user_headers)

        assert resp.status_code == 200
        data = resp.get_json()['data']
        assert data['totalAssets'] == 1
        assert data['availableAssets'] == 1
        assert data['totalUsers'] == 0
        assert data['upcomingGigs'] == []
        assert data['recentActivity'] == []

    def test_dashboard_for_admin_counts_users(self, client, admin_headers, regular_user):
        data = client.get('/api/v1/dashboard', headers=admin_headers).get_json()['data']
        assert data['totalUsers'] == 2

    def test_dashboard_requires_auth(self, client):
        assert client.get('/api/v1/dashboard').status_code == 401


class TestReportsEndpoint:

    def test_manager_report(self, client, manager_headers, gig_a):
        resp = client.get('/api/v1/reports', headers=manager_headers)

        assert resp.status_code == 200
        data = resp.get_json()['data']
        assert data['overview']['totalAssets'] == 1
        assert data['overview']['totalGigs'] == 1
        assert data['overview']['totalUsers'] == 0
        assert data['assetsByStatus'] == {'available': 1}
        assert data['topAssets'][0]['assetTag'] == 'MIC001'
        assert data['userActivity'] == []

    def test_admin_report_includes_users(self, client, admin_headers, gig_a):
        data = client.get('/api/v1/reports', headers=admin_headers).get_json()['data']

        assert data['overview']['totalUsers'] == 2
        assert {u['name'] for u in data['userActivity']} == {'Admin User', 'Regular User'}

    def test_regular_user_denied(self, client, user_headers):
        resp = client.get('/api/v1/reports', headers=user_headers)
        assert resp.status_code == 401

    def test_cached_report_is_served(self, client, manager_headers):
        cached = {'overview': {'totalAssets': 99}}
        with mock.patch.object(cache, 'get', return_value=cached) as cache_get:
            resp = client.get('/api/v1/reports', headers=manager_headers)

        assert resp.get_json()['data'] == cached
        cache_get.assert_called_once_with('reports:manager')

    def test_report_is_stored_per_role(self, app, client, manager_headers):
        with mock.patch.object(cache, 'set') as cache_set:
            client.get('/api/v1/reports', headers=manager_headers)

        key, report = cache_set.call_args.args
        assert key == 'reports:manager'
        assert 'overview' in report
        assert cache_set.call_args.kwargs['timeout'] == app.config['REPORT_CACHE_TIMEOUT']
