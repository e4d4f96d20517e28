"""
Tests for BookingService: staff/asset conflict detection and atomic gig creation.
"""
from datetime import datetime
from unittest import mock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from assetdesk.extensions import db
from assetdesk.models.gig import Gig, GigStaff, GigAsset
from assetdesk.services.booking_service import (
    ASSET,
    STAFF,
    BookingService,
    BookingValidationError,
    ConflictResult,
)
from tests.conftest import GIG_A_START, GIG_A_END


def dt(day, hour, minute=0):
    return datetime(2024, 3, day, hour, minute)


class TestCheckConflicts:
    """Conflict detection against Gig A (19:00Z to 23:00Z on 2024-03-15)."""

    def test_overlapping_staff_is_rejected(self, gig_a, regular_user):
        result = BookingService.check_conflicts(dt(15, 21), dt(16, 1), [regular_user.id], [])

        assert not result.is_clear
        conflict = result.conflict
        assert conflict.resource_kind == STAFF
        assert conflict.resource_id == regular_user.id
        assert conflict.gig_id == gig_a.id
        assert conflict.message == (
            'Staff conflict detected: Regular User is already assigned to "Gig A" '
            '(2024-03-15T19:00:00Z - 2024-03-15T23:00:00Z)'
        )

    def test_shared_boundary_is_accepted(self, gig_a, regular_user):
        after = BookingService.check_conflicts(dt(15, 23), dt(16, 2), [regular_user.id], [])
        before = BookingService.check_conflicts(dt(15, 16), dt(15, 19), [regular_user.id], [])

        assert after.is_clear
        assert before.is_clear

    def test_enclosing_window_is_rejected(self, gig_a, regular_user):
        result = BookingService.check_conflicts(dt(15, 12), dt(16, 3), [regular_user.id], [])
        assert result.conflict.gig_name == 'Gig A'

    def test_contained_window_is_rejected(self, gig_a, regular_user):
        result = BookingService.check_conflicts(dt(15, 20), dt(15, 21), [regular_user.id], [])
        assert result.conflict.gig_id == gig_a.id

    def test_next_day_is_clear(self, gig_a, regular_user, mic_asset):
        result = BookingService.check_conflicts(dt(16, 19), dt(16, 23), [regular_user.id], [mic_asset.id])
        assert result.is_clear

    def test_other_staff_member_is_free(self, gig_a, second_user):
        result = BookingService.check_conflicts(dt(15, 21), dt(16, 1), [second_user.id], [])
        assert result.is_clear

    def test_overlapping_asset_is_rejected(self, gig_a, mic_asset, second_user):
        result = BookingService.check_conflicts(
            dt(15, 20), dt(15, 22), [second_user.id], [mic_asset.id]
        )

        assert result.conflict.resource_kind == ASSET
        assert result.conflict.resource_label == 'MIC001'
        assert result.conflict.message == (
            'Asset conflict detected: Asset MIC001 is already assigned to "Gig A" '
            '(2024-03-15T19:00:00Z - 2024-03-15T23:00:00Z)'
        )

    def test_staff_conflict_reported_before_asset_conflict(self, gig_a, regular_user, mic_asset):
        result = BookingService.check_conflicts(
            dt(15, 20), dt(15, 22), [regular_user.id], [mic_asset.id]
        )
        assert result.conflict.resource_kind == STAFF

    def test_assets_not_queried_when_staff_conflict_found(self, gig_a, regular_user, mic_asset):
        with mock.patch.object(
            BookingService, 'find_asset_conflicts', wraps=BookingService.find_asset_conflicts
        ) as find_assets:
            BookingService.check_conflicts(dt(15, 20), dt(15, 22), [regular_user.id], [mic_asset.id])

        find_assets.assert_not_called()

    def test_empty_id_lists_never_query(self, app):
        with mock.patch.object(BookingService, 'find_staff_conflicts') as find_staff, \
                mock.patch.object(BookingService, 'find_asset_conflicts') as find_assets:
            result = BookingService.check_conflicts(dt(15, 20), dt(15, 22), [], [])

        assert result == ConflictResult()
        assert result.is_clear
        find_staff.assert_not_called()
        find_assets.assert_not_called()

    def test_finders_return_empty_without_touching_database(self, app):
        with mock.patch.object(db.session, 'query') as query:
            assert BookingService.find_staff_conflicts(dt(15, 20), dt(15, 22), []) == []
            assert BookingService.find_asset_conflicts(dt(15, 20), dt(15, 22), []) == []
        query.assert_not_called()

    def test_first_conflict_is_earliest_gig(self, make_gig, regular_user):
        later = make_gig('Late Show', dt(15, 22), dt(16, 1), staff=[regular_user])
        earlier = make_gig('Early Show', dt(15, 18), dt(15, 21), staff=[regular_user])

        result = BookingService.check_conflicts(dt(15, 20), dt(15, 23), [regular_user.id], [])

        assert result.conflict.gig_id == earlier.id
        conflicts = BookingService.find_staff_conflicts(dt(15, 20), dt(15, 23), [regular_user.id])
        assert [c.gig_id for c in conflicts] == [earlier.id, later.id]

    def test_same_gig_ties_break_on_user_id(self, make_gig, regular_user, second_user):
        make_gig('Both Crew', dt(15, 19), dt(15, 23), staff=[second_user, regular_user])

        conflicts = BookingService.find_staff_conflicts(
            dt(15, 20), dt(15, 21), [second_user.id, regular_user.id]
        )

        assert [c.resource_id for c in conflicts] == sorted([regular_user.id, second_user.id])

    def test_conflict_to_dict_uses_camel_case(self, gig_a, regular_user):
        result = BookingService.check_conflicts(dt(15, 21), dt(16, 1), [regular_user.id], [])
        payload = result.conflict.to_dict()

        assert payload == {
            'resourceKind': 'staff',
            'resourceId': regular_user.id,
            'resourceLabel': 'Regular User',
            'gigId': gig_a.id,
            'gigName': 'Gig A',
            'gigStart': '2024-03-15T19:00:00Z',
            'gigEnd': '2024-03-15T23:00:00Z',
        }


class TestCreateGig:
    """Atomic booking through BookingService.create_gig."""

    def test_clear_booking_persists_gig_and_assignments(
            self, manager_user, regular_user, mic_asset, venue, contact):
        gig, result = BookingService.create_gig(
            name='Jazz Night',
            start_time=dt(16, 19),
            end_time=dt(16, 23),
            created_by=manager_user,
            venue_id=venue.id,
            contact_id=contact.id,
            notes='Load-in at 17:00',
            staff_ids=[regular_user.id],
            asset_ids=[mic_asset.id],
        )

        assert result.is_clear
        assert gig.id is not None

        stored = db.session.get(Gig, gig.id)
        assert stored.venue_id == venue.id
        assert stored.created_by_id == manager_user.id
        assert [s.user_id for s in stored.staff] == [regular_user.id]
        assert [a.asset_id for a in stored.assets] == [mic_asset.id]
        assert stored.assets[0].assigned_by_id == manager_user.id

    def test_conflict_persists_nothing(self, gig_a, manager_user, regular_user):
        gigs_before = Gig.query.count()
        staff_before = GigStaff.query.count()

        gig, result = BookingService.create_gig(
            name='Overlapping Show',
            start_time=dt(15, 21),
            end_time=dt(16, 1),
            created_by=manager_user,
            staff_ids=[regular_user.id],
        )

        assert gig is None
        assert result.conflict.resource_kind == STAFF
        assert Gig.query.count() == gigs_before
        assert GigStaff.query.count() == staff_before

    def test_asset_conflict_persists_nothing(self, gig_a, manager_user, second_user, mic_asset):
        gig, result = BookingService.create_gig(
            name='Overlapping Show',
            start_time=dt(15, 22),
            end_time=dt(16, 1),
            created_by=manager_user,
            staff_ids=[second_user.id],
            asset_ids=[mic_asset.id],
        )

        assert gig is None
        assert result.conflict.resource_kind == ASSET
        assert GigAsset.query.count() == 1
        assert GigStaff.query.filter_by(user_id=second_user.id).count() == 0

    def test_back_to_back_booking_succeeds(self, gig_a, manager_user, regular_user, mic_asset):
        gig, result = BookingService.create_gig(
            name='After Party',
            start_time=GIG_A_END,
            end_time=dt(16, 2),
            created_by=manager_user,
            staff_ids=[regular_user.id],
            asset_ids=[mic_asset.id],
        )

        assert result.is_clear
        assert gig is not None
        assert Gig.query.count() == 2

    @pytest.mark.parametrize('start, end', [
        (GIG_A_END, GIG_A_START),
        (GIG_A_START, GIG_A_START),
    ])
    def test_inverted_or_empty_window_rejected(self, manager_user, start, end):
        with pytest.raises(BookingValidationError) as exc:
            BookingService.create_gig('Bad Window', start, end, created_by=manager_user)

        assert exc.value.field == 'endTime'
        assert Gig.query.count() == 0

    def test_unknown_staff_id_rejected(self, manager_user, regular_user):
        with pytest.raises(BookingValidationError) as exc:
            BookingService.create_gig(
                'Ghost Crew', dt(16, 19), dt(16, 23), created_by=manager_user,
                staff_ids=[regular_user.id, 9999],
            )

        assert exc.value.field == 'staffIds'
        assert '9999' in exc.value.message
        assert Gig.query.count() == 0

    def test_unknown_asset_id_rejected(self, manager_user):
        with pytest.raises(BookingValidationError) as exc:
            BookingService.create_gig(
                'Ghost Gear', dt(16, 19), dt(16, 23), created_by=manager_user, asset_ids=[4242],
            )
        assert exc.value.field == 'assetIds'

    def test_unknown_venue_rejected(self, manager_user):
        with pytest.raises(BookingValidationError) as exc:
            BookingService.create_gig(
                'Nowhere', dt(16, 19), dt(16, 23), created_by=manager_user, venue_id=777,
            )
        assert exc.value.field == 'venueId'

    def test_duplicate_ids_are_collapsed(self, manager_user, regular_user, mic_asset):
        gig, result = BookingService.create_gig(
            'Doubled', dt(16, 19), dt(16, 23), created_by=manager_user,
            staff_ids=[regular_user.id, regular_user.id],
            asset_ids=[mic_asset.id, mic_asset.id],
        )

        assert result.is_clear
        assert GigStaff.query.filter_by(gig_id=gig.id).count() == 1
        assert GigAsset.query.filter_by(gig_id=gig.id).count() == 1

    def test_storage_error_rolls_back_and_propagates(self, manager_user, regular_user):
        with mock.patch.object(db.session, 'commit', side_effect=SQLAlchemyError('disk full')):
            with pytest.raises(SQLAlchemyError):
                BookingService.create_gig(
                    'Doomed', dt(16, 19), dt(16, 23), created_by=manager_user,
                    staff_ids=[regular_user.id],
                )

        assert Gig.query.count() == 0
        assert GigStaff.query.count() == 0
