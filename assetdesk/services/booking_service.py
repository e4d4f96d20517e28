"""
Booking service for gig creation.
Detects staff and asset scheduling conflicts before a gig is persisted.

Two gigs overlap when their half-open windows [start, end) share an instant:
existing.start < candidate.end AND existing.end > candidate.start.
Back-to-back gigs (one ends exactly when the other starts) do not conflict.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from assetdesk.extensions import db
from assetdesk.models.asset import Asset
from assetdesk.models.gig import Gig, GigAsset, GigStaff
from assetdesk.models.user import User
from assetdesk.models.venue import Venue, Contact
from assetdesk.utils.timezone import isoformat_utc

logger = logging.getLogger(__name__)

STAFF = 'staff'
ASSET = 'asset'


class BookingValidationError(ValueError):
    """Booking request refers to something that cannot be booked."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field


@dataclass(frozen=True)
class Conflict:
    """A resource already committed to an overlapping gig."""
    resource_kind: str
    resource_id: int
    resource_label: str
    gig_id: int
    gig_name: str
    gig_start: datetime
    gig_end: datetime

    @property
    def window(self) -> str:
        return f'{isoformat_utc(self.gig_start)} - {isoformat_utc(self.gig_end)}'

    @property
    def message(self) -> str:
        if self.resource_kind == STAFF:
            return (
                f'Staff conflict detected: {self.resource_label} is already '
                f'assigned to "{self.gig_name}" ({self.window})'
            )
        return (
            f'Asset conflict detected: Asset {self.resource_label} is already '
            f'assigned to "{self.gig_name}" ({self.window})'
        )

    def to_dict(self) -> dict:
        return {
            'resourceKind': self.resource_kind,
            'resourceId': self.resource_id,
            'resourceLabel': self.resource_label,
            'gigId': self.gig_id,
            'gigName': self.gig_name,
            'gigStart': isoformat_utc(self.gig_start),
            'gigEnd': isoformat_utc(self.gig_end),
        }


@dataclass(frozen=True)
class ConflictResult:
    """Outcome of a conflict check: clear, or the first blocking conflict."""
    conflict: Optional[Conflict] = None

    @property
    def is_clear(self) -> bool:
        return self.conflict is None


def _unique(ids: Iterable[int]) -> List[int]:
    """Drop duplicate ids, keeping first-seen order."""
    seen = set()
    result = []
    for value in ids or ():
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


class BookingService:
    """Service for checking and booking gigs."""

    @staticmethod
    def find_staff_conflicts(start: datetime, end: datetime, staff_ids: List[int]) -> List[Conflict]:
        """
        Staff assignments of the given users on gigs overlapping [start, end).

        Ordered by conflicting gig start, then gig id, then user id, so the
        first element is the same on every database.
        """
        if not staff_ids:
            return []

        rows = db.session.query(
            User.id, User.name, Gig.id, Gig.name, Gig.start_time, Gig.end_time
        ).select_from(GigStaff).join(
            User, GigStaff.user_id == User.id
        ).join(
            Gig, GigStaff.gig_id == Gig.id
        ).filter(
            GigStaff.user_id.in_(staff_ids),
            Gig.start_time < end,
            Gig.end_time > start,
        ).order_by(Gig.start_time, Gig.id, User.id).all()

        return [
            Conflict(STAFF, user_id, user_name, gig_id, gig_name, gig_start, gig_end)
            for user_id, user_name, gig_id, gig_name, gig_start, gig_end in rows
        ]

    @staticmethod
    def find_asset_conflicts(start: datetime, end: datetime, asset_ids: List[int]) -> List[Conflict]:
        """Asset assignments of the given assets on gigs overlapping [start, end)."""
        if not asset_ids:
            return []

        rows = db.session.query(
            Asset.id, Asset.asset_tag, Gig.id, Gig.name, Gig.start_time, Gig.end_time
        ).select_from(GigAsset).join(
            Asset, GigAsset.asset_id == Asset.id
        ).join(
            Gig, GigAsset.gig_id == Gig.id
        ).filter(
            GigAsset.asset_id.in_(asset_ids),
            Gig.start_time < end,
            Gig.end_time > start,
        ).order_by(Gig.start_time, Gig.id, Asset.id).all()

        return [
            Conflict(ASSET, asset_id, asset_tag, gig_id, gig_name, gig_start, gig_end)
            for asset_id, asset_tag, gig_id, gig_name, gig_start, gig_end in rows
        ]

    @staticmethod
    def check_conflicts(start: datetime, end: datetime,
                        staff_ids: List[int], asset_ids: List[int]) -> ConflictResult:
        """
        Check a candidate window against existing bookings.

        Staff are checked first; assets are only checked when no staff
        conflict exists. Read-only.

        Args:
            start: Candidate start (naive UTC)
            end: Candidate end (naive UTC)
            staff_ids: Users to assign (may be empty)
            asset_ids: Assets to assign (may be empty)

        Returns:
            ConflictResult carrying the first conflict found, if any
        """
        if staff_ids:
            staff_conflicts = BookingService.find_staff_conflicts(start, end, staff_ids)
            if staff_conflicts:
                return ConflictResult(staff_conflicts[0])

        if asset_ids:
            asset_conflicts = BookingService.find_asset_conflicts(start, end, asset_ids)
            if asset_conflicts:
                return ConflictResult(asset_conflicts[0])

        return ConflictResult()

    @staticmethod
    def _lock_resources(staff_ids: List[int], asset_ids: List[int]) -> None:
        """
        Row-lock every requested user and asset for the current transaction.

        Locks are taken in id order, users before assets. Unknown ids are
        rejected here.
        """
        if staff_ids:
            users = User.query.filter(
                User.id.in_(staff_ids)
            ).order_by(User.id).with_for_update().all()
            missing = sorted(set(staff_ids) - {u.id for u in users})
            if missing:
                raise BookingValidationError(
                    f'Unknown staff member(s): {", ".join(str(m) for m in missing)}',
                    field='staffIds',
                )

        if asset_ids:
            assets = Asset.query.filter(
                Asset.id.in_(asset_ids)
            ).order_by(Asset.id).with_for_update().all()
            missing = sorted(set(asset_ids) - {a.id for a in assets})
            if missing:
                raise BookingValidationError(
                    f'Unknown asset(s): {", ".join(str(m) for m in missing)}',
                    field='assetIds',
                )

    @staticmethod
    def create_gig(name: str, start_time: datetime, end_time: datetime, created_by: User,
                   venue_id: Optional[int] = None, contact_id: Optional[int] = None,
                   notes: Optional[str] = None, staff_ids: Iterable[int] = (),
                   asset_ids: Iterable[int] = ()) -> Tuple[Optional[Gig], ConflictResult]:
        """
        Book a gig with its staff and asset assignments.

        Lock, conflict check and insert run in one transaction: either the
        gig and all its assignment rows are committed together, or nothing is.

        Returns:
            (gig, result). gig is None when result carries a conflict.

        Raises:
            BookingValidationError: inverted window or unknown reference
        """
        if end_time <= start_time:
            raise BookingValidationError('endTime must be after startTime', field='endTime')

        staff_ids = _unique(staff_ids)
        asset_ids = _unique(asset_ids)

        try:
            if venue_id is not None and db.session.get(Venue, venue_id) is None:
                raise BookingValidationError(f'Unknown venue: {venue_id}', field='venueId')
            if contact_id is not None and db.session.get(Contact, contact_id) is None:
                raise BookingValidationError(f'Unknown contact: {contact_id}', field='contactId')

            BookingService._lock_resources(staff_ids, asset_ids)

            result = BookingService.check_conflicts(start_time, end_time, staff_ids, asset_ids)
            if not result.is_clear:
                db.session.rollback()
                logger.info('Booking "%s" refused: %s', name, result.conflict.message)
                return None, result

            gig = Gig(
                name=name,
                start_time=start_time,
                end_time=end_time,
                venue_id=venue_id,
                contact_id=contact_id,
                notes=notes,
                created_by_id=created_by.id,
            )
            gig.staff = [GigStaff(user_id=user_id) for user_id in staff_ids]
            gig.assets = [
                GigAsset(asset_id=asset_id, assigned_by_id=created_by.id)
                for asset_id in asset_ids
            ]
            db.session.add(gig)
            db.session.commit()
        except BookingValidationError:
            db.session.rollback()
            raise
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception('Booking "%s" failed while writing', name)
            raise

        logger.info(
            'Gig %s "%s" booked by user %s with %d staff and %d assets',
            gig.id, gig.name, created_by.id, len(staff_ids), len(asset_ids)
        )
        return gig, result
