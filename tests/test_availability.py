from datetime import date, timedelta

import pytest

from app.core.errors import NotFoundError, UnauthorizedError, ValidationError
from app.models.enums import BookingStatus
from app.models.hall_blocked_date import HallBlockedDate
from app.services import availability
from app.utils.dates import utcnow


class TestHallBookedDates:
    def test_single_day_booking_round_trip(self, db, hall, planner, make_booking):
        booking = make_booking(planner, date(2025, 12, 1))

        assert availability.get_hall_booked_dates(db, hall.id) == ["2025-12-01"]

        booking.status = BookingStatus.CANCELLED
        db.commit()

        assert availability.get_hall_booked_dates(db, hall.id) == []

    def test_multi_day_booking_covers_inclusive_range(self, db, hall, planner, make_booking):
        make_booking(planner, date(2025, 12, 30), date(2026, 1, 2), status=BookingStatus.CONFIRMED)

        assert availability.get_hall_booked_dates(db, hall.id) == [
            "2025-12-30",
            "2025-12-31",
            "2026-01-01",
            "2026-01-02",
        ]

    @pytest.mark.parametrize(
        "status",
        [BookingStatus.REQUESTED, BookingStatus.ACCEPTED, BookingStatus.PAID, BookingStatus.CONFIRMED],
    )
    def test_active_statuses_hold_the_date(self, db, hall, planner, make_booking, status):
        make_booking(planner, date(2025, 7, 4), status=status)
        assert availability.get_hall_booked_dates(db, hall.id) == ["2025-07-04"]

    @pytest.mark.parametrize(
        "status",
        [BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.CANCELLATION_REQUESTED],
    )
    def test_other_statuses_do_not_hold_the_date(self, db, hall, planner, make_booking, status):
        make_booking(planner, date(2025, 7, 4), status=status)
        assert availability.get_hall_booked_dates(db, hall.id) == []

    def test_overlapping_bookings_are_deduplicated_and_sorted(self, db, hall, planner, other_planner, make_booking):
        make_booking(planner, date(2025, 8, 3), date(2025, 8, 4))
        make_booking(other_planner, date(2025, 8, 1), date(2025, 8, 3))

        assert availability.get_hall_booked_dates(db, hall.id) == [
            "2025-08-01",
            "2025-08-02",
            "2025-08-03",
            "2025-08-04",
        ]

    def test_other_halls_are_ignored(self, db, hall, venue, planner, make_booking):
        from app.models.hall import Hall

        other = Hall(venue_id=venue.id, name="Garden", capacity=50, price=1000)
        db.add(other)
        db.commit()

        make_booking(planner, date(2025, 9, 9))

        assert availability.get_hall_booked_dates(db, other.id) == []


class TestHallAvailability:
    def test_booked_and_blocked_dates_are_reported_separately(self, db, hall, planner, make_booking):
        make_booking(planner, date(2025, 10, 10))
        db.add(HallBlockedDate(hall_id=hall.id, date=date(2025, 10, 11), reason="Renovation"))
        db.commit()

        result = availability.get_hall_availability(db, hall.id)

        assert result["hall_id"] == hall.id
        assert result["booked_dates"] == ["2025-10-10"]
        assert len(result["blocked_dates"]) == 1
        assert result["blocked_dates"][0]["date"] == "2025-10-11"
        assert result["blocked_dates"][0]["reason"] == "Renovation"

    def test_missing_hall(self, db):
        with pytest.raises(NotFoundError):
            availability.get_hall_availability(db, 999)

    def test_today_defaults_to_the_utc_date(self, db, hall, monkeypatch):
        from datetime import datetime

        monkeypatch.setattr(availability, "utcnow", lambda: datetime(2030, 3, 10, 23, 30))

        assert availability.is_date_bookable(db, hall.id, date(2030, 3, 9)) is False
        assert availability.is_date_bookable(db, hall.id, date(2030, 3, 10)) is True

    def test_is_date_bookable(self, db, hall, planner, make_booking):
        today = date(2025, 1, 1)
        make_booking(planner, date(2025, 3, 1))
        db.add(HallBlockedDate(hall_id=hall.id, date=date(2025, 3, 2)))
        db.commit()

        assert availability.is_date_bookable(db, hall.id, date(2025, 3, 3), today=today) is True
        assert availability.is_date_bookable(db, hall.id, date(2025, 3, 1), today=today) is False
        assert availability.is_date_bookable(db, hall.id, date(2025, 3, 2), today=today) is False
        assert availability.is_date_bookable(db, hall.id, date(2024, 12, 31), today=today) is False


class TestBlockDates:
    def test_owner_blocks_and_unblocks(self, db, hall, owner):
        day = utcnow().date() + timedelta(days=10)

        blocked = availability.block_date(db, owner, hall.id, day, "Private event")

        assert blocked.id is not None
        assert [b.date for b in availability.get_hall_blocked_dates(db, hall.id)] == [day]

        availability.unblock_date(db, owner, blocked.id)

        assert availability.get_hall_blocked_dates(db, hall.id) == []

    def test_admin_may_block_any_hall(self, db, hall, admin):
        blocked = availability.block_date(db, admin, hall.id, date(2026, 2, 2))
        assert blocked.reason is None

    def test_other_venue_holder_is_rejected(self, db, hall, make_user):
        from app.models.enums import UserRole

        stranger = make_user(UserRole.VENUE_HOLDER)

        with pytest.raises(UnauthorizedError, match="Not your venue"):
            availability.block_date(db, stranger, hall.id, date(2026, 2, 2))

    def test_planner_is_rejected(self, db, hall, planner):
        with pytest.raises(UnauthorizedError):
            availability.block_date(db, planner, hall.id, date(2026, 2, 2))

    def test_same_date_cannot_be_blocked_twice(self, db, hall, owner):
        availability.block_date(db, owner, hall.id, date(2026, 2, 2))

        with pytest.raises(ValidationError, match="already blocked"):
            availability.block_date(db, owner, hall.id, date(2026, 2, 2))

    def test_unblock_missing_record(self, db, owner):
        with pytest.raises(NotFoundError, match="Blocked date not found"):
            availability.unblock_date(db, owner, 12345)

    def test_unblock_requires_ownership(self, db, hall, owner, make_user):
        from app.models.enums import UserRole

        blocked = availability.block_date(db, owner, hall.id, date(2026, 2, 2))
        stranger = make_user(UserRole.VENUE_HOLDER)

        with pytest.raises(UnauthorizedError):
            availability.unblock_date(db, stranger, blocked.id)
