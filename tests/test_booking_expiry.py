from datetime import date, timedelta

import pytest

from app.models.enums import BookingStatus, NotificationType, PaymentStatus
from app.models.notification import Notification
from app.services import email
from app.services.booking_expiry import (
    EXPIRY_CANCELLATION_REASON,
    expire_unpaid_bookings,
    in_warning_window,
    is_expired,
    run_booking_expiry_check,
    send_expiry_warnings,
)
from app.services.booking_store import claim_expiry_warning, mark_expiry_notification_sent

from helpers import at

ACCEPTED_AT = at("2025-05-01T10:00")
DEADLINE = at("2025-05-02T10:00")


@pytest.fixture
def outbox(monkeypatch):
    sent = []

    def fake_send(to_email, subject, html):
        sent.append({"to": to_email, "subject": subject, "html": html})
        return True

    monkeypatch.setattr(email, "send_email", fake_send)
    return sent


@pytest.fixture
def accepted_booking(make_booking, planner):
    return make_booking(planner, date(2025, 6, 1), status=BookingStatus.ACCEPTED, accepted_at=ACCEPTED_AT)


class TestDeadlineMath:
    def test_deadline_is_accepted_at_plus_window(self, accepted_booking):
        assert accepted_booking.expiry_deadline == DEADLINE

    @pytest.mark.parametrize(
        "now,expected",
        [
            (at("2025-05-02T03:59"), False),
            (at("2025-05-02T04:00"), True),
            (at("2025-05-02T09:59"), True),
            (DEADLINE, False),
        ],
    )
    def test_warning_window(self, accepted_booking, now, expected):
        assert in_warning_window(accepted_booking, now) is expected

    @pytest.mark.parametrize(
        "now,expected",
        [
            (DEADLINE - timedelta(seconds=1), False),
            (DEADLINE, True),
            (DEADLINE + timedelta(seconds=1), True),
        ],
    )
    def test_expiry_boundary(self, accepted_booking, now, expected):
        assert is_expired(accepted_booking, now) is expected

    def test_without_accepted_at_nothing_applies(self, make_booking, planner):
        booking = make_booking(planner, date(2025, 6, 1), status=BookingStatus.ACCEPTED)

        assert booking.expiry_deadline is None
        assert in_warning_window(booking, DEADLINE) is False
        assert is_expired(booking, DEADLINE) is False


class TestWarnings:
    def test_warns_both_parties_once(self, db, owner, planner, accepted_booking, outbox):
        assert send_expiry_warnings(db, at("2025-05-02T05:30")) == 1

        assert [m["to"] for m in outbox] == [planner.email, owner.email]
        assert "expires soon" in outbox[0]["subject"]
        assert "Ada Planner" in outbox[1]["html"]
        db.refresh(accepted_booking)
        assert accepted_booking.expiry_notification_sent is True

        note = db.query(Notification).filter(Notification.user_id == planner.id).one()
        assert note.type == NotificationType.BOOKING_EXPIRY

        assert send_expiry_warnings(db, at("2025-05-02T05:45")) == 0
        assert len(outbox) == 2

    def test_no_warning_before_window(self, db, accepted_booking, outbox):
        assert send_expiry_warnings(db, at("2025-05-02T03:30")) == 0
        assert outbox == []

    def test_paid_booking_is_not_warned(self, db, make_booking, planner, outbox):
        make_booking(
            planner, date(2025, 6, 1), status=BookingStatus.ACCEPTED, accepted_at=ACCEPTED_AT,
            deposit_paid=True, payment_status=PaymentStatus.COMPLETED,
        )

        assert send_expiry_warnings(db, at("2025-05-02T05:30")) == 0
        assert outbox == []

    def test_marking_twice_is_harmless(self, db, accepted_booking):
        mark_expiry_notification_sent(db, accepted_booking)
        booking = mark_expiry_notification_sent(db, accepted_booking)

        assert booking.expiry_notification_sent is True

    def test_one_failure_does_not_stop_the_pass(self, db, make_booking, planner, other_planner, monkeypatch):
        first = make_booking(planner, date(2025, 6, 1), status=BookingStatus.ACCEPTED, accepted_at=ACCEPTED_AT)
        second = make_booking(
            other_planner, date(2025, 6, 2), status=BookingStatus.ACCEPTED, accepted_at=ACCEPTED_AT
        )

        def flaky_send(to_email, subject, html):
            if to_email == planner.email:
                raise ConnectionError("smtp unreachable")
            return True

        monkeypatch.setattr(email, "send_email", flaky_send)

        assert send_expiry_warnings(db, at("2025-05-02T05:30")) == 1

        db.refresh(first)
        db.refresh(second)
        # The claim stands even though delivery failed, so no partial re-send later
        assert first.expiry_notification_sent is True
        assert second.expiry_notification_sent is True
        assert send_expiry_warnings(db, at("2025-05-02T06:00")) == 0

    def test_warning_is_claimed_once(self, db, accepted_booking):
        assert claim_expiry_warning(db, accepted_booking) is True
        assert claim_expiry_warning(db, accepted_booking) is False
        assert accepted_booking.expiry_notification_sent is True

    def test_paid_booking_cannot_be_claimed(self, db, accepted_booking):
        accepted_booking.status = BookingStatus.PAID
        db.commit()

        assert claim_expiry_warning(db, accepted_booking) is False

    def test_overlapping_checks_send_one_warning(self, db, session_factory, planner, owner, accepted_booking, monkeypatch):
        sent = []
        nested_counts = []

        def send_and_run_again(to_email, subject, html):
            sent.append(to_email)
            if len(nested_counts) == 0:
                other = session_factory()
                try:
                    nested_counts.append(send_expiry_warnings(other, at("2025-05-02T05:31")))
                finally:
                    other.close()
            return True

        monkeypatch.setattr(email, "send_email", send_and_run_again)

        assert send_expiry_warnings(db, at("2025-05-02T05:30")) == 1

        assert nested_counts == [0]
        assert sent == [planner.email, owner.email]


class TestExpiry:
    def test_expires_at_deadline_and_emails_both_parties(self, db, owner, planner, accepted_booking, outbox):
        assert expire_unpaid_bookings(db, DEADLINE) == 1

        db.refresh(accepted_booking)
        assert accepted_booking.status == BookingStatus.CANCELLED
        assert accepted_booking.cancellation_reason == EXPIRY_CANCELLATION_REASON
        assert [m["to"] for m in outbox] == [planner.email, owner.email]
        assert "has expired" in outbox[0]["subject"]

    def test_not_expired_one_second_before(self, db, accepted_booking, outbox):
        assert expire_unpaid_bookings(db, DEADLINE - timedelta(seconds=1)) == 0

        db.refresh(accepted_booking)
        assert accepted_booking.status == BookingStatus.ACCEPTED

    def test_expiring_again_is_a_no_op(self, db, accepted_booking, outbox):
        expire_unpaid_bookings(db, DEADLINE)

        assert expire_unpaid_bookings(db, DEADLINE + timedelta(hours=1)) == 0
        assert len(outbox) == 2

    def test_booking_that_left_accepted_is_skipped(self, db, accepted_booking, outbox, monkeypatch):
        from app.services import booking_expiry

        monkeypatch.setattr(booking_expiry, "update_booking_status_with_data", lambda *a, **kw: None)

        assert expire_unpaid_bookings(db, DEADLINE) == 0
        assert outbox == []


class TestExpiryCheck:
    def test_unpaid_booking_timeline(self, db, accepted_booking, outbox):
        assert run_booking_expiry_check(db, at("2025-05-02T03:30")) == {"warned": 0, "expired": 0}
        assert run_booking_expiry_check(db, at("2025-05-02T05:30")) == {"warned": 1, "expired": 0}
        assert run_booking_expiry_check(db, at("2025-05-02T10:05")) == {"warned": 0, "expired": 1}

        db.refresh(accepted_booking)
        assert accepted_booking.status == BookingStatus.CANCELLED
        assert len(outbox) == 4

    def test_booking_paid_in_time_survives(self, db, planner, accepted_booking, outbox):
        from app.services.booking_lifecycle import record_payment

        run_booking_expiry_check(db, at("2025-05-02T05:30"))
        record_payment(db, planner, accepted_booking.id)

        assert run_booking_expiry_check(db, at("2025-05-02T10:05")) == {"warned": 0, "expired": 0}
        db.refresh(accepted_booking)
        assert accepted_booking.status == BookingStatus.PAID

    def test_overdue_booking_expires_without_warning(self, db, accepted_booking, outbox):
        assert run_booking_expiry_check(db, at("2025-05-03T00:00")) == {"warned": 0, "expired": 1}
