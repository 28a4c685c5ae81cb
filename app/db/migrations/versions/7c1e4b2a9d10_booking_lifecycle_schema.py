from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "7c1e4b2a9d10"
down_revision = None
branch_labels = None
depends_on = None


user_role = sa.Enum("admin", "venue_holder", "planner", name="user_role")

booking_status = sa.Enum(
    "requested",
    "accepted",
    "paid",
    "confirmed",
    "completed",
    "cancelled",
    "cancellation_requested",
    name="booking_status",
)

payment_status = sa.Enum("pending", "completed", "failed", "refunded", name="payment_status")

notification_type = sa.Enum(
    "booking_request",
    "booking_accepted",
    "booking_cancelled",
    "booking_completed",
    "booking_expiry",
    "system",
    name="notification_type",
)


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "venues",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("city", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_venues_id", "venues", ["id"])

    op.create_table(
        "halls",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("deposit_percentage", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("balance_due_days", sa.Integer(), nullable=False, server_default="7"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_halls_id", "halls", ["id"])

    op.create_table(
        "hall_blocked_dates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("hall_id", sa.Integer(), sa.ForeignKey("halls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("hall_id", "date", name="uq_hall_blocked_date"),
    )
    op.create_index("ix_hall_blocked_dates_id", "hall_blocked_dates", ["id"])
    op.create_index("ix_hall_blocked_dates_hall_id", "hall_blocked_dates", ["hall_id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id"), nullable=False),
        sa.Column("hall_id", sa.Integer(), sa.ForeignKey("halls.id"), nullable=False),
        sa.Column("planner_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", booking_status, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("guests", sa.Integer(), nullable=True),
        sa.Column("total_amount", sa.Integer(), nullable=False),
        sa.Column("deposit_amount", sa.Integer(), nullable=False),
        sa.Column("balance_amount", sa.Integer(), nullable=False),
        sa.Column("deposit_paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("balance_paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("payment_status", payment_status, nullable=False),
        sa.Column("cancellation_reason", sa.String(), nullable=True),
        sa.Column("accepted_at", sa.DateTime(), nullable=True),
        sa.Column("expiry_notification_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_hall_id", "bookings", ["hall_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), nullable=True),
        sa.Column("from_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("to_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("body", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_messages_id", "messages", ["id"])
    op.create_index("ix_messages_booking_id", "messages", ["booking_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", notification_type, nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("body", sa.String(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("link_url", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_notifications_id", "notifications", ["id"])
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])


def downgrade():
    op.drop_table("notifications")
    op.drop_table("messages")
    op.drop_table("bookings")
    op.drop_table("hall_blocked_dates")
    op.drop_table("halls")
    op.drop_table("venues")
    op.drop_table("users")

    bind = op.get_bind()
    notification_type.drop(bind, checkfirst=True)
    payment_status.drop(bind, checkfirst=True)
    booking_status.drop(bind, checkfirst=True)
    user_role.drop(bind, checkfirst=True)
