"""parish records init

Revision ID: 7a1c2e9d4b30
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "7a1c2e9d4b30"
down_revision = None
branch_labels = None
depends_on = None


def _id(length: int = 64) -> sa.Column:
    return sa.Column("id", sa.String(length=length), nullable=False)


def _ts(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=True)


def _str(name: str, length: int = 200) -> sa.Column:
    return sa.Column(name, sa.String(length=length), nullable=True)


def _text(name: str) -> sa.Column:
    return sa.Column(name, sa.Text(), nullable=True)


def _register() -> list:
    return [
        _str("parish_id", 64),
        _str("registry_number", 64),
        _str("book_number", 32),
        _str("page_number", 32),
        _str("line_number", 32),
        _ts("created_at"),
        _ts("updated_at"),
    ]


def _request_columns() -> list:
    return [
        _str("parish_id", 64),
        _str("record_id", 64),
        _str("requester_name"),
        _str("status", 32),
        _ts("requested_at"),
        _ts("processed_at"),
        _str("processed_by", 320),
        sa.Column("notification_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts("updated_at"),
    ]


MIRROR_REQUEST_TABLES = ("baptism_requests", "marriage_requests", "confirmation_requests", "death_requests")

INDEXES = [
    ("records", "type"),
    ("records", "parish_id"),
    ("records", "certificate_status"),
    ("records", "owner_uid"),
    ("records", "created_by_uid"),
    ("records", "created_at"),
    ("certificate_requests", "parish_id"),
    ("certificate_requests", "request_type"),
    ("certificate_requests", "created_by_uid"),
    *[(t, "parish_id") for t in MIRROR_REQUEST_TABLES],
    ("notifications", "user_id"),
    ("notifications", "created_at"),
    ("audit_logs", "user_id"),
    ("audit_logs", "resource_id"),
    ("audit_logs", "timestamp"),
    ("users", "email"),
    ("users", "role"),
    ("privacy_consent_logs", "user_id"),
    ("donations", "date"),
    ("donations", "donor_id"),
    ("events", "parish_id"),
    ("events", "starts_at"),
    ("bookings", "event_id"),
    ("bookings", "requester_uid"),
    ("bookings", "created_at"),
    ("analytics", "date"),
    ("analytics", "metric_type"),
    ("correction_tickets", "record_id"),
]


def upgrade() -> None:
    # ---- sacrament records ---------------------------------------------------
    op.create_table(
        "records",
        _id(),
        sa.Column("type", sa.String(length=32), nullable=False),
        _text("text"),
        _str("parish_id", 64),
        _text("image_ref"),
        _str("date", 32),
        _str("place"),
        _str("registry_number", 64),
        _text("notes"),
        _str("certificate_status", 32),
        _str("owner_uid", 128),
        _str("created_by_uid", 128),
        _str("created_by_email", 320),
        _ts("created_at"),
        _ts("updated_at"),
        _ts("deleted_at"),
        _str("deleted_by", 320),
        _text("deleted_reason"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "baptism_records",
        _id(),
        *_register(),
        _str("name"),
        _str("gender", 16),
        _str("date_of_birth", 32),
        _str("place_of_birth"),
        _str("father_name"),
        _str("mother_name"),
        _str("godfather_name"),
        _str("godmother_name"),
        _str("minister_name"),
        _str("date_of_baptism", 32),
        _str("time_of_baptism", 16),
        _str("place"),
        _str("date", 32),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "marriage_records",
        _id(),
        *_register(),
        _str("date", 32),
        _str("place"),
        _str("officiant_name"),
        _str("groom_name"),
        _str("groom_age_or_dob", 32),
        _str("groom_civil_status", 32),
        _str("groom_religion", 64),
        _text("groom_address"),
        _str("bride_name"),
        _str("witness1_name"),
        _str("witness2_name"),
        _text("remarks"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "confirmation_records",
        _id(),
        *_register(),
        _str("name"),
        _str("age_or_dob", 32),
        _str("place_of_birth"),
        _text("address"),
        _str("father_name"),
        _str("mother_name"),
        _str("sponsor_name"),
        _str("date", 32),
        _str("place"),
        _str("minister_name"),
        _text("remarks"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "death_records",
        _id(),
        *_register(),
        _str("name"),
        _str("gender", 16),
        _str("age_or_dob", 32),
        _str("date_of_birth", 32),
        _str("date", 32),
        _str("place_of_death"),
        _str("cause_of_death"),
        _str("civil_status", 32),
        _text("address"),
        _str("father_name"),
        _str("mother_name"),
        _str("spouse_name"),
        _str("informant_name"),
        _str("informant_relation", 64),
        _str("burial_date", 32),
        _str("burial_place"),
        _str("minister_name"),
        sa.PrimaryKeyConstraint("id"),
    )

    # ---- certificate requests --------------------------------------------------
    op.create_table(
        "certificate_requests",
        _id(),
        *_request_columns(),
        sa.Column("request_type", sa.String(length=32), nullable=False),
        _str("created_by_uid", 128),
        _str("created_by_email", 320),
        _ts("created_at"),
        _ts("cancelled_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    for table in MIRROR_REQUEST_TABLES:
        op.create_table(table, _id(), *_request_columns(), sa.PrimaryKeyConstraint("id"))

    # ---- notifications / audit ---------------------------------------------------
    op.create_table(
        "notifications",
        _id(),
        _str("user_id", 128),
        sa.Column("title", sa.String(length=200), nullable=False),
        _text("body"),
        _str("type", 32),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        _str("created_by_uid", 128),
        _ts("created_at"),
        _ts("updated_at"),
        _ts("expires_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "audit_logs",
        _id(),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        _str("resource_type", 64),
        _str("resource_id", 64),
        _text("old_values"),
        _text("new_values"),
        _ts("timestamp"),
        _str("ip_address", 64),
        _text("user_agent"),
        sa.PrimaryKeyConstraint("id"),
    )

    # ---- users -------------------------------------------------------------------
    op.create_table(
        "users",
        _id(128),
        _str("email", 320),
        _str("display_name"),
        _str("role", 32),
        sa.Column("disabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        _str("phone", 64),
        _text("address"),
        sa.Column("household", sa.JSON(), nullable=True),
        sa.Column("privacy_consent", sa.Boolean(), nullable=True),
        _ts("privacy_consent_at"),
        _ts("last_login"),
        _ts("created_at"),
        _ts("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "privacy_consent_logs",
        _id(),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("consent", sa.Boolean(), nullable=False),
        _ts("timestamp"),
        _str("ip_address", 64),
        _text("user_agent"),
        sa.PrimaryKeyConstraint("id"),
    )

    # ---- donations / events / bookings ---------------------------------------------
    op.create_table(
        "donations",
        _id(),
        _ts("date"),
        _str("donor_name"),
        _str("donor_id", 128),
        sa.Column("anonymous", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("amount", sa.Float(), nullable=False),
        _str("method", 32),
        _str("campaign"),
        sa.Column("reconciled", sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts("reconciled_at"),
        _str("reconciled_by", 320),
        _text("receipt_url"),
        _ts("created_at"),
        _ts("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "events",
        _id(),
        _str("parish_id", 64),
        sa.Column("title", sa.String(length=200), nullable=False),
        _str("type", 32),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        _ts("ends_at"),
        _str("location"),
        _str("status", 32),
        _str("created_by_uid", 128),
        _ts("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "bookings",
        _id(),
        _str("event_id", 64),
        _str("requester_name"),
        _str("requester_contact"),
        _str("requester_uid", 128),
        _str("status", 32),
        _text("notes"),
        _str("assigned_staff", 128),
        _ts("confirmed_at"),
        _ts("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )

    # ---- analytics / settings / corrections ------------------------------------------
    op.create_table(
        "analytics",
        _id(250),
        _str("date", 10),
        _str("metric_type", 64),
        _str("metric_name", 128),
        sa.Column("value", sa.Float(), nullable=False, server_default="0"),
        sa.Column("metadata", sa.JSON(), nullable=True),
        _ts("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "settings",
        _id(),
        _str("language", 16),
        _str("timezone", 64),
        sa.Column("notify", sa.Boolean(), nullable=True),
        sa.Column("auto_backup", sa.Boolean(), nullable=True),
        _ts("updated_at"),
        _str("updated_by", 128),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "correction_tickets",
        _id(),
        sa.Column("record_id", sa.String(length=64), nullable=False),
        _text("message"),
        _str("status", 32),
        _str("created_by_uid", 128),
        _ts("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )

    for table, column in INDEXES:
        op.create_index(f"ix_{table}_{column}", table, [column])


def downgrade() -> None:
    for table, column in reversed(INDEXES):
        op.drop_index(f"ix_{table}_{column}", table_name=table)
    for table in (
        "correction_tickets",
        "settings",
        "analytics",
        "bookings",
        "events",
        "donations",
        "privacy_consent_logs",
        "users",
        "audit_logs",
        "notifications",
        *MIRROR_REQUEST_TABLES,
        "certificate_requests",
        "death_records",
        "confirmation_records",
        "marriage_records",
        "baptism_records",
        "records",
    ):
        op.drop_table(table)
