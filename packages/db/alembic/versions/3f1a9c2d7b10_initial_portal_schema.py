# This project was developed with assistance from AI tools.
"""initial portal schema: profiles, role tables, files, admin notes

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "3f1a9c2d7b10"
down_revision = None
branch_labels = None
depends_on = None

UUID = postgresql.UUID(as_uuid=False)

REALTIME_TABLES = ("profiles", "lenders", "brokers", "broker_files", "lender_files")

# Provisions the profile row server-side at sign-up. Only metadata roles in
# the allow-list are accepted; anything else is left for the client
# bootstrap to resolve.
HANDLE_NEW_USER_FUNCTION = """
CREATE OR REPLACE FUNCTION public.handle_new_user()
RETURNS TRIGGER
LANGUAGE plpgsql
SECURITY DEFINER SET search_path = public
AS $$
BEGIN
    IF NEW.raw_user_meta_data->>'role' IN ('lender', 'broker', 'admin') THEN
        INSERT INTO public.profiles (id, full_name, role, country, email)
        VALUES (
            NEW.id,
            NEW.raw_user_meta_data->>'full_name',
            NEW.raw_user_meta_data->>'role',
            NEW.raw_user_meta_data->>'country',
            NEW.email
        )
        ON CONFLICT (id) DO NOTHING;
    END IF;
    RETURN NEW;
END;
$$;
"""

HANDLE_NEW_USER_TRIGGER = """
CREATE TRIGGER on_auth_user_created
    AFTER INSERT ON auth.users
    FOR EACH ROW
    EXECUTE FUNCTION public.handle_new_user();
"""

CREATE_BUCKETS = """
INSERT INTO storage.buckets (id, name, public)
VALUES ('broker_files', 'broker_files', false),
       ('lender_files', 'lender_files', false)
ON CONFLICT (id) DO NOTHING;
"""


def _file_table(name: str, owner_column: str, owner_table: str) -> None:
    op.create_table(
        name,
        sa.Column("id", UUID, server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column(owner_column, UUID, nullable=False),
        sa.Column("file_name", sa.String(255), nullable=True),
        sa.Column("file_url_path", sa.Text(), nullable=False),
        sa.Column("file_type", sa.String(100), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("extracted_summary", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint([owner_column], [f"{owner_table}.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(f"ix_{name}_{owner_column}", name, [owner_column])


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", UUID, nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["id"], ["auth.users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("role IN ('lender', 'broker', 'admin')", name="ck_profiles_role"),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"])

    op.create_table(
        "lenders",
        sa.Column("id", UUID, nullable=False),
        sa.Column("company_name", sa.String(255), nullable=True),
        sa.Column("specialization", sa.String(255), nullable=True),
        sa.Column("criteria_summary", sa.Text(), nullable=True),
        sa.Column("contact_info", sa.Text(), nullable=True),
        sa.Column("guideline_file_url", sa.Text(), nullable=True),
        sa.Column("profile_completed", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "brokers",
        sa.Column("id", UUID, nullable=False),
        sa.Column("agency_name", sa.String(255), nullable=True),
        sa.Column("client_notes", sa.Text(), nullable=True),
        sa.Column("subscription_tier", sa.String(20), server_default="free", nullable=False),
        sa.Column("profile_completed", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["id"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "subscription_tier IN ('free', 'premium', 'enterprise')",
            name="ck_brokers_subscription_tier",
        ),
    )

    _file_table("lender_files", "lender_id", "lenders")
    _file_table("broker_files", "broker_id", "brokers")

    op.create_table(
        "admin_notes",
        sa.Column("id", UUID, server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("user_id", UUID, nullable=False),
        sa.Column("created_by", UUID, nullable=False),
        sa.Column("note", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("length(trim(note)) > 0", name="ck_admin_notes_note_not_empty"),
    )
    op.create_index("ix_admin_notes_user_id", "admin_notes", ["user_id"])
    op.create_index("ix_admin_notes_created_by", "admin_notes", ["created_by"])

    op.execute(HANDLE_NEW_USER_FUNCTION)
    op.execute(HANDLE_NEW_USER_TRIGGER)
    op.execute(CREATE_BUCKETS)

    for table in REALTIME_TABLES:
        op.execute(f"ALTER PUBLICATION supabase_realtime ADD TABLE public.{table}")


def downgrade() -> None:
    for table in REALTIME_TABLES:
        op.execute(f"ALTER PUBLICATION supabase_realtime DROP TABLE public.{table}")

    op.execute("DELETE FROM storage.buckets WHERE id IN ('broker_files', 'lender_files')")
    op.execute("DROP TRIGGER IF EXISTS on_auth_user_created ON auth.users")
    op.execute("DROP FUNCTION IF EXISTS public.handle_new_user()")

    op.drop_index("ix_admin_notes_created_by", table_name="admin_notes")
    op.drop_index("ix_admin_notes_user_id", table_name="admin_notes")
    op.drop_table("admin_notes")
    op.drop_index("ix_broker_files_broker_id", table_name="broker_files")
    op.drop_table("broker_files")
    op.drop_index("ix_lender_files_lender_id", table_name="lender_files")
    op.drop_table("lender_files")
    op.drop_table("brokers")
    op.drop_table("lenders")
    op.drop_index("ix_profiles_email", table_name="profiles")
    op.drop_table("profiles")
