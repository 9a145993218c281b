"""Core tables: clinics, vocabularies, cases, files, follow-ups, feed posts

Revision ID: 0001_core_tables
Revises:
Create Date: 2026-01-12

Tables:
- clinics: Tenant clinics (cases and posts are read across clinics)
- tumour_types / anatomical_sites: Reference vocabularies
- cases: Clinical records; reference XOR custom text per vocabulary
- case_files: Attachments with soft delete
- follow_ups: Scheduled follow-up visits
- feed_posts: Shared announcements (clinic_id NULL = global)
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_core_tables"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "clinics",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("state", sa.String(64), nullable=True),  # free text or AKWA_IBOM style
        sa.Column("city", sa.String(128), nullable=True),
        sa.Column("address", sa.Text, nullable=True),
        _created_at(),
    )

    for table in ("tumour_types", "anatomical_sites"):
        op.create_table(
            table,
            sa.Column("id", sa.Uuid(), primary_key=True),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("species", sa.String(64), nullable=True),
            sa.Column("is_system", sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column(
                "clinic_id",
                sa.Uuid(),
                sa.ForeignKey("clinics.id", ondelete="CASCADE"),
                nullable=True,
            ),
            _created_at(),
        )
        op.create_index(f"{table}_name_species_idx", table, ["name", "species"])

    op.create_table(
        "cases",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("case_number", sa.String(32), nullable=False, unique=True),
        sa.Column(
            "clinic_id",
            sa.Uuid(),
            sa.ForeignKey("clinics.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        sa.Column("state", sa.String(64), nullable=True),
        sa.Column("species", sa.String(64), nullable=False),
        sa.Column("breed", sa.String(128), nullable=True),
        sa.Column("sex", sa.String(32), nullable=True),
        sa.Column(
            "tumour_type_id",
            sa.Uuid(),
            sa.ForeignKey("tumour_types.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("tumour_type_custom", sa.Text, nullable=True),
        sa.Column(
            "anatomical_site_id",
            sa.Uuid(),
            sa.ForeignKey("anatomical_sites.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("anatomical_site_custom", sa.Text, nullable=True),
        sa.Column("diagnosis_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("outcome", sa.String(32), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="DRAFT"),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint(
            "tumour_type_id IS NULL OR tumour_type_custom IS NULL",
            name="ck_cases_tumour_type_exclusive",
        ),
        sa.CheckConstraint(
            "anatomical_site_id IS NULL OR anatomical_site_custom IS NULL",
            name="ck_cases_anatomical_site_exclusive",
        ),
    )
    op.create_index("cases_clinic_idx", "cases", ["clinic_id"])
    op.create_index("cases_species_idx", "cases", ["species"])
    op.create_index("cases_tumour_type_idx", "cases", ["tumour_type_id"])
    op.create_index("cases_outcome_idx", "cases", ["outcome"])
    op.create_index("cases_diagnosis_date_idx", "cases", ["diagnosis_date"])

    op.create_table(
        "case_files",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "case_id",
            sa.Uuid(),
            sa.ForeignKey("cases.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("kind", sa.String(16), nullable=False),  # image | file
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("storage_key", sa.String(512), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("size", sa.Integer, nullable=True),
        sa.Column("uploaded_by", sa.Uuid(), nullable=True),
        _created_at(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("case_files_case_idx", "case_files", ["case_id"])
    op.create_index(
        "case_files_case_kind_created_idx",
        "case_files",
        ["case_id", "kind", "created_at"],
    )

    op.create_table(
        "follow_ups",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "case_id",
            sa.Uuid(),
            sa.ForeignKey("cases.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("scheduled_for", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_completed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("follow_ups_case_idx", "follow_ups", ["case_id"])
    op.create_index("follow_ups_scheduled_idx", "follow_ups", ["scheduled_for"])

    op.create_table(
        "feed_posts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="DRAFT"),
        sa.Column(
            "clinic_id",
            sa.Uuid(),
            sa.ForeignKey("clinics.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("author_name", sa.String(255), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("feed_posts_status_idx", "feed_posts", ["status"])
    op.create_index("feed_posts_clinic_idx", "feed_posts", ["clinic_id"])
    op.create_index("feed_posts_created_idx", "feed_posts", ["created_at", "id"])


def downgrade() -> None:
    op.drop_table("feed_posts")
    op.drop_table("follow_ups")
    op.drop_table("case_files")
    op.drop_table("cases")
    op.drop_table("anatomical_sites")
    op.drop_table("tumour_types")
    op.drop_table("clinics")
