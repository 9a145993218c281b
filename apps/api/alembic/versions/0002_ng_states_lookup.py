"""Optional zone lookup table (ng_states)

Revision ID: 0002_ng_states_lookup
Revises: 0001_core_tables
Create Date: 2026-01-12

Rows come from oncoshare.geo.zones.REGIONS, the same table the in-process
resolver uses. Deployments without this revision still work: the case
query engine detects the missing table and derives zones in-process.
"""

from alembic import op

from oncoshare.db.models.geo import ng_states, zone_table_rows


# revision identifiers, used by Alembic.
revision = "0002_ng_states_lookup"
down_revision = "0001_core_tables"
branch_labels = None
depends_on = None


def upgrade() -> None:
    ng_states.create(op.get_bind(), checkfirst=True)
    op.bulk_insert(ng_states, zone_table_rows())


def downgrade() -> None:
    ng_states.drop(op.get_bind(), checkfirst=True)
