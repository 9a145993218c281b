"""Optional zone lookup table.

Declared on ``optional_metadata`` so it is only present in schemas that ran
migration 0002 (or ``python -m oncoshare.cli seed-zones``). Its rows are
generated from ``oncoshare.geo.zones.REGIONS``.
"""

from sqlalchemy import Column, String, Table

from oncoshare.core.config import settings
from oncoshare.db.base import optional_metadata
from oncoshare.geo.zones import REGIONS


ng_states = Table(
    settings.ZONE_TABLE_NAME,
    optional_metadata,
    Column("code", String(8), primary_key=True),
    Column("name", String(64), nullable=False, unique=True),
    Column("zone", String(32), nullable=False),
)


def zone_table_rows(regions=None) -> list[dict[str, str]]:
    """Rows for ``ng_states``, generated from the static region table."""
    return [
        {"code": region.code, "name": region.name, "zone": region.zone}
        for region in (REGIONS if regions is None else regions)
    ]


def ensure_zone_table(connection) -> int:
    """Create ``ng_states`` if missing and replace its rows. Returns the row count."""
    ng_states.create(connection, checkfirst=True)
    rows = zone_table_rows()
    connection.execute(ng_states.delete())
    connection.execute(ng_states.insert(), rows)
    return len(rows)
