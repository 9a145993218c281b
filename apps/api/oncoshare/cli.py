"""CLI tools for the shared-data query layer."""

import click

from oncoshare.db.models.geo import ensure_zone_table
from oncoshare.db.session import SessionLocal, engine
from oncoshare.services.capability_service import CapabilityDetector


@click.group()
def cli():
    """Oncoshare CLI tools."""
    pass


@cli.command()
def seed_zones():
    """
    Create the optional zone lookup table and (re)load it from the static region table.

    Example:
        python -m oncoshare.cli seed-zones
    """
    try:
        with engine.begin() as connection:
            count = ensure_zone_table(connection)
    except Exception as e:
        click.echo(f"❌ Error: {e}")
        raise
    click.echo(f"✓ Loaded {count} region(s) into the zone lookup table")
    click.echo("→ Restart the API so running processes re-probe the schema")


@cli.command()
def probe_capabilities():
    """Report which zone derivation path case queries will use."""
    detector = CapabilityDetector(SessionLocal)
    if detector.has_zone_table_sync():
        click.echo(f"✓ Zone lookup table '{detector.table_name}' present: joined path")
    else:
        click.echo(f"→ Zone lookup table '{detector.table_name}' absent: fallback path")


if __name__ == "__main__":
    cli()
