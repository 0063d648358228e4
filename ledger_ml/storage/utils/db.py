"""Database management commands for the classification service.

The service owns the rule, feedback and metrics tables. Transactions and the
category taxonomy belong to the bookkeeping backend and are only created here
for standalone setups; `db-reset` leaves them alone unless `--all` is given.
"""

import asyncio
import logging
import sys

from sqlalchemy import Table, func, select

from ledger_ml.config.settings import get_settings
from ledger_ml.storage.sqlalchemy.base import Base
from ledger_ml.storage.sqlalchemy.engine import get_engine
from ledger_ml.storage.sqlalchemy.tables import (
    ClassificationFeedbackTable,
    ClassificationMetricTable,
    ClassificationRuleTable,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

OWNED_TABLES: list[Table] = [
    ClassificationRuleTable.__table__,
    ClassificationFeedbackTable.__table__,
    ClassificationMetricTable.__table__,
]


async def create_tables() -> None:
    """Create missing tables (idempotent)."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    logger.info("Database schema is up to date")


async def drop_tables(include_shared: bool = False) -> None:
    tables = None if include_shared else OWNED_TABLES
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all, tables=tables)
    await engine.dispose()
    logger.warning(
        "Dropped %s", "all tables" if include_shared else ", ".join(t.name for t in OWNED_TABLES)
    )


async def tenant_counts() -> dict[str, dict[str, int]]:
    """Row counts of the owned tables, per tenant."""
    counts: dict[str, dict[str, int]] = {}
    engine = get_engine()
    async with engine.connect() as conn:
        for table in OWNED_TABLES:
            stmt = select(table.c.tenant, func.count()).group_by(table.c.tenant)
            for tenant, count in (await conn.execute(stmt)).all():
                counts.setdefault(tenant, {})[table.name] = count
    await engine.dispose()
    return counts


def _display_url() -> str:
    url = get_settings().database_url
    return url.split("@")[-1] if "@" in url else url


async def _reset_database(force: bool, include_shared: bool) -> None:
    print(f"Classification database: {_display_url()}")
    if not force:
        scope = "ALL TABLES" if include_shared else "ALL RULES, FEEDBACK AND METRICS"
        response = input(f"This will DELETE {scope}. Type 'yes' to confirm: ")
        if response.lower() != "yes":
            print("Aborted.")
            sys.exit(1)

    await drop_tables(include_shared=include_shared)
    await create_tables()


async def _print_stats() -> None:
    counts = await tenant_counts()
    print(f"Classification database: {_display_url()}")
    if not counts:
        print("No rules, feedback or metrics stored.")
        return

    columns = [t.name for t in OWNED_TABLES]
    print(f"{'tenant':<20}" + "".join(f"{c:>26}" for c in columns))
    for tenant in sorted(counts):
        row = counts[tenant]
        print(f"{tenant:<20}" + "".join(f"{row.get(c, 0):>26}" for c in columns))


def db_init():
    asyncio.run(create_tables())


def db_reset():
    """Drop and recreate the service tables (`--all` includes shared ones)."""
    force = "--force" in sys.argv or "-f" in sys.argv
    asyncio.run(_reset_database(force=force, include_shared="--all" in sys.argv))


def db_stats():
    asyncio.run(_print_stats())
