"""Copy every search and award from the SQLite file into PostgreSQL.

Search ids are reassigned by the target database, so awards are rewritten
with the new id of their parent. Awards whose parent search is missing from
the source are skipped and logged; any other failure aborts the run and
leaves the target untouched.
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from flightpoints.core.config import get_settings
from flightpoints.db.common import create_schema
from flightpoints.models import Award, Search

logger = logging.getLogger(__name__)

_SEARCH_COLUMNS = [c.key for c in Search.__table__.columns if c.key != "id"]
_AWARD_COLUMNS = [c.key for c in Award.__table__.columns if c.key not in ("id", "search_id")]


@dataclass
class MigrationReport:
    searches: int = 0
    awards: int = 0
    skipped_award_ids: list[int] = field(default_factory=list)


def migrate_data(source: Engine, target: Engine) -> MigrationReport:
    """Copy all rows from ``source`` to ``target`` in a single target transaction."""
    report = MigrationReport()
    create_schema(target)

    with Session(source) as src, Session(target) as dst, dst.begin():
        id_map: dict[int, int] = {}

        for search in src.scalars(select(Search).order_by(Search.id)):
            copy = Search(**{column: getattr(search, column) for column in _SEARCH_COLUMNS})
            dst.add(copy)
            dst.flush()
            id_map[search.id] = copy.id
            report.searches += 1
        logger.info("Migrated %d search records", report.searches)

        for award in src.scalars(select(Award).order_by(Award.id)):
            new_search_id = id_map.get(award.search_id)
            if new_search_id is None:
                logger.warning(
                    "Skipping award %d: parent search %d not found in new mapping",
                    award.id,
                    award.search_id,
                )
                report.skipped_award_ids.append(award.id)
                continue
            dst.add(
                Award(
                    search_id=new_search_id,
                    **{column: getattr(award, column) for column in _AWARD_COLUMNS},
                )
            )
            report.awards += 1
        dst.flush()
        logger.info("Migrated %d award records", report.awards)

    return report


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Migrate award search data from SQLite to PostgreSQL")
    parser.add_argument("--sqlite-path", default=settings.db_path, help="Source SQLite file")
    parser.add_argument("--postgres-url", default=settings.postgres_url, help="Target database URL")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    if not Path(args.sqlite_path).exists():
        print(f"SQLite database file not found at {args.sqlite_path}", file=sys.stderr)
        sys.exit(1)

    print(f"Migrating data from SQLite ({args.sqlite_path}) to PostgreSQL...")
    # No pragmas: the source file's journal mode is left as found
    source = create_engine(f"sqlite:///{args.sqlite_path}")
    target = create_engine(args.postgres_url, pool_pre_ping=True)
    try:
        report = migrate_data(source, target)
    except Exception as e:
        print(f"Migration failed: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        source.dispose()
        target.dispose()

    print(
        f"Migrated {report.searches} searches and {report.awards} awards "
        f"({len(report.skipped_award_ids)} orphaned awards skipped)"
    )


if __name__ == "__main__":
    main()
