#!/usr/bin/env python
"""
Database migration script
Applies or rolls back the ledger schema with Alembic against DATABASE_URL
"""
import logging
import sys
from pathlib import Path

# Add src to path
ROOT = Path(__file__).parent
sys.path.insert(0, str(ROOT / "src"))

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from wellness_ledger.config import config as app_config
from wellness_ledger.logging_config import setup_logging

logger = logging.getLogger("migrate_db")


def _alembic_config() -> Config:
    alembic_cfg = Config(str(ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(ROOT / "alembic"))
    return alembic_cfg


def upgrade_db(revision: str = "head"):
    """Upgrade the ledger schema (default: latest)"""
    logger.info(f"Upgrading ledger schema to {revision}")
    command.upgrade(_alembic_config(), revision)
    logger.info("Ledger schema is up to date")


def downgrade_db(revision: str = "-1"):
    """Roll back one revision, or to a specific revision"""
    logger.info(f"Downgrading ledger schema to {revision}")
    command.downgrade(_alembic_config(), revision)


def show_current_revision():
    """Log the applied and latest revisions"""
    from wellness_ledger.db.engine import engine

    head = ScriptDirectory.from_config(_alembic_config()).get_current_head()
    with engine.connect() as connection:
        current = MigrationContext.configure(connection).get_current_revision()

    if current is None:
        logger.info(f"Database has no ledger schema yet (latest: {head})")
    else:
        logger.info(f"Current revision: {current} (latest: {head})")


if __name__ == "__main__":
    setup_logging(env=app_config.ENV, log_level=app_config.LOG_LEVEL, build=app_config.BUILD_VERSION)

    action = sys.argv[1] if len(sys.argv) > 1 else "upgrade"
    if action == "upgrade":
        upgrade_db(sys.argv[2] if len(sys.argv) > 2 else "head")
    elif action == "downgrade":
        downgrade_db(sys.argv[2] if len(sys.argv) > 2 else "-1")
    elif action == "current":
        show_current_revision()
    else:
        print("Usage: python migrate_db.py [upgrade [revision] | downgrade [revision] | current]")
        sys.exit(2)
