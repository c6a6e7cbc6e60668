# clinic_queue/db/bootstrap.py
import json
import logging
from pathlib import Path
from typing import Optional

from clinic_queue.config.settings import Settings
from clinic_queue.db.crud.patient import PatientQueue
from clinic_queue.db.crud.user import UserDirectory
from clinic_queue.db.session import Database

logger = logging.getLogger(__name__)


def load_seed_file(path: str) -> Optional[list]:
    """Read a JSON array of exported patients, or None if unusable."""
    seed_path = Path(path)
    if not seed_path.exists():
        logger.info(f"Seed file {seed_path} not found, nothing to import")
        return None
    try:
        data = json.loads(seed_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read seed file {seed_path}: {e}")
        return None
    if not isinstance(data, list):
        logger.warning(f"Seed file {seed_path} does not hold a JSON array")
        return None
    return [r for r in data if isinstance(r, dict)]


async def init_db(
    db: Database, users: UserDirectory, queue: PatientQueue, settings: Settings
) -> None:
    """Create tables, the bootstrap admin and, if configured, import seed patients."""
    logger.info("Creating tables...")
    await db.create_all()

    await users.ensure_admin(settings.admin_name, settings.admin_email, settings.admin_password)

    if settings.seed_file:
        records = load_seed_file(settings.seed_file)
        if records:
            await queue.import_patients(records)
