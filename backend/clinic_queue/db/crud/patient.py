# clinic_queue/db/crud/patient.py
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List

from sqlalchemy import case, func, select, update

from clinic_queue.config.constants import PatientStatus, Priority
from clinic_queue.core.exceptions import PatientAlreadyVisited, PatientNotFound
from clinic_queue.db.models.patient import PatientModel
from clinic_queue.db.session import Database
from clinic_queue.schemas.shared import PatientOut, QueueStats

logger = logging.getLogger(__name__)

ARRIVAL_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_arrival(moment: datetime) -> str:
    """ISO-8601 in UTC with the fractional seconds dropped."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.replace(microsecond=0).strftime(ARRIVAL_FORMAT)


def parse_arrival(value: str) -> str:
    """Normalize an exported ISO-8601 timestamp; naive values are taken as UTC."""
    if not isinstance(value, str):
        raise TypeError(f"arrivalTime must be a string, got {type(value).__name__}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return format_arrival(datetime.fromisoformat(text))


def _original_id(record: Dict[str, Any]) -> int:
    value = record.get("id")
    return value if isinstance(value, int) else 0


# Emergency first, then by arrival; id breaks ties inside the same second
QUEUE_ORDER = (
    case((PatientModel.priority == Priority.emergency.value, 0), else_=1),
    PatientModel.arrival_time.asc(),
    PatientModel.id.asc(),
)


class PatientQueue:
    """
    The waiting room.

    A patient is created ``Waiting`` and moves to ``Visited`` exactly once.
    Nothing else about a patient changes after creation, so the queue order
    is simply recomputed by the storage query on every read.
    """

    def __init__(self, db: Database, clock: Callable[[], datetime] = _utcnow):
        self.db = db
        self.clock = clock

    async def enqueue(self, name: str, problem: str, priority: Priority = Priority.normal) -> PatientOut:
        patient = PatientModel(
            name=name.strip(),
            problem=problem.strip(),
            priority=Priority(priority).value,
            arrival_time=format_arrival(self.clock()),
            status=PatientStatus.waiting.value,
        )
        async with self.db.session() as session:
            session.add(patient)
            await session.commit()
            await session.refresh(patient)

        logger.info(f"Patient id={patient.id} queued with priority={patient.priority}")
        return PatientOut.model_validate(patient)

    async def list_waiting(self) -> List[PatientOut]:
        stmt = (
            select(PatientModel)
            .where(PatientModel.status == PatientStatus.waiting.value)
            .order_by(*QUEUE_ORDER)
        )
        async with self.db.session() as session:
            result = await session.execute(stmt)
            patients = result.scalars().all()
        return [PatientOut.model_validate(p) for p in patients]

    async def mark_visited(self, patient_id: int) -> PatientOut:
        """
        Move a waiting patient to Visited.

        The check and the transition are one conditional UPDATE, so two
        concurrent calls for the same patient cannot both succeed.

        Raises:
            PatientNotFound: no patient has this id.
            PatientAlreadyVisited: the patient was visited before; repeated
                calls are errors, not no-ops.
        """
        stmt = (
            update(PatientModel)
            .where(
                PatientModel.id == patient_id,
                PatientModel.status == PatientStatus.waiting.value,
            )
            .values(status=PatientStatus.visited.value)
            .returning(PatientModel)
            .execution_options(synchronize_session=False)
        )
        async with self.db.session() as session:
            result = await session.execute(stmt)
            patient = result.scalar_one_or_none()
            if patient is not None:
                await session.commit()
                logger.info(f"Patient id={patient_id} marked visited")
                return PatientOut.model_validate(patient)

            exists = await session.scalar(
                select(PatientModel.id).where(PatientModel.id == patient_id)
            )

        if exists is None:
            raise PatientNotFound()
        raise PatientAlreadyVisited()

    async def stats(self) -> QueueStats:
        def count(*conditions):
            return select(func.count(PatientModel.id)).where(*conditions)

        async with self.db.session() as session:
            waiting = await session.scalar(
                count(PatientModel.status == PatientStatus.waiting.value)
            )
            emergency = await session.scalar(
                count(
                    PatientModel.status == PatientStatus.waiting.value,
                    PatientModel.priority == Priority.emergency.value,
                )
            )
            visited = await session.scalar(
                count(PatientModel.status == PatientStatus.visited.value)
            )

        return QueueStats(
            total_waiting=waiting or 0,
            total_emergency=emergency or 0,
            total_visited=visited or 0,
        )

    async def import_patients(self, records: Iterable[Dict[str, Any]]) -> int:
        """
        Load exported patients into an empty queue.

        Storage assigns fresh ids, in the order of the records' original ids.
        Arrival times are rewritten to second-precision UTC. Malformed
        records are skipped. Does nothing if the queue has rows.
        """
        async with self.db.session() as session:
            existing = await session.scalar(select(func.count(PatientModel.id)))
            if existing:
                logger.info(f"Patients table has {existing} rows, skipping import")
                return 0

            rows = []
            for record in sorted(records, key=_original_id):
                try:
                    rows.append(
                        PatientModel(
                            name=str(record["name"]).strip(),
                            problem=str(record["problem"]).strip(),
                            priority=Priority(record.get("priority", Priority.normal.value)).value,
                            arrival_time=parse_arrival(record["arrivalTime"]),
                            status=PatientStatus(record.get("status", PatientStatus.waiting.value)).value,
                        )
                    )
                except (KeyError, ValueError, TypeError) as e:
                    logger.warning(f"Skipping malformed patient record {record!r}: {e}")

            session.add_all(rows)
            await session.commit()

        logger.info(f"Imported {len(rows)} patients")
        return len(rows)
