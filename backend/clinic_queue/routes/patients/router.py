import logging
from typing import List

from fastapi import APIRouter, Depends, status

from clinic_queue.core.middleware import get_current_user, get_patient_queue
from clinic_queue.db.crud.patient import PatientQueue
from clinic_queue.schemas.patient_request import PatientIn
from clinic_queue.schemas.shared import MessageResponse, PatientOut, QueueStats

logger = logging.getLogger(__name__)

# every route here requires a valid access token
router = APIRouter(
    prefix="/patients",
    tags=["patients"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=List[PatientOut])
async def list_waiting_patients(queue: PatientQueue = Depends(get_patient_queue)):
    """Waiting patients, emergencies first, then by arrival time."""
    return await queue.list_waiting()


@router.post("", response_model=PatientOut, status_code=status.HTTP_201_CREATED)
async def create_patient(
    payload: PatientIn,
    queue: PatientQueue = Depends(get_patient_queue),
):
    return await queue.enqueue(payload.name, payload.problem, payload.priority)


@router.get("/stats", response_model=QueueStats)
async def queue_stats(queue: PatientQueue = Depends(get_patient_queue)):
    return await queue.stats()


@router.put("/{patient_id}/visit", response_model=MessageResponse)
async def visit_patient(
    patient_id: int,
    queue: PatientQueue = Depends(get_patient_queue),
):
    await queue.mark_visited(patient_id)
    return MessageResponse(message="Patient marked as visited successfully")
