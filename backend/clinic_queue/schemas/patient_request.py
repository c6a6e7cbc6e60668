# clinic_queue/schemas/patient_request.py
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from clinic_queue.config.constants import NAME_MIN_LENGTH, PROBLEM_MIN_LENGTH, Priority


class PatientIn(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=NAME_MIN_LENGTH, max_length=255)]
    problem: Annotated[str, StringConstraints(strip_whitespace=True, min_length=PROBLEM_MIN_LENGTH)]
    priority: Priority = Field(default=Priority.normal)
