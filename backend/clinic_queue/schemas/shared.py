# clinic_queue/schemas/shared.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from clinic_queue.config.constants import Role, Priority, PatientStatus


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: EmailStr
    role: Role


class PatientOut(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    problem: str
    priority: Priority
    arrival_time: str = Field(alias="arrivalTime")
    status: PatientStatus


class QueueStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_waiting: int = Field(alias="totalWaiting")
    total_emergency: int = Field(alias="totalEmergency")
    total_visited: int = Field(alias="totalVisited")


class MessageResponse(BaseModel):
    message: str
