# clinic_queue/db/models/patient.py
from sqlalchemy import Column, Integer, String, Text
from clinic_queue.db.base import Base


class PatientModel(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    problem = Column(Text, nullable=False)
    priority = Column(String(50), nullable=False)  # 'Normal', 'Emergency'
    # ISO-8601 UTC, second precision, e.g. 2024-05-01T09:30:00Z
    arrival_time = Column("arrivalTime", String(255), nullable=False)
    status = Column(String(50), nullable=False)  # 'Waiting', 'Visited'
