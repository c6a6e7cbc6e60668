from enum import Enum


class Role(str, Enum):
    admin = "admin"
    user = "user"


class Priority(str, Enum):
    normal = "Normal"
    emergency = "Emergency"


class PatientStatus(str, Enum):
    waiting = "Waiting"
    visited = "Visited"


NAME_MIN_LENGTH = 3
PROBLEM_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 6

SERVICE_NAME = "Clinic Patient Queue API"
SERVICE_VERSION = "1.0.0"
