from clinic_queue.db.models.user import UserModel
from clinic_queue.db.models.patient import PatientModel

__all__ = ["UserModel", "PatientModel"]
