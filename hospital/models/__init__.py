"""
ORM models. Importing this package registers every table on ``Base``.
"""
from .admin import Admin
from .department import Department
from .doctor import Doctor
from .patient import Patient
from .appointment import Appointment, AppointmentStatus

__all__ = ["Admin", "Department", "Doctor", "Patient", "Appointment", "AppointmentStatus"]
