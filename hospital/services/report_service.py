from sqlalchemy import func
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional

from ..models.appointment import Appointment, AppointmentStatus
from ..schemas.appointment import StatsSummary


class ReportService:
    """Read-only summaries over the appointment table, recomputed per call."""

    def __init__(self, db: Session):
        self.db = db

    def stats_summary(self, today: Optional[date] = None) -> StatsSummary:
        today = today or date.today()

        by_status = dict(
            self.db.query(Appointment.status, func.count(Appointment.id))
            .group_by(Appointment.status)
            .all()
        )
        todays = (
            self.db.query(func.count(Appointment.id))
            .filter(Appointment.appointment_date == today)
            .scalar()
        )

        return StatsSummary(
            total_appointments=sum(by_status.values()),
            pending=by_status.get(AppointmentStatus.PENDING, 0),
            approved=by_status.get(AppointmentStatus.APPROVED, 0),
            completed=by_status.get(AppointmentStatus.COMPLETED, 0),
            cancelled=by_status.get(AppointmentStatus.CANCELLED, 0),
            today=todays or 0,
        )
