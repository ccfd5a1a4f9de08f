from __future__ import annotations

from ..appointments.service import AppointmentService
from ..core.constants import MODERATOR_ROLES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..hours.service import HourLogService
from ..identity.model import Principal
from ..reports.service import HourReportService
from ..users.repository import UserRepository


class DashboardService:
    """Builds the landing-page payload for each role."""

    def __init__(
        self,
        users: UserRepository,
        hours: HourLogService,
        reports: HourReportService,
        appointments: AppointmentService,
    ):
        self._users = users
        self._hours = hours
        self._reports = reports
        self._appointments = appointments

    def for_principal(self, principal: Principal) -> dict:
        role = principal.role
        if role in MODERATOR_ROLES:
            return self._admin()
        if role == Role.SENATOR:
            return self._senator(principal.user_id)
        if role == Role.ATTORNEY:
            return self._attorney(principal.user_id)
        if role == Role.STUDENT:
            return self._student(principal)
        raise AuthorizationError("Forbidden")

    def _senator(self, user_id: str) -> dict:
        key = self._reports.current_period()
        start, end = self._reports.utc_bounds(key)
        logged = self._hours.hours_in_range(user_id=user_id, start=start, end=end)
        target = self._reports.target_hours
        return {
            "role": Role.SENATOR.value,
            "period": key,
            "periodLabel": self._reports.label(key),
            "hoursLogged": logged,
            "targetHours": target,
            "metTarget": logged >= target,
        }

    def _attorney(self, user_id: str) -> dict:
        return {
            "role": Role.ATTORNEY.value,
            "upcomingAppointments": self._appointments.upcoming_for_attorney(user_id),
            "openSlots": self._appointments.open_slot_count(user_id),
        }

    def _student(self, principal: Principal) -> dict:
        return {
            "role": Role.STUDENT.value,
            "appointments": self._appointments.list_booked(user_id=principal.user_id, current_role=principal.role),
        }

    def _admin(self) -> dict:
        return {
            "role": "admin",
            "userCounts": self._users.count_by_role(),
            "hourReport": self._reports.period_summary(self._reports.current_period()),
        }