from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .agendas.mysql_agenda_repository import MySQLAgendaRepository
from .agendas.repository import AgendaRepository
from .agendas.service import AgendaService
from .appointments.mysql_appointment_repository import MySQLAppointmentRepository
from .appointments.repository import AppointmentRepository
from .appointments.service import AppointmentService
from .core.constants import DEFAULT_ANCHOR_WEEKDAY, DEFAULT_TARGET_HOURS, DEFAULT_TIMEZONE
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .hours.mysql_hour_repository import MySQLHourRepository
from .hours.repository import HourRepository
from .hours.service import HourLogService
from .identity.clerk_provider import ClerkIdentityProvider
from .identity.provider import IdentityProvider
from .library.mysql_library_repository import MySQLLibraryRepository
from .library.repository import LibraryRepository
from .library.service import LibraryService
from .reports.service import HourReportService
from .team.service import TeamService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import UserService
from .voting.service import VotingService
from .voting.store import VotingStore


@dataclass(frozen=True)
class PortalSettings:
    tz: str = DEFAULT_TIMEZONE
    target_hours: float = DEFAULT_TARGET_HOURS
    anchor_weekday: int = DEFAULT_ANCHOR_WEEKDAY
    session_cookie: str = "__session"
    allowed_email_domains: tuple[str, ...] = field(default_factory=tuple)
    data_dir: str = "data"
    upload_dir: str = "public/images"

    @classmethod
    def from_module(cls, settings) -> "PortalSettings":
        return cls(
            tz=str(getattr(settings, "PORTAL_TIMEZONE", DEFAULT_TIMEZONE)),
            target_hours=float(getattr(settings, "TARGET_HOURS", DEFAULT_TARGET_HOURS)),
            anchor_weekday=int(getattr(settings, "PERIOD_ANCHOR_WEEKDAY", DEFAULT_ANCHOR_WEEKDAY)),
            session_cookie=str(getattr(settings, "SESSION_COOKIE", "__session")),
            allowed_email_domains=tuple(getattr(settings, "ALLOWED_EMAIL_DOMAINS", ())),
            data_dir=str(getattr(settings, "DATA_DIR", "data")),
            upload_dir=str(getattr(settings, "UPLOAD_DIR", "public/images")),
        )


@dataclass(frozen=True)
class Container:
    settings: PortalSettings
    conn: Optional[DatabaseConnection]
    identity: IdentityProvider

    users_repo: UserRepository
    events_repo: EventRepository
    library_repo: LibraryRepository
    appointments_repo: AppointmentRepository
    agendas_repo: AgendaRepository
    hours_repo: HourRepository

    user_service: UserService
    event_service: EventService
    library_service: LibraryService
    appointment_service: AppointmentService
    agenda_service: AgendaService
    voting_service: VotingService
    hour_service: HourLogService
    report_service: HourReportService
    team_service: TeamService
    dashboard_service: DashboardService


def assemble_container(
    *,
    settings: PortalSettings,
    identity: IdentityProvider,
    users_repo: UserRepository,
    events_repo: EventRepository,
    library_repo: LibraryRepository,
    appointments_repo: AppointmentRepository,
    agendas_repo: AgendaRepository,
    hours_repo: HourRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of already-built repositories."""
    user_service = UserService(users_repo, identity, allowed_email_domains=settings.allowed_email_domains)
    event_service = EventService(events_repo, tz=settings.tz)
    library_service = LibraryService(library_repo)
    appointment_service = AppointmentService(appointments_repo, users_repo, identity, tz=settings.tz)
    agenda_service = AgendaService(agendas_repo, user_service)
    voting_service = VotingService(VotingStore(settings.data_dir))
    hour_service = HourLogService(hours_repo, user_service, tz=settings.tz)
    report_service = HourReportService(
        hours_repo,
        tz=settings.tz,
        target_hours=settings.target_hours,
        anchor_weekday=settings.anchor_weekday,
    )
    team_service = TeamService(settings.data_dir, settings.upload_dir)
    dashboard_service = DashboardService(users_repo, hour_service, report_service, appointment_service)

    return Container(
        settings=settings,
        conn=conn,
        identity=identity,
        users_repo=users_repo,
        events_repo=events_repo,
        library_repo=library_repo,
        appointments_repo=appointments_repo,
        agendas_repo=agendas_repo,
        hours_repo=hours_repo,
        user_service=user_service,
        event_service=event_service,
        library_service=library_service,
        appointment_service=appointment_service,
        agenda_service=agenda_service,
        voting_service=voting_service,
        hour_service=hour_service,
        report_service=report_service,
        team_service=team_service,
        dashboard_service=dashboard_service,
    )


def build_container(*, db_config: dict, settings_module, identity: Optional[IdentityProvider] = None) -> Container:
    conn = DatabaseConnection(
        DBConfig.from_dict(db_config),
        pool_size=int(getattr(settings_module, "DB_POOL_SIZE", 0)),
    )

    if identity is None:
        identity = ClerkIdentityProvider(
            api_url=str(getattr(settings_module, "IDENTITY_API_URL")),
            secret_key=str(getattr(settings_module, "IDENTITY_SECRET_KEY", "")),
            jwks_url=str(getattr(settings_module, "IDENTITY_JWKS_URL", "")),
        )

    return assemble_container(
        settings=PortalSettings.from_module(settings_module),
        identity=identity,
        users_repo=MySQLUserRepository(conn),
        events_repo=MySQLEventRepository(conn),
        library_repo=MySQLLibraryRepository(conn),
        appointments_repo=MySQLAppointmentRepository(conn),
        agendas_repo=MySQLAgendaRepository(conn),
        hours_repo=MySQLHourRepository(conn),
        conn=conn,
    )
