from datetime import date
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from barberpro.core.security import SessionUser
from barberpro.models.appointment import Appointment, AppointmentStatus
from barberpro.models.barber import Barber
from barberpro.models.profile import Profile, UserRole
from barberpro.models.service import Service
from barberpro.schemas.dashboard import (
    KPI,
    AppointmentOut,
    DashboardContent,
    DashboardLayout,
    HeaderOut,
    SidebarItem,
)

# role -> [(id, label, icon, path)]
SIDEBAR_MENUS = {
    UserRole.admin: [
        ("dashboard", "Dashboard", "📊", "/admin"),
        ("barbers", "Gerenciar Barbeiros", "✂️", "/admin/barbers"),
        ("schedules", "Horários", "🕐", "/admin/schedules"),
        ("reports", "Relatórios", "📈", "/admin/reports"),
        ("settings", "Configurações", "⚙️", "/admin/settings"),
    ],
    UserRole.barber: [
        ("dashboard", "Dashboard", "📊", "/barber"),
        ("schedule", "Minha Agenda", "📅", "/barber/schedule"),
        ("clients", "Clientes", "👥", "/barber/clients"),
        ("profile", "Perfil", "👤", "/barber/profile"),
        ("availability", "Disponibilidade", "🕐", "/barber/availability"),
    ],
    UserRole.customer: [
        ("dashboard", "Dashboard", "📊", "/customer"),
        ("appointments", "Meus Agendamentos", "📅", "/customer/appointments"),
        ("history", "Histórico", "📜", "/customer/history"),
        ("profile", "Perfil", "👤", "/customer/profile"),
        ("favorites", "Favoritos", "⭐", "/customer/favorites"),
    ],
}

HEADERS = {
    UserRole.admin: ("Dashboard Administrativo", "Gerencie sua barbearia com controle total"),
    UserRole.barber: ("Dashboard Profissional", "Gerencie seus atendimentos e clientes"),
    UserRole.customer: ("Meu Espaço", "Agende e acompanhe seus atendimentos"),
}

OPEN_STATUSES = (AppointmentStatus.pending, AppointmentStatus.scheduled, AppointmentStatus.confirmed)
UPCOMING_LIMIT = 10


def build_sidebar(role: UserRole, current_path: str) -> List[SidebarItem]:
    return [
        SidebarItem(id=i, label=label, icon=icon, path=path, active=path == current_path)
        for i, label, icon, path in SIDEBAR_MENUS[role]
    ]


def build_header(user: SessionUser) -> HeaderOut:
    title, subtitle = HEADERS[user.role]
    return HeaderOut(
        title=title,
        subtitle=subtitle,
        user_name=user.full_name,
        user_email=user.email,
        role=user.role.value,
    )


def _appointments_out(db: Session, where, today: date) -> List[AppointmentOut]:
    rows = db.execute(
        select(Appointment, Service.name)
        .outerjoin(Service, Service.id == Appointment.service_id)
        .where(where, Appointment.appointment_date >= today, Appointment.status.in_(OPEN_STATUSES))
        .order_by(Appointment.appointment_date, Appointment.appointment_time)
        .limit(UPCOMING_LIMIT)
    ).all()
    return [
        AppointmentOut(
            id=str(a.id),
            appointment_date=a.appointment_date,
            appointment_time=a.appointment_time,
            status=a.status.value,
            service_name=service_name,
            total_price=a.total_price,
        )
        for a, service_name in rows
    ]


def _count(db: Session, stmt) -> int:
    return db.execute(stmt).scalar_one()


def admin_content(db: Session, user: SessionUser, today: date) -> DashboardContent:
    shop = user.barbershop_id
    revenue = db.execute(
        select(func.coalesce(func.sum(Appointment.total_price), 0)).where(
            Appointment.barbershop_id == shop, Appointment.status == AppointmentStatus.completed
        )
    ).scalar_one()
    return DashboardContent(
        kpis=[
            KPI(id="appointments_today", label="Agendamentos Hoje", value=_count(
                db,
                select(func.count()).select_from(Appointment).where(
                    Appointment.barbershop_id == shop, Appointment.appointment_date == today
                ),
            )),
            KPI(id="barbers", label="Barbeiros", value=_count(
                db, select(func.count()).select_from(Barber).where(Barber.barbershop_id == shop)
            )),
            KPI(id="services", label="Serviços", value=_count(
                db,
                select(func.count()).select_from(Service).where(Service.barbershop_id == shop, Service.is_active.is_(True)),
            )),
            KPI(id="customers", label="Clientes", value=_count(
                db, select(func.count()).select_from(Profile).where(Profile.role == UserRole.customer)
            )),
            KPI(id="revenue", label="Receita", value=revenue),
        ],
        appointments=_appointments_out(db, Appointment.barbershop_id == shop, today),
    )


def barber_content(db: Session, user: SessionUser, today: date) -> DashboardContent:
    barber = db.execute(select(Barber).where(Barber.profile_id == user.id)).scalar_one_or_none()
    if barber is None:
        return DashboardContent()
    upcoming = _appointments_out(db, Appointment.barber_id == barber.id, today)
    return DashboardContent(
        kpis=[
            KPI(id="appointments_today", label="Atendimentos Hoje", value=sum(
                1 for a in upcoming if a.appointment_date == today
            )),
            KPI(id="upcoming", label="Próximos", value=len(upcoming)),
            KPI(id="rating", label="Avaliação", value=barber.rating),
        ],
        appointments=upcoming,
    )


def customer_content(db: Session, user: SessionUser, today: date) -> DashboardContent:
    upcoming = _appointments_out(db, Appointment.customer_id == user.id, today)
    completed = _count(
        db,
        select(func.count()).select_from(Appointment).where(
            Appointment.customer_id == user.id, Appointment.status == AppointmentStatus.completed
        ),
    )
    return DashboardContent(
        kpis=[
            KPI(id="upcoming", label="Próximos Agendamentos", value=len(upcoming)),
            KPI(id="completed", label="Atendimentos Realizados", value=completed),
        ],
        appointments=upcoming,
    )


CONTENT_BUILDERS = {
    UserRole.admin: admin_content,
    UserRole.barber: barber_content,
    UserRole.customer: customer_content,
}


def build_layout(db: Session, user: SessionUser, current_path: str, today: date | None = None) -> DashboardLayout:
    today = today or date.today()
    return DashboardLayout(
        role=user.role.value,
        sidebar=build_sidebar(user.role, current_path),
        header=build_header(user),
        content=CONTENT_BUILDERS[user.role](db, user, today),
    )
