from datetime import date, time
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class SidebarItem(BaseModel):
    id: str
    label: str
    icon: str
    path: str
    active: bool = False


class HeaderOut(BaseModel):
    title: str
    subtitle: Optional[str] = None
    user_name: Optional[str] = None
    user_email: str
    role: str


class KPI(BaseModel):
    id: str
    label: str
    value: Decimal | int


class AppointmentOut(BaseModel):
    id: str
    appointment_date: date
    appointment_time: time
    status: str
    service_name: Optional[str] = None
    total_price: Decimal


class DashboardContent(BaseModel):
    kpis: list[KPI] = Field(default_factory=list)
    appointments: list[AppointmentOut] = Field(default_factory=list)


class DashboardLayout(BaseModel):
    role: str
    sidebar: list[SidebarItem]
    header: HeaderOut
    content: DashboardContent
