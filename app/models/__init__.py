"""Database models for the tenant graph."""

from app.models.appointment import Appointment, AppointmentReminder
from app.models.billing import PurchasedCredit, Subscription
from app.models.calendar_connection import CalendarConnection
from app.models.call import Call, CallEvent, CallTranscript
from app.models.phone_number import PhoneNumber
from app.models.profile import UserProfile
from app.models.service import Service
from app.models.teardown_lock import TenantTeardownLock
from app.models.tenant import Tenant, TenantStatus
from app.models.user import User
from app.models.user_role import AppRole, UserRole
from app.models.voice_agent import VoiceAgent

__all__ = [
    "AppRole",
    "Appointment",
    "AppointmentReminder",
    "CalendarConnection",
    "Call",
    "CallEvent",
    "CallTranscript",
    "PhoneNumber",
    "PurchasedCredit",
    "Service",
    "Subscription",
    "Tenant",
    "TenantStatus",
    "TenantTeardownLock",
    "User",
    "UserProfile",
    "UserRole",
    "VoiceAgent",
]
