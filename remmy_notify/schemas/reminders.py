# remmy_notify/schemas/reminders.py
# Filas de Supabase tal como las leen los jobs de notificación.

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Reminder(BaseModel):
    """
    Fila de `reminders`. Solo tocamos notified_at / priority_notified_at.
    """
    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    scheduled_time: datetime
    is_priority: bool = False
    notify_before_minutes: int = 0
    notified_at: Optional[datetime] = None
    priority_notified_at: Optional[datetime] = None


class PushToken(BaseModel):
    model_config = ConfigDict(extra="ignore")

    token: str
    user_id: str
    platform: Optional[str] = None    # android / ios
    token_type: Optional[str] = None  # fcm / expo
    device_id: Optional[str] = None


class SnoozeMode(str, Enum):
    TEXT_INPUT = "text_input"
    PRESETS = "presets"


class UserPreference(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str
    snooze_mode: Optional[SnoozeMode] = None  # null -> text_input
