# remmy_notify/schemas/push.py
# Mensajes salientes y resultados de entrega. Nunca se persisten.

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from remmy_notify.schemas.reminders import PushToken


class Channel(str, Enum):
    EXPO = "expo"  # relay de Expo
    FCM = "fcm"    # FCM HTTP v1 directo


class NotificationKind(str, Enum):
    REMINDER = "reminder"
    PRIORITY_EARLY = "priority_early"
    RESYNC = "resync"


class OutboundMessage(BaseModel):
    """
    Un envío a un token concreto. reminder_id viaja junto al mensaje para
    correlacionar el ticket de respuesta sin depender del índice del array.
    """
    reminder_id: Optional[str] = None
    kind: NotificationKind
    token: PushToken
    channel: Channel
    title: Optional[str] = None  # None => push silencioso (resync)
    body: Optional[str] = None
    data: Dict[str, str] = Field(default_factory=dict)
    priority: str = "default"    # default / normal / high
    sound: Optional[str] = "default"
    channel_id: str = "reminders"
    category_id: Optional[str] = None

    @property
    def silent(self) -> bool:
        return self.title is None


class DeliveryResult(BaseModel):
    message: OutboundMessage
    delivered: bool
    error: Optional[str] = None
    ticket: Optional[Dict[str, Any]] = None


class DispatchReport(BaseModel):
    results: List[DeliveryResult] = Field(default_factory=list)

    @property
    def delivered(self) -> int:
        return sum(1 for r in self.results if r.delivered)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.delivered)

    def extend(self, results: List[DeliveryResult]) -> None:
        self.results.extend(results)
