# remmy_notify/worker/dispatcher.py

import logging
from typing import Dict, List, Optional

import httpx

from remmy_notify.core.config import Settings
from remmy_notify.integrations.expo_client import send_expo_batch
from remmy_notify.integrations.fcm_client import send_fcm_message
from remmy_notify.integrations.google_oauth import FcmCredentials, fetch_access_token
from remmy_notify.schemas.actions import ReminderAction, category_id_for
from remmy_notify.schemas.push import Channel, DispatchReport, NotificationKind, OutboundMessage
from remmy_notify.schemas.reminders import PushToken, Reminder, SnoozeMode
from remmy_notify.worker.classifier import classify_token
from remmy_notify.worker.selector import DueSelection

log = logging.getLogger(__name__)

DEFAULT_BODY = "Reminder is due!"
PRIORITY_EARLY_BODY = "Priority reminder in 30 minutes"


def _regular_content(r: Reminder):
    title = f"Priority: {r.title}" if r.is_priority else r.title
    body = r.description or DEFAULT_BODY
    return title, body, ("high" if r.is_priority else "default")


def _priority_content(r: Reminder):
    return f"Coming up: {r.title}", PRIORITY_EARLY_BODY, "high"


def build_reminder_messages(
    selection: DueSelection,
    tokens_by_user: Dict[str, List[PushToken]],
    snooze_modes: Dict[str, SnoozeMode],
    actions: Optional[Dict[str, List[ReminderAction]]] = None,
) -> List[OutboundMessage]:
    """
    Producto (reminder x token) de los dos conjuntos de la selección.
    Un reminder sin tokens no genera mensajes (y no se marcará).
    """
    actions = actions or {}
    plan = [(r, NotificationKind.REMINDER, _regular_content(r)) for r in selection.regular]
    plan += [(r, NotificationKind.PRIORITY_EARLY, _priority_content(r)) for r in selection.priority]

    messages: List[OutboundMessage] = []
    for reminder, kind, (title, body, priority) in plan:
        mode = snooze_modes.get(reminder.user_id, SnoozeMode.TEXT_INPUT)
        category = category_id_for(actions.get(reminder.id, []))
        for token in tokens_by_user.get(reminder.user_id, []):
            messages.append(OutboundMessage(
                reminder_id=reminder.id,
                kind=kind,
                token=token,
                channel=classify_token(token),
                title=title,
                body=body,
                data={
                    "reminderId": reminder.id,
                    "type": kind.value,
                    "snoozeMode": mode.value,
                    "title": title,
                    "body": body,
                },
                priority=priority,
                category_id=category,
            ))
    return messages


def dispatch(
    http: httpx.Client,
    messages: List[OutboundMessage],
    settings: Settings,
) -> DispatchReport:
    """
    Expo en un solo lote, luego FCM mensaje a mensaje. Las credenciales FCM y
    el access token se resuelven antes de cualquier envío: si faltan o el canje
    falla, se propaga sin haber enviado nada (ni siquiera el lote de Expo).
    """
    report = DispatchReport()
    expo = [m for m in messages if m.channel == Channel.EXPO]
    fcm = [m for m in messages if m.channel == Channel.FCM]

    creds: Optional[FcmCredentials] = None
    access_token = ""
    if fcm:
        creds = FcmCredentials.from_settings(settings)
        access_token = fetch_access_token(http, creds)

    if expo:
        report.extend(send_expo_batch(http, expo))

    if creds is not None:
        for m in fcm:
            report.results.append(send_fcm_message(http, creds.project_id, access_token, m))

    log.info("[dispatcher] expo=%d fcm=%d delivered=%d failed=%d",
             len(expo), len(fcm), report.delivered, report.failed)
    return report
