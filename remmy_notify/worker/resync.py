# remmy_notify/worker/resync.py
# Push silencioso {type: resync} a los demás dispositivos del usuario para que
# re-sincronicen sus notificaciones locales tras un cambio.

import logging
from typing import Dict, Optional

import httpx
from supabase import Client

from remmy_notify.core import store
from remmy_notify.core.config import Settings
from remmy_notify.schemas.push import NotificationKind, OutboundMessage
from remmy_notify.worker.classifier import classify_token
from remmy_notify.worker.dispatcher import dispatch

log = logging.getLogger(__name__)


def send_resync_push(
    sb: Client,
    http: httpx.Client,
    settings: Settings,
    user_id: str,
    device_id: Optional[str] = None,
) -> Dict[str, object]:
    """
    device_id es el dispositivo que origina el cambio: no se le envía a sí mismo.
    """
    tokens = store.dedupe_tokens(store.fetch_user_push_tokens(sb, user_id))
    targets = [t for t in tokens if not device_id or t.device_id != device_id]
    if not targets:
        return {"message": "No targets", "sent": 0, "delivered": 0, "failed": 0}

    messages = [
        OutboundMessage(
            kind=NotificationKind.RESYNC,
            token=t,
            channel=classify_token(t),
            data={"type": NotificationKind.RESYNC.value},
            priority="high",
            sound=None,
        )
        for t in targets
    ]
    report = dispatch(http, messages, settings)
    log.info("[resync] user=%s targets=%d delivered=%d", user_id, len(targets), report.delivered)
    return {
        "message": "Resync push sent",
        "sent": len(messages),
        "delivered": report.delivered,
        "failed": report.failed,
    }
