# remmy_notify/integrations/fcm_client.py
# FCM HTTP v1: no hay API de lote, un POST por mensaje.

import logging
from typing import Any, Dict

import httpx

from remmy_notify.core.config import FCM_SEND_URL
from remmy_notify.schemas.push import DeliveryResult, OutboundMessage

log = logging.getLogger(__name__)


def to_fcm_payload(m: OutboundMessage) -> Dict[str, Any]:
    android: Dict[str, Any] = {"priority": "HIGH" if m.priority == "high" else "NORMAL"}
    message: Dict[str, Any] = {"token": m.token.token, "data": dict(m.data)}
    if not m.silent:
        message["notification"] = {"title": m.title, "body": m.body}
        android["notification"] = {"channel_id": m.channel_id, "sound": m.sound or "default"}
    message["android"] = android
    return {"message": message}


def send_fcm_message(http: httpx.Client, project_id: str, access_token: str, m: OutboundMessage) -> DeliveryResult:
    """Entregado solo con 2xx y 'name' en la respuesta."""
    url = FCM_SEND_URL.format(project_id=project_id)
    headers = {"Content-Type": "application/json", "Authorization": f"Bearer {access_token}"}
    try:
        r = http.post(url, json=to_fcm_payload(m), headers=headers)
    except httpx.HTTPError as e:
        log.warning("[fcm] request error reminder=%s: %s", m.reminder_id, e)
        return DeliveryResult(message=m, delivered=False, error=f"request error: {e}")

    try:
        data = r.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    if 200 <= r.status_code < 300 and data.get("name"):
        return DeliveryResult(message=m, delivered=True, ticket=data)

    log.warning("[fcm] HTTP %s reminder=%s: %s", r.status_code, m.reminder_id, r.text[:400])
    return DeliveryResult(message=m, delivered=False, error=f"HTTP {r.status_code}", ticket=data or None)
