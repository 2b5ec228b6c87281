# remmy_notify/integrations/expo_client.py
# Relay de Expo: un POST con el array completo; la respuesta trae un ticket
# por mensaje en el mismo orden ({data: [{status: ok|error, ...}]}).

import logging
from typing import Any, Dict, List

import httpx

from remmy_notify.core.config import EXPO_PUSH_URL
from remmy_notify.schemas.push import DeliveryResult, OutboundMessage

log = logging.getLogger(__name__)

_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "Accept-Encoding": "gzip, deflate",
}


def to_expo_payload(m: OutboundMessage) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"to": m.token.token, "data": dict(m.data), "priority": m.priority}
    if m.silent:
        payload["contentAvailable"] = True
        return payload
    payload.update({
        "title": m.title,
        "body": m.body,
        "sound": m.sound,
        "channelId": m.channel_id,
    })
    if m.category_id:
        payload["categoryId"] = m.category_id
    return payload


def _all_failed(messages: List[OutboundMessage], error: str) -> List[DeliveryResult]:
    return [DeliveryResult(message=m, delivered=False, error=error) for m in messages]


def send_expo_batch(http: httpx.Client, messages: List[OutboundMessage]) -> List[DeliveryResult]:
    """
    Envía el lote y empareja cada mensaje con su ticket. Si la llamada falla
    entera, ningún mensaje del lote cuenta como entregado.
    """
    if not messages:
        return []

    body = [to_expo_payload(m) for m in messages]
    try:
        r = http.post(EXPO_PUSH_URL, json=body, headers=_HEADERS)
    except httpx.HTTPError as e:
        log.error("[expo] request error: %s", e)
        return _all_failed(messages, f"request error: {e}")

    if r.status_code >= 300:
        log.error("[expo] HTTP %s: %s", r.status_code, r.text[:400])
        return _all_failed(messages, f"HTTP {r.status_code}")

    try:
        tickets = r.json().get("data")
    except (ValueError, AttributeError):
        tickets = None
    if not isinstance(tickets, list):
        log.error("[expo] respuesta sin tickets: %s", r.text[:400])
        return _all_failed(messages, "malformed response")

    if len(tickets) != len(messages):
        log.warning("[expo] %d tickets para %d mensajes", len(tickets), len(messages))

    results: List[DeliveryResult] = []
    for i, m in enumerate(messages):
        ticket = tickets[i] if i < len(tickets) and isinstance(tickets[i], dict) else None
        if ticket is None:
            results.append(DeliveryResult(message=m, delivered=False, error="missing ticket"))
            continue
        ok = ticket.get("status") == "ok"
        error = None if ok else (ticket.get("message") or ticket.get("details") or "error")
        if not ok:
            log.warning("[expo] ticket error reminder=%s: %s", m.reminder_id, error)
        results.append(DeliveryResult(message=m, delivered=ok, error=None if ok else str(error), ticket=ticket))
    return results
