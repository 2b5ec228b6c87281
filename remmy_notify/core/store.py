# remmy_notify/core/store.py
# Acceso a Supabase para los jobs de notificación (service role).
# Solo lectura de reminders/push_tokens/preferencias, y escritura de los dos
# timestamps de notificación (más la columna de claim, si está activada).

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError
from supabase import Client

from remmy_notify.schemas.actions import ReminderAction, parse_action
from remmy_notify.schemas.reminders import PushToken, Reminder, SnoozeMode, UserPreference

log = logging.getLogger(__name__)

TOKEN_COLUMNS = "token, user_id, platform, token_type, device_id"


def _rows(res) -> List[Dict[str, Any]]:
    return getattr(res, "data", None) or []


# -------------------------
# Reminders
# -------------------------
def fetch_unnotified_before(sb: Client, horizon: datetime) -> List[Reminder]:
    """Reminders sin notified_at con scheduled_time <= horizon."""
    res = (
        sb.table("reminders")
        .select("*")
        .is_("notified_at", "null")
        .lte("scheduled_time", horizon.isoformat())
        .execute()
    )
    return [Reminder.model_validate(r) for r in _rows(res)]


def fetch_priority_after_regular(sb: Client) -> List[Reminder]:
    """Prioritarios que ya tuvieron la notificación normal pero no el aviso previo."""
    res = (
        sb.table("reminders")
        .select("*")
        .eq("is_priority", True)
        .is_("priority_notified_at", "null")
        .not_.is_("notified_at", "null")
        .execute()
    )
    return [Reminder.model_validate(r) for r in _rows(res)]


def fetch_priority_unnotified_before(sb: Client, horizon: datetime) -> List[Reminder]:
    """Prioritarios sin ninguna notificación todavía, con scheduled_time <= horizon."""
    res = (
        sb.table("reminders")
        .select("*")
        .eq("is_priority", True)
        .is_("priority_notified_at", "null")
        .is_("notified_at", "null")
        .lte("scheduled_time", horizon.isoformat())
        .execute()
    )
    return [Reminder.model_validate(r) for r in _rows(res)]


def mark_notified(sb: Client, reminder_ids: List[str], column: str, at: datetime) -> List[str]:
    """
    Fija `column` (notified_at / priority_notified_at) = at, solo donde sigue en null.
    Devuelve los ids realmente actualizados. Errores de BD se propagan.
    """
    if not reminder_ids:
        return []
    res = (
        sb.table("reminders")
        .update({column: at.isoformat()})
        .in_("id", reminder_ids)
        .is_(column, "null")
        .execute()
    )
    return [r["id"] for r in _rows(res)]


def claim_reminders(
    sb: Client,
    reminder_ids: List[str],
    column: str,
    now: datetime,
    lease_minutes: int,
) -> List[str]:
    """
    Claim atómico por fila: notify_claimed_at = now donde esté libre o vencido
    y `column` (notified_at / priority_notified_at) siga en null.
    Dos invocaciones solapadas no pueden reclamar el mismo reminder, y una
    selección vieja no reclama lo que otra ejecución ya marcó.
    """
    if not reminder_ids:
        return []
    cutoff = (now - timedelta(minutes=lease_minutes)).isoformat()
    res = (
        sb.table("reminders")
        .update({"notify_claimed_at": now.isoformat()})
        .in_("id", reminder_ids)
        .is_(column, "null")
        .or_(f"notify_claimed_at.is.null,notify_claimed_at.lt.{cutoff}")
        .execute()
    )
    return [r["id"] for r in _rows(res)]


def release_claims(sb: Client, reminder_ids: List[str]) -> None:
    if not reminder_ids:
        return
    sb.table("reminders").update({"notify_claimed_at": None}).in_("id", reminder_ids).execute()


# -------------------------
# Push tokens / preferencias
# -------------------------
def fetch_push_tokens(sb: Client, user_ids: Iterable[str]) -> List[PushToken]:
    ids = sorted(set(user_ids))
    if not ids:
        return []
    res = sb.table("push_tokens").select(TOKEN_COLUMNS).in_("user_id", ids).execute()
    return [PushToken.model_validate(r) for r in _rows(res)]


def fetch_user_push_tokens(sb: Client, user_id: str) -> List[PushToken]:
    res = sb.table("push_tokens").select(TOKEN_COLUMNS).eq("user_id", user_id).execute()
    return [PushToken.model_validate(r) for r in _rows(res)]


def _informativeness(t: PushToken) -> tuple:
    return (bool(t.platform), bool(t.token_type))


def dedupe_tokens(tokens: Iterable[PushToken]) -> List[PushToken]:
    """
    Una fila por token. Si el mismo token aparece varias veces, gana la fila con
    platform (y luego la que trae token_type); si empatan, la primera vista.
    """
    by_token: Dict[str, PushToken] = {}
    for t in tokens:
        current = by_token.get(t.token)
        if current is None or _informativeness(t) > _informativeness(current):
            by_token[t.token] = t
    return list(by_token.values())


def fetch_snooze_modes(sb: Client, user_ids: Iterable[str]) -> Dict[str, SnoozeMode]:
    ids = sorted(set(user_ids))
    modes = {uid: SnoozeMode.TEXT_INPUT for uid in ids}
    if not ids:
        return modes
    res = sb.table("user_preferences").select("user_id, snooze_mode").in_("user_id", ids).execute()
    for row in _rows(res):
        try:
            pref = UserPreference.model_validate(row)
        except ValidationError:
            log.warning("[store] snooze_mode desconocido %r para user=%s", row.get("snooze_mode"), row.get("user_id"))
            continue
        modes[pref.user_id] = pref.snooze_mode or SnoozeMode.TEXT_INPUT
    return modes


def fetch_reminder_actions(sb: Client, reminder_ids: Iterable[str]) -> Dict[str, List[ReminderAction]]:
    ids = sorted(set(reminder_ids))
    out: Dict[str, List[ReminderAction]] = {rid: [] for rid in ids}
    if not ids:
        return out
    res = (
        sb.table("reminder_actions")
        .select("id, reminder_id, action_type, action_value")
        .in_("reminder_id", ids)
        .execute()
    )
    for row in _rows(res):
        try:
            out.setdefault(row["reminder_id"], []).append(parse_action(row))
        except ValidationError as e:
            log.warning("[store] acción inválida id=%s type=%s: %s", row.get("id"), row.get("action_type"), e)
    return out
