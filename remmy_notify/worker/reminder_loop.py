# remmy_notify/worker/reminder_loop.py
# Un ciclo de envío de notificaciones de reminders:
#   selección -> (claim) -> tokens/preferencias -> mensajes -> envío -> marcado
# Lo invoca el endpoint (cron cada minuto) o el loop de abajo:
#     python -m remmy_notify.worker.reminder_loop

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

import httpx
from supabase import Client

from remmy_notify.core import store
from remmy_notify.core.config import Settings, load_settings
from remmy_notify.core.logging import setup_logging
from remmy_notify.core.supabase_client import create_service_client
from remmy_notify.schemas.reminders import PushToken
from remmy_notify.worker.dispatcher import build_reminder_messages, dispatch
from remmy_notify.worker.reconciler import reconcile
from remmy_notify.worker.selector import DueSelection, select_due

log = logging.getLogger(__name__)


@dataclass
class CycleResult:
    message: str
    delivered: int = 0
    failed: int = 0
    regular_reminders: int = 0
    priority_reminders: int = 0

    def to_response(self) -> Dict[str, object]:
        return {
            "message": self.message,
            "delivered": self.delivered,
            "failed": self.failed,
            "regularReminders": self.regular_reminders,
            "priorityReminders": self.priority_reminders,
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _only(selection: DueSelection, ids: List[str]) -> DueSelection:
    keep = set(ids)
    return DueSelection(
        regular=[r for r in selection.regular if r.id in keep],
        priority=[r for r in selection.priority if r.id in keep],
    )


def _group_by_user(tokens: List[PushToken]) -> Dict[str, List[PushToken]]:
    out: Dict[str, List[PushToken]] = {}
    for t in tokens:
        out.setdefault(t.user_id, []).append(t)
    return out


def run_reminder_cycle(
    sb: Client,
    http: httpx.Client,
    settings: Settings,
    now: Optional[datetime] = None,
) -> CycleResult:
    now = now or _utcnow()
    selection = select_due(sb, now)
    if selection.empty:
        return CycleResult(message="No notifications to send")

    claimed: List[str] = []
    if settings.claim_enabled:
        # cada tipo se reclama contra su propio timestamp
        lease = settings.claim_lease_minutes
        claimed = store.claim_reminders(sb, [r.id for r in selection.regular], "notified_at", now, lease)
        claimed += store.claim_reminders(sb, [r.id for r in selection.priority], "priority_notified_at", now, lease)
        selection = _only(selection, claimed)
        if selection.empty:
            log.info("[dispatcher] todos los candidatos ya están reclamados por otra ejecución")
            return CycleResult(message="No notifications to send")

    try:
        return _deliver(sb, http, settings, selection, now)
    finally:
        if claimed:
            store.release_claims(sb, claimed)


def _deliver(sb: Client, http: httpx.Client, settings: Settings, selection: DueSelection, now: datetime) -> CycleResult:
    user_ids = selection.user_ids()
    tokens = store.dedupe_tokens(store.fetch_push_tokens(sb, user_ids))
    if not tokens:
        log.info("[dispatcher] %d reminders sin push tokens", len(selection.reminder_ids()))
        return CycleResult(message="No push tokens found")

    snooze_modes = store.fetch_snooze_modes(sb, user_ids)
    actions = store.fetch_reminder_actions(sb, selection.reminder_ids())
    messages = build_reminder_messages(selection, _group_by_user(tokens), snooze_modes, actions)

    report = dispatch(http, messages, settings)
    marked = reconcile(sb, selection, report, now)

    result = CycleResult(
        message="Notifications processed",
        delivered=report.delivered,
        failed=report.failed,
        regular_reminders=len(marked.regular_ids),
        priority_reminders=len(marked.priority_ids),
    )
    log.info("[dispatcher] %s", result.to_response())
    return result


def run():
    settings = load_settings()
    setup_logging(settings.log_level)
    sb = create_service_client(settings)
    log.info("[dispatcher] running; poll=%ss claim=%s", settings.poll_seconds, settings.claim_enabled)

    with httpx.Client(timeout=settings.http_timeout_seconds) as http:
        while True:
            try:
                run_reminder_cycle(sb, http, settings)
            except Exception:
                # el ciclo siguiente vuelve a leer todo desde la BD
                log.exception("[dispatcher] loop error")
            time.sleep(settings.poll_seconds)


if __name__ == "__main__":
    run()
