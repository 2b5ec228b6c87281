# remmy_notify/worker/reconciler.py
# Marca notified_at / priority_notified_at SOLO para reminders con al menos
# una entrega confirmada. Los fallidos quedan en null y se reintentan en la
# siguiente invocación.

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Set

from supabase import Client

from remmy_notify.core import store
from remmy_notify.schemas.push import DispatchReport, NotificationKind
from remmy_notify.worker.selector import DueSelection

log = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    regular_ids: List[str] = field(default_factory=list)
    priority_ids: List[str] = field(default_factory=list)


def delivered_reminder_ids(report: DispatchReport, kind: NotificationKind) -> Set[str]:
    return {
        r.message.reminder_id
        for r in report.results
        if r.delivered and r.message.kind == kind and r.message.reminder_id
    }


def reconcile(sb: Client, selection: DueSelection, report: DispatchReport, run_started_at: datetime) -> ReconcileResult:
    ok_regular = delivered_reminder_ids(report, NotificationKind.REMINDER)
    ok_priority = delivered_reminder_ids(report, NotificationKind.PRIORITY_EARLY)

    regular_ids = [r.id for r in selection.regular if r.id in ok_regular]
    priority_ids = [r.id for r in selection.priority if r.id in ok_priority]

    result = ReconcileResult(
        regular_ids=store.mark_notified(sb, regular_ids, "notified_at", run_started_at),
        priority_ids=store.mark_notified(sb, priority_ids, "priority_notified_at", run_started_at),
    )

    skipped = (len(selection.regular) - len(regular_ids)) + (len(selection.priority) - len(priority_ids))
    if skipped:
        log.info("[reconciler] %d reminders sin entrega confirmada quedan pendientes", skipped)
    return result
