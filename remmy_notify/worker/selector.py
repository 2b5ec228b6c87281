# remmy_notify/worker/selector.py
# Qué reminders necesitan notificación en este pase.
#
# - Normal: notified_at null, scheduled_time <= now+1h y
#   scheduled_time - notify_before_minutes <= now.
# - Aviso previo (prioritarios): priority_notified_at null y
#   scheduled_time - 30min <= now < scheduled_time - notify_before_minutes.
#   La ventana es semiabierta: en el instante en que la normal se vuelve
#   elegible, el aviso previo deja de serlo (nunca ambos en el mismo pase).

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List

from supabase import Client

from remmy_notify.core import store
from remmy_notify.schemas.reminders import Reminder

LOOKAHEAD = timedelta(hours=1)
PRIORITY_LOOKAHEAD = timedelta(minutes=35)
PRIORITY_EARLY_WINDOW = timedelta(minutes=30)


@dataclass
class DueSelection:
    regular: List[Reminder] = field(default_factory=list)
    priority: List[Reminder] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.regular and not self.priority

    def user_ids(self) -> List[str]:
        return sorted({r.user_id for r in self.regular} | {r.user_id for r in self.priority})

    def reminder_ids(self) -> List[str]:
        return sorted({r.id for r in self.regular} | {r.id for r in self.priority})


def _regular_instant(r: Reminder) -> datetime:
    return r.scheduled_time - timedelta(minutes=r.notify_before_minutes)


def is_regular_due(r: Reminder, now: datetime) -> bool:
    if r.notified_at is not None:
        return False
    if r.scheduled_time > now + LOOKAHEAD:
        return False
    return _regular_instant(r) <= now


def is_priority_early_due(r: Reminder, now: datetime) -> bool:
    if not r.is_priority or r.priority_notified_at is not None:
        return False
    if r.notified_at is None and r.scheduled_time > now + PRIORITY_LOOKAHEAD:
        return False
    return r.scheduled_time - PRIORITY_EARLY_WINDOW <= now < _regular_instant(r)


def select_due(sb: Client, now: datetime) -> DueSelection:
    regular_rows = store.fetch_unnotified_before(sb, now + LOOKAHEAD)

    # Los dos conjuntos de prioritarios son disjuntos (notified_at null / no null),
    # pero se mezclan por id por si la BD cambió entre consultas.
    priority_rows: Dict[str, Reminder] = {}
    for r in store.fetch_priority_after_regular(sb):
        priority_rows[r.id] = r
    for r in store.fetch_priority_unnotified_before(sb, now + PRIORITY_LOOKAHEAD):
        priority_rows.setdefault(r.id, r)

    return DueSelection(
        regular=[r for r in regular_rows if is_regular_due(r, now)],
        priority=[r for r in priority_rows.values() if is_priority_early_due(r, now)],
    )
