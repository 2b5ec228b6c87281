# remmy_notify/api/routers/push_functions.py
# Endpoints que invocan el cron (reminders) y la app (resync).

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from supabase import Client

from remmy_notify.api.deps import get_http_client, get_service_supabase, get_settings
from remmy_notify.core.auth import get_user_id, require_service_caller
from remmy_notify.core.config import Settings
from remmy_notify.worker.reminder_loop import run_reminder_cycle
from remmy_notify.worker.resync import send_resync_push

log = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["Push notifications"])


async def _device_id_from_body(request: Request) -> Optional[str]:
    # El body es opcional y puede no ser JSON
    try:
        body = await request.json()
    except ValueError:
        return None
    device_id = body.get("deviceId") if isinstance(body, dict) else None
    return device_id if isinstance(device_id, str) else None


@router.post("/send-reminder-notifications", dependencies=[Depends(require_service_caller)])
def send_reminder_notifications(
    settings: Settings = Depends(get_settings),
    sb: Client = Depends(get_service_supabase),
    http: httpx.Client = Depends(get_http_client),
):
    try:
        return run_reminder_cycle(sb, http, settings).to_response()
    except Exception as e:
        log.exception("[send-reminder-notifications] error")
        raise HTTPException(status_code=500, detail=f"[send-reminder-notifications] {e}")


@router.post("/send-resync-push")
def send_resync(
    user_id: str = Depends(get_user_id),
    device_id: Optional[str] = Depends(_device_id_from_body),
    settings: Settings = Depends(get_settings),
    sb: Client = Depends(get_service_supabase),
    http: httpx.Client = Depends(get_http_client),
):
    try:
        return send_resync_push(sb, http, settings, user_id, device_id)
    except Exception as e:
        log.exception("[send-resync-push] error user=%s", user_id)
        raise HTTPException(status_code=500, detail=f"[send-resync-push] {e}")
