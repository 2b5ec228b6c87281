# main.py

from dotenv import load_dotenv
from fastapi import FastAPI

from remmy_notify.api.deps import get_settings
from remmy_notify.api.routers import push_functions
from remmy_notify.core.logging import setup_logging

# -------------------------------------------------------------------
# Cargar variables de entorno y app base
# -------------------------------------------------------------------
load_dotenv()
setup_logging(get_settings().log_level)

app = FastAPI(
    title="Remmy Push Notifications",
    description="""
Supabase-backed push delivery for Remmy reminders.

**What it does**
- **Reminder notifications:** selects reminders whose notification window has opened (regular lead time and the 30-minute priority early warning), sends them through the Expo relay or FCM HTTP v1, and marks `notified_at` / `priority_notified_at` only for reminders with a confirmed delivery.
- **Resync push:** silent push to a user's other devices so they rebuild their local notification schedule.

**Notes**
- `send-reminder-notifications` is meant for a cron trigger and expects the service role key as Bearer token.
- `send-resync-push` expects a user access token.
""",
    version="1.0.0",
)

app.include_router(push_functions.router)


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}
