# remmy_notify/core/config.py
# Configuración: leemos .env, validamos lo mínimo y devolvemos un objeto tipado.
# La lógica de negocio recibe Settings explícitamente; nunca lee os.environ.

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"
GOOGLE_OAUTH_TOKEN_URL = "https://oauth2.googleapis.com/token"
FCM_SCOPE = "https://www.googleapis.com/auth/firebase.messaging"
FCM_SEND_URL = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"


def _flag(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in ("1", "true", "yes", "on")


def _int(raw: Optional[str], default: int) -> int:
    try:
        return int(raw) if raw not in (None, "") else default
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_service_role_key: str
    supabase_anon_key: str = ""
    supabase_jwt_secret: str = ""
    fcm_project_id: str = ""
    fcm_client_email: str = ""
    fcm_private_key: str = ""
    http_timeout_seconds: int = 30
    poll_seconds: int = 60
    claim_enabled: bool = False
    claim_lease_minutes: int = 5
    log_level: str = "INFO"


def load_settings() -> Settings:
    """
    Lee el entorno (con .env si existe) y arma Settings.
    FCM_PRIVATE_KEY suele venir con '\\n' literales desde el panel del host.
    """
    load_dotenv()
    private_key = os.getenv("FCM_PRIVATE_KEY", "").replace("\\n", "\n")
    return Settings(
        supabase_url=os.getenv("SUPABASE_URL", "").rstrip("/"),
        supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
        supabase_anon_key=os.getenv("SUPABASE_KEY", "") or os.getenv("SUPABASE_ANON_KEY", ""),
        supabase_jwt_secret=os.getenv("SUPABASE_JWT_SECRET", ""),
        fcm_project_id=os.getenv("FCM_PROJECT_ID", "").strip(),
        fcm_client_email=os.getenv("FCM_CLIENT_EMAIL", "").strip(),
        fcm_private_key=private_key,
        http_timeout_seconds=_int(os.getenv("HTTP_TIMEOUT_SECONDS"), 30),
        poll_seconds=_int(os.getenv("DISPATCHER_POLL_SECONDS"), 60),
        claim_enabled=_flag(os.getenv("NOTIFY_CLAIM_ENABLED")),
        claim_lease_minutes=_int(os.getenv("NOTIFY_CLAIM_LEASE_MINUTES"), 5),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
