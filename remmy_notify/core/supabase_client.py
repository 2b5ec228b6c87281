# remmy_notify/core/supabase_client.py

from supabase import create_client, Client

from remmy_notify.core.config import Settings


def create_service_client(settings: Settings) -> Client:
    """
    Cliente con Service Role: salta RLS, lo usan solo los jobs de notificación.
    """
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise RuntimeError("Faltan SUPABASE_URL/SUPABASE_SERVICE_ROLE_KEY en el entorno")
    return create_client(settings.supabase_url, settings.supabase_service_role_key)


def create_auth_client(settings: Settings) -> Client:
    """
    Cliente con anon key para validar tokens de usuario (auth.get_user).
    Si no hay anon key configurada, reutiliza la service key.
    """
    key = settings.supabase_anon_key or settings.supabase_service_role_key
    if not settings.supabase_url or not key:
        raise RuntimeError("Faltan SUPABASE_URL/SUPABASE_KEY en el entorno")
    return create_client(settings.supabase_url, key)
