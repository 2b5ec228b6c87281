# remmy_notify/core/auth.py

import hmac
import logging
from typing import Annotated, Optional

import jwt
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client

from remmy_notify.api.deps import get_auth_supabase, get_settings
from remmy_notify.core.config import Settings

log = logging.getLogger(__name__)

# Bearer para integrarse con Swagger Authorize
_bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _get_token_from_bearer(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if not credentials or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise _unauthorized("Missing authorization")
    return credentials.credentials


def _is_service_role_jwt(token: str, secret: str) -> bool:
    """HS256 firmado con el JWT secret del proyecto y role=service_role."""
    try:
        payload = jwt.decode(token, secret, algorithms=["HS256"], options={"verify_aud": False})
    except jwt.PyJWTError:
        return False
    return payload.get("role") == "service_role"


# -------------------------
# Dependencias públicas (para routers)
# -------------------------
def require_service_caller(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Security(_bearer)],
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Los jobs los llama el cron con la service role key.
    Acepta la key tal cual o, si hay SUPABASE_JWT_SECRET, cualquier JWT
    service_role válido del proyecto.
    """
    token = _get_token_from_bearer(credentials)
    key = settings.supabase_service_role_key
    if key and hmac.compare_digest(token.encode(), key.encode()):
        return
    if settings.supabase_jwt_secret and _is_service_role_jwt(token, settings.supabase_jwt_secret):
        return
    raise _unauthorized("Unauthorized")


def get_user_id(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Security(_bearer)],
    sb: Client = Depends(get_auth_supabase),
) -> str:
    """
    Resuelve el usuario del access token contra Supabase Auth.
    """
    token = _get_token_from_bearer(credentials)
    try:
        res = sb.auth.get_user(token)
        user = getattr(res, "user", None) if res else None
    except Exception as e:
        log.info("[auth] token rechazado: %s", e)
        user = None
    user_id = getattr(user, "id", None)
    if not user_id:
        raise _unauthorized("Unauthorized")
    return str(user_id)
