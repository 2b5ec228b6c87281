# remmy_notify/integrations/google_oauth.py
# Access token de Google para FCM HTTP v1 a partir de la service account.
# JWT RS256 firmado con la clave PKCS#8 y canjeado en el endpoint OAuth
# (grant jwt-bearer). Sin caché: cada ejecución hace su propio canje.

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import httpx
import jwt

from remmy_notify.core.config import FCM_SCOPE, GOOGLE_OAUTH_TOKEN_URL, Settings

log = logging.getLogger(__name__)

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_TTL_SECONDS = 3600


class FcmConfigError(Exception):
    pass


class FcmAuthError(Exception):
    pass


@dataclass(frozen=True)
class FcmCredentials:
    project_id: str
    client_email: str
    private_key: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "FcmCredentials":
        if not settings.fcm_project_id or not settings.fcm_client_email or not settings.fcm_private_key:
            raise FcmConfigError("Missing FCM_PROJECT_ID, FCM_CLIENT_EMAIL, or FCM_PRIVATE_KEY")
        return cls(
            project_id=settings.fcm_project_id,
            client_email=settings.fcm_client_email,
            private_key=settings.fcm_private_key,
        )


def build_assertion(client_email: str, private_key: str, now: Optional[datetime] = None) -> str:
    """
    JWT {alg: RS256, typ: JWT} con iss/scope/aud/iat/exp, en base64url sin
    padding, firmado RSASSA-PKCS1-v1_5 + SHA-256.
    """
    iat = int(now.timestamp()) if now else int(time.time())
    claims = {
        "iss": client_email,
        "scope": FCM_SCOPE,
        "aud": GOOGLE_OAUTH_TOKEN_URL,
        "iat": iat,
        "exp": iat + ASSERTION_TTL_SECONDS,
    }
    try:
        return jwt.encode(claims, private_key, algorithm="RS256", headers={"typ": "JWT"})
    except (ValueError, TypeError, jwt.PyJWTError) as e:
        raise FcmConfigError(f"FCM_PRIVATE_KEY inválida: {e}") from e


def fetch_access_token(http: httpx.Client, creds: FcmCredentials, now: Optional[datetime] = None) -> str:
    assertion = build_assertion(creds.client_email, creds.private_key, now)
    try:
        r = http.post(
            GOOGLE_OAUTH_TOKEN_URL,
            data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    except httpx.HTTPError as e:
        raise FcmAuthError(f"Google OAuth token request failed: {e}") from e

    if r.status_code >= 300:
        raise FcmAuthError(f"Google OAuth token error: {r.status_code} {r.text}")

    try:
        body = r.json()
    except ValueError:
        body = None
    token = body.get("access_token") if isinstance(body, dict) else None
    if not token:
        raise FcmAuthError("Google OAuth token response without access_token")

    log.info("[fcm] access token obtenido para %s", creds.client_email)
    return token
