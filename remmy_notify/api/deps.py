# remmy_notify/api/deps.py
# Dependencias compartidas por los routers (se sobreescriben en tests con
# app.dependency_overrides).

from functools import lru_cache
from typing import Iterator

import httpx
from fastapi import Depends
from supabase import Client

from remmy_notify.core.config import Settings, load_settings
from remmy_notify.core.supabase_client import create_auth_client, create_service_client


@lru_cache
def get_settings() -> Settings:
    return load_settings()


def get_service_supabase(settings: Settings = Depends(get_settings)) -> Client:
    return create_service_client(settings)


def get_auth_supabase(settings: Settings = Depends(get_settings)) -> Client:
    return create_auth_client(settings)


def get_http_client(settings: Settings = Depends(get_settings)) -> Iterator[httpx.Client]:
    with httpx.Client(timeout=settings.http_timeout_seconds) as client:
        yield client
