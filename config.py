# config.py
import os
from dataclasses import dataclass
from functools import lru_cache

import pytz

TOKEN_STORAGE_KEY = "ipiranga_token"


@dataclass(frozen=True)
class Settings:
    backend_url: str
    token_max_age_days: float = 7.0
    token_storage_key: str = TOKEN_STORAGE_KEY
    request_timeout: float = 15.0
    notification_poll_seconds: float = 30.0
    dashboard_poll_seconds: float = 60.0
    local_timezone: str = "America/Sao_Paulo"
    log_level: str = "INFO"

    @property
    def tz(self):
        return pytz.timezone(self.local_timezone)


def _setting(name, default=None):
    """Environment first, then .streamlit/secrets.toml, then the default."""
    value = os.getenv(name)
    if value:
        return value
    try:
        import streamlit as st
        return st.secrets.get(name, default)
    except Exception:
        # no secrets file configured
        return default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        backend_url=(_setting("BACKEND_URL", "") or "").rstrip("/"),
        token_max_age_days=float(_setting("TOKEN_MAX_AGE_DAYS", Settings.token_max_age_days)),
        request_timeout=float(_setting("REQUEST_TIMEOUT", Settings.request_timeout)),
        notification_poll_seconds=float(
            _setting("NOTIFICATION_POLL_SECONDS", Settings.notification_poll_seconds)
        ),
        dashboard_poll_seconds=float(
            _setting("DASHBOARD_POLL_SECONDS", Settings.dashboard_poll_seconds)
        ),
        local_timezone=_setting("LOCAL_TIMEZONE", Settings.local_timezone),
        log_level=str(_setting("LOG_LEVEL", Settings.log_level)).upper(),
    )
