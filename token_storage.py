# token_storage.py
import datetime
import logging
from typing import Optional

from config import TOKEN_STORAGE_KEY

logger = logging.getLogger(__name__)

EXPIRED = datetime.datetime(1970, 1, 1)


class TokenStorage:
    def load(self) -> Optional[str]:
        raise NotImplementedError

    def save(self, token: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemoryTokenStorage(TokenStorage):
    def __init__(self, token: Optional[str] = None):
        self.token = token

    def load(self):
        return self.token

    def save(self, token):
        self.token = token

    def clear(self):
        self.token = None


class CookieTokenStorage(TokenStorage):
    """
    Keeps the credential token in a cookie of the visitor's own browser.

    `request_cookies` are the cookies the browser sent when the session
    opened (st.context.cookies), so a reload finds the token on the very
    first run. Changes are handed to the browser by flush() through an
    extra-streamlit-components CookieManager. The last change is sent on
    every run, so it still lands when the page switches right after it.
    """

    def __init__(self, request_cookies=None, key: str = TOKEN_STORAGE_KEY, max_age_days: float = 7):
        self.key = key
        self.max_age = datetime.timedelta(days=max_age_days)
        self._token = (request_cookies or {}).get(key) or None
        self._write = None

    @property
    def pending(self) -> bool:
        return self._write is not None

    def load(self):
        return self._token

    def save(self, token):
        self._token = token
        self._write = (token, datetime.datetime.now() + self.max_age)

    def clear(self):
        self._token = None
        # an already expired cookie is removed by the browser
        self._write = ("", EXPIRED)

    def flush(self, manager) -> None:
        if self._write is None:
            return
        value, expires_at = self._write
        manager.set(self.key, value, expires_at=expires_at, key=f"{self.key}_write")
        logger.debug("Cookie %s sent to the browser", self.key)
