import datetime

from token_storage import EXPIRED, CookieTokenStorage, MemoryTokenStorage


class FakeCookieManager:
    """Records what would be sent to the browser."""

    def __init__(self):
        self.writes = []

    def set(self, cookie, val, expires_at=None, key=None, **kwargs):
        self.writes.append((cookie, val, expires_at, key))


def test_memory_storage():
    storage = MemoryTokenStorage("abc")
    assert storage.load() == "abc"
    storage.clear()
    storage.clear()
    assert storage.load() is None


def test_cookie_storage_reads_the_request_cookie():
    storage = CookieTokenStorage({"ipiranga_token": "jwt-token", "theme": "dark"})

    assert storage.load() == "jwt-token"
    assert not storage.pending


def test_cookie_storage_without_cookie():
    assert CookieTokenStorage({}).load() is None
    assert CookieTokenStorage(None).load() is None
    assert CookieTokenStorage({"ipiranga_token": ""}).load() is None


def test_save_is_sent_with_an_expiry():
    storage = CookieTokenStorage({}, max_age_days=7)
    manager = FakeCookieManager()

    storage.save("jwt-token")
    storage.flush(manager)

    assert storage.load() == "jwt-token"
    cookie, value, expires_at, _ = manager.writes[0]
    assert (cookie, value) == ("ipiranga_token", "jwt-token")
    assert expires_at > datetime.datetime.now() + datetime.timedelta(days=6)


def test_clear_expires_the_cookie_and_is_idempotent():
    storage = CookieTokenStorage({"ipiranga_token": "jwt-token"})
    manager = FakeCookieManager()

    storage.clear()
    storage.clear()
    storage.flush(manager)

    assert storage.load() is None
    assert manager.writes == [("ipiranga_token", "", EXPIRED, "ipiranga_token_write")]


def test_last_change_is_resent_on_every_flush():
    storage = CookieTokenStorage({})
    manager = FakeCookieManager()

    storage.flush(manager)
    assert manager.writes == []

    storage.save("jwt-token")
    storage.flush(manager)
    storage.flush(manager)

    assert manager.writes[0] == manager.writes[1]


def test_custom_cookie_name():
    storage = CookieTokenStorage({"console_token": "abc"}, key="console_token")
    assert storage.load() == "abc"
