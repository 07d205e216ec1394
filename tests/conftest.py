import json

import pytest
import requests

from api_client import ApiError
from session_store import SessionStore
from token_storage import MemoryTokenStorage

OPERATOR = {"id": "u1", "name": "João Operador", "matricula": "OPR001", "role": "operator", "active": True}
SUPERVISOR = {"id": "u2", "name": "Maria Supervisora", "matricula": "SUP001", "role": "supervisor", "active": True}
ADMIN = {"id": "u3", "name": "Admin", "matricula": "ADM001", "role": "admin", "active": True}


class FakeGateway:
    """In-memory stand-in for AuthGateway."""

    def __init__(self, needs_setup=False):
        self.profiles = {}      # token -> profile payload
        self.accounts = {}      # (matricula, password) -> token
        self.needs_setup = needs_setup
        self.setup_status_error = None
        self.whoami_hook = None
        self.calls = []

    def add_user(self, profile, password, token):
        self.accounts[(profile["matricula"], password)] = token
        self.profiles[token] = profile

    def login(self, matricula, password):
        self.calls.append(("login", matricula))
        token = self.accounts.get((matricula, password))
        if token is None:
            raise ApiError("rejected", status_code=401, detail="Matrícula ou senha inválidos")
        return token, self.profiles[token]

    def whoami(self, token):
        self.calls.append(("whoami", token))
        if self.whoami_hook:
            self.whoami_hook(token)
        if token not in self.profiles:
            raise ApiError("unauthorized", status_code=401, detail="Token inválido")
        return self.profiles[token]

    def get_setup_status(self):
        self.calls.append(("setup_status",))
        if self.setup_status_error:
            raise self.setup_status_error
        return self.needs_setup

    def create_initial_admin(self):
        self.calls.append(("create_admin",))
        self.needs_setup = False
        return {
            "matricula": "ADM001",
            "senha_inicial": "Xk29-pQ7a",
            "aviso": "Altere a senha no primeiro acesso.",
        }


@pytest.fixture
def gateway():
    gw = FakeGateway()
    gw.add_user(OPERATOR, "op123456", "tok-operator")
    gw.add_user(SUPERVISOR, "sup123456", "tok-supervisor")
    gw.add_user(ADMIN, "adm123456", "tok-admin")
    return gw


@pytest.fixture
def storage():
    return MemoryTokenStorage()


@pytest.fixture
def store(gateway, storage):
    return SessionStore(gateway, storage)


def make_response(status_code=200, body=None, raw=None):
    response = requests.Response()
    response.status_code = status_code
    if raw is not None:
        response._content = raw
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = b""
    return response


class FakeHttpSession:
    """Records requests and replays queued responses (or raises queued errors)."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result
