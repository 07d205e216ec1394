# api_client.py
"""
HTTP access to the juice-treatment backend.

Every call takes the bearer token as an explicit argument. Nothing is
attached to the underlying requests.Session, so a logout never changes
the headers of a request that is already in flight.
"""
import logging
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A backend call failed: non-2xx answer or no answer at all."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    @property
    def is_auth_rejection(self) -> bool:
        return self.status_code in (401, 403)

    def user_message(self, fallback: str) -> str:
        return self.detail or fallback


def _detail_from(response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, str):
            return detail
        if isinstance(detail, list) and detail:
            # validation errors come back as a list of {loc, msg}
            first = detail[0]
            return first.get("msg") if isinstance(first, dict) else str(first)
    return None


class ApiClient:
    def __init__(self, base_url: str, timeout: float = 15.0, session=None):
        if not base_url:
            raise ValueError("BACKEND_URL is not configured")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def request(self, method: str, path: str, token: Optional[str] = None,
                params: Optional[dict] = None, json: Any = None) -> Any:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, headers=headers, params=params, json=json, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(f"Backend unreachable: {e}") from e

        if response.status_code >= 400:
            detail = _detail_from(response)
            logger.info("%s %s -> %s %s", method, path, response.status_code, detail or "")
            raise ApiError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
                detail=detail,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"{method} {path} returned a non-JSON body",
                           status_code=response.status_code) from e

    def get(self, path, token=None, params=None):
        return self.request("GET", path, token=token, params=params)

    def post(self, path, token=None, params=None, json=None):
        return self.request("POST", path, token=token, params=params, json=json)

    def patch(self, path, token=None, params=None, json=None):
        return self.request("PATCH", path, token=token, params=params, json=json)


class AuthGateway:
    """Session intents -> backend calls. Single shot, no retries."""

    def __init__(self, client: ApiClient):
        self.client = client

    def login(self, matricula: str, password: str):
        data = self.client.post("/api/auth/login", json={"matricula": matricula, "password": password})
        if not data or not data.get("token"):
            raise ApiError("Login response without token")
        return data["token"], data.get("user") or {}

    def whoami(self, token: str) -> dict:
        data = self.client.get("/api/auth/me", token=token)
        if not isinstance(data, dict):
            raise ApiError("Malformed profile response")
        return data

    def get_setup_status(self) -> bool:
        data = self.client.get("/api/setup/status") or {}
        return bool(data.get("needs_setup", False))

    def create_initial_admin(self) -> dict:
        return self.client.post("/api/setup/admin") or {}
