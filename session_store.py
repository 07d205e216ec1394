# session_store.py
"""
Who is logged in.

One SessionStore lives per browser session (auth_helpers keeps it in
st.session_state). It owns the credential token, the cached profile of
the current user and the two flags the route guard needs: `loading`
and `needs_setup`.

The session counts as authenticated only once a profile is present. A
persisted token on its own may be stale and is confirmed by
fetch_profile(), which discards any answer that arrives after the token
has changed.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from access_policy import Role, capabilities_for
from api_client import ApiError

logger = logging.getLogger(__name__)

LOGIN_FALLBACK = "Erro ao fazer login"
SETUP_FALLBACK = "Erro ao criar administrador"
ALREADY_CONFIGURED = "Sistema já configurado"

# screen state that belongs to whoever is logged in
USER_STATE_KEYS = ("chat_messages", "chat_session_id", "report_occurrence", "setup_result")


def clear_user_state(state) -> None:
    for key in USER_STATE_KEYS:
        state.pop(key, None)


@dataclass(frozen=True)
class Profile:
    id: str
    name: str
    matricula: str
    role: Optional[Role]
    active: bool = True
    function: Optional[str] = None
    sector: Optional[str] = None

    @classmethod
    def from_payload(cls, data: dict) -> "Profile":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            matricula=data.get("matricula", ""),
            role=Role.parse(data.get("role")),
            active=bool(data.get("active", True)),
            function=data.get("function"),
            sector=data.get("sector"),
        )


@dataclass(frozen=True)
class SessionSnapshot:
    token: Optional[str]
    user: Optional[Profile]
    loading: bool
    needs_setup: bool

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def role(self) -> Optional[Role]:
        return self.user.role if self.user else None

    @property
    def is_supervisor(self) -> bool:
        return capabilities_for(self.role).can_view_supervisor_screens


@dataclass
class AuthResult:
    success: bool
    error: Optional[str] = None


@dataclass
class SetupResult:
    success: bool
    data: dict = field(default_factory=dict)
    error: Optional[str] = None


class SessionStore:
    def __init__(self, gateway, storage):
        self.gateway = gateway
        self.storage = storage
        self.token: Optional[str] = None
        self.user: Optional[Profile] = None
        self.loading = True
        self.needs_setup = False
        self._generation = 0
        self._initialized = False
        self._admin_created = False
        self._lock = threading.RLock()
        self._listeners: List[Callable] = []
        self._logout_listeners: List[Callable] = []

    # --- derived accessors ---
    @property
    def role(self) -> Optional[Role]:
        user = self.user
        return user.role if user else None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_operator(self) -> bool:
        return self.role is Role.OPERATOR

    @property
    def is_supervisor(self) -> bool:
        return capabilities_for(self.role).can_view_supervisor_screens

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def can_manage_users(self) -> bool:
        return capabilities_for(self.role).can_manage_users

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(self.token, self.user, self.loading, self.needs_setup)

    def subscribe(self, callback: Callable[["SessionStore"], None]) -> None:
        self._listeners.append(callback)

    def on_logout(self, callback: Callable[["SessionStore"], None]) -> None:
        self._logout_listeners.append(callback)

    def _changed(self):
        for callback in list(self._listeners):
            callback(self)

    # --- operations ---
    def initialize(self) -> None:
        with self._lock:
            if self._initialized:
                return
            self._initialized = True
            self.loading = True
            token = self.storage.load()

        self.check_setup_status()

        if not token:
            with self._lock:
                self.loading = False
            self._changed()
            return

        with self._lock:
            self.token = token
            self._generation += 1
        self.fetch_profile()

    def check_setup_status(self) -> None:
        try:
            needs_setup = self.gateway.get_setup_status()
        except ApiError as e:
            logger.error("Error checking setup status: %s", e)
            return
        with self._lock:
            # an admin created here settles the flag for the rest of the session
            self.needs_setup = needs_setup and not self._admin_created
        self._changed()

    def fetch_profile(self) -> None:
        with self._lock:
            generation, token = self._generation, self.token
        if not token:
            with self._lock:
                if generation == self._generation:
                    self.loading = False
            return

        try:
            payload = self.gateway.whoami(token)
        except ApiError as e:
            with self._lock:
                if generation != self._generation:
                    logger.info("Discarding profile failure for a superseded token")
                    return
            logger.warning("Error fetching user, ending session: %s", e)
            self.logout()
            return

        with self._lock:
            if generation != self._generation:
                logger.info("Discarding profile for a superseded token")
                return
            self.user = Profile.from_payload(payload)
            self.loading = False
        self._changed()

    def login(self, matricula: str, password: str) -> AuthResult:
        try:
            token, user_data = self.gateway.login(matricula, password)
        except ApiError as e:
            logger.info("Login rejected for %s", matricula)
            return AuthResult(False, e.user_message(LOGIN_FALLBACK))

        self.storage.save(token)
        with self._lock:
            self.token = token
            self.user = Profile.from_payload(user_data) if user_data else None
            self._generation += 1
        logger.info("User %s logged in", matricula)
        self._changed()
        self.fetch_profile()
        if not self.is_authenticated:
            return AuthResult(False, LOGIN_FALLBACK)
        return AuthResult(True)

    def logout(self) -> None:
        self.storage.clear()
        with self._lock:
            was_authenticated = self.token is not None or self.user is not None
            self.token = None
            self.user = None
            self.loading = False
            self._generation += 1
        if was_authenticated:
            logger.info("Session ended")
        self._changed()
        for callback in list(self._logout_listeners):
            callback(self)

    def setup_admin(self) -> SetupResult:
        if not self.needs_setup:
            return SetupResult(False, error=ALREADY_CONFIGURED)
        try:
            data = self.gateway.create_initial_admin()
        except ApiError as e:
            return SetupResult(False, error=e.user_message(SETUP_FALLBACK))
        with self._lock:
            self.needs_setup = False
            self._admin_created = True
        logger.info("Initial administrator %s created", data.get("matricula"))
        self._changed()
        return SetupResult(True, data=data)
