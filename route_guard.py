# route_guard.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from access_policy import DASHBOARD_PATH, LOGIN_PATH


class GuardState(Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    ALLOWED = "allowed"
    ALREADY_AUTHENTICATED = "already_authenticated"


@dataclass(frozen=True)
class GuardDecision:
    state: GuardState
    redirect: Optional[str] = None

    @property
    def renders(self) -> bool:
        return self.state is GuardState.ALLOWED


def evaluate(snapshot, require_supervisor: bool = False) -> GuardDecision:
    """Decide what a protected view does for the current session state."""
    if snapshot.loading:
        # wait for the token check before sending anyone to the login screen
        return GuardDecision(GuardState.LOADING)
    if not snapshot.is_authenticated:
        return GuardDecision(GuardState.UNAUTHENTICATED, LOGIN_PATH)
    if require_supervisor and not snapshot.is_supervisor:
        return GuardDecision(GuardState.FORBIDDEN, DASHBOARD_PATH)
    return GuardDecision(GuardState.ALLOWED)


def evaluate_public(snapshot) -> GuardDecision:
    """Same rules inverted for the login screen."""
    if snapshot.loading:
        return GuardDecision(GuardState.LOADING)
    if snapshot.is_authenticated:
        return GuardDecision(GuardState.ALREADY_AUTHENTICATED, DASHBOARD_PATH)
    return GuardDecision(GuardState.ALLOWED)
