# access_policy.py
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"


class Role(str, Enum):
    OPERATOR = "operator"
    SUPERVISOR = "supervisor"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _RANK[self]

    def at_least(self, other: "Role") -> bool:
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        if isinstance(value, Role):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


_RANK = {Role.OPERATOR: 0, Role.SUPERVISOR: 1, Role.ADMIN: 2}

ROLE_LABELS = {
    Role.OPERATOR: "Operador",
    Role.SUPERVISOR: "Supervisor",
    Role.ADMIN: "Administrador",
}


@dataclass(frozen=True)
class Capabilities:
    can_view_operator_screens: bool = False
    can_view_supervisor_screens: bool = False
    can_manage_users: bool = False


NO_CAPABILITIES = Capabilities()

CAPABILITIES = {
    Role.OPERATOR: Capabilities(can_view_operator_screens=True),
    Role.SUPERVISOR: Capabilities(True, True, True),
    Role.ADMIN: Capabilities(True, True, True),
}


def capabilities_for(role) -> Capabilities:
    role = Role.parse(role)
    return CAPABILITIES.get(role, NO_CAPABILITIES)


@dataclass(frozen=True)
class NavItem:
    label: str
    path: str
    icon: str
    page: str
    roles: frozenset


_ALL = frozenset(Role)
_SUPERVISORS = frozenset({Role.SUPERVISOR, Role.ADMIN})

NAV_ITEMS = (
    NavItem("Dashboard", "/dashboard", ":material/dashboard:", "pages/1_Dashboard.py", _ALL),
    NavItem("Ordens de Serviço", "/work-orders", ":material/assignment:", "pages/2_Work_Orders.py", _ALL),
    NavItem("Assistente IA", "/assistant", ":material/chat:", "pages/3_Assistant.py", _ALL),
    NavItem("Ocorrências", "/occurrences", ":material/warning:", "pages/4_Occurrences.py", _ALL),
    NavItem("Relatórios", "/reports", ":material/description:", "pages/5_Reports.py", _ALL),
    NavItem("Dosagem Química", "/chemicals", ":material/science:", "pages/6_Chemicals.py", _ALL),
    NavItem("Gestão", "/supervisor", ":material/bar_chart:", "pages/7_Supervisor.py", _SUPERVISORS),
    NavItem("Usuários", "/users", ":material/group:", "pages/8_Users.py", _SUPERVISORS),
    NavItem("Histórico", "/history", ":material/history:", "pages/9_History.py", _ALL),
)

_PAGES = {item.path: item.page for item in NAV_ITEMS}
_PAGES[LOGIN_PATH] = "Home.py"


@lru_cache(maxsize=None)
def _navigation(role: Optional[Role]):
    if role is None:
        return ()
    return tuple(item for item in NAV_ITEMS if role in item.roles)


def navigation_for(role):
    """Sidebar entries visible to `role`, in master-list order. Same object per role."""
    return _navigation(Role.parse(role))


def page_for(path: str) -> str:
    # unknown routes land on the dashboard
    return _PAGES.get(path, _PAGES[DASHBOARD_PATH])


def role_label(role) -> str:
    parsed = Role.parse(role)
    return ROLE_LABELS[parsed] if parsed else str(role or "")


def assignable_roles(role):
    """Roles a user with `role` may grant when creating accounts."""
    parsed = Role.parse(role)
    if parsed is Role.ADMIN:
        return tuple(Role)
    if parsed is Role.SUPERVISOR:
        return (Role.OPERATOR,)
    return ()
