import pytest

from access_policy import (
    NAV_ITEMS,
    Role,
    assignable_roles,
    capabilities_for,
    navigation_for,
    page_for,
    role_label,
)


def labels(items):
    return [item.label for item in items]


def test_operator_navigation_hides_supervisor_screens():
    nav = labels(navigation_for("operator"))

    assert "Gestão" not in nav
    assert "Usuários" not in nav
    assert nav == [
        "Dashboard",
        "Ordens de Serviço",
        "Assistente IA",
        "Ocorrências",
        "Relatórios",
        "Dosagem Química",
        "Histórico",
    ]


@pytest.mark.parametrize("role", ["supervisor", "admin", Role.ADMIN])
def test_supervisors_see_everything_in_order(role):
    assert labels(navigation_for(role)) == labels(NAV_ITEMS)


def test_navigation_is_the_same_object_per_role():
    assert navigation_for("operator") is navigation_for(Role.OPERATOR)
    assert navigation_for("admin") is navigation_for("admin")


@pytest.mark.parametrize("role", [None, "", "visitor"])
def test_unknown_role_has_no_navigation(role):
    assert navigation_for(role) == ()


def test_capabilities():
    op = capabilities_for("operator")
    sup = capabilities_for("supervisor")
    admin = capabilities_for(Role.ADMIN)

    assert op.can_view_operator_screens and not op.can_view_supervisor_screens
    assert not op.can_manage_users
    assert sup.can_view_supervisor_screens and sup.can_manage_users
    assert admin == sup
    assert not capabilities_for("visitor").can_view_operator_screens


def test_role_ordering():
    assert Role.ADMIN.at_least(Role.SUPERVISOR)
    assert Role.SUPERVISOR.at_least(Role.SUPERVISOR)
    assert not Role.OPERATOR.at_least(Role.SUPERVISOR)


def test_page_for_known_and_unknown_paths():
    assert page_for("/users") == "pages/8_Users.py"
    assert page_for("/login") == "Home.py"
    assert page_for("/nowhere") == "pages/1_Dashboard.py"


def test_role_label():
    assert role_label("supervisor") == "Supervisor"
    assert role_label("visitor") == "visitor"
    assert role_label(None) == ""


def test_assignable_roles():
    assert assignable_roles("admin") == (Role.OPERATOR, Role.SUPERVISOR, Role.ADMIN)
    assert assignable_roles("supervisor") == (Role.OPERATOR,)
    assert assignable_roles("operator") == ()
