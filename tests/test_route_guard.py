import pytest

from route_guard import GuardState, evaluate, evaluate_public
from session_store import Profile, SessionSnapshot


def snapshot(role=None, loading=False):
    user = None
    if role:
        user = Profile.from_payload({"id": "u1", "name": "Teste", "matricula": "T001", "role": role})
    return SessionSnapshot(token="tok" if user else None, user=user, loading=loading, needs_setup=False)


def test_loading_never_redirects():
    decision = evaluate(snapshot(loading=True), require_supervisor=True)

    assert decision.state is GuardState.LOADING
    assert decision.redirect is None
    assert not decision.renders


def test_anonymous_goes_to_login():
    decision = evaluate(snapshot())

    assert decision.state is GuardState.UNAUTHENTICATED
    assert decision.redirect == "/login"


def test_operator_on_supervisor_view_goes_to_dashboard():
    decision = evaluate(snapshot("operator"), require_supervisor=True)

    assert decision.state is GuardState.FORBIDDEN
    assert decision.redirect == "/dashboard"


def test_operator_on_regular_view_renders():
    assert evaluate(snapshot("operator")).renders


@pytest.mark.parametrize("role", ["supervisor", "admin"])
def test_supervisors_render_supervisor_views(role):
    decision = evaluate(snapshot(role), require_supervisor=True)

    assert decision.renders
    assert decision.redirect is None


def test_public_route():
    assert evaluate_public(snapshot(loading=True)).state is GuardState.LOADING
    assert evaluate_public(snapshot()).renders

    decision = evaluate_public(snapshot("operator"))
    assert decision.state is GuardState.ALREADY_AUTHENTICATED
    assert decision.redirect == "/dashboard"
