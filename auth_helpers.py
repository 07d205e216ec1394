# auth_helpers.py
import logging

import extra_streamlit_components as stx
import streamlit as st

from access_policy import DASHBOARD_PATH, LOGIN_PATH, navigation_for, page_for, role_label
from api_client import ApiClient, ApiError, AuthGateway
from config import get_settings
from formatting import URGENCY_ICONS, format_date
from polling import PollerRegistry
from route_guard import GuardState, evaluate, evaluate_public
from session_store import SessionStore, clear_user_state
from token_storage import CookieTokenStorage

logger = logging.getLogger(__name__)

NOTIFICATION_POLLER = "notifications"


def configure_logging():
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=get_settings().log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@st.cache_resource
def get_client() -> ApiClient:
    settings = get_settings()
    return ApiClient(settings.backend_url, timeout=settings.request_timeout)


def get_pollers() -> PollerRegistry:
    if "pollers" not in st.session_state:
        st.session_state.pollers = PollerRegistry()
    return st.session_state.pollers


def get_session() -> SessionStore:
    """The SessionStore of this browser session, created on first use."""
    if "session" not in st.session_state:
        settings = get_settings()
        store = SessionStore(
            AuthGateway(get_client()),
            CookieTokenStorage(
                st.context.cookies,
                key=settings.token_storage_key,
                max_age_days=settings.token_max_age_days,
            ),
        )
        pollers = get_pollers()
        state = st.session_state

        def end_user_session(_store):
            pollers.cancel_all()
            clear_user_state(state)

        store.on_logout(end_user_session)
        st.session_state.session = store
    return st.session_state.session


def sync_token_cookie(session: SessionStore):
    """Hand the last login or logout of this session to the browser's cookie jar."""
    storage = session.storage
    if getattr(storage, "pending", False):
        storage.flush(stx.CookieManager(key="ipiranga_cookies"))


def login(matricula: str, password: str):
    result = get_session().login(matricula, password)
    return result.success, result.error


def logout():
    get_session().logout()


# --- transient notifications ---
def queue_toast(message: str, icon: str = "✅"):
    """Shown at the start of the next run, so it survives the st.rerun() after a write."""
    st.session_state.setdefault("pending_toasts", []).append((message, icon))


def toast_success(message: str):
    queue_toast(message, "✅")


def flush_toasts():
    for message, icon in st.session_state.pop("pending_toasts", []):
        st.toast(message, icon=icon)


def toast_error(error, fallback: str):
    message = error.user_message(fallback) if isinstance(error, ApiError) else fallback
    st.toast(message, icon="❌")
    return message


def _resolve(session: SessionStore):
    with st.spinner("Carregando..."):
        session.initialize()
    return session.snapshot()


def require_login(require_supervisor: bool = False, pollers=()):
    """
    Call at the very top of each page file, after st.set_page_config.
    Sends anonymous visitors to the login screen and operators away from
    supervisor screens, then draws the sidebar shell.
    `pollers` names the background refreshes the page owns; any other
    page-level refresh still running is cancelled.
    """
    configure_logging()
    session = get_session()
    decision = evaluate(_resolve(session), require_supervisor)
    sync_token_cookie(session)
    if decision.state is GuardState.LOADING:
        st.info("Carregando...")
        st.stop()
    if decision.redirect:
        st.switch_page(page_for(decision.redirect))

    get_pollers().retain({NOTIFICATION_POLLER, *pollers})
    flush_toasts()
    render_shell(session)
    return session


def public_route():
    """Login screen guard: authenticated users go straight to the dashboard."""
    configure_logging()
    session = get_session()
    decision = evaluate_public(_resolve(session))
    sync_token_cookie(session)
    if decision.state is GuardState.LOADING:
        st.info("Carregando...")
        st.stop()
    if decision.redirect:
        st.switch_page(page_for(decision.redirect))
    get_pollers().cancel_all()
    return session


# --- application shell ---
def fetch_notifications(client: ApiClient, token: str) -> dict:
    items = client.get("/api/notifications", token=token, params={"unread_only": "false"}) or []
    count = client.get("/api/notifications/count", token=token) or {}
    return {"items": items[:10], "unread": count.get("unread_count", 0)}


def _notification_target(notif):
    if notif.get("type") == "work_order_assigned":
        return page_for("/work-orders")
    if notif.get("occurrence_id"):
        return page_for("/occurrences")
    return None


@st.fragment(run_every=get_settings().notification_poll_seconds)
def notifications_panel(session: SessionStore):
    task = get_pollers().get(NOTIFICATION_POLLER)
    if task:
        task.poll()
    data = (task.latest if task else None) or {"items": [], "unread": 0}
    unread = data["unread"]
    label = f"🔔 Notificações ({unread})" if unread else "🔔 Notificações"

    with st.expander(label):
        if unread and st.button("Marcar lidas", key="notif_mark_all"):
            try:
                get_client().post("/api/notifications/mark-all-read", token=session.token)
            except ApiError as e:
                logger.error("Error marking all as read: %s", e)
            if task:
                task.run_once()
            st.rerun(scope="fragment")

        if not data["items"]:
            st.caption("Nenhuma notificação")
        for notif in data["items"]:
            badge = URGENCY_ICONS.get(notif.get("urgency"), "")
            marker = "" if notif.get("read") else "● "
            st.markdown(f"{marker}{badge} **{notif.get('title', '')}**")
            st.caption(f"{notif.get('message', '')}  \n{format_date(notif.get('created_at'))}")
            if st.button("Abrir", key=f"notif_{notif.get('id')}"):
                if not notif.get("read"):
                    try:
                        get_client().patch(f"/api/notifications/{notif['id']}/read", token=session.token)
                    except ApiError as e:
                        logger.error("Error marking notification as read: %s", e)
                    if task:
                        task.run_once()
                target = _notification_target(notif)
                if target:
                    st.switch_page(target)
                st.rerun(scope="fragment")


def render_shell(session: SessionStore):
    settings = get_settings()
    client = get_client()
    token = session.token
    get_pollers().ensure(
        NOTIFICATION_POLLER,
        settings.notification_poll_seconds,
        lambda: fetch_notifications(client, token),
    )

    user = session.user
    with st.sidebar:
        st.markdown("## 🏭 IPIRANGA AI")
        st.caption("Tratamento de Caldo")
        for item in navigation_for(session.role):
            st.page_link(item.page, label=item.label, icon=item.icon)

        st.divider()
        notifications_panel(session)

        st.divider()
        st.markdown(f"👤 **{user.name}**")
        st.caption(f"{user.matricula} • {role_label(user.role)}")
        if st.button("Sair do Sistema", key="logout_btn", use_container_width=True):
            logout()
            st.switch_page(page_for(LOGIN_PATH))


def go_to_dashboard():
    st.switch_page(page_for(DASHBOARD_PATH))
