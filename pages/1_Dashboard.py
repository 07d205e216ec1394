import pandas as pd
import streamlit as st

from api_client import ApiError
from auth_helpers import get_client, get_pollers, require_login, toast_error, toast_success
from config import get_settings
from formatting import (
    PARAMETERS,
    SHIFTS,
    current_shift,
    format_date,
    format_number,
    parameter_status,
    trend,
)

st.set_page_config(page_title="Dashboard", page_icon="📊", layout="wide")
session = require_login(pollers=("dashboard",))

client = get_client()
settings = get_settings()
STATUS_ICONS = {"ok": "🟢 Normal", "warning": "🟡 Atenção", "critical": "🔴 Crítico"}


def load_snapshot(token):
    try:
        latest = client.get("/api/parameters/latest", token=token)
    except ApiError:
        # no reading registered yet
        latest = None
    stats = client.get("/api/parameters/stats", token=token) or {}
    return {"latest": latest, "stats": stats}


token = session.token
poller = get_pollers().ensure("dashboard", settings.dashboard_poll_seconds, lambda: load_snapshot(token))

header_col, refresh_col, add_col = st.columns([6, 1, 1])
header_col.title("📊 Dashboard Operacional")
if refresh_col.button("🔄 Atualizar", key="refresh_btn"):
    poller.run_once()


@st.fragment(run_every=settings.dashboard_poll_seconds)
def live_parameters():
    poller.poll()
    data = poller.latest or {"latest": None, "stats": {}}
    latest = data["latest"] or {}
    stats = data["stats"] or {}
    if poller.last_error and poller.latest is None:
        st.error("Erro ao carregar parâmetros")

    st.caption(f"Atualização: {format_date(latest.get('timestamp')) if latest else 'N/A'}")

    cols = st.columns(3)
    for idx, param in enumerate(PARAMETERS):
        value = latest.get(param["key"])
        average = stats.get(f"avg_{param['key']}")
        delta = trend(value, average)
        with cols[idx % 3]:
            with st.container(border=True):
                st.metric(
                    f"{param['icon']} {param['label']}",
                    f"{format_number(value)} {param['unit']}".strip(),
                    delta=f"{delta:+.1f}% vs média" if delta is not None else None,
                    delta_color="off",
                )
                if value is not None:
                    st.caption(f"{STATUS_ICONS[parameter_status(param['key'], value)]} • Ideal: {param['ideal']}")
                else:
                    st.caption(f"Ideal: {param['ideal']}")

    if latest.get("notes"):
        st.info(f"📝 {latest['notes']}")

    st.subheader("📈 Médias do Período")
    rows = []
    for p in PARAMETERS:
        average = format_number(stats.get("avg_" + p["key"]), 2)
        rows.append({"Parâmetro": p["label"], "Média": f"{average} {p['unit']}".strip(), "Faixa Ideal": p["ideal"]})
    averages = pd.DataFrame(rows)
    st.dataframe(averages, hide_index=True, use_container_width=True)
    st.caption(f"Turno atual: **{current_shift()}** • Registros: {stats.get('total_readings', stats.get('count', '—'))}")


live_parameters()

with add_col.popover("➕ Registrar"):
    with st.form("parameters_form", clear_on_submit=True):
        values = {}
        for param in PARAMETERS:
            values[param["key"]] = st.number_input(
                f"{param['label']} {param['unit']}".strip(), value=None, step=0.1, format="%.1f"
            )
        shift = st.selectbox("Turno", list(SHIFTS), format_func=SHIFTS.get,
                             index=list(SHIFTS).index(current_shift()))
        notes = st.text_area("Observações", placeholder="Opcional")
        submitted = st.form_submit_button("Registrar")

    if submitted:
        missing = [p["label"] for p in PARAMETERS if values[p["key"]] is None]
        if missing:
            st.warning(f"Preencha: {', '.join(missing)}")
        else:
            try:
                client.post("/api/parameters", token=session.token, json={
                    **{k: float(v) for k, v in values.items()},
                    "shift": shift,
                    "notes": notes or None,
                })
            except ApiError as e:
                toast_error(e, "Erro ao registrar parâmetros")
            else:
                toast_success("Parâmetros registrados com sucesso!")
                poller.run_once()
                st.rerun()
