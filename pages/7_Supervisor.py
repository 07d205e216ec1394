import altair as alt
import pandas as pd
import streamlit as st

from api_client import ApiError
from auth_helpers import get_client, get_pollers, require_login
from config import get_settings
from datasets import weekly_trends_frame
from formatting import URGENCY_ICONS, format_date

st.set_page_config(page_title="Gestão", page_icon="📈", layout="wide")
session = require_login(require_supervisor=True, pollers=("supervisor",))
client = get_client()
settings = get_settings()


def load_dashboard(token):
    return {
        "dashboard": client.get("/api/supervisor/dashboard", token=token) or {},
        "trends": client.get("/api/supervisor/weekly-trends", token=token) or [],
    }


token = session.token
poller = get_pollers().ensure("supervisor", settings.dashboard_poll_seconds, lambda: load_dashboard(token))

st.title("📈 Painel de Gestão")
st.caption("Indicadores do tratamento de caldo")


def efficiency_label(value):
    if value >= 80:
        return "🟢 Excelente"
    if value >= 60:
        return "🟡 Regular"
    return "🔴 Crítica"


@st.fragment(run_every=settings.dashboard_poll_seconds)
def live_dashboard():
    poller.poll()
    if poller.latest is None:
        error = poller.last_error
        if isinstance(error, ApiError) and error.status_code == 403:
            st.error("Acesso restrito a supervisores")
        elif error is not None:
            st.error("Erro ao carregar painel")
        else:
            st.info("Carregando...")
        return

    data = poller.latest["dashboard"]
    trends = weekly_trends_frame(poller.latest["trends"])

    efficiency = data.get("efficiency") or 0
    critical = data.get("critical_occurrences") or []
    shifts = data.get("shifts") or {}

    c1, c2, c3 = st.columns(3)
    with c1:
        st.metric("Eficiência", f"{efficiency}%", help=efficiency_label(efficiency))
        st.progress(min(max(int(efficiency), 0), 100))
    c2.metric("Ocorrências Críticas", len(critical))
    c3.metric("Tendências de Parâmetros", len(data.get("parameter_trends") or []))

    st.markdown("### 🕐 Ocorrências por Turno")
    shift_cols = st.columns(3)
    for col, shift in zip(shift_cols, ["A", "B", "C"]):
        col.metric(f"Turno {shift}", shifts.get(shift, 0))

    left, right = st.columns(2)
    with left:
        st.markdown("### 🧪 pH Semanal")
        if not trends.empty and "avg_ph" in trends:
            band = alt.Chart(pd.DataFrame({"low": [6.8], "high": [7.2]})).mark_rect(opacity=0.15, color="green").encode(
                y="low:Q", y2="high:Q"
            )
            line = alt.Chart(trends).mark_line(point=True).encode(
                x=alt.X("date:T", title="Data"),
                y=alt.Y("avg_ph:Q", title="pH", scale=alt.Scale(zero=False)),
                tooltip=[alt.Tooltip("date:T", format="%d/%m"), alt.Tooltip("avg_ph:Q", format=".2f")],
            )
            st.altair_chart((band + line).properties(height=280), use_container_width=True)
        else:
            st.info("Sem dados semanais.")
    with right:
        st.markdown("### 💧 Turbidez Semanal")
        if not trends.empty and "avg_turbidity" in trends:
            bars = alt.Chart(trends).mark_bar().encode(
                x=alt.X("date:T", title="Data"),
                y=alt.Y("avg_turbidity:Q", title="NTU"),
                tooltip=[alt.Tooltip("date:T", format="%d/%m"), alt.Tooltip("avg_turbidity:Q", format=".0f")],
            ).properties(height=280)
            st.altair_chart(bars, use_container_width=True)
        else:
            st.info("Sem dados semanais.")

    left, right = st.columns(2)
    with left:
        st.markdown("### 🔧 Principais Falhas")
        failures = data.get("top_failures") or []
        if failures:
            st.dataframe(pd.DataFrame(failures).rename(columns={"type": "Tipo", "count": "Ocorrências"}),
                         hide_index=True, use_container_width=True)
        else:
            st.info("Nenhuma falha registrada.")
    with right:
        st.markdown("### 🚨 Ocorrências Críticas")
        if critical:
            for occ in critical:
                st.markdown(
                    f"{URGENCY_ICONS.get(occ.get('urgency'), '🔴')} **{occ.get('protocol')}** • "
                    f"{occ.get('equipment')} • {format_date(occ.get('timestamp'))}"
                )
        else:
            st.success("Nenhuma ocorrência crítica.")


live_dashboard()
