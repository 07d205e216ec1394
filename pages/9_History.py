import datetime

import streamlit as st

from api_client import ApiError
from auth_helpers import get_client, require_login, toast_error
from datasets import ENTITY_LABELS, audit_csv, audit_filename, audit_frame, audit_query, filter_audit_logs

st.set_page_config(page_title="Histórico", page_icon="🕓", layout="wide")
session = require_login()
client = get_client()

st.title("🕓 Histórico e Auditoria")
st.caption("Registro completo de ocorrências, parâmetros e dosagens")

# --- Filters ---
with st.expander("📆 Filtros", expanded=True):
    f1, f2, f3 = st.columns([2, 1, 1])
    search = f1.text_input("🔍 Buscar", placeholder="Protocolo, equipamento, operador...")
    entity_type = f2.selectbox("Tipo", list(ENTITY_LABELS), format_func=ENTITY_LABELS.get)
    use_dates = f3.checkbox("Filtrar por data")
    start_date = end_date = None
    if use_dates:
        d1, d2 = st.columns(2)
        start_date = d1.date_input("Data inicial", datetime.date.today() - datetime.timedelta(days=7))
        end_date = d2.date_input("Data final", datetime.date.today())

try:
    logs = client.get("/api/audit/logs", token=session.token,
                      params=audit_query(entity_type, start_date, end_date)) or []
except ApiError as e:
    toast_error(e, "Erro ao carregar histórico")
    logs = []

visible = filter_audit_logs(logs, search)
st.caption(f"{len(visible)} registros")

if not visible:
    st.info("Nenhum registro encontrado.")
else:
    st.dataframe(audit_frame(visible), hide_index=True, use_container_width=True)
    st.download_button(
        "⬇️ Exportar CSV",
        data=audit_csv(visible),
        file_name=audit_filename(),
        mime="text/csv",
    )
