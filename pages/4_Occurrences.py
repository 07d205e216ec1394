import base64

import pandas as pd
import streamlit as st

from api_client import ApiError
from auth_helpers import get_client, require_login, toast_error, toast_success
from datasets import filter_occurrences
from formatting import (
    EQUIPMENT,
    OCCURRENCE_STATUS_LABELS,
    OCCURRENCE_TYPES,
    URGENCY_ICONS,
    URGENCY_LABELS,
    format_date,
)
from reports import occurrence_type_label

st.set_page_config(page_title="Ocorrências", page_icon="⚠️", layout="wide")
session = require_login()
client = get_client()

st.title("⚠️ Ocorrências")
st.caption("Registro e acompanhamento de falhas operacionais")


def photo_data_url(upload):
    if upload is None:
        return None
    encoded = base64.b64encode(upload.getvalue()).decode("ascii")
    return f"data:{upload.type};base64,{encoded}"


# --- Register ---
with st.expander("➕ Nova Ocorrência"):
    with st.form("occurrence_form", clear_on_submit=True):
        col_a, col_b = st.columns(2)
        equipment = col_a.selectbox("Equipamento Afetado *", EQUIPMENT, index=None,
                                    placeholder="Selecione o equipamento")
        occurrence_type = col_b.selectbox("Tipo de Ocorrência *", list(OCCURRENCE_TYPES), index=None,
                                          format_func=OCCURRENCE_TYPES.get, placeholder="Selecione o tipo")
        urgency = st.selectbox("Urgência *", list(URGENCY_LABELS), index=None,
                               format_func=URGENCY_LABELS.get, placeholder="Selecione a urgência")
        description = st.text_area("Descrição Detalhada *",
                                   placeholder="Descreva a ocorrência com o máximo de detalhes possível...")
        photo = st.file_uploader("📸 Foto (opcional)", type=["jpg", "jpeg", "png"])
        submitted = st.form_submit_button("✅ Registrar Ocorrência")

    if submitted:
        if not (equipment and occurrence_type and urgency and description.strip()):
            st.warning("⚠️ Preencha todos os campos obrigatórios.")
        else:
            payload = {
                "equipment": equipment,
                "occurrence_type": occurrence_type,
                "urgency": urgency,
                "description": description.strip(),
            }
            if photo is not None:
                payload["photo_base64"] = photo_data_url(photo)
            try:
                created = client.post("/api/occurrences", token=session.token, json=payload) or {}
            except ApiError as e:
                toast_error(e, "Erro ao registrar ocorrência")
            else:
                toast_success(f"Protocolo {created.get('protocol', '')} gerado com sucesso!")
                st.rerun()

# --- Load ---
try:
    occurrences = client.get("/api/occurrences", token=session.token) or []
except ApiError as e:
    toast_error(e, "Erro ao carregar ocorrências")
    occurrences = []

# --- Filters ---
f1, f2, f3 = st.columns([3, 1, 1])
search = f1.text_input("🔍 Buscar", placeholder="Buscar por protocolo, equipamento...")
urgency_filter = f2.selectbox("Urgência", ["all", *URGENCY_LABELS],
                              format_func=lambda u: "Todas" if u == "all" else URGENCY_LABELS[u])
status_filter = f3.selectbox("Status", ["all", *OCCURRENCE_STATUS_LABELS],
                             format_func=lambda s: "Todos" if s == "all" else OCCURRENCE_STATUS_LABELS[s])

visible = filter_occurrences(occurrences, search, urgency_filter, status_filter)
st.caption(f"{len(visible)} de {len(occurrences)} ocorrências")

if not visible:
    st.info("Nenhuma ocorrência encontrada.")
else:
    table = pd.DataFrame([{
        "Protocolo": occ.get("protocol"),
        "Data/Hora": format_date(occ.get("timestamp")),
        "Equipamento": occ.get("equipment"),
        "Tipo": occurrence_type_label(occ.get("occurrence_type")),
        "Urgência": f"{URGENCY_ICONS.get(occ.get('urgency'), '')} {URGENCY_LABELS.get(occ.get('urgency'), occ.get('urgency'))}",
        "Status": OCCURRENCE_STATUS_LABELS.get(occ.get("status"), occ.get("status")),
        "Operador": occ.get("operator_name"),
    } for occ in visible])
    st.dataframe(table, hide_index=True, use_container_width=True)

    st.subheader("📄 Gerar relatório")
    by_id = {occ["id"]: occ for occ in visible if occ.get("id")}
    selected = st.selectbox("Ocorrência", list(by_id),
                            format_func=lambda i: f"{by_id[i].get('protocol')} • {by_id[i].get('equipment')}")
    if selected and st.button("Abrir relatório", key="open_report"):
        st.session_state.report_occurrence = selected
        st.switch_page("pages/5_Reports.py")
