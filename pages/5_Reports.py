import streamlit as st

from api_client import ApiError
from auth_helpers import get_client, require_login, toast_error
from formatting import OCCURRENCE_STATUS_LABELS, URGENCY_ICONS
from reports import (
    build_occurrence_pdf,
    generate_qr_bytes,
    qr_payload,
    report_filename,
    report_lines,
)

st.set_page_config(page_title="Relatórios", page_icon="📄", layout="wide")
session = require_login()
client = get_client()

st.title("📄 Relatórios")
st.caption("Relatório técnico de ocorrência com QR Code")

try:
    occurrences = client.get("/api/occurrences", token=session.token) or []
except ApiError as e:
    toast_error(e, "Erro ao carregar ocorrências")
    occurrences = []

if not occurrences:
    st.info("Nenhuma ocorrência registrada.")
    st.stop()

by_id = {occ["id"]: occ for occ in occurrences if occ.get("id")}
ids = list(by_id)

# deep link from the occurrences screen, or ?occurrence=<id> in the URL
preselected = st.session_state.pop("report_occurrence", None) or st.query_params.get("occurrence")
index = ids.index(preselected) if preselected in by_id else None

selected_id = st.selectbox(
    "Selecione a ocorrência", ids, index=index,
    format_func=lambda i: f"{by_id[i].get('protocol')} • {by_id[i].get('equipment')}",
    placeholder="Selecione",
)
if not selected_id:
    st.stop()
st.query_params["occurrence"] = selected_id
occurrence = by_id[selected_id]

with st.container(border=True):
    body, qr_col = st.columns([3, 1])
    with body:
        st.subheader(f"Ocorrência {occurrence.get('protocol', '')}")
        status = OCCURRENCE_STATUS_LABELS.get(occurrence.get("status"), occurrence.get("status") or "-")
        st.caption(f"{URGENCY_ICONS.get(occurrence.get('urgency'), '')} • {status}")
        for label, value in report_lines(occurrence):
            st.markdown(f"**{label}:** {value}")
        st.markdown("**Descrição**")
        st.write(occurrence.get("description") or "-")
        if occurrence.get("photo_url"):
            st.image(occurrence["photo_url"], caption="Foto anexada")
    with qr_col:
        st.image(generate_qr_bytes(qr_payload(occurrence)), caption=occurrence.get("protocol"))

try:
    pdf = build_occurrence_pdf(occurrence)
except RuntimeError as e:
    # PyMuPDF reports rendering failures as RuntimeError
    toast_error(e, "Erro ao gerar PDF")
else:
    st.download_button(
        "⬇️ Baixar PDF",
        data=pdf,
        file_name=report_filename(occurrence),
        mime="application/pdf",
    )
