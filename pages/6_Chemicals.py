import altair as alt
import pandas as pd
import streamlit as st

from api_client import ApiError
from auth_helpers import get_client, require_login, toast_error, toast_success
from datasets import chemical_totals, cost_distribution, dosage_by_shift, dosages_frame, total_cost
from formatting import CHEMICALS, SHIFTS, chemical, current_shift, format_currency, format_date_short

st.set_page_config(page_title="Dosagem Química", page_icon="🧪", layout="wide")
session = require_login()
client = get_client()

st.title("🧪 Dosagem Química")
st.caption("Controle de consumo e custo de insumos")

# --- Load ---
try:
    dosages = client.get("/api/dosage", token=session.token) or []
    stats = client.get("/api/dosage/stats", token=session.token) or {}
    daily = client.get("/api/dosage/daily", token=session.token) or []
except ApiError as e:
    toast_error(e, "Erro ao carregar dosagens")
    dosages, stats, daily = [], {}, []

# --- Register ---
with st.expander("➕ Registrar Dosagem"):
    chem_value = st.selectbox("Produto *", [c["value"] for c in CHEMICALS], index=None,
                              format_func=lambda v: chemical(v)["label"], placeholder="Selecione o produto")
    unit = chemical(chem_value)["unit"] if chem_value else ""
    with st.form("dosage_form", clear_on_submit=True):
        col_a, col_b = st.columns(2)
        quantity = col_a.number_input(f"Quantidade ({unit or '-'}) *", min_value=0.0, step=0.1, value=None)
        cost_per_unit = col_b.number_input("Custo por unidade (R$) *", min_value=0.0, step=0.01, value=None)
        shift = st.selectbox("Turno", list(SHIFTS), format_func=SHIFTS.get,
                             index=list(SHIFTS).index(current_shift()))
        notes = st.text_input("Observações", placeholder="Opcional")
        submitted = st.form_submit_button("✅ Registrar")

    if submitted:
        if not chem_value or quantity is None or cost_per_unit is None:
            st.warning("⚠️ Preencha produto, quantidade e custo.")
        else:
            try:
                client.post("/api/dosage", token=session.token, json={
                    "chemical_type": chem_value,
                    "quantity": float(quantity),
                    "unit": unit,
                    "cost_per_unit": float(cost_per_unit),
                    "shift": shift,
                    "notes": notes or None,
                })
            except ApiError as e:
                toast_error(e, "Erro ao registrar dosagem")
            else:
                toast_success("Dosagem registrada com sucesso!")
                st.rerun()

# --- Totals per chemical ---
cols = st.columns(len(CHEMICALS))
for col, item in zip(cols, chemical_totals(stats)):
    col.metric(item["label"], f"{item['total_quantity']:.1f} {item['unit']}",
               help=f"{item['count']} registros • {format_currency(item['total_cost'])}")
st.metric("💰 Custo Total", format_currency(total_cost(stats)))

# --- Charts ---
left, right = st.columns(2)
with left:
    st.markdown("### 💸 Distribuição de Custo")
    pie = cost_distribution(stats)
    if not pie.empty and (pie["value"] > 0).any():
        chart = alt.Chart(pie).mark_arc(innerRadius=50).encode(
            theta="value:Q",
            color=alt.Color("name:N", scale=alt.Scale(domain=list(pie["name"]), range=list(pie["color"])),
                            legend=alt.Legend(title="Produto")),
            tooltip=["name", alt.Tooltip("value:Q", format=",.2f", title="R$")],
        ).properties(height=280)
        st.altair_chart(chart, use_container_width=True)
    else:
        st.info("Sem custos registrados.")

with right:
    st.markdown("### 📊 Consumo por Turno")
    by_shift = dosage_by_shift(dosages).reset_index().melt(id_vars="shift", var_name="Produto",
                                                           value_name="Quantidade")
    chart = alt.Chart(by_shift).mark_bar().encode(
        x=alt.X("shift:N", title="Turno"),
        y=alt.Y("Quantidade:Q"),
        xOffset="Produto:N",
        color=alt.Color("Produto:N", scale=alt.Scale(domain=[c["label"] for c in CHEMICALS],
                                                     range=[c["color"] for c in CHEMICALS])),
        tooltip=["shift", "Produto", "Quantidade"],
    ).properties(height=280)
    st.altair_chart(chart, use_container_width=True)

if daily:
    st.markdown("### 📈 Consumo Diário")
    daily_df = pd.DataFrame(daily)
    date_col = "date" if "date" in daily_df.columns else "_id"
    daily_df["Dia"] = daily_df[date_col].map(format_date_short)
    value_cols = [c for c in daily_df.columns if c not in (date_col, "Dia")]
    st.dataframe(daily_df[["Dia", *value_cols]], hide_index=True, use_container_width=True)

# --- History ---
st.markdown("### 📋 Registros")
table = dosages_frame(dosages)
if table.empty:
    st.info("Nenhuma dosagem registrada.")
else:
    st.dataframe(table, hide_index=True, use_container_width=True)
