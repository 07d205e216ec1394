import streamlit as st

from api_client import ApiError
from auth_helpers import get_client, require_login, toast_error, toast_success
from datasets import can_progress, filter_work_orders, missing_work_order_fields
from formatting import EQUIPMENT, PRIORITY_LABELS, WORK_ORDER_STATUS_LABELS, format_date

st.set_page_config(page_title="Ordens de Serviço", page_icon="📋", layout="wide")
session = require_login()
client = get_client()

PRIORITY_ICONS = {"baixa": "🟢", "media": "🟡", "alta": "🟠", "urgente": "🔴"}

st.title("📋 Ordens de Serviço")
st.caption("Manutenção e tarefas atribuídas")

# --- Load ---
try:
    work_orders = client.get("/api/work-orders", token=session.token) or []
    stats = client.get("/api/work-orders/stats/summary", token=session.token) or {}
except ApiError as e:
    toast_error(e, "Erro ao carregar ordens de serviço")
    work_orders, stats = [], {}

operators = []
if session.is_supervisor:
    try:
        operators = client.get("/api/operators/list", token=session.token) or []
    except ApiError as e:
        toast_error(e, "Erro ao carregar operadores")

# --- Stats ---
c1, c2, c3, c4 = st.columns(4)
c1.metric("Total", stats.get("total", 0))
c2.metric("Pendentes", stats.get("pending", 0))
c3.metric("Em Andamento", stats.get("in_progress", 0))
c4.metric("Concluídas", stats.get("completed", 0))

# --- New work order (supervisors) ---
if session.is_supervisor:
    with st.expander("➕ Nova OS"):
        with st.form("work_order_form", clear_on_submit=True):
            title = st.text_input("Título *")
            description = st.text_area("Descrição *")
            col_a, col_b = st.columns(2)
            equipment = col_a.selectbox("Equipamento *", EQUIPMENT, index=None, placeholder="Selecione")
            priority = col_b.selectbox("Prioridade", list(PRIORITY_LABELS), index=1,
                                       format_func=PRIORITY_LABELS.get)
            operator_ids = [op.get("id") for op in operators]
            operator_names = {op.get("id"): f"{op.get('name')} ({op.get('matricula')})" for op in operators}
            assigned_to = st.selectbox("Atribuir a *", operator_ids, index=None,
                                       format_func=lambda i: operator_names.get(i, i),
                                       placeholder="Selecione o operador")
            submitted = st.form_submit_button("✅ Criar OS")

        if submitted:
            missing = missing_work_order_fields(title, description, equipment, assigned_to)
            if missing:
                st.warning(f"⚠️ Preencha: {', '.join(missing)}")
            else:
                try:
                    created = client.post("/api/work-orders", token=session.token, json={
                        "title": title.strip(),
                        "description": description.strip(),
                        "equipment": equipment,
                        "priority": priority,
                        "assigned_to": assigned_to,
                    }) or {}
                except ApiError as e:
                    toast_error(e, "Erro ao criar OS")
                else:
                    toast_success(f"OS {created.get('os_number', '')} criada com sucesso!")
                    st.rerun()

# --- List ---
status_filter = st.selectbox(
    "Status", ["all", *WORK_ORDER_STATUS_LABELS],
    format_func=lambda s: "Todos" if s == "all" else WORK_ORDER_STATUS_LABELS[s],
)
visible = filter_work_orders(work_orders, status_filter)

if not visible:
    st.info("Nenhuma ordem de serviço encontrada.")

for wo in visible:
    with st.container(border=True):
        top, actions = st.columns([5, 1])
        with top:
            st.markdown(
                f"**{wo.get('os_number', '')}** · {wo.get('title', '')}  \n"
                f"{PRIORITY_ICONS.get(wo.get('priority'), '')} {PRIORITY_LABELS.get(wo.get('priority'), wo.get('priority'))}"
                f" • {WORK_ORDER_STATUS_LABELS.get(wo.get('status'), wo.get('status'))}"
            )
            st.write(wo.get("description", ""))
            st.caption(
                f"🔧 {wo.get('equipment') or '-'} • 👷 {wo.get('assigned_to_name') or 'Não atribuída'}"
                f" • Criada por {wo.get('created_by_name') or '-'} em {format_date(wo.get('created_at'))}"
            )
            if wo.get("completion_notes"):
                st.caption(f"📝 {wo['completion_notes']}")

        with actions:
            if not can_progress(wo, session.user.id):
                continue
            if wo.get("status") == "pendente":
                if st.button("▶️ Iniciar", key=f"start_{wo['id']}"):
                    try:
                        client.patch(f"/api/work-orders/{wo['id']}/start", token=session.token)
                    except ApiError as e:
                        toast_error(e, "Erro ao iniciar OS")
                    else:
                        toast_success("OS iniciada!")
                        st.rerun()
            elif wo.get("status") == "em_andamento":
                with st.popover("✅ Concluir"):
                    notes = st.text_area("Notas de conclusão", key=f"notes_{wo['id']}")
                    if st.button("Confirmar", key=f"complete_{wo['id']}"):
                        try:
                            client.patch(f"/api/work-orders/{wo['id']}/complete", token=session.token,
                                         params={"completion_notes": notes})
                        except ApiError as e:
                            toast_error(e, "Erro ao concluir OS")
                        else:
                            toast_success("OS concluída!")
                            st.rerun()
