import streamlit as st

from access_policy import ROLE_LABELS, Role, assignable_roles
from api_client import ApiError
from auth_helpers import get_client, require_login, toast_error, toast_success
from datasets import filter_users, user_counts, users_frame

st.set_page_config(page_title="Usuários", page_icon="👥", layout="wide")
session = require_login(require_supervisor=True)
client = get_client()

MIN_PASSWORD = 6
FUNCTIONS = [
    "Operador de Tratamento",
    "Operador de Caldeira",
    "Operador de Evaporação",
    "Líder de Turno",
    "Supervisor de Produção",
    "Engenheiro de Processo",
    "Coordenador de Área",
    "Gerente Industrial",
]

st.title("👥 Gestão de Usuários")
st.caption("Cadastro, ativação e redefinição de senha")

try:
    users = client.get("/api/users", token=session.token) or []
except ApiError as e:
    toast_error(e, "Erro ao carregar usuários")
    users = []

counts = user_counts(users)
c1, c2, c3, c4 = st.columns(4)
c1.metric("Total", counts["total"])
c2.metric("Operadores", counts["operators"])
c3.metric("Supervisores", counts["supervisors"])
c4.metric("Ativos", counts["active"])

# --- Create ---
with st.expander("➕ Novo Usuário"):
    with st.form("user_form", clear_on_submit=True):
        name = st.text_input("Nome completo *")
        col_a, col_b = st.columns(2)
        matricula = col_a.text_input("Matrícula *", placeholder="Ex: OPR002")
        sector = col_b.text_input("Setor", value="Tratamento de Caldo")
        function = st.selectbox("Função", FUNCTIONS)
        role = st.selectbox("Perfil", list(assignable_roles(session.role)), format_func=ROLE_LABELS.get)
        password = st.text_input("Senha inicial *", type="password")
        submitted = st.form_submit_button("✅ Criar Usuário")

    if submitted:
        if not name.strip() or not matricula.strip():
            st.warning("⚠️ Nome e matrícula são obrigatórios.")
        elif len(password) < MIN_PASSWORD:
            st.warning(f"⚠️ Senha deve ter pelo menos {MIN_PASSWORD} caracteres")
        else:
            matricula = matricula.strip().upper()
            try:
                client.post("/api/users", token=session.token, json={
                    "name": name.strip(),
                    "matricula": matricula,
                    "sector": sector.strip(),
                    "function": function,
                    "role": Role(role).value,
                    "password": password,
                })
            except ApiError as e:
                toast_error(e, "Erro ao criar usuário")
            else:
                toast_success(f"Usuário {matricula} criado com sucesso!")
                st.rerun()

# --- List ---
f1, f2 = st.columns([3, 1])
search = f1.text_input("🔍 Buscar", placeholder="Nome ou matrícula")
role_filter = f2.selectbox("Perfil", ["all", *[r.value for r in Role]],
                           format_func=lambda r: "Todos" if r == "all" else ROLE_LABELS[Role(r)])
visible = filter_users(users, search, role_filter)

if not visible:
    st.info("Nenhum usuário encontrado.")
    st.stop()

st.dataframe(users_frame(visible), hide_index=True, use_container_width=True)

# --- Per-user actions ---
st.subheader("✏️ Ações")
by_id = {u["id"]: u for u in visible if u.get("id")}
selected_id = st.selectbox("Usuário", list(by_id),
                           format_func=lambda i: f"{by_id[i].get('matricula')} • {by_id[i].get('name')}")
selected = by_id[selected_id]
is_self = session.user and selected_id == session.user.id

col_toggle, col_reset = st.columns(2)
with col_toggle:
    active = bool(selected.get("active"))
    label = "🚫 Desativar" if active else "✅ Ativar"
    if st.button(label, key="toggle_active", disabled=bool(is_self)):
        try:
            client.patch(f"/api/users/{selected_id}", token=session.token, json={"active": not active})
        except ApiError as e:
            toast_error(e, "Erro ao atualizar status")
        else:
            toast_success("Usuário desativado" if active else "Usuário ativado")
            st.rerun()

with col_reset:
    with st.form("reset_password_form", clear_on_submit=True):
        new_password = st.text_input("Nova senha", type="password")
        reset = st.form_submit_button("🔑 Redefinir senha")
    if reset:
        if len(new_password) < MIN_PASSWORD:
            toast_error(None, f"Senha deve ter pelo menos {MIN_PASSWORD} caracteres")
        else:
            try:
                client.post(f"/api/users/{selected_id}/reset-password", token=session.token,
                            params={"new_password": new_password})
            except ApiError as e:
                toast_error(e, "Erro ao redefinir senha")
            else:
                toast_success("Senha redefinida com sucesso!")
                st.rerun()
