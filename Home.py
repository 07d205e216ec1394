# Home.py
import streamlit as st

from auth_helpers import go_to_dashboard, login, public_route

st.set_page_config(page_title="IPIRANGA AI • Entrar", page_icon="🏭", layout="centered")

session = public_route()


def setup_view():
    with st.container(border=True):
        st.caption("⚙️ Configuração Inicial")
        st.subheader("Primeiro Acesso")
        st.write("O sistema precisa de um administrador inicial")
        if st.button("Criar Administrador Inicial", key="setup_btn", use_container_width=True):
            with st.spinner("Criando..."):
                result = session.setup_admin()
            if result.success:
                st.session_state.setup_result = result.data
                st.rerun()
            else:
                st.error(result.error)


def setup_result_view(data):
    st.success("Administrador criado com sucesso!")
    st.markdown(
        f"**Matrícula:** `{data.get('matricula', '')}`  \n"
        f"**Senha inicial:** `{data.get('senha_inicial', '')}`"
    )
    if data.get("aviso"):
        st.warning(data["aviso"])


def login_view():
    with st.container(border=True):
        st.caption("🔒 Acesso Industrial")
        st.subheader("Entrar no Sistema")
        st.write("Use sua matrícula e senha fornecidas pelo supervisor")
        with st.form("login_form"):
            matricula = st.text_input("Matrícula", placeholder="Ex: OPR001")
            password = st.text_input("Senha", type="password", placeholder="••••••••")
            submitted = st.form_submit_button("Entrar", use_container_width=True)
            if submitted:
                if not matricula or not password:
                    st.warning("Informe matrícula e senha.")
                    return
                with st.spinner("Entrando..."):
                    ok, error = login(matricula.strip().upper(), password)
                if ok:
                    go_to_dashboard()
                else:
                    st.error(error or "Erro ao fazer login")


st.title("🏭 IPIRANGA AI")
st.caption("Inteligência Operacional do Tratamento de Caldo")

# refresh the bootstrap flag once per browser session
if "setup_checked" not in st.session_state:
    session.check_setup_status()
    st.session_state.setup_checked = True

setup_result = st.session_state.get("setup_result")
if session.needs_setup and not setup_result:
    setup_view()
if setup_result:
    setup_result_view(setup_result)

login_view()
