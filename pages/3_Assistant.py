import datetime

import streamlit as st

from api_client import ApiError
from auth_helpers import get_client, queue_toast, require_login
from formatting import RISK_ICONS

st.set_page_config(page_title="Assistente IA", page_icon="💬", layout="wide")
session = require_login()
client = get_client()

QUICK_SUGGESTIONS = [
    "pH caiu para 6.4 e turbidez aumentou",
    "Temperatura do caldo está abaixo de 100°C",
    "Floculante não está tendo efeito esperado",
    "Brix acima de 20, devo ajustar dosagem?",
    "Como melhorar a clarificação do caldo?",
]
ERROR_REPLY = "Desculpe, ocorreu um erro ao processar sua mensagem. Por favor, tente novamente."

ss = st.session_state
ss.setdefault("chat_messages", [])
ss.setdefault("chat_session_id", None)


def send_message(text: str):
    if not text.strip():
        return
    ss.chat_messages.append({"type": "user", "content": text, "timestamp": datetime.datetime.now().isoformat()})
    try:
        with st.spinner("Analisando..."):
            data = client.post("/api/chat", token=session.token,
                               json={"message": text, "session_id": ss.chat_session_id}) or {}
    except ApiError:
        queue_toast("Erro ao enviar mensagem", "❌")
        ss.chat_messages.append({"type": "ai", "content": ERROR_REPLY, "risk_level": "MÉDIO", "escalate": False})
        return

    ss.chat_messages.append({
        "type": "ai",
        "content": data.get("response", ""),
        "risk_level": data.get("risk_level"),
        "escalate": data.get("escalate", False),
    })
    ss.chat_session_id = data.get("session_id") or ss.chat_session_id
    if data.get("escalate"):
        queue_toast("Recomendação: Acionar supervisão. A situação requer atenção do supervisor.", "⚠️")


st.title("💬 Assistente IA")
st.caption("Diagnóstico assistido do tratamento de caldo")

if not ss.chat_messages:
    st.write("Sugestões rápidas:")
    cols = st.columns(len(QUICK_SUGGESTIONS))
    for i, suggestion in enumerate(QUICK_SUGGESTIONS):
        if cols[i].button(suggestion, key=f"suggestion_{i}"):
            send_message(suggestion)
            st.rerun()

for msg in ss.chat_messages:
    with st.chat_message("user" if msg["type"] == "user" else "assistant"):
        st.markdown(msg["content"])
        if msg["type"] == "ai" and msg.get("risk_level"):
            st.caption(f"{RISK_ICONS.get(msg['risk_level'], '')} Risco: {msg['risk_level']}")
        if msg.get("escalate"):
            st.warning("Acionar supervisão")

prompt = st.chat_input("Descreva a situação do processo...")
if prompt:
    send_message(prompt)
    st.rerun()

if ss.chat_messages and st.button("🗑️ Nova conversa"):
    ss.chat_messages = []
    ss.chat_session_id = None
    st.rerun()
