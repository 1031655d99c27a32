import streamlit as st

from config import APP_TIMEZONE
from element_component import confirm_delete_dialog, product_inputs, route_selector, sidebar_controls
from services.report_service import local_time

st.set_page_config(page_title="Entregas", page_icon="📦", layout="wide")
st.sidebar.header("📦 Entregas")

coordinator = sidebar_controls()

rota = route_selector()
ledger = coordinator.ledger
deliveries = ledger.deliveries_for(rota)

# -----------------------------------------------------------------------------
# Nova entrega
# -----------------------------------------------------------------------------
st.subheader("Nova Entrega na Rota")

# bumping the counter gives the form fresh (empty) widgets after a submit
st.session_state.setdefault("delivery_form_seq", 0)
form_key = f"delivery_{st.session_state['delivery_form_seq']}"

with st.form(form_key, enter_to_submit=False):
    client_name = st.text_input("Nome do Ponto de Venda / Cliente", key=f"{form_key}_client")
    items = product_inputs(form_key)
    submitted = st.form_submit_button("Confirmar Registro")

if submitted:
    ok, msg = coordinator.add_delivery(rota, client_name, items)
    if not ok:
        st.error(msg)
    else:
        st.session_state["delivery_form_seq"] += 1
        st.session_state["delivery_saved"] = f"Entrega para {client_name.strip()}: {msg}"
        st.rerun()

saved = st.session_state.pop("delivery_saved", None)
if saved:
    st.success(saved)

# -----------------------------------------------------------------------------
# Linha do tempo
# -----------------------------------------------------------------------------
st.subheader(f"Linha do Tempo ({len(deliveries)} clientes)")
st.caption(f"Horários em {APP_TIMEZONE}")

if not deliveries:
    st.info(f"Sem registros para {rota}")

for delivery in deliveries:
    col_info, col_delete = st.columns([6, 1])
    with col_info:
        st.markdown(f"**{delivery.client_name}** · {local_time(delivery.timestamp)[:5]}")
        items_text = " | ".join(f"{q} {p}" for p, q in delivery.items.items() if q > 0)
        st.caption(items_text or "Sem itens")
    with col_delete:
        if st.button("🗑️", key=f"delete_{delivery.id}", help="Excluir registro"):
            confirm_delete_dialog(coordinator, delivery)
