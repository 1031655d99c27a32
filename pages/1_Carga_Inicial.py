import streamlit as st

from element_component import product_inputs, route_selector, sidebar_controls
from utils.formatting import format_units

st.set_page_config(page_title="Carga Inicial", page_icon="🚚", layout="wide")
st.sidebar.header("🚚 Carga Inicial")

coordinator = sidebar_controls()

st.subheader("Registrar Itens do Carregamento")
rota = route_selector()
ledger = coordinator.ledger
inbound = ledger.inbound_for(rota)

with st.form(f"inbound_form_{ledger.date}_{rota}", enter_to_submit=False):
    items = product_inputs(f"inbound_{ledger.date}_{rota}", inbound)
    submitted = st.form_submit_button("Salvar Carga")

if submitted:
    ok, msg = coordinator.set_inbound(rota, items)
    if not ok:
        st.error(msg)
    else:
        st.session_state["inbound_saved"] = f"Carga de {rota}: {msg}"
        st.rerun()

saved = st.session_state.pop("inbound_saved", None)
if saved:
    st.success(saved)

st.caption(f"Total carregado em {rota}: **{format_units(sum(inbound.values()))}** itens")
