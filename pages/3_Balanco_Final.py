import streamlit as st

from domain.reconciler import reconcile
from element_component import balance_dataframe, route_selector, sidebar_controls
from utils.formatting import format_units

st.set_page_config(page_title="Balanço Final", page_icon="📊", layout="wide")
st.sidebar.header("📊 Balanço Final")

coordinator = sidebar_controls()

rota = route_selector()
report = reconcile(coordinator.ledger)
route = report.routes.get(rota)

if route is None:
    st.info(f"Sem movimentação em {rota} neste dia.")
    st.stop()

col_in, col_out = st.columns(2)
col_in.metric("Total Carga", f"{format_units(route.total_inbound)} UN")
col_out.metric("Total Entregue", f"{format_units(route.total_delivered)} UN")

df = balance_dataframe(route)


def _highlight_negative(val):
    return "color: #dc2626; font-weight: bold" if val < 0 else "color: #15803d"


st.dataframe(
    df.style.map(_highlight_negative, subset=["Sobra"]),
    width="stretch",
    hide_index=True,
)

short = [b.product for b in route.lines if b.remaining < 0]
if short:
    st.warning(f"Entregue acima da carga: {', '.join(short)}. Verifique os lançamentos.")
