from datetime import date
from typing import Dict, Optional

import pandas as pd
import streamlit as st

import config
from data_integrator import RemoteStore, get_supabase_client
from domain.catalog import MAX_QTY_INPUT, PRODUCTS, ROTAS
from domain.models import Delivery, RouteBalance
from services.insight_service import InsightGenerator
from services.sync_service import SyncCoordinator
from utils.formatting import format_units
from utils.local_snapshot import LocalSnapshotStore


@st.cache_resource
def get_remote_store() -> Optional[RemoteStore]:
    if not config.supabase_configured():
        return None
    return RemoteStore(get_supabase_client(), config.SCHEMA)


@st.cache_resource
def get_insight_generator() -> InsightGenerator:
    return InsightGenerator()


def _queue_alert(message: str) -> None:
    st.session_state.setdefault("alerts", []).append(message)


def show_alerts() -> None:
    for message in st.session_state.pop("alerts", []):
        st.error(message)


def get_coordinator() -> SyncCoordinator:
    if "coordinator" not in st.session_state:
        st.session_state["coordinator"] = SyncCoordinator(
            get_remote_store(),
            LocalSnapshotStore(config.LOCAL_SNAPSHOT_PATH),
            notifier=_queue_alert,
            current_date=config.today(),
        )
    return st.session_state["coordinator"]


def sync_badge(coordinator: SyncCoordinator) -> None:
    if coordinator.local_only:
        st.sidebar.caption("⚪ Modo local (nuvem não configurada)")
    elif coordinator.synced:
        st.sidebar.caption("🟢 Sincronizado com a nuvem")
    else:
        st.sidebar.caption(f"🟠 {len(coordinator.pending)} alteração(ões) pendente(s)")
        if st.sidebar.button("Tentar sincronizar novamente"):
            ok_count, still_pending = coordinator.retry_pending()
            if still_pending:
                st.sidebar.error(f"{still_pending} alteração(ões) ainda pendente(s)")
            else:
                st.sidebar.success(f"{ok_count} alteração(ões) sincronizada(s)")


def sidebar_controls() -> SyncCoordinator:
    """
    Date selector + sync indicator shared by every page.
    Loads the selected date from the cloud on change (and once per session).
    """
    config.configure_logging()
    coordinator = get_coordinator()

    st.session_state.setdefault("active_date", date.fromisoformat(coordinator.current_date))
    selected = st.sidebar.date_input("Data", key="active_date", format="DD/MM/YYYY")
    selected_iso = selected.isoformat()

    if selected_iso != coordinator.current_date or not st.session_state.get("loaded_once"):
        with st.spinner("Carregando dados da nuvem..."):
            coordinator.set_date(selected_iso)
        st.session_state["loaded_once"] = True

    sync_badge(coordinator)
    show_alerts()
    return coordinator


def route_selector(label: str = "Região") -> str:
    st.session_state.setdefault("active_rota", ROTAS[0])
    return st.radio(label, ROTAS, horizontal=True, key="active_rota")


def product_inputs(key_prefix: str, values: Optional[Dict[str, int]] = None) -> Dict[str, int]:
    """
    Grid of quantity inputs, one per product in catalog order.
    Returns {product: quantity}.
    """
    values = values or {}
    result: Dict[str, int] = {}
    cols = st.columns(4)

    for i, product in enumerate(PRODUCTS):
        with cols[i % 4]:
            result[product] = st.number_input(
                product,
                min_value=0,
                max_value=MAX_QTY_INPUT,
                step=1,
                value=min(int(values.get(product, 0)), MAX_QTY_INPUT),
                key=f"{key_prefix}_{product}",
            )

    return result


def balance_dataframe(route: RouteBalance) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {
                "Produto": b.product,
                "Carga": b.inbound,
                "Clientes": b.delivered,
                "Sobra": b.remaining,
            }
            for b in route.lines
        ],
        columns=["Produto", "Carga", "Clientes", "Sobra"],
    )
    return df


@st.dialog("Confirmação")
def confirm_delete_dialog(coordinator: SyncCoordinator, delivery: Delivery):
    st.write("Excluir registro permanentemente do banco?")

    items = {p: q for p, q in delivery.items.items() if q > 0}
    df = pd.DataFrame(
        [("Cliente", delivery.client_name), ("Rota", delivery.rota)]
        + [(p, format_units(q)) for p, q in items.items()],
        columns=["Campo", "Valor"],
    )
    st.dataframe(df, hide_index=True)

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button("Sim", type="primary", key="confirm_delete_yes"):
            ok, msg = coordinator.delete_delivery(delivery.rota, delivery.id, confirmed=True)
            if not ok:
                st.error(msg)
            else:
                st.rerun()
    with col_no:
        if st.button("Não", key="confirm_delete_no"):
            st.rerun()
