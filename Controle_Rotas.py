import pandas as pd
import streamlit as st

import config
from domain.catalog import ROTAS
from domain.reconciler import reconcile
from element_component import get_insight_generator, sidebar_controls
from services.report_service import format_report, report_filename
from utils.formatting import format_units


st.set_page_config(
    page_title="ValorCafé - Controle de Rotas",
    page_icon="☕",
    layout="wide",
)

st.sidebar.header("☕ Controle de Rotas")

coordinator = sidebar_controls()
ledger = coordinator.ledger
report = reconcile(ledger)

st.title("☕ ValorCafé - Live Cloud Ops")
st.caption(f"Operação do dia {ledger.date}")

# -----------------------------------------------------------------------------
# Métricas consolidadas
# -----------------------------------------------------------------------------
col_in, col_out, col_rest = st.columns(3)
col_in.metric("Carga Total Saída", format_units(report.total_inbound))
col_out.metric("Efetividade Entregas", format_units(report.total_delivered))
col_rest.metric("Retorno Previsto", format_units(report.total_remaining))

# -----------------------------------------------------------------------------
# IA Insight
# -----------------------------------------------------------------------------
st.subheader("IA Insight Logístico")

insight_key = f"insight_{ledger.date}"
if st.button("⚡ Analisar o dia", disabled=ledger.is_empty()):
    with st.spinner("Consultando o cérebro logístico..."):
        st.session_state[insight_key] = get_insight_generator().summarize(ledger)

st.info(
    st.session_state.get(
        insight_key,
        "Consolidação automática ativa. Clique em analisar para insights estratégicos.",
    )
)

# -----------------------------------------------------------------------------
# Monitoramento por região
# -----------------------------------------------------------------------------
st.subheader("Monitoramento por Região")

overview = pd.DataFrame(
    [
        {
            "Região": rota,
            "Carga": report.routes[rota].total_inbound if rota in report.routes else 0,
            "Entregue": report.routes[rota].total_delivered if rota in report.routes else 0,
            "Sobra": report.routes[rota].total_remaining if rota in report.routes else 0,
            "Clientes": report.routes[rota].delivery_count if rota in report.routes else 0,
        }
        for rota in ROTAS
    ]
)
st.dataframe(overview, width="stretch", hide_index=True)

if report.products:
    st.subheader("Balanço Geral do Dia")
    df_products = pd.DataFrame(
        [
            {"Produto": b.product, "Saída": b.inbound, "Entregue": b.delivered, "Retorno": b.remaining}
            for b in report.products
        ]
    )
    st.dataframe(df_products, width="stretch", hide_index=True)
else:
    st.caption("Selecione uma região nas páginas ao lado para registrar carga ou entregas.")

# -----------------------------------------------------------------------------
# Relatório gerencial
# -----------------------------------------------------------------------------
st.divider()
text_report = format_report(ledger, report, generated_at=config.now())
filename = report_filename(ledger.date)

col_download, col_drive = st.columns(2)

with col_download:
    st.download_button(
        "📄 Relatório Gerencial (.txt)",
        data=text_report.encode("utf-8"),
        file_name=filename,
        mime="text/plain",
    )

if config.drive_configured():
    with col_drive:
        if st.button("☁️ Arquivar no Drive"):
            from google_client import get_drive_service
            from services.drive_service import archive_report

            ok, msg, link = archive_report(
                get_drive_service(), config.DRIVE_REPORT_FOLDER_ID, filename, text_report
            )
            if ok:
                st.success(f"{msg}: {link}" if link else msg)
            else:
                st.error(msg)
