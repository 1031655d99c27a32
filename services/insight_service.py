# services/insight_service.py
"""
Short prose summary of a day's operation, written by an LLM.

Numbers are computed here and passed in the prompt; the model only
interprets them. One call per request, no retry.
"""

import json
import logging
from typing import Optional

from openai import OpenAI

import config
from domain.models import DailyLedger
from domain.reconciler import reconcile

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Resumo indisponível no momento."
ERROR_MESSAGE = "Erro ao processar análise. Verifique a conexão."


def get_openai_client() -> OpenAI:
    return OpenAI(api_key=config.OPENAI_API_KEY, base_url=config.OPENAI_BASE_URL)


class InsightGenerator:
    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        self.client = client
        self.model = model or config.INSIGHT_MODEL

    def summarize(self, ledger: DailyLedger) -> str:
        prompt = self._build_prompt(ledger)

        try:
            if self.client is None:
                self.client = get_openai_client()
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "system",
                        "content": "Você é um analista sênior de logística da ValorCafé.",
                    },
                    {"role": "user", "content": prompt},
                ],
            )
            text = response.choices[0].message.content
        except Exception as e:
            logger.error("Insight generation failed for %s: %s", ledger.date, e)
            return ERROR_MESSAGE

        if not text or not text.strip():
            return UNAVAILABLE_MESSAGE
        return text.strip()

    def _build_prompt(self, ledger: DailyLedger) -> str:
        report = reconcile(ledger)
        key_metrics = {
            "carga_total": report.total_inbound,
            "entregue_total": report.total_delivered,
            "retorno_total": report.total_remaining,
            "entregas_por_regiao": {
                r.rota: r.delivery_count for r in report.ordered_routes()
            },
            "balanco_por_produto": {
                b.product: {"saida": b.inbound, "entregue": b.delivered, "retorno": b.remaining}
                for b in report.products
            },
        }

        return f"""Analise os seguintes dados de distribuição para o dia {ledger.date}.

REGRAS:
1. Responda obrigatoriamente em Português Brasileiro.
2. Forneça um resumo profissional e estratégico (máximo 100 palavras).
3. Identifique a região com maior volume de entregas.
4. Comente sobre o balanço de estoque (sobras ou faltas críticas).

Métricas (já calculadas, use estes números exatos):
{json.dumps(key_metrics, ensure_ascii=False, indent=2)}

Dados da Operação:
{json.dumps(ledger.to_dict(), ensure_ascii=False)}"""
