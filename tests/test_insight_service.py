from types import SimpleNamespace
from unittest.mock import MagicMock

from domain.ledger import set_inbound
from domain.models import DailyLedger
from services.insight_service import ERROR_MESSAGE, UNAVAILABLE_MESSAGE, InsightGenerator


def _completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def _ledger():
    return set_inbound(DailyLedger(date="2024-05-01"), "Centro", {"Café": 100})


def test_summarize_returns_model_text():
    client = MagicMock()
    client.chat.completions.create.return_value = _completion("  Dia tranquilo no Centro.  ")

    text = InsightGenerator(client=client, model="test-model").summarize(_ledger())

    assert text == "Dia tranquilo no Centro."
    kwargs = client.chat.completions.create.call_args[1]
    assert kwargs["model"] == "test-model"
    prompt = kwargs["messages"][-1]["content"]
    assert "2024-05-01" in prompt
    assert '"carga_total": 100' in prompt


def test_empty_answer_falls_back():
    client = MagicMock()
    client.chat.completions.create.return_value = _completion(None)

    assert InsightGenerator(client=client).summarize(_ledger()) == UNAVAILABLE_MESSAGE


def test_error_falls_back_without_retry():
    client = MagicMock()
    client.chat.completions.create.side_effect = TimeoutError("slow")

    assert InsightGenerator(client=client).summarize(_ledger()) == ERROR_MESSAGE
    assert client.chat.completions.create.call_count == 1
