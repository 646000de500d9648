"""Tests for the scan use case (stubbed provider)."""

import asyncio
import json
import logging

import pytest

from omniscan.categories import ScanCategory
from omniscan.orchestrator import SCAN_FAILED_MESSAGE, ScanFailed, ScanOrchestrator
from omniscan.parser import FALLBACK_SUMMARY, ParseError, parse
from omniscan.provider import AnalysisProvider, ProviderError
from omniscan.session import ScanInProgress, ScanSession, ScanState

IMAGE = "data:image/jpeg;base64,/9j/4AAQSkZJRg=="

RESPONSES = {
    ScanCategory.FOOD: {
        "nome_prato": "Feijoada",
        "calorias_estimadas": 850,
        "macronutrientes": {"proteina": 45, "carboidratos": 60, "gordura": 40},
        "analise_saude": "Rica em proteína. Alta em sódio.",
    },
    ScanCategory.VEHICLE: {
        "dano_detectado": "dented bumper",
        "pecas_afetadas": ["bumper"],
        "nivel_urgencia": "Médio",
        "estimativa_custo_reparo_brl": 1200,
        "acoes_recomendadas": "repair",
    },
    ScanCategory.DOCUMENT: {
        "tipo_documento": "Contrato",
        "resumo_proposito": "Locação residencial",
        "entidades_chave_envolvidas": ["Locador", "Locatário"],
        "datas_criticas_ou_obrigacoes": "Vencimento dia 5",
        "analise_sentimento": "Neutro",
    },
    ScanCategory.OBJECT: {
        "nome_produto": "Fone Bluetooth",
        "palpite_fabricante": "Sony",
        "palpite_modelo": "WH-1000XM4",
        "estimativa_valor_mercado_brl": 1500,
        "3_varejistas_potenciais": ["Amazon", "Magalu", "Americanas"],
    },
}

SUMMARIES = {
    ScanCategory.FOOD: "Feijoada",
    ScanCategory.VEHICLE: "dented bumper",
    ScanCategory.DOCUMENT: "Locação residencial",
    ScanCategory.OBJECT: "Fone Bluetooth",
}


class StubProvider(AnalysisProvider):
    """Returns canned text, or raises, without any SDK."""

    def __init__(self, text="{}", error=None, gate=None):
        super().__init__()
        self.text = text
        self.error = error
        self.gate = gate
        self.calls = 0

    def _connect(self):
        return None

    async def _generate(self, client, request, prompt):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.text


class TestSubmit:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("category", list(ScanCategory))
    async def test_success_prepends_one_record(self, category):
        orchestrator = ScanOrchestrator(
            StubProvider(text=json.dumps(RESPONSES[category], ensure_ascii=False))
        )
        before = orchestrator.history

        record = await orchestrator.submit(IMAGE, category)

        history = orchestrator.history
        assert len(history) == len(before) + 1
        assert history[0] is record
        assert record.category is category
        assert record.summary == SUMMARIES[category]
        assert dict(record.details) == RESPONSES[category]
        assert record.image == IMAGE
        assert orchestrator.state is ScanState.IDLE

    @pytest.mark.asyncio
    async def test_most_recent_first(self):
        provider = StubProvider(text=json.dumps(RESPONSES[ScanCategory.FOOD]))
        orchestrator = ScanOrchestrator(provider)
        first = await orchestrator.submit(IMAGE, ScanCategory.FOOD)
        provider.text = json.dumps(RESPONSES[ScanCategory.OBJECT])
        second = await orchestrator.submit(IMAGE, "object")
        assert orchestrator.history == [second, first]

    @pytest.mark.asyncio
    async def test_vehicle_scenario(self):
        text = (
            '{"dano_detectado":"dented bumper","pecas_afetadas":["bumper"],'
            '"nivel_urgencia":"Médio","estimativa_custo_reparo_brl":1200,'
            '"acoes_recomendadas":"repair"}'
        )
        orchestrator = ScanOrchestrator(StubProvider(text=text))
        record = await orchestrator.submit(IMAGE, ScanCategory.VEHICLE)
        assert record.summary == "dented bumper"
        assert record.details["nivel_urgencia"] == "Médio"

    @pytest.mark.asyncio
    async def test_fenced_response(self):
        body = json.dumps(RESPONSES[ScanCategory.DOCUMENT], ensure_ascii=False)
        orchestrator = ScanOrchestrator(StubProvider(text=f"```json\n{body}\n```"))
        record = await orchestrator.submit(IMAGE, ScanCategory.DOCUMENT)
        assert dict(record.details) == RESPONSES[ScanCategory.DOCUMENT]

    @pytest.mark.asyncio
    async def test_empty_response_records_empty_details(self):
        orchestrator = ScanOrchestrator(StubProvider(text=""))
        record = await orchestrator.submit(IMAGE, ScanCategory.OBJECT)
        assert dict(record.details) == {}
        assert record.summary == FALLBACK_SUMMARY
        assert len(orchestrator.history) == 1

    @pytest.mark.asyncio
    async def test_uses_given_session(self):
        session = ScanSession()
        orchestrator = ScanOrchestrator(StubProvider(), session=session)
        await orchestrator.submit(IMAGE, ScanCategory.FOOD)
        assert orchestrator.session is session
        assert len(session) == 1


class TestFailures:
    @pytest.mark.asyncio
    async def test_provider_error_leaves_history(self):
        provider = StubProvider(text=json.dumps(RESPONSES[ScanCategory.FOOD]))
        orchestrator = ScanOrchestrator(provider)
        kept = await orchestrator.submit(IMAGE, ScanCategory.FOOD)

        provider.error = TimeoutError("slow")
        with pytest.raises(ScanFailed, match=SCAN_FAILED_MESSAGE) as exc:
            await orchestrator.submit(IMAGE, ScanCategory.FOOD)

        assert isinstance(exc.value.__cause__, ProviderError)
        assert orchestrator.history == [kept]
        assert orchestrator.state is ScanState.IDLE
        assert provider.calls == 2

    @pytest.mark.asyncio
    async def test_parse_error_leaves_history(self):
        orchestrator = ScanOrchestrator(StubProvider(text="não é json"))
        with pytest.raises(ScanFailed) as exc:
            await orchestrator.submit(IMAGE, ScanCategory.DOCUMENT)

        assert isinstance(exc.value.__cause__, ParseError)
        assert orchestrator.history == []
        assert orchestrator.state is ScanState.IDLE

    @pytest.mark.asyncio
    async def test_failure_is_logged_with_error_type(self, caplog):
        orchestrator = ScanOrchestrator(StubProvider(text="[]"))
        with caplog.at_level(logging.WARNING, logger="omniscan.orchestrator"):
            with pytest.raises(ScanFailed):
                await orchestrator.submit(IMAGE, ScanCategory.OBJECT)
        assert "ParseError" in caplog.text

    @pytest.mark.asyncio
    async def test_retry_after_failure(self):
        provider = StubProvider(error=ConnectionError("offline"))
        orchestrator = ScanOrchestrator(provider)
        with pytest.raises(ScanFailed):
            await orchestrator.submit(IMAGE, ScanCategory.FOOD)

        provider.error = None
        provider.text = json.dumps(RESPONSES[ScanCategory.FOOD])
        record = await orchestrator.submit(IMAGE, ScanCategory.FOOD)
        assert orchestrator.history == [record]

    @pytest.mark.asyncio
    async def test_empty_image_rejected(self):
        provider = StubProvider()
        orchestrator = ScanOrchestrator(provider)
        with pytest.raises(ValueError):
            await orchestrator.submit("", ScanCategory.FOOD)
        assert provider.calls == 0
        assert orchestrator.state is ScanState.IDLE

    @pytest.mark.asyncio
    async def test_missing_api_key_is_scan_failure(self):
        from omniscan.provider.gemini import GeminiProvider

        orchestrator = ScanOrchestrator(GeminiProvider(api_key=""))
        with pytest.raises(ScanFailed, match=SCAN_FAILED_MESSAGE) as exc:
            await orchestrator.submit(IMAGE, ScanCategory.FOOD)

        assert isinstance(exc.value.__cause__, ProviderError)
        assert isinstance(exc.value.__cause__.__cause__, ValueError)
        assert orchestrator.history == []
        assert orchestrator.state is ScanState.IDLE


class TestRecordDetails:
    @pytest.mark.asyncio
    async def test_details_reencode_from_history(self):
        text = json.dumps(RESPONSES[ScanCategory.VEHICLE], ensure_ascii=False)
        orchestrator = ScanOrchestrator(StubProvider(text=text))
        record = await orchestrator.submit(IMAGE, ScanCategory.VEHICLE)

        encoded = json.dumps(orchestrator.history[0].details, ensure_ascii=False)
        assert parse(encoded, ScanCategory.VEHICLE).details == record.details
        assert json.loads(json.dumps(record.to_dict()))["details"] == RESPONSES[ScanCategory.VEHICLE]

    @pytest.mark.asyncio
    async def test_nested_values_cannot_change_history(self):
        text = json.dumps(RESPONSES[ScanCategory.VEHICLE], ensure_ascii=False)
        orchestrator = ScanOrchestrator(StubProvider(text=text))
        record = await orchestrator.submit(IMAGE, ScanCategory.VEHICLE)

        record.details["pecas_afetadas"].append("porta")
        record.details["nivel_urgencia"] = "Alto"

        kept = orchestrator.history[0].details
        assert kept["pecas_afetadas"] == ["bumper"]
        assert kept["nivel_urgencia"] == "Médio"


class TestInFlightGuard:
    @pytest.mark.asyncio
    async def test_duplicate_submission_rejected(self):
        gate = asyncio.Event()
        provider = StubProvider(text=json.dumps(RESPONSES[ScanCategory.FOOD]), gate=gate)
        orchestrator = ScanOrchestrator(provider)

        task = asyncio.create_task(orchestrator.submit(IMAGE, ScanCategory.FOOD))
        await asyncio.sleep(0)
        assert orchestrator.state is ScanState.AWAITING_PROVIDER

        with pytest.raises(ScanInProgress):
            await orchestrator.submit(IMAGE, ScanCategory.FOOD)

        gate.set()
        record = await task
        assert provider.calls == 1
        assert orchestrator.history == [record]
        assert orchestrator.state is ScanState.IDLE

    @pytest.mark.asyncio
    async def test_separate_sessions_run_concurrently(self):
        gate = asyncio.Event()
        provider = StubProvider(text=json.dumps(RESPONSES[ScanCategory.OBJECT]), gate=gate)
        a = ScanOrchestrator(provider)
        b = ScanOrchestrator(provider)

        tasks = [
            asyncio.create_task(a.submit(IMAGE, ScanCategory.OBJECT)),
            asyncio.create_task(b.submit(IMAGE, ScanCategory.OBJECT)),
        ]
        await asyncio.sleep(0)
        gate.set()
        await asyncio.gather(*tasks)

        assert len(a.history) == 1
        assert len(b.history) == 1
        assert a.history[0].id != b.history[0].id
