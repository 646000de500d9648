"""Scan use case: provider call, parse, and append to session history."""

from __future__ import annotations

import logging

from . import parser
from .categories import ScanCategory
from .parser import ParseError
from .provider import AnalysisProvider, ProviderError
from .session import ScanRecord, ScanSession, ScanState

logger = logging.getLogger(__name__)

SCAN_FAILED_MESSAGE = "O escaneamento falhou. Por favor, tente novamente."


class ScanFailed(RuntimeError):
    """User-facing failure of a scan; the cause keeps the detail."""

    def __init__(self, message: str = SCAN_FAILED_MESSAGE) -> None:
        super().__init__(message)


class ScanOrchestrator:
    """Run scans for one session against one analysis provider."""

    def __init__(self, provider: AnalysisProvider, session: ScanSession | None = None) -> None:
        self._provider = provider
        self._session = session if session is not None else ScanSession()

    @property
    def session(self) -> ScanSession:
        return self._session

    @property
    def state(self) -> ScanState:
        return self._session.state

    @property
    def history(self) -> list[ScanRecord]:
        return self._session.history

    async def submit(self, image: str, category: ScanCategory | str) -> ScanRecord:
        """Analyze *image* and prepend the resulting record to history.

        Raises:
            ValueError: If no image was given (the session stays IDLE).
            ScanInProgress: If this session already has a scan in flight.
            ScanFailed: If the provider call or the parse failed.
        """
        if not image:
            raise ValueError("Nenhuma imagem foi selecionada.")
        category = ScanCategory.parse(category)

        self._session.begin()
        try:
            try:
                raw = await self._provider.analyze(image, category)
                self._session.transition(ScanState.PARSING)
                result = parser.parse(raw, category)
            except (ProviderError, ParseError) as e:
                self._session.transition(ScanState.FAILED)
                logger.warning(
                    "Escaneamento %s falhou (%s): %s",
                    category.value,
                    type(e).__name__,
                    e,
                )
                raise ScanFailed() from e

            record = ScanRecord(
                category=category,
                image=image,
                summary=result.summary,
                details=result.details,
            )
            self._session.record(record)
            logger.info(
                "Escaneamento %s registrado: %s (%s)",
                category.value,
                record.summary,
                record.id,
            )
            return record
        finally:
            self._session.reset()
