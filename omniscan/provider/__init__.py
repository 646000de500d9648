"""Analysis provider base class, request type, and factory."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..categories import ScanCategory, build_prompt

if TYPE_CHECKING:
    from ..config import ScanConfig

logger = logging.getLogger(__name__)

PROVIDER_ERROR_MESSAGE = "Falha ao analisar a imagem."
EMPTY_RESPONSE = "{}"

_DATA_URI = re.compile(r"^data:(?P<mime>[^;,]*)(?:;[^,]*)?,", re.IGNORECASE)


class ProviderError(RuntimeError):
    """The external provider could not analyze the image."""


@dataclass(frozen=True)
class ScanRequest:
    image: str  # base64, optionally with a data URI header
    category: ScanCategory

    @property
    def payload(self) -> str:
        """Base64 payload with any ``data:...;base64,`` header removed."""
        m = _DATA_URI.match(self.image)
        return self.image[m.end():] if m else self.image

    @property
    def mime_type(self) -> str:
        m = _DATA_URI.match(self.image)
        if m and m.group("mime"):
            return m.group("mime").lower()
        return "image/jpeg"


class AnalysisProvider(ABC):
    """Abstract base for multimodal image analysis.

    Subclasses only talk to their SDK; the base class owns the contract:
    one attempt, empty text becomes ``"{}"``, and any failure of the call
    surfaces as :class:`ProviderError`.
    """

    def __init__(self, temperature: float = 0.4) -> None:
        self._temperature = temperature

    @property
    def temperature(self) -> float:
        return self._temperature

    async def analyze(self, image: str, category: ScanCategory | str) -> str:
        """Send *image* with the category's instructions; return raw text."""
        request = ScanRequest(image=image, category=ScanCategory.parse(category))
        if not request.payload:
            raise ValueError("Nenhuma imagem foi selecionada.")

        prompt = build_prompt(request.category)
        logger.info(
            "Enviando imagem (%s, %s) ao provedor %s",
            request.category.value,
            request.mime_type,
            type(self).__name__,
        )
        # Missing credentials or SDK count as provider failures too.
        try:
            client = self._connect()
            text = await self._generate(client, request, prompt)
        except Exception as e:
            logger.exception("Erro do provedor %s", type(self).__name__)
            raise ProviderError(PROVIDER_ERROR_MESSAGE) from e

        return text or EMPTY_RESPONSE

    @abstractmethod
    def _connect(self) -> Any:
        """Validate credentials and return a ready SDK client."""
        ...

    @abstractmethod
    async def _generate(self, client: Any, request: ScanRequest, prompt: str) -> str | None:
        """Issue the single request and return the response text."""
        ...


def create_provider(config: ScanConfig) -> AnalysisProvider:
    """Create an analysis provider based on configuration."""
    backend_name = config.provider.backend

    match backend_name:
        case "gemini":
            from .gemini import GeminiProvider

            return GeminiProvider(
                api_key=config.provider.gemini.api_key,
                model=config.provider.gemini.model,
                temperature=config.provider.temperature,
            )
        case "claude":
            from .claude import ClaudeProvider

            return ClaudeProvider(
                api_key=config.provider.claude.api_key,
                model=config.provider.claude.model,
                max_tokens=config.provider.claude.max_tokens,
                temperature=config.provider.temperature,
            )
        case _:
            raise ValueError(
                f"Provedor desconhecido: {backend_name!r}  "
                f"(escolha entre gemini / claude)"
            )
