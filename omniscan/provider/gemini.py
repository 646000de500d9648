"""Gemini API analysis provider."""

from __future__ import annotations

import base64

from . import AnalysisProvider, ScanRequest


class GeminiProvider(AnalysisProvider):
    """Analyze scan images using Google Gemini's vision capability."""

    def __init__(
        self,
        api_key: str = "",
        model: str = "gemini-2.5-flash-image",
        temperature: float = 0.4,
    ) -> None:
        super().__init__(temperature=temperature)
        self._api_key = api_key
        self._model = model

    def _connect(self):
        if not self._api_key:
            raise ValueError(
                "A chave da API Gemini não está configurada. "
                "Verifique o arquivo de configuração ou a variável de ambiente GEMINI_API_KEY."
            )

        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        return genai.GenerativeModel(self._model)

    async def _generate(self, client, request: ScanRequest, prompt: str) -> str | None:
        parts = [
            {
                "mime_type": request.mime_type,
                "data": base64.b64decode(request.payload),
            },
            prompt,
        ]
        response = await client.generate_content_async(
            parts,
            generation_config={"temperature": self._temperature},
        )
        # response.text raises when the candidate carries no parts.
        if not response.candidates:
            return ""
        return "".join(part.text for part in response.candidates[0].content.parts)
