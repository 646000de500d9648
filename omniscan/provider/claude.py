"""Claude API analysis provider."""

from __future__ import annotations

from . import AnalysisProvider, ScanRequest


class ClaudeProvider(AnalysisProvider):
    """Analyze scan images using Claude's vision capability."""

    def __init__(
        self,
        api_key: str = "",
        model: str = "claude-sonnet-4-5-20250929",
        max_tokens: int = 2048,
        temperature: float = 0.4,
    ) -> None:
        super().__init__(temperature=temperature)
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens

    def _connect(self):
        if not self._api_key:
            raise ValueError(
                "A chave da API Anthropic não está configurada. "
                "Verifique o arquivo de configuração ou a variável de ambiente ANTHROPIC_API_KEY."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        return anthropic.AsyncAnthropic(api_key=self._api_key)

    async def _generate(self, client, request: ScanRequest, prompt: str) -> str | None:
        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": request.mime_type,
                    "data": request.payload,
                },
            },
            {"type": "text", "text": prompt},
        ]
        response = await client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            messages=[{"role": "user", "content": content}],
        )
        # Concatenate text blocks; an empty reply yields "".
        return "".join(
            getattr(block, "text", "") for block in response.content
        )
