"""Normalize provider text into a summary and a details mapping."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .categories import CATALOGUE, ScanCategory

FALLBACK_SUMMARY = "Resultado do Scan"

# Probed in order when the category's own headline field is absent.
SUMMARY_FIELDS: tuple[str, ...] = (
    "resumo_proposito",
    "nome_prato",
    "nome_produto",
    "dano_detectado",
)


class ParseError(ValueError):
    """The provider response could not be decoded into a JSON object."""


@dataclass
class ParsedResult:
    summary: str
    details: dict[str, Any] = field(default_factory=dict)


def strip_fences(text: str) -> str:
    """Remove every ```json and ``` marker, wherever it appears."""
    return text.replace("```json", "").replace("```", "")


def summary_fields(category: ScanCategory | None = None) -> tuple[str, ...]:
    """Ordered lookup list for *category*, headline field first."""
    if category is None:
        return SUMMARY_FIELDS
    headline = CATALOGUE[category].headline_field
    return (headline,) + tuple(f for f in SUMMARY_FIELDS if f != headline)


def derive_summary(
    details: dict[str, Any], category: ScanCategory | None = None
) -> str:
    for key in summary_fields(category):
        value = details.get(key)
        # Falsy values (None, "", 0, False, empty containers) count as absent.
        if value:
            return value if isinstance(value, str) else str(value)
    return FALLBACK_SUMMARY


def parse(raw_text: str, category: ScanCategory | None = None) -> ParsedResult:
    """Decode *raw_text* into a :class:`ParsedResult`.

    Raises:
        ParseError: If the cleaned text is not JSON or not a JSON object.
    """
    cleaned = strip_fences(raw_text)
    try:
        decoded = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ParseError(f"Resposta do provedor não é JSON válido: {e}") from e

    if not isinstance(decoded, dict):
        raise ParseError(
            f"Resposta do provedor deve ser um objeto JSON, recebido {type(decoded).__name__}"
        )

    return ParsedResult(summary=derive_summary(decoded, category), details=decoded)
