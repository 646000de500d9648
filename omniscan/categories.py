"""Scan categories and the instruction templates sent to the provider."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ScanCategory(str, Enum):
    FOOD = "FOOD"
    VEHICLE = "VEHICLE"
    DOCUMENT = "DOCUMENT"
    OBJECT = "OBJECT"

    @classmethod
    def parse(cls, value: str | ScanCategory) -> ScanCategory:
        """Resolve a category from user input (case-insensitive)."""
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            choices = ", ".join(c.value.lower() for c in cls)
            raise ValueError(
                f"Categoria desconhecida: {value!r}  (escolha entre: {choices})"
            ) from None


@dataclass(frozen=True)
class CategoryInfo:
    product: str  # display name shown on the landing page
    title: str
    description: str
    instructions: str
    fields: tuple[str, ...]  # expected JSON keys, not enforced
    headline_field: str  # tried first when deriving the summary


JSON_ONLY_DIRECTIVE = (
    "Analise esta imagem. Retorne APENAS JSON bruto sem formatação markdown."
)

CATALOGUE: dict[ScanCategory, CategoryInfo] = {
    ScanCategory.FOOD: CategoryInfo(
        product="NutriScan",
        title="Scanner de Alimentos",
        description=(
            "Detalhamento instantâneo de calorias e macronutrientes "
            "a partir de uma foto da sua refeição."
        ),
        instructions=(
            "Você é um nutricionista especialista. Analise a imagem da "
            "comida/prato. Forneça uma resposta JSON com: nome_prato, "
            "calorias_estimadas, macronutrientes (proteina, carboidratos, "
            "gordura em gramas) e uma curta analise_saude (2 frases)."
        ),
        fields=(
            "nome_prato",
            "calorias_estimadas",
            "macronutrientes",
            "analise_saude",
        ),
        headline_field="nome_prato",
    ),
    ScanCategory.VEHICLE: CategoryInfo(
        product="AutoDano",
        title="Scanner de Veículos",
        description=(
            "Avaliação de danos via IA, identificação de peças e "
            "estimativa de custo de reparo."
        ),
        instructions=(
            "Você é um mecânico automotivo especialista e perito em seguros. "
            "Analise a imagem do dano no veículo. Forneça uma resposta JSON "
            "com: dano_detectado, pecas_afetadas (array), nivel_urgencia "
            "(Baixo/Médio/Alto), estimativa_custo_reparo_brl, e "
            "acoes_recomendadas."
        ),
        fields=(
            "dano_detectado",
            "pecas_afetadas",
            "nivel_urgencia",
            "estimativa_custo_reparo_brl",
            "acoes_recomendadas",
        ),
        headline_field="dano_detectado",
    ),
    ScanCategory.DOCUMENT: CategoryInfo(
        product="DocResumo",
        title="Scanner de Documentos",
        description=(
            "Resumo de documentos legais e comerciais com extração "
            "de entidades chave."
        ),
        instructions=(
            "Você é um analista legal e de negócios especialista. Analise a "
            "imagem do documento/planilha. Forneça uma resposta JSON com: "
            "tipo_documento, resumo_proposito, entidades_chave_envolvidas, "
            "datas_criticas_ou_obrigacoes, e uma analise_sentimento "
            "(Neutro/Positivo/Risco)."
        ),
        fields=(
            "tipo_documento",
            "resumo_proposito",
            "entidades_chave_envolvidas",
            "datas_criticas_ou_obrigacoes",
            "analise_sentimento",
        ),
        headline_field="resumo_proposito",
    ),
    ScanCategory.OBJECT: CategoryInfo(
        product="ItemFinder",
        title="Scanner de Objetos",
        description=(
            "Identifique objetos, encontre fabricantes e compare preços "
            "de mercado instantaneamente."
        ),
        instructions=(
            "Você é um avaliador especialista e buscador de produtos. "
            "Analise a imagem do objeto. Forneça uma resposta JSON com: "
            "nome_produto, palpite_fabricante, palpite_modelo, "
            "estimativa_valor_mercado_brl, e 3_varejistas_potenciais."
        ),
        fields=(
            "nome_produto",
            "palpite_fabricante",
            "palpite_modelo",
            "estimativa_valor_mercado_brl",
            "3_varejistas_potenciais",
        ),
        headline_field="nome_produto",
    ),
}


def build_prompt(category: ScanCategory) -> str:
    """Combine the raw-JSON directive with the category's instructions."""
    return f"{JSON_ONLY_DIRECTIVE} {CATALOGUE[category].instructions}"
