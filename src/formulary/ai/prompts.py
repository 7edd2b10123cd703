"""Prompt construction for the search-summary and detail-explanation slots."""
from __future__ import annotations

from dataclasses import dataclass
from textwrap import dedent
from typing import List

from formulary.ai.llm import ChatMessage
from formulary.ingest.models import MedicineRecord


@dataclass(frozen=True)
class PromptSpec:
    """Messages plus the sampling parameters and fallbacks for one enrichment call."""

    messages: List[ChatMessage]
    temperature: float
    max_tokens: int
    empty_fallback: str


def search_summary_prompt(search_term: str) -> PromptSpec:
    system_prompt = dedent(
        f"""
        You are a very fast, helpful medical AI. The user just typed "{search_term}" into a medicine search bar.
        In EXACTLY 20 words or less, provide a helpful fact, definition, or quick tip about this symptom, generic formula, or medicine brand. Be concise, direct, and safe.
        """
    ).strip()
    return PromptSpec(
        messages=[ChatMessage(role="system", content=system_prompt)],
        temperature=0.5,
        max_tokens=50,
        empty_fallback="",
    )


def detail_explanation_prompt(record: MedicineRecord) -> PromptSpec:
    system_prompt = dedent(
        f"""
        You are a helpful and safe health assistant.
        The user is looking at a medicine card.
        Brand: {record.brand_name}
        Generic Formula: {record.generic_formula}
        Dosage/Route: {record.dosage}
        Used for: {", ".join(record.uses)}

        Your job is to:
        1. Provide a very simple, 1-2 sentence definition of what this medicine does for a regular user.
        2. Suggest 2-3 popular alternative medicine brands that have the EXACT same generic formula ({record.generic_formula}).
        3. Always add a short disclaimer to consult a doctor. Keep responses concise, simple, and formatted in Markdown.
        """
    ).strip()
    return PromptSpec(
        messages=[
            ChatMessage(role="system", content=system_prompt),
            ChatMessage(role="user", content=f"Please explain {record.brand_name} and suggest alternatives."),
        ],
        temperature=0.3,
        max_tokens=400,
        empty_fallback="Sorry, I couldn't generate an explanation.",
    )
