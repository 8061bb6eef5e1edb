"""
Menu recommendation resolver.

Responsibilities:
- Answer title searches locally with a case-insensitive substring match.
- Otherwise ask the language model to rank the menu for a query, a meal
  type, or in general, and map its ranked ids back onto the menu.
- Never raise: model and parse failures degrade to an empty result.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from pydantic import ValidationError

from ..llm.groq_client import LLMResponseError, TextModel
from ..llm.response import extract_json
from .models import MenuItem, RecommendationCandidate

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 5

RESPONSE_FORMAT_INSTRUCTION = (
    "If the query matches a specific item or category, prioritize those items. "
    "Format the response as a JSON array of objects with 'id' and 'relevance' "
    "properties, where 'relevance' is a number from 0 to 1 indicating how closely "
    "the item matches the query or meal type. Return ONLY the JSON array."
)


class ResolutionStatus(str, Enum):
    matched = "matched"
    resolved = "resolved"
    degraded = "degraded"


@dataclass
class RecommendationResult:
    status: ResolutionStatus
    items: list[MenuItem] = field(default_factory=list)
    error: str | None = None


def match_titles(query: str, menu: Sequence[MenuItem]) -> list[MenuItem]:
    """Items whose title contains ``query`` (case-insensitive), in menu order."""
    needle = query.lower()
    return [item for item in menu if needle in item.title.lower()]


def build_prompt(
    menu: Sequence[MenuItem],
    query: str | None = None,
    meal_type: str | None = None,
) -> str:
    menu_json = json.dumps([item.to_record() for item in menu], default=str)
    prompt = f"Given the following menu items: {menu_json}, "

    if query:
        prompt += (
            f'and the user\'s search query: "{query}", provide a list of up to '
            f"{MAX_RECOMMENDATIONS} recommended items, prioritizing items whose "
            "name or description contains the words of the query. "
        )
    elif meal_type:
        prompt += f"provide a list of {MAX_RECOMMENDATIONS} recommended {meal_type} items. "
    else:
        prompt += f"provide a list of {MAX_RECOMMENDATIONS} generally recommended items. "

    return prompt + RESPONSE_FORMAT_INSTRUCTION


def parse_candidates(reply: str) -> list[RecommendationCandidate]:
    """Parse a model reply into candidates sorted by relevance (stable on ties)."""
    payload = extract_json(reply)
    if not isinstance(payload, list):
        raise LLMResponseError(f"Expected a JSON array, got {type(payload).__name__}")

    candidates: list[RecommendationCandidate] = []
    for entry in payload:
        try:
            candidates.append(RecommendationCandidate.model_validate(entry))
        except ValidationError:
            logger.debug("Dropping invalid recommendation entry: %r", entry)
    return sorted(candidates, key=lambda c: c.relevance, reverse=True)


def resolve_candidates(
    candidates: Sequence[RecommendationCandidate],
    menu: Sequence[MenuItem],
) -> list[MenuItem]:
    by_id = {item.id: item for item in menu}
    resolved: list[MenuItem] = []
    seen: set[str] = set()
    for candidate in candidates:
        item = by_id.get(candidate.id)
        if item is None or candidate.id in seen:
            continue
        seen.add(candidate.id)
        resolved.append(item)
        if len(resolved) == MAX_RECOMMENDATIONS:
            break
    return resolved


async def resolve(
    query: str | None,
    menu: Sequence[MenuItem],
    model: TextModel,
    meal_type: str | None = None,
) -> RecommendationResult:
    query = (query or "").strip() or None
    meal_type = (meal_type or "").strip() or None

    if query:
        matches = match_titles(query, menu)
        if matches:
            return RecommendationResult(
                status=ResolutionStatus.matched,
                items=matches[:MAX_RECOMMENDATIONS],
            )

    try:
        reply = await model.generate(build_prompt(menu, query=query, meal_type=meal_type))
        candidates = parse_candidates(reply)
        items = resolve_candidates(candidates, menu)
    except Exception as exc:
        logger.warning("Model recommendation failed, returning none: %s", exc, exc_info=True)
        return RecommendationResult(status=ResolutionStatus.degraded, error=str(exc))

    return RecommendationResult(status=ResolutionStatus.resolved, items=items)


async def recommend(
    query: str | None,
    menu: Sequence[MenuItem],
    model: TextModel,
    meal_type: str | None = None,
) -> list[MenuItem]:
    """Up to five recommended menu items; empty when the model path fails."""
    result = await resolve(query, menu, model, meal_type=meal_type)
    return result.items
