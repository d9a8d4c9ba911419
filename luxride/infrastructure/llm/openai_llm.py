from __future__ import annotations

import json
from typing import Any

from openai import OpenAI

from luxride.application.exceptions import LLMContractError, LLMUpstreamError
from luxride.application.ports.preference_suggester import PreferenceSuggesterPort
from luxride.core.config import settings
from luxride.domain.entities.preferences import PreferenceSuggestion
from luxride.infrastructure.llm.prompts import build_suggest_prompt

_OUTPUT_KEYS = ("preferredVehicleType", "preferredTemperature", "preferredMusicGenre")


class OpenAILLM(PreferenceSuggesterPort):
    """
    OpenAI-backed adapter implementing PreferenceSuggesterPort.

    Contract guarantees:
    - suggest returns a PreferenceSuggestion with three non-empty strings
    - Raises:
        LLMUpstreamError: networking/provider failures
        LLMContractError: invalid JSON or wrong schema/shape
    """

    def __init__(self, client: OpenAI | None = None) -> None:
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)

    def suggest(self, owner_id: str, past_bookings: str) -> PreferenceSuggestion:
        prompt = build_suggest_prompt(owner_id=owner_id, past_bookings=past_bookings or "[]")

        text = self._call_text(
            model=settings.OPENAI_MODEL_SUGGEST,
            prompt=prompt,
            temperature=settings.OPENAI_TEMPERATURE_SUGGEST,
        )

        data = _parse_json(text, what="suggest")
        if not isinstance(data, dict):
            raise LLMContractError("Suggest: expected a JSON object with the three preference keys.")

        values: dict[str, str] = {}
        for key in _OUTPUT_KEYS:
            raw = data.get(key)
            if not isinstance(raw, str) or not raw.strip():
                raise LLMContractError(f"Suggest: '{key}' must be a non-empty string.")
            values[key] = raw.strip()

        return PreferenceSuggestion(
            preferred_vehicle_type=values["preferredVehicleType"],
            preferred_temperature=values["preferredTemperature"],
            preferred_music_genre=values["preferredMusicGenre"],
        )

    def _call_text(self, model: str, prompt: str, temperature: float) -> str:
        try:
            resp = self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": "Return only valid JSON. Do not include markdown or extra text."},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                max_tokens=300,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise LLMUpstreamError(f"OpenAI API error: {e}") from e

        content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not content:
            raise LLMContractError("LLM returned empty response text.")

        return content


def _parse_json(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except Exception:
        snippet = text[:200].replace("\n", " ")
        raise LLMContractError(f"{what.capitalize()}: invalid JSON. Snippet: {snippet!r}")
