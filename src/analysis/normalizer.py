# src/analysis/normalizer.py — v1
"""Normalize raw AI responses into AnalysisRecord. Never raises."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from clipsight.core.models import STRUCTURED_FIELD_DEFAULTS, AnalysisRecord

logger = logging.getLogger(__name__)

# Record field name → key used by the response schema.
_RESPONSE_KEYS: dict[str, str] = {
    "text_content": "textContent",
    "audio_context": "audioContext",
    "technical_aspects": "technicalAspects",
}

_FENCED_JSON = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def normalize_response(text: str) -> AnalysisRecord:
    """Build an AnalysisRecord from a provider response.

    A JSON object maps onto the record field by field: missing structured
    fields take their empty-container default and non-string values are
    re-serialized. Any other payload yields a degraded record whose summary
    is the raw response text.
    """
    try:
        data = json.loads(_strip_code_fence(text))
    except (ValueError, RecursionError) as e:
        logger.warning("Failed to parse analysis response as JSON: %s", e)
        return AnalysisRecord.degraded(text)

    if not isinstance(data, dict):
        logger.warning("Analysis response is JSON %s, expected object", type(data).__name__)
        return AnalysisRecord.degraded(text)

    fields: dict[str, str] = {"summary": _as_text(data.get("summary"), "")}
    for name, default in STRUCTURED_FIELD_DEFAULTS.items():
        key = _RESPONSE_KEYS.get(name, name)
        value = data[key] if key in data else data.get(name)
        fields[name] = _as_text(value, default)
    return AnalysisRecord(**fields)


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    match = _FENCED_JSON.match(stripped)
    return match.group(1) if match else stripped


def _as_text(value: Any, default: str) -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)
