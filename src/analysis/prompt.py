# src/analysis/prompt.py — v1
"""Prompt, system instruction and response schema for structured scene analysis."""

from __future__ import annotations

from typing import Any

SYSTEM_INSTRUCTION = (
    "You are an expert video analyst. Provide a detailed, structured analysis "
    "in JSON format."
)

_STRUCTURED_ANALYSIS_PROMPT = """You are an expert video analyst. Analyze these video frames, given in chronological order, and return a complete structured description as a JSON object.

For properties that require structured data (objects, people, actions, etc.), the value must be a valid JSON string:

{{
  "summary": "A concise summary of the video: main topic, approximate duration, main people/objects, setting/location.",
  "objects": "A JSON string holding an array of significant objects. For each object include 'name', 'frequency' (rare/occasional/frequent/constant) and 'description'.",
  "people": "A JSON string holding an array describing the people. For each group include 'count', 'physical_descriptions' (non-identifying), 'actions' (array) and 'interactions'.",
  "actions": "A JSON string holding an array of the main actions in chronological order. For each action include 'timestamp_approx', 'description' and 'performer'.",
  "textContent": "A JSON string holding an array of all visible text. For each text include 'type' (overlay/object/screen/handwritten), 'content' (exact text), 'location' (top/bottom/left/right/center), 'size' (large/medium/small), 'language' and 'context'.",
  "audioContext": "A JSON string holding an object with the inferred audio context: 'likely_sounds' (array), 'talking_people_count' ('few'/'several') and 'sound_environment_type'.",
  "technicalAspects": "A JSON string holding an object with 'image_quality' (excellent/good/fair/poor), 'lighting' (natural/artificial/mixed), 'camera_stability' and 'shot_types' (array: static/moving/zoom).",
  "metadata": "A JSON string holding an object with 'visible_timestamps' (array), 'location_info', 'environmental_conditions' (day/night, weather) and 'approx_era'."
}}
{language_instruction}"""

RESPONSE_FIELDS: tuple[str, ...] = (
    "summary",
    "objects",
    "people",
    "actions",
    "textContent",
    "audioContext",
    "technicalAspects",
    "metadata",
)

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {name: {"type": "STRING"} for name in RESPONSE_FIELDS},
    "required": list(RESPONSE_FIELDS),
}


def build_analysis_prompt(language_hint: str | None = None) -> str:
    """Render the structured-analysis prompt, optionally pinning the output language."""
    language_instruction = ""
    if language_hint:
        language_instruction = (
            f"\nWrite every human-readable value in the language '{language_hint}'. "
            "Keep JSON keys in English."
        )
    return _STRUCTURED_ANALYSIS_PROMPT.format(language_instruction=language_instruction)
