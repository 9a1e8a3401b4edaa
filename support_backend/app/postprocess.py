#!/usr/bin/env python3
"""
Postprocessing module for the support dashboard.

This module cleans LLM replies, extracts their JSON payloads and scores
generated reply options.
"""

import json
import re
from typing import Any, Dict

CODE_FENCE_PATTERN = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)

QUALITY_CRITERIA = ("clarity", "completeness", "tone", "accuracy", "actionability")


def clean_json_reply(text: str) -> str:
    """Strip Markdown code fences and surrounding whitespace."""
    return CODE_FENCE_PATTERN.sub("", text or "").strip()


def parse_json_reply(text: str) -> Dict[str, Any]:
    """
    Parse the JSON object out of an LLM reply.

    Args:
        text: Raw LLM reply

    Returns:
        Decoded JSON object

    Raises:
        ValueError: If the reply holds no JSON object
    """
    cleaned = clean_json_reply(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        match = JSON_OBJECT_PATTERN.search(cleaned)
        if not match:
            raise ValueError("No JSON object found in reply")
        parsed = json.loads(match.group())

    if not isinstance(parsed, dict):
        raise ValueError("Reply JSON is not an object")
    return parsed


def calculate_confidence(choice: Dict[str, Any]) -> float:
    """
    Heuristic confidence for one completion choice.

    Args:
        choice: A chat completion choice

    Returns:
        0.5 unless the choice finished normally with content, in which case
        longer content scores higher, capped at 0.9
    """
    content = (choice.get("message") or {}).get("content") or ""
    if choice.get("finish_reason") == "stop" and content:
        return min(0.9, 0.5 + (len(content) / 1000) * 0.4)
    return 0.5


def normalize_quality(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in a missing overall score as the mean of the five criteria."""
    result = dict(payload)
    if result.get("overall") is None:
        scores = [float(result[c]) for c in QUALITY_CRITERIA if result.get(c) is not None]
        if len(scores) == len(QUALITY_CRITERIA):
            result["overall"] = round(sum(scores) / len(scores), 2)
    return result
