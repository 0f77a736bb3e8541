import json
import logging
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from . import settings
from .models import LinkMetadata

logger = logging.getLogger("linkhub.metadata")

PROMPT = (
    "Analyze the URL {url} and suggest professional metadata for a corporate "
    "link hub. Return a description, a category and an icon name from the "
    "Lucide library (e.g. Box, Globe, Shield, Terminal)."
)

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "description": {
            "type": "STRING",
            "description": "A short professional description (max 80 characters).",
        },
        "category": {
            "type": "STRING",
            "description": "A logical category (e.g. Tools, HR, IT).",
        },
        "icon": {"type": "STRING", "description": "A fitting Lucide icon name."},
    },
    "required": ["description", "category", "icon"],
}


def _answer_text(data: Any) -> Optional[str]:
    candidates = data.get("candidates") if isinstance(data, dict) else None
    if not isinstance(candidates, list):
        return None
    for candidate in candidates:
        content = candidate.get("content") if isinstance(candidate, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            continue
        for part in parts:
            if isinstance(part, dict) and isinstance(part.get("text"), str) and part["text"]:
                return part["text"]
    return None


def suggest_metadata(
    url: str,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
) -> Optional[LinkMetadata]:
    """Best-effort description/category/icon suggestion. None when unavailable."""
    api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
    if not api_key or not url:
        return None

    endpoint = f"{settings.GEMINI_BASE_URL}/models/{model or settings.GEMINI_MODEL}:generateContent"
    payload = {
        "contents": [{"role": "user", "parts": [{"text": PROMPT.format(url=url)}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }
    try:
        resp = requests.post(endpoint, params={"key": api_key}, json=payload, timeout=30)
        if resp.status_code != 200:
            logger.warning("metadata suggestion failed: HTTP %s", resp.status_code)
            return None
        text = _answer_text(resp.json())
        if not text:
            return None
        return LinkMetadata.model_validate(json.loads(text.strip()))
    except (
        requests.RequestException,
        ValueError,
        TypeError,
        AttributeError,
        ValidationError,
    ) as exc:
        logger.warning("metadata suggestion failed: %s", exc)
        return None
