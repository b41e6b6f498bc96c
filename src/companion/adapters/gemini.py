"""Gemini REST adapter (generateContent).

One blocking POST per call. No retry, no streaming.
"""
from __future__ import annotations

import hashlib
from typing import Any, Dict, List, Optional

import requests

from ..config import sanitize_api_key
from ..errors import MalformedResponseError, UpstreamError
from ..logging_util import get_logger
from ..types import DEFAULT_ENDPOINT, DEFAULT_MODEL
from .base import BaseChatAdapter

logger = get_logger(__name__)

GENERATION_CONFIG: Dict[str, Any] = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 1024,
}

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)

SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"

def build_payload(prompt: str) -> Dict[str, Any]:
    safety: List[Dict[str, str]] = [
        {"category": c, "threshold": SAFETY_THRESHOLD} for c in SAFETY_CATEGORIES
    ]
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": dict(GENERATION_CONFIG),
        "safetySettings": safety,
    }

def extract_text(data: Any) -> str:
    """Return candidates[0].content.parts[0].text or raise MalformedResponseError."""
    try:
        content = data["candidates"][0]["content"]
        text = content["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise MalformedResponseError("Invalid response format from Gemini API")
    if not isinstance(text, str):
        raise MalformedResponseError("Invalid response format from Gemini API")
    return text

def _error_body(r: requests.Response) -> Optional[Any]:
    try:
        return r.json()
    except ValueError:
        return None

class GeminiClient(BaseChatAdapter):
    def __init__(self, url: Optional[str] = None, timeout: float = 30.0):
        self.url = url or DEFAULT_ENDPOINT.format(model=DEFAULT_MODEL)
        self.timeout = timeout

    def generate(self, prompt: str, api_key: str) -> str:
        key = sanitize_api_key(api_key)
        sha8 = hashlib.sha256(key.encode("utf-8")).hexdigest()[:8]
        logger.debug("[GEMINI_KEY] len=%d sha8=%s", len(key), sha8)

        headers = {"Content-Type": "application/json", "x-goog-api-key": key}

        try:
            r = requests.post(self.url, headers=headers, json=build_payload(prompt), timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"API request failed: {e}")

        if r.status_code != 200:
            logger.error("Gemini API error: %s", _error_body(r))
            raise UpstreamError(f"API request failed: {r.status_code}", status_code=r.status_code)

        try:
            data = r.json()
        except ValueError:
            raise MalformedResponseError("Invalid response format from Gemini API")

        return extract_text(data)
