"""Adapter interface for the upstream generation API."""
from __future__ import annotations

class BaseChatAdapter:
    def generate(self, prompt: str, api_key: str) -> str:
        raise NotImplementedError
