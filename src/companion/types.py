"""Shared types and lightweight data containers.

We avoid heavy frameworks here. Every container lives for a single request,
except ProxyConfig which is built once and never mutated.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

from .errors import ConfigurationError

GoalFailurePolicy = Literal["degrade", "fail"]

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

@dataclass(frozen=True)
class Goal:
    name: str
    description: str

@dataclass(frozen=True)
class ChatRequest:
    message: str
    user_id: Optional[str] = None

@dataclass(frozen=True)
class ProxyConfig:
    gemini_api_key: str = ""
    supabase_url: str = ""
    supabase_service_key: str = ""
    model: str = DEFAULT_MODEL
    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = 30.0
    on_goal_lookup_failure: GoalFailurePolicy = "degrade"

    @property
    def generate_url(self) -> str:
        return self.endpoint.format(model=self.model)

    def validate(self) -> None:
        if not self.gemini_api_key:
            raise ConfigurationError("Gemini API key not configured")
        if not self.supabase_url or not self.supabase_service_key:
            raise ConfigurationError("Supabase configuration missing")

@dataclass
class HttpResponse:
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None

    def json_body(self) -> Any:
        return json.loads(self.body) if self.body else None
