"""ChatHandler: the stateless request handler / CORS gateway.

Steps per request:
1. preflight  - OPTIONS answers immediately with CORS headers
2. parse      - {message, userId}
3. configure  - required secrets present
4. goals      - load personalization (degrade or fail on lookup errors)
5. compose    - build the prompt
6. upstream   - one Gemini call
7. respond    - {"response": text} / {"error": message}, CORS headers always
"""
from __future__ import annotations

import json
import time
from typing import Any, Dict, List, Optional

from .adapters.base import BaseChatAdapter
from .adapters.gemini import GeminiClient
from .errors import CompanionError, GoalLookupError
from .goals import GoalLoader, supabase_client_factory
from .input_spec import parse_chat_request
from .logging_util import get_logger, log_step
from .prompt import compose_prompt
from .types import Goal, HttpResponse, ProxyConfig

logger = get_logger(__name__)

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

GENERIC_ERROR = "Internal error"

def preflight_response() -> HttpResponse:
    return HttpResponse(status_code=200, headers=dict(CORS_HEADERS), body=None)

def json_response(status_code: int, payload: Dict[str, Any]) -> HttpResponse:
    headers = {**CORS_HEADERS, "Content-Type": "application/json"}
    return HttpResponse(status_code=status_code, headers=headers, body=json.dumps(payload, ensure_ascii=False))

def error_response(message: str) -> HttpResponse:
    # Every failure kind maps to 500, matching the deployed function.
    return json_response(500, {"error": message or GENERIC_ERROR})

class ChatHandler:
    def __init__(
        self,
        config: ProxyConfig,
        goal_loader: Optional[GoalLoader] = None,
        upstream: Optional[BaseChatAdapter] = None,
    ):
        self.config = config
        self.goal_loader = goal_loader or GoalLoader(
            supabase_client_factory(config.supabase_url, config.supabase_service_key)
        )
        self.upstream = upstream or GeminiClient(url=config.generate_url, timeout=config.timeout)

    def handle(self, method: str, body: Any, request_id: Optional[str] = None) -> HttpResponse:
        if (method or "").strip().upper() == "OPTIONS":
            return preflight_response()

        t0 = time.time()
        try:
            log_step(logger, "1", "parse request", request_id)
            req = parse_chat_request(body)

            log_step(logger, "2", "check configuration", request_id)
            self.config.validate()

            log_step(logger, "3", "resolve goals", request_id)
            goals = self._resolve_goals(req.user_id, request_id)

            log_step(logger, "4", f"compose prompt goals={len(goals)}", request_id)
            prompt = compose_prompt(goals, req.message)
            logger.debug("Composed prompt:\n%s", prompt)

            log_step(logger, "5", "call upstream", request_id)
            text = self.upstream.generate(prompt, self.config.gemini_api_key)

            logger.info("chat ok in %d ms", int((time.time() - t0) * 1000))
            return json_response(200, {"response": text})

        except CompanionError as e:
            logger.error("chat failed (%s): %s", type(e).__name__, e)
            return error_response(str(e))
        except Exception as e:
            logger.exception("ChatHandler.handle failed: %s", e)
            return error_response(GENERIC_ERROR)

    def _resolve_goals(self, user_id: Optional[str], request_id: Optional[str]) -> List[Goal]:
        try:
            return self.goal_loader.load(user_id)
        except GoalLookupError as e:
            if self.config.on_goal_lookup_failure == "fail":
                raise
            logger.warning("[%s] continuing without goals: %s", request_id or "-", e)
            return []
