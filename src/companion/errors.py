"""Error taxonomy for the chat proxy.

Only GoalLookupError may be absorbed by the handler (degrade policy).
Everything else ends the request with a 500 and {"error": str(exc)}.
"""
from __future__ import annotations

from typing import Optional

class CompanionError(Exception):
    pass

class ConfigurationError(CompanionError):
    pass

class BadRequestError(CompanionError):
    pass

class GoalLookupError(CompanionError):
    pass

class UpstreamError(CompanionError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

class MalformedResponseError(CompanionError):
    pass
