"""Goal context loader.

Resolves the personalization goals a user selected, through the Supabase
join `user_goals -> mental_health_goals`. The loader never swallows store
failures; the handler decides whether to degrade.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional

from supabase import Client, create_client

from .errors import GoalLookupError
from .logging_util import get_logger
from .types import Goal

logger = get_logger(__name__)

GOALS_SELECT = "mental_health_goals(name, description)"

ClientFactory = Callable[[], Any]

def supabase_client_factory(url: str, key: str) -> ClientFactory:
    def _create() -> Client:
        return create_client(url, key)
    return _create

def _embedded_goals(row: Any) -> Iterable[Any]:
    embedded = row.get("mental_health_goals") if isinstance(row, dict) else None
    if embedded is None:
        return []
    if isinstance(embedded, list):
        return embedded
    return [embedded]

def rows_to_goals(rows: Optional[List[Any]]) -> List[Goal]:
    goals: List[Goal] = []
    for row in rows or []:
        for g in _embedded_goals(row):
            if not isinstance(g, dict):
                continue
            goals.append(Goal(name=str(g.get("name") or ""), description=str(g.get("description") or "")))
    return goals

class GoalLoader:
    def __init__(self, client_factory: ClientFactory):
        self._client_factory = client_factory

    def load(self, user_id: Optional[str]) -> List[Goal]:
        if not user_id or not user_id.strip():
            return []

        try:
            client = self._client_factory()
            res = (
                client.table("user_goals")
                .select(GOALS_SELECT)
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as e:
            logger.error("goal lookup failed for user %s: %s", user_id, e)
            raise GoalLookupError("Failed to load user goals") from e

        goals = rows_to_goals(getattr(res, "data", None))
        logger.debug("Loaded %d goal(s) for user %s", len(goals), user_id)
        return goals
