import pytest

from src.companion.errors import GoalLookupError
from src.companion.types import Goal, ProxyConfig


@pytest.fixture
def config():
    return ProxyConfig(
        gemini_api_key="test-key",
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
    )


@pytest.fixture
def calm_goal():
    return Goal(name="Feel calm", description="reduce anxiety")


@pytest.fixture
def lookup_error():
    return GoalLookupError("store unavailable")
