# This project was developed with assistance from AI tools.
"""Shared fixtures: an in-memory Supabase and settings pointing at it."""

import pytest
from fakes import ANON_KEY, SUPABASE_URL, FakeSupabase, SleepRecorder

from signal1.core.config import Settings


@pytest.fixture
def fake() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def cfg() -> Settings:
    return Settings(
        SUPABASE_URL=SUPABASE_URL,
        SUPABASE_ANON_KEY=ANON_KEY,
        SUPABASE_SERVICE_ROLE_KEY=None,
        SUPABASE_JWT_SECRET=None,
        ADMIN_PROXY_URL="http://proxy.test",
        SITE_URL="http://portal.test",
        DEFAULT_PROFILE_ROLE="lender",
        BOOTSTRAP_MAX_ATTEMPTS=5,
        BOOTSTRAP_RETRY_DELAY_MS=200,
        UPLOAD_MAX_SIZE_MB=10,
    )
