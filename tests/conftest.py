"""
Pytest configuration and fixtures
"""

from datetime import UTC, datetime, timedelta

import pytest

from sentry_monitor.models.config import MonitorConfig

FIXED_NOW = datetime(2024, 6, 18, 16, 0, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock for time-dependent rendering"""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def mock_monitor_config():
    """Valid MonitorConfig for testing"""
    return MonitorConfig(
        auth_token="test_auth_token",
        org_slug="test_org",
        project_slug="test_project",
    )


@pytest.fixture
def mock_sentry_issue_data():
    """One issue as returned by the organization issues endpoint"""
    return {
        "id": "12345",
        "title": "DatabaseConnectionError",
        "culprit": "src/database.py in connect",
        "permalink": "https://sentry.io/organizations/test_org/issues/12345/",
        "shortId": "TEST-1",
        "status": "unresolved",
        "level": "error",
        "type": "error",
        "count": "150",
        "userCount": 25,
        "firstSeen": "2024-06-18T10:00:00.000Z",
        "lastSeen": "2024-06-18T15:30:00.000Z",
        "project": {"id": "1", "name": "Test Project", "slug": "test-project"},
        "metadata": {
            "type": "ConnectionError",
            "environment": "production",
            "release": "1.4.2",
        },
        "isRegression": True,
    }


@pytest.fixture
def make_raw_issues():
    """Factory for raw issue arrays with the given event counts"""

    def _make(counts: list[int], start_id: int = 1) -> list[dict]:
        return [
            {
                "id": str(start_id + i),
                "title": f"Error number {start_id + i}",
                "level": "error",
                "count": str(count),
                "userCount": 3,
                "project": {"slug": "web"},
                "firstSeen": "2024-06-18T09:00:00Z",
                "lastSeen": "2024-06-18T15:58:30Z",
                "permalink": f"https://sentry.io/issues/{start_id + i}/",
            }
            for i, count in enumerate(counts)
        ]

    return _make
