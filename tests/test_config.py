"""
Tests for MonitorConfig and AppConfig
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from sentry_monitor.models.config import AppConfig, MonitorConfig


class TestMonitorConfig:
    def test_defaults(self):
        """Test default values match the widget defaults"""
        config = MonitorConfig(auth_token="token", org_slug="org")

        assert config.update_interval_ms == 30000
        assert config.update_interval == 30.0
        assert config.display_count == 5
        assert config.time_range == "24h"
        assert config.sort_by == "freq"
        assert config.min_events == 1
        assert config.api_host == "sentry.io"

    def test_from_host_camel_case_keys(self):
        """Test building config from the host payload"""
        config = MonitorConfig.from_host(
            {
                "sentryAuthToken": "token",
                "sentryOrgSlug": "org",
                "sentryProjectSlug": "proj",
                "updateInterval": 60000,
                "displayCount": 3,
                "timeRange": "14d",
                "sortBy": "last_seen",
                "minEvents": 10,
                "position": "top_left",
            }
        )

        assert config.auth_token == "token"
        assert config.org_slug == "org"
        assert config.project_slug == "proj"
        assert config.update_interval == 60.0
        assert config.display_count == 3
        assert config.time_range == "14d"
        assert config.min_events == 10

    def test_missing_required_fields(self):
        """Test that token and organization are required"""
        config = MonitorConfig()

        assert config.missing_fields() == ["sentryAuthToken", "sentryOrgSlug"]
        assert not config.is_configured()

    def test_project_slug_optional(self):
        """Test that a missing project slug does not invalidate the config"""
        config = MonitorConfig(auth_token="token", org_slug="org")

        assert config.is_configured()

    def test_api_sort_mapping(self):
        """Test mapping of configured sort values to API values"""
        assert MonitorConfig(sort_by="freq").api_sort() == "freq"
        assert MonitorConfig(sort_by="last_seen").api_sort() == "date"
        assert MonitorConfig(sort_by="first_seen").api_sort() == "new"
        assert MonitorConfig(sort_by="priority").api_sort() == "priority"
        assert MonitorConfig(sort_by="bogus").api_sort() == ""

    def test_config_is_immutable(self, mock_monitor_config):
        """Test that config cannot be changed after creation"""
        with pytest.raises(ValidationError):
            mock_monitor_config.display_count = 10

    def test_rejects_non_positive_display_count(self):
        """Test validation of numeric options"""
        with pytest.raises(ValidationError):
            MonitorConfig(display_count=0)

    def test_from_env(self):
        """Test loading configuration from environment variables"""
        env = {
            "SENTRY_AUTH_TOKEN": "env_token",
            "SENTRY_ORG": "env_org",
            "SENTRY_UPDATE_INTERVAL": "15000",
            "SENTRY_DISPLAY_COUNT": "7",
            "SENTRY_MIN_EVENTS": "2",
        }
        with patch.dict(os.environ, env, clear=True):
            config = MonitorConfig.from_env()

        assert config.auth_token == "env_token"
        assert config.org_slug == "env_org"
        assert config.project_slug == ""
        assert config.update_interval == 15.0
        assert config.display_count == 7
        assert config.min_events == 2
        assert config.time_range == "24h"


class TestAppConfig:
    def test_from_env_debug(self):
        """Test debug flag parsing"""
        with patch.dict(os.environ, {"DEBUG": "True"}, clear=True):
            config = AppConfig.from_env()

        assert config.debug is True
        assert not config.sentry.is_configured()
