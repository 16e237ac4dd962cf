"""
Tests for SentryMonitor (wiring of widget and service)
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from sentry_monitor.models.config import AppConfig, MonitorConfig
from sentry_monitor.models.messages import FetchMessage
from sentry_monitor.models.widget import WidgetPhase
from sentry_monitor.monitor import SentryMonitor
from sentry_monitor.services.sentry_fetcher import SentryFetcher


@pytest.fixture
def mock_app_config(mock_monitor_config):
    return AppConfig(sentry=mock_monitor_config)


class TestSentryMonitor:
    def test_initialization(self, mock_app_config):
        """Test monitor initialization with config"""
        monitor = SentryMonitor(mock_app_config)

        assert monitor.config == mock_app_config
        assert monitor.session is None
        assert monitor.service is None
        assert monitor.widget is None

    def test_initialize_components(self, mock_app_config):
        """Test that the service shares the monitor's HTTP session"""
        monitor = SentryMonitor(mock_app_config)
        monitor.session = MagicMock()

        monitor._initialize_components()

        assert monitor.service.session is monitor.session
        assert monitor.widget.config == mock_app_config.sentry

    @pytest.mark.asyncio
    async def test_start_with_invalid_config_returns(self):
        """Test that an unconfigured widget does not keep the monitor alive"""
        monitor = SentryMonitor(AppConfig(sentry=MonitorConfig()))

        with patch(
            "sentry_monitor.monitor.aiohttp.ClientSession", return_value=AsyncMock()
        ):
            await asyncio.wait_for(monitor.start(), timeout=1)

        assert monitor.widget.state.phase == WidgetPhase.CONFIG_INVALID
        monitor.session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_dispatch_runs_in_background(self, mock_app_config):
        """Test that widget messages are handled as background tasks"""
        monitor = SentryMonitor(mock_app_config)
        monitor._initialize_components()

        with patch.object(
            monitor.service, "handle_message", new_callable=AsyncMock
        ) as mock_handle:
            monitor._dispatch(FetchMessage())
            await asyncio.sleep(0)

        mock_handle.assert_awaited_once_with(FetchMessage())

    @pytest.mark.asyncio
    async def test_end_to_end_update(self, mock_app_config, make_raw_issues):
        """Test CONFIG -> fetch -> UPDATE -> rendered cards"""
        monitor = SentryMonitor(mock_app_config)

        with (
            patch(
                "sentry_monitor.monitor.aiohttp.ClientSession",
                return_value=AsyncMock(),
            ),
            patch.object(
                SentryFetcher,
                "fetch_issues",
                new_callable=AsyncMock,
                return_value=make_raw_issues([100, 50, 10]),
            ),
        ):
            task = asyncio.create_task(monitor.start())
            await asyncio.sleep(0.05)
            monitor.stop()
            await asyncio.wait_for(task, timeout=1)

        text = monitor.widget.surface.to_text()
        assert monitor.widget.state.phase == WidgetPhase.NORMAL
        assert "Error number 1" in text
        assert "62.5% of all errors" in text
        assert not monitor.widget.poller.running
