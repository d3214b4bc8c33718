"""Unit tests for the headless port implementations."""

import pytest
import structlog
from structlog.testing import capture_logs

from contentbase.application.services.ports import LoggingNotifier
from contentbase.core.logging import rename_message_field


def _render(captured: dict) -> dict:
    """Run a captured event through the level and message processors of the JSON pipeline."""
    event = dict(captured)
    method = event.pop("log_level")
    event = structlog.stdlib.add_log_level(None, method, event)
    return rename_message_field(None, method, event)


class TestLoggingNotifier:
    @pytest.mark.parametrize(
        ("method", "kind", "level"),
        [("success", "success", "info"), ("error", "error", "warning")],
    )
    def test_notification_text_survives_rendering(self, method, kind, level):
        """Test that the notification text and kind are not overwritten by the log level and message."""
        with capture_logs() as logs:
            getattr(LoggingNotifier(), method)("Content saved successfully")

        rendered = _render(logs[0])

        assert rendered["message"] == "Notification"
        assert rendered["notification"] == "Content saved successfully"
        assert rendered["kind"] == kind
        assert rendered["level"] == level
