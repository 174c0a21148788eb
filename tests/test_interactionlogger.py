"""
Tests for the interaction event logger.
"""

import json

import pytest

from uisafe.interactionlogger import InteractionLogger


@pytest.fixture
def logger():
    instance = InteractionLogger()
    instance.configure(format="jsonl")
    instance.enable()
    return instance


class TestInteractionLogger:
    """Tests for InteractionLogger output and configuration."""

    def test_disabled_logger_is_silent(self, capsys):
        """Should print nothing while disabled."""
        instance = InteractionLogger()
        instance.log(event="interaction_finish")
        assert capsys.readouterr().out == ""

    def test_jsonl_event(self, logger, capsys):
        """Should write one JSON object per event."""
        logger.log(event="recovery_attempt", interaction="IClickable.click", target="ok", status="info")

        event = json.loads(capsys.readouterr().out)
        assert event["event"] == "recovery_attempt"
        assert event["interaction"] == "IClickable.click"
        assert event["target"] == "ok"

    def test_redacts_sensitive_metadata(self, logger, capsys):
        """Should mask password-like metadata."""
        logger.log(event="interaction_start", metadata={"password": "hunter2", "text": "bob"})

        event = json.loads(capsys.readouterr().out)
        assert event["metadata"] == {"password": "***", "text": "bob"}

    def test_exception_details(self, logger, capsys):
        """Should include exception type, cause and traceback."""
        try:
            try:
                raise KeyError("inner")
            except KeyError as inner:
                raise ValueError("outer") from inner
        except ValueError as e:
            logger.log(event="interaction_finish", status="error", exception=e)

        exc = json.loads(capsys.readouterr().out)["exception"]
        assert exc["type"] == "ValueError"
        assert exc["cause_type"] == "KeyError"
        assert "Traceback" in exc["traceback"]

    def test_rejects_unknown_format(self):
        """Should reject formats other than line and jsonl."""
        with pytest.raises(ValueError):
            InteractionLogger().configure(format="xml")

    def test_retry_sampling(self):
        """Should log the first and every Nth retry attempt."""
        instance = InteractionLogger()
        instance.configure(sample_retry_events=3)

        sampled = [a for a in range(1, 10) if instance.should_log_retry_attempt(a)]

        assert sampled == [1, 3, 6, 9]

    def test_configure_from_env(self, monkeypatch, tmp_path):
        """Should enable file logging from environment variables."""
        log_file = tmp_path / "events.log"
        monkeypatch.setenv("UISAFE_INTERACTION_LOGGING", "true")
        monkeypatch.setenv("UISAFE_INTERACTION_LOG_FILE", str(log_file))
        instance = InteractionLogger()

        instance.configure_from_env()
        instance.log(event="marker")

        assert instance.is_enabled()
        assert "marker" in log_file.read_text(encoding="utf-8")
