"""Unit tests for notekeeper.core.resilience."""

from datetime import timedelta
from unittest.mock import MagicMock, patch

from notekeeper.core.resilience import ResilienceLogger, create_circuit_breaker


class TestResilienceLogger:
    def test_state_change_open(self):
        """Opening the circuit should log at error level."""
        rl = ResilienceLogger("note_store")
        mock_cb = MagicMock()
        mock_cb.fail_counter = 5

        with patch("notekeeper.core.resilience.logger") as mock_logger:
            rl.state_change(mock_cb, "closed", "open")
            mock_logger.error.assert_called_once()
            assert "circuit_breaker_opened" in str(mock_logger.error.call_args)

    def test_state_change_half_open(self):
        """Half-open should log at info level."""
        rl = ResilienceLogger("note_store")
        mock_cb = MagicMock()
        mock_cb.fail_counter = 3

        with patch("notekeeper.core.resilience.logger") as mock_logger:
            rl.state_change(mock_cb, "open", "half-open")
            mock_logger.info.assert_called_once()
            assert "circuit_breaker_half_open" in str(mock_logger.info.call_args)

    def test_failure(self):
        """Recording a failure should log at warning level."""
        rl = ResilienceLogger("note_store")
        mock_cb = MagicMock()
        mock_cb.fail_counter = 2

        with patch("notekeeper.core.resilience.logger") as mock_logger:
            rl.failure(mock_cb, ConnectionError("timeout"))
            mock_logger.warning.assert_called_once()
            extra = mock_logger.warning.call_args.kwargs["extra"]
            assert extra["resilience_event"] == "circuit_breaker_failure"
            assert extra["failure_count"] == 2


class TestCreateCircuitBreaker:
    def test_returns_configured_breaker(self):
        cb = create_circuit_breaker("note_store", fail_max=3, timeout_duration=15)
        assert cb.fail_max == 3
        assert cb.timeout_duration == timedelta(seconds=15)
        assert len(cb.listeners) == 1
        assert isinstance(cb.listeners[0], ResilienceLogger)
        assert cb.listeners[0].dependency == "note_store"

    def test_default_values(self):
        cb = create_circuit_breaker("default-dep")
        assert cb.fail_max == 5
        assert cb.timeout_duration == timedelta(seconds=30)
