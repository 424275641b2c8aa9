from unittest.mock import MagicMock

import pytest

from scripts.run_ui_playground import analysis_for_input


class TestAnalysisCache:
    """Tests for reusing the Gemini analysis across playground reruns"""

    def test_same_input_is_requested_once(self, balanced_batch):
        client = MagicMock()
        client.analyze.return_value = {"frequency_hz": 50.0}
        state = {}

        first = analysis_for_input(client, balanced_batch, "waveform", "{...}", state)
        second = analysis_for_input(client, balanced_batch, "waveform", "{...}", state)

        assert first == second == {"frequency_hz": 50.0}
        client.analyze.assert_called_once_with(balanced_batch, "waveform")

    def test_new_mode_or_input_requests_again(self, balanced_batch):
        client = MagicMock()
        client.analyze.side_effect = [{"n": 1}, {"n": 2}, {"n": 3}]
        state = {}

        analysis_for_input(client, balanced_batch, "waveform", "a", state)
        assert analysis_for_input(client, balanced_batch, "power_quality", "a", state) == {"n": 2}
        assert analysis_for_input(client, balanced_batch, "power_quality", "b", state) == {"n": 3}
        assert client.analyze.call_count == 3

    def test_failed_request_is_not_cached(self, balanced_batch):
        client = MagicMock()
        client.analyze.side_effect = [RuntimeError("quota"), {"n": 1}]
        state = {}

        with pytest.raises(RuntimeError):
            analysis_for_input(client, balanced_batch, "waveform", "a", state)

        assert "gemini_analysis" not in state
        assert analysis_for_input(client, balanced_batch, "waveform", "a", state) == {"n": 1}
