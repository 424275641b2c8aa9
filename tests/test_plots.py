from power_analytics import plot_harmonic_spectrum, plot_three_phase_waveforms


class TestPlots:
    """Tests for the plotly figures"""

    def test_waveform_figure(self, balanced_batch):
        fig = plot_three_phase_waveforms(balanced_batch)

        assert len(fig.data) == 9
        assert [trace.name for trace in fig.data[:3]] == ["V1", "V2", "V3"]
        assert len(fig.data[0].x) == balanced_batch.num_samples

    def test_waveform_figure_with_total_power(self, balanced_batch, baseline):
        p_total = baseline["power_analysis"]["active_power"]["total"]

        fig = plot_three_phase_waveforms(balanced_batch, p_total=p_total)

        assert len(fig.data) == 10
        assert fig.data[-1].name == f"P_total_avg = {p_total:.2f}kW"

    def test_harmonic_spectrum(self, balanced_batch):
        fig = plot_harmonic_spectrum(balanced_batch, 50.0)

        assert len(fig.data) == 6
        assert list(fig.data[0].x) == list(range(2, 11))
        assert max(fig.data[0].y) < 1.0
