import logging
import math

import numpy as np
import pytest

from power_analytics import (
    calculate_phase_power,
    calculate_thd,
    calculate_three_phase_power,
    calculate_unbalance,
    estimate_frequency,
    estimate_phase_angle,
    generate_sine,
    goertzel_magnitude,
    normalize_angle,
)
from power_analytics.analytics import cross_correlation_lag, find_zero_crossings

FS = 10000
N = 2000  # 10 cycles at 50 Hz


def sine(amplitude=1.0, frequency=50.0, phase_deg=0.0, harmonics=None):
    _, signal = generate_sine(
        amplitude, frequency, np.radians(phase_deg), FS, N, harmonics
    )
    return signal


class TestFrequency:
    """Tests for zero-crossing frequency estimation"""

    def test_positive_going_crossings_only(self):
        signal = np.array([-1.0, 1.0, -1.0, 0.0, 2.0, -3.0])
        assert find_zero_crossings(signal).tolist() == [1, 4]

    @pytest.mark.parametrize("frequency", [45.0, 50.0, 60.0, 65.0])
    def test_recovers_power_frequencies(self, frequency):
        signal = sine(frequency=frequency, phase_deg=17.0)
        step = frequency**2 / FS  # one sample of period resolution, in Hz
        assert estimate_frequency(signal, FS) == pytest.approx(frequency, abs=step)

    def test_unestimable_frequency_is_nan(self):
        assert math.isnan(estimate_frequency(np.zeros(100), FS))
        assert math.isnan(estimate_frequency(np.linspace(-1, 1, 100), FS))


class TestPhaseAngle:
    """Tests for the cross-correlation phase correlator"""

    @pytest.mark.parametrize(
        "degrees, expected",
        [(0.0, 0.0), (190.0, -170.0), (-190.0, 170.0), (180.0, 180.0), (-180.0, 180.0), (540.0, 180.0)],
    )
    def test_normalize_angle(self, degrees, expected):
        assert normalize_angle(degrees) == pytest.approx(expected)

    def test_three_phase_separation(self):
        v1 = sine(phase_deg=0.0)
        v2 = sine(phase_deg=-120.0)
        v3 = sine(phase_deg=120.0)
        spp = FS / 50

        assert estimate_phase_angle(v2, v1, spp, round(spp)) == pytest.approx(-120, abs=5)
        assert estimate_phase_angle(v3, v2, spp, round(spp)) == pytest.approx(-120, abs=5)
        assert estimate_phase_angle(v1, v3, spp, round(spp)) == pytest.approx(-120, abs=5)
        assert estimate_phase_angle(v3, v1, spp, round(spp)) == pytest.approx(120, abs=5)

    def test_lagging_current_is_negative(self):
        voltage = sine(phase_deg=0.0)
        current = sine(amplitude=0.1, phase_deg=-30.0)
        spp = FS / 50

        assert estimate_phase_angle(current, voltage, spp, round(spp)) == pytest.approx(
            -30, abs=5
        )

    def test_identical_signals_have_zero_lag(self):
        signal = sine(phase_deg=10.0)
        lag, coeff = cross_correlation_lag(signal, signal, 200)

        assert lag == 0
        assert coeff == pytest.approx(1.0)

    def test_silent_signal_gives_zero_angle(self):
        assert estimate_phase_angle(np.zeros(N), sine(), 200, 200) == 0.0

    def test_lag_window_larger_than_signal(self):
        lag, _ = cross_correlation_lag(np.array([0.0, 1.0, 0.0]), np.array([1.0, 0.0, 0.0]), 50)
        assert lag == -1


class TestPower:
    """Tests for power and balance calculations"""

    def test_resistive_load(self):
        voltage = sine(amplitude=230 * np.sqrt(2))
        current = sine(amplitude=10 * np.sqrt(2))

        result = calculate_phase_power(voltage, current)

        assert result["P"] == pytest.approx(2.3, rel=1e-6)
        assert result["S"] == pytest.approx(2.3, rel=1e-6)
        assert result["PF"] == pytest.approx(1.0, abs=1e-9)
        assert result["Q"] == pytest.approx(0.0, abs=1e-4)

    def test_lagging_load_power_factor(self):
        voltage = sine(amplitude=230 * np.sqrt(2))
        current = sine(amplitude=10 * np.sqrt(2), phase_deg=-30.0)

        result = calculate_phase_power(voltage, current)

        assert result["PF"] == pytest.approx(np.cos(np.radians(30)), abs=1e-6)
        assert result["Q"] == pytest.approx(2.3 * 0.5, rel=1e-4)

    def test_zero_current_leaves_power_factor_undefined(self):
        result = calculate_phase_power(sine(amplitude=325.0), np.zeros(N))

        assert result["P"] == 0.0
        assert result["S"] == 0.0
        assert result["PF"] is None
        assert result["Q"] is None

    @pytest.mark.parametrize("seed", range(5))
    def test_apparent_power_bounds_active_power(self, seed):
        rng = np.random.default_rng(seed)
        voltage = rng.normal(0, 230, 500)
        current = rng.normal(0, 10, 500) + 0.5 * voltage / 23

        result = calculate_phase_power(voltage, current)

        assert result["S"] ** 2 >= result["P"] ** 2 - 1e-12
        assert result["Q"] >= 0.0
        assert -1.0 <= result["PF"] <= 1.0

    def test_unbalance(self):
        assert calculate_unbalance(230.0, 230.0, 230.0) == 0.0
        assert calculate_unbalance(0.0, 0.0, 0.0) == 0.0
        assert calculate_unbalance(230.0, 207.0, 230.0) == pytest.approx(
            100 * (667 / 3 - 207) / (667 / 3)
        )

    def test_three_phase_totals_are_sums(self):
        v = [sine(amplitude=325.0, phase_deg=p) for p in (0, -120, 120)]
        i = [sine(amplitude=14.1, phase_deg=p - 30) for p in (0, -120, 120)]
        i[2] = np.zeros(N)

        result = calculate_three_phase_power(*v, *i)

        assert result["P_total"] == pytest.approx(result["P1"] + result["P2"] + result["P3"])
        assert result["S_total"] == pytest.approx(result["S1"] + result["S2"] + result["S3"])
        assert result["Q3"] is None
        assert result["Q_total"] == pytest.approx(result["Q1"] + result["Q2"])
        assert result["V_unbalance"] == pytest.approx(0.0, abs=1e-9)
        assert result["I_unbalance"] == pytest.approx(100.0)


class TestHarmonics:
    """Tests for Goertzel magnitudes and THD"""

    def test_goertzel_magnitude_of_sine(self):
        assert goertzel_magnitude(sine(amplitude=2.0), FS, 50) == pytest.approx(1.0, rel=1e-6)
        assert goertzel_magnitude(sine(amplitude=2.0), FS, 150) == pytest.approx(0.0, abs=1e-9)

    def test_pure_sine_has_no_distortion(self):
        assert calculate_thd(sine(amplitude=325.0), FS, 50.0) == pytest.approx(0.0, abs=0.01)

    def test_third_harmonic_20_percent(self):
        signal = sine(amplitude=325.0, harmonics={3: (0.2, 0.0)})
        assert calculate_thd(signal, FS, 50.0) == pytest.approx(20.0, abs=0.1)

    def test_multiple_harmonics(self):
        signal = sine(amplitude=325.0, harmonics={3: (0.1, 0.4), 5: (0.05, -1.0)})
        assert calculate_thd(signal, FS, 50.0) == pytest.approx(
            100 * math.sqrt(0.1**2 + 0.05**2), abs=0.1
        )

    def test_missing_frequency_uses_fallback(self):
        signal = sine(amplitude=325.0, harmonics={3: (0.2, 0.0)})
        assert calculate_thd(signal, FS, None) == pytest.approx(20.0, abs=0.1)
        assert calculate_thd(signal, FS, math.nan) == pytest.approx(20.0, abs=0.1)

    def test_harmonics_above_nyquist_are_reported(self, caplog):
        caplog.set_level(logging.DEBUG, logger="power_analytics.analytics")
        _, signal = generate_sine(170.0, 60.0, 0.0, 1000, 100)

        calculate_thd(signal, 1000, 60.0)

        assert "at or above Nyquist" in caplog.text
        assert "[9, 10]" in caplog.text

    def test_no_aliasing_report_when_sampled_fast_enough(self, caplog):
        caplog.set_level(logging.DEBUG, logger="power_analytics.analytics")

        calculate_thd(sine(amplitude=325.0), FS, 50.0)

        assert "Nyquist" not in caplog.text

    def test_silent_signal_is_finite(self):
        assert calculate_thd(np.zeros(N), FS, 50.0) == 0.0
