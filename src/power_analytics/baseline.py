"""
Deterministic baseline metrics for a three-phase waveform batch.

Every numeric field of the baseline is populated, with one exception: the power
factor and reactive power of a phase with zero apparent power are None.
"""

import logging
import math

from config import ANALYSIS_CONFIG
from utils import demean, peak_abs, rms

from .analytics import (
    FALLBACK_FREQ,
    calculate_thd,
    calculate_three_phase_power,
    estimate_frequency,
    estimate_phase_angle,
)
from .models import WaveformBatch

logger = logging.getLogger(__name__)

PHASES = ("L1", "L2", "L3")


def _per_phase(values, units=None, total=None) -> dict:
    group = dict(zip(PHASES, (float(v) if v is not None else None for v in values)))
    if total is not None:
        group["total"] = float(total)
    if units is not None:
        group["units"] = units
    return group


def detect_phase_sequence(angle_12: float, angle_23: float) -> str:
    """
    Coarse phase rotation label from the V_L1->L2 and V_L2->L3 angles.

    "positive" when both angles fall in (-180, 0) degrees, otherwise "unknown".
    This is a heuristic on two correlator outputs, not a validated
    phase-rotation detector.
    """
    low, high = ANALYSIS_CONFIG["positive_sequence_window"]
    if low < angle_12 < high and low < angle_23 < high:
        return "positive"
    return "unknown"


def build_baseline(batch: WaveformBatch) -> dict:
    """
    Compute the complete deterministic metrics for one waveform batch.

    Args:
        batch: Validated three-phase waveform batch

    Returns:
        Nested dictionary with rms_values, peak_values, frequency_hz,
        phase_sequence, phase_angles_degrees, power_analysis, quality_metrics
        and diagnostics
    """
    fs = batch.sampling_rate_hz
    v1, v2, v3 = batch.voltages
    i1, i2, i3 = batch.currents

    # Line-to-line voltages
    v12 = v1 - v2
    v23 = v2 - v3
    v31 = v3 - v1

    dv1, dv2, dv3 = (demean(v) for v in batch.voltages)
    di1, di2, di3 = (demean(i) for i in batch.currents)

    frequency = estimate_frequency(dv1, fs)
    frequency_estimated = math.isfinite(frequency) and frequency > 0
    if not frequency_estimated:
        logger.warning(
            "Frequency could not be estimated from voltage_L1, using %.1f Hz",
            FALLBACK_FREQ,
        )
        frequency = FALLBACK_FREQ

    samples_per_period = fs / frequency
    max_lag = int(round(samples_per_period))
    logger.debug(
        "f0=%.3f Hz, %.2f samples/period, max lag %d samples",
        frequency,
        samples_per_period,
        max_lag,
    )

    def angle(a, b):
        return estimate_phase_angle(a, b, samples_per_period, max_lag)

    # Phase of the second signal relative to the first
    angles = {
        "voltage_L1_vs_voltage_L2": angle(dv2, dv1),
        "voltage_L2_vs_voltage_L3": angle(dv3, dv2),
        "voltage_L3_vs_voltage_L1": angle(dv1, dv3),
        "voltage_L1_vs_current_L1": angle(di1, dv1),
        "voltage_L2_vs_current_L2": angle(di2, dv2),
        "voltage_L3_vs_current_L3": angle(di3, dv3),
    }

    power = calculate_three_phase_power(v1, v2, v3, i1, i2, i3)

    thd_voltage = [calculate_thd(x, fs, frequency) for x in (dv1, dv2, dv3)]
    thd_current = [calculate_thd(x, fs, frequency) for x in (di1, di2, di3)]

    return {
        "rms_values": {
            "voltage": _per_phase([rms(v) for v in batch.voltages], units="V"),
            "current": _per_phase([rms(i) for i in batch.currents], units="A"),
            "line_to_line_voltage": {
                "L12": rms(v12),
                "L23": rms(v23),
                "L31": rms(v31),
                "units": "V",
            },
        },
        "peak_values": {
            "voltage": _per_phase([peak_abs(v) for v in batch.voltages], units="V"),
            "current": _per_phase([peak_abs(i) for i in batch.currents], units="A"),
        },
        "frequency_hz": float(frequency),
        "phase_sequence": detect_phase_sequence(
            angles["voltage_L1_vs_voltage_L2"], angles["voltage_L2_vs_voltage_L3"]
        ),
        "phase_angles_degrees": {key: float(value) for key, value in angles.items()},
        "power_analysis": {
            "active_power": _per_phase(
                [power["P1"], power["P2"], power["P3"]], "kW", power["P_total"]
            ),
            "reactive_power": _per_phase(
                [power["Q1"], power["Q2"], power["Q3"]], "kVAR", power["Q_total"]
            ),
            "apparent_power": _per_phase(
                [power["S1"], power["S2"], power["S3"]], "kVA", power["S_total"]
            ),
            "power_factor": {
                **_per_phase([power["PF1"], power["PF2"], power["PF3"]]),
                "total": power["PF_total"],
            },
        },
        "quality_metrics": {
            "voltage_unbalance_percent": float(power["V_unbalance"]),
            "current_unbalance_percent": float(power["I_unbalance"]),
            "thd_voltage": _per_phase(thd_voltage, units="%"),
            "thd_current": _per_phase(thd_current, units="%"),
        },
        "diagnostics": {
            "frequency_estimated": frequency_estimated,
            "samples_per_period": float(samples_per_period),
            "max_lag_samples": max_lag,
            "num_samples": batch.num_samples,
        },
    }
