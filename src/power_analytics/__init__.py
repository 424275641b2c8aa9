"""
Analytics module for three-phase power analysis calculations and visualization.
"""

from .analytics import (
    FALLBACK_FREQ,
    generate_sine,
    estimate_frequency,
    estimate_phase_angle,
    normalize_angle,
    calculate_phase_power,
    calculate_three_phase_power,
    calculate_unbalance,
    goertzel_magnitude,
    analyze_harmonics,
    calculate_thd,
)
from .baseline import build_baseline, detect_phase_sequence
from .datasets import EXAMPLES, create_example, generate_three_phase
from .merge import merge_results
from .models import InvalidBatchError, WaveformBatch
from .pipeline import analyze_power_data
from .plots import plot_harmonic_spectrum, plot_three_phase_waveforms
from .validation import validate_payload

__all__ = [
    "FALLBACK_FREQ",
    "generate_sine",
    "estimate_frequency",
    "estimate_phase_angle",
    "normalize_angle",
    "calculate_phase_power",
    "calculate_three_phase_power",
    "calculate_unbalance",
    "goertzel_magnitude",
    "analyze_harmonics",
    "calculate_thd",
    "build_baseline",
    "detect_phase_sequence",
    "EXAMPLES",
    "create_example",
    "generate_three_phase",
    "merge_results",
    "InvalidBatchError",
    "WaveformBatch",
    "analyze_power_data",
    "plot_harmonic_spectrum",
    "plot_three_phase_waveforms",
    "validate_payload",
]
